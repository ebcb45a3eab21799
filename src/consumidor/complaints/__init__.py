"""Complaint record store -- data models, schemas, and repository.

Provides SQLAlchemy models (Company, Complaint, ComplaintUpdate,
CompanyReputation snapshot, ReputationHistory), Pydantic read schemas
(complaints, updates, companies), and ComplaintRepository for async access.
"""
