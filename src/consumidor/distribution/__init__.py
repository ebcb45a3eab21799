"""Complaint distribution -- plans, external channel submission, and write-back.

Provides DistributionOrchestrator (plan building and distribution), the
ChannelGateway HTTP client, and the MediationAdvisor protocol for optional
advisory suggestions.
"""
