"""V1 API router -- aggregates all v1 endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from src.consumidor.api.v1 import channels, companies, complaints, health

router = APIRouter()

router.include_router(health.router)
router.include_router(companies.router)
router.include_router(channels.router)
router.include_router(complaints.router)
