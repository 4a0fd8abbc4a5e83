"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from funhouse.engine.strategies import get_registry
from funhouse.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version="0.1.0",
        strategies=[spec.strategy.value for spec in get_registry().all()],
    )
