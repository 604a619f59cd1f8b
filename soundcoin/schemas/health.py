"""Pydantic models for health endpoints."""

from datetime import datetime

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime
