from typing import Optional

from pydantic import BaseModel


class ServiceHealth(BaseModel):
    healthy: bool
    message: str
    latency_ms: Optional[float] = None


class HealthCheckResponse(BaseModel):
    service: str
    version: str
    timestamp: str
    healthy: bool
    database: ServiceHealth
