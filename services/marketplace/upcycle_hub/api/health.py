from fastapi import APIRouter
from pydantic import BaseModel, Field

from upcycle_hub.config import settings

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str = Field(..., description="Service health status", examples=["healthy"])
    service: str = Field(..., description="Service name", examples=["upcycle-hub"])
    version: str = Field(..., description="Service version", examples=["1.0.0"])
    auth_provider: str = Field(..., description="Active auth provider", examples=["local"])
    data_backend: str = Field(..., description="Active data backend", examples=["database"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="""
    Health check endpoint for monitoring and load balancer health checks.

    Returns the service status, name, version and the configured backends.
    """,
)
async def health():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        service=settings.app_name,
        version=settings.app_version,
        auth_provider=settings.auth_provider,
        data_backend=settings.data_backend,
    )
