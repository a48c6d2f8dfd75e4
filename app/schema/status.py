"""
Service status response models
"""

from pydantic import BaseModel, Field
from ulid import ULID


class HealthCheckResponse(BaseModel):
    """
    Health check response model.
    """

    status: str = Field(default="ok", description="Service status")
    version: str = Field(..., description="Service version")
    uptime: float = Field(..., description="Seconds since the process started")
    exec_id: ULID = Field(..., description="Identifier of this service process")


class IndexResponse(BaseModel):
    message: str = Field(default="OK", description="Service banner")
    docs: str = Field(default="/docs", description="Interactive API documentation")
