"""
API response models.

Pydantic models for FastAPI endpoint serialization and OpenAPI schema generation.
"""

from pydantic import BaseModel

from src.domain.models import DeviceKey


class DeviceKeyResponse(BaseModel):
    """Response model for a newly requested (not yet active) api key."""

    email: str
    device_name: str
    key: str

    @classmethod
    def from_device_key(cls, device_key: DeviceKey) -> "DeviceKeyResponse":
        return cls(email=device_key.email, device_name=device_key.device_name, key=device_key.key)


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
