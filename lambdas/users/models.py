"""Pydantic models for user identity API requests."""

from pydantic import BaseModel, Field

from shared.models import DeviceInfo


class RegisterUserRequest(BaseModel):
    """Request body for registering the calling user.

    Privilege is decided by deploy-time configuration; any device list a
    client sends is ignored.
    """

    device_info: DeviceInfo
    is_native: bool = False


class SyncPrivilegedDevicesResponse(BaseModel):
    """Response for POST /users/privileged-devices."""

    success: bool = True
    created: list[str] = Field(default_factory=list)
    promoted: list[str] = Field(default_factory=list)
