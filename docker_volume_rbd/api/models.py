"""
Pydantic models for the Docker volume plugin protocol.

Field names follow the protocol (``Name``, ``Err``, ``Mountpoint``, ...).
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PluginRequest(BaseModel):
    """Request body shared by the VolumeDriver endpoints."""

    model_config = ConfigDict(extra="ignore")

    Name: str = Field(..., description="Volume name, [pool/]name[@size]")


class CreateRequest(PluginRequest):
    """Request model for VolumeDriver.Create."""

    Opts: Optional[Dict[str, str]] = Field(None, description="Driver options (unused)")


class MountRequest(PluginRequest):
    """Request model for VolumeDriver.Mount and VolumeDriver.Unmount."""

    ID: Optional[str] = Field(None, description="Caller ID")


class ErrResponse(BaseModel):
    """Response carrying only an error string."""

    Err: str = ""


class MountpointResponse(ErrResponse):
    """Response model for VolumeDriver.Path and VolumeDriver.Mount."""

    Mountpoint: str = ""


class VolumeInfo(BaseModel):
    """Volume description returned by Get and List."""

    Name: str
    Mountpoint: str = ""


class GetResponse(ErrResponse):
    """Response model for VolumeDriver.Get."""

    Volume: Optional[VolumeInfo] = None


class ListResponse(ErrResponse):
    """Response model for VolumeDriver.List."""

    Volumes: List[VolumeInfo] = Field(default_factory=list)


class ActivateResponse(BaseModel):
    """Response model for Plugin.Activate."""

    Implements: List[str] = Field(default_factory=lambda: ["VolumeDriver"])


class CapabilitiesResponse(BaseModel):
    """Response model for VolumeDriver.Capabilities."""

    Capabilities: Dict[str, str] = Field(default_factory=lambda: {"Scope": "local"})


class MappedImage(BaseModel):
    pool: str
    image: str
    device: str


class RegisteredVolume(BaseModel):
    mountpoint: str
    name: str
    device: str
    locker: str
    fstype: str
    pool: str
    volume: str = ""


class AuditResponse(BaseModel):
    """Response model for the audit report."""

    registered: int
    mapped: int
    stale: List[RegisteredVolume]
    orphaned: List[MappedImage]
