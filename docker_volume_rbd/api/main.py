"""
FastAPI application implementing the Docker volume plugin protocol.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from docker_volume_rbd import __version__
from docker_volume_rbd.api.models import (
    ActivateResponse,
    AuditResponse,
    CapabilitiesResponse,
    CreateRequest,
    ErrResponse,
    GetResponse,
    ListResponse,
    MountpointResponse,
    MountRequest,
    PluginRequest,
)
from docker_volume_rbd.api.services.volume_service import VolumeService
from docker_volume_rbd.backends.command import CommandBackend
from docker_volume_rbd.cli.lib.config import load_config
from docker_volume_rbd.exceptions import VolumePluginError

app = FastAPI(title="docker-volume-rbd", description="Docker volume plugin backed by Ceph RBD", version=__version__)
logger = logging.getLogger(__name__)

_volume_service: Optional[VolumeService] = None


def set_volume_service(service: Optional[VolumeService]) -> None:
    """Install the service used by every endpoint (None resets it)."""
    global _volume_service
    _volume_service = service


def get_volume_service() -> VolumeService:
    """Return the installed service, building one from config on first use."""
    global _volume_service
    if _volume_service is None:
        cfg = load_config()
        _volume_service = VolumeService(cfg, CommandBackend(cfg.tool_paths))
    return _volume_service


@app.exception_handler(VolumePluginError)
async def plugin_error_handler(request: Request, exc: VolumePluginError) -> JSONResponse:
    """Return plugin errors in the protocol's ``Err`` field."""
    content: Dict[str, Any] = {"Err": exc.message}
    if exc.cleanup:
        content["Cleanup"] = [result.to_dict() for result in exc.cleanup]
    if exc.teardown_incomplete:
        content["TeardownIncomplete"] = True
    return JSONResponse(status_code=500, content=content)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies."""
    return JSONResponse(status_code=400, content={"Err": f"Invalid request: {exc.errors()}"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    request_id = str(uuid.uuid4())
    logger.exception("Unhandled error (request_id=%s, path=%s)", request_id, request.url.path)
    return JSONResponse(status_code=500, content={"Err": f"Internal error (request_id={request_id})"})


# Handshake


@app.post("/Plugin.Activate", response_model=ActivateResponse)
def activate() -> Dict[str, Any]:
    """
    Declare the plugin as a volume driver.
    """
    return {"Implements": ["VolumeDriver"]}


# VolumeDriver endpoints


@app.post("/VolumeDriver.Create", response_model=ErrResponse)
def create_volume(req: CreateRequest, service: VolumeService = Depends(get_volume_service)) -> Dict[str, Any]:
    """
    Provision the RBD image behind a volume if it does not exist yet.
    """
    service.create(req.Name)
    return {"Err": ""}


@app.post("/VolumeDriver.Remove", response_model=ErrResponse)
def remove_volume(req: PluginRequest, service: VolumeService = Depends(get_volume_service)) -> Dict[str, Any]:
    """
    Acknowledge removal. The image is kept.
    """
    service.remove(req.Name)
    return {"Err": ""}


@app.post("/VolumeDriver.Path", response_model=MountpointResponse)
def volume_path(req: PluginRequest, service: VolumeService = Depends(get_volume_service)) -> Dict[str, Any]:
    """
    Return the host path of a volume.
    """
    return {"Mountpoint": service.path(req.Name), "Err": ""}


@app.post("/VolumeDriver.Mount", response_model=MountpointResponse)
def mount_volume(req: MountRequest, service: VolumeService = Depends(get_volume_service)) -> Dict[str, Any]:
    """
    Lock, map and mount a volume. Called once per container start.
    """
    return {"Mountpoint": service.mount(req.Name), "Err": ""}


@app.post("/VolumeDriver.Unmount", response_model=ErrResponse)
def unmount_volume(req: MountRequest, service: VolumeService = Depends(get_volume_service)) -> Dict[str, Any]:
    """
    Unmount, unmap and unlock a volume. Called once per container stop.
    """
    service.unmount(req.Name)
    return {"Err": ""}


@app.post("/VolumeDriver.Get", response_model=GetResponse)
def get_volume(req: PluginRequest, service: VolumeService = Depends(get_volume_service)) -> Dict[str, Any]:
    """
    Describe a single volume.
    """
    volume = service.get(req.Name)
    return {"Volume": {"Name": volume["name"], "Mountpoint": volume["mountpoint"]}, "Err": ""}


@app.post("/VolumeDriver.List", response_model=ListResponse)
def list_volumes(service: VolumeService = Depends(get_volume_service)) -> Dict[str, Any]:
    """
    List mounted volumes.
    """
    items = service.list()
    volumes = [{"Name": v["volume"] or v["name"], "Mountpoint": v["mountpoint"]} for v in items]
    return {"Volumes": volumes, "Err": ""}


@app.post("/VolumeDriver.Capabilities", response_model=CapabilitiesResponse)
def capabilities() -> Dict[str, Any]:
    """
    Volumes are local to this host.
    """
    return {"Capabilities": {"Scope": "local"}}


# Operator endpoints


@app.get("/v1/audit", response_model=AuditResponse)
def audit(service: VolumeService = Depends(get_volume_service)) -> Dict[str, Any]:
    """
    Compare mounted-volume state with the devices mapped on this host.
    """
    return service.audit()
