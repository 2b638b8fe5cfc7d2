"""Backend that drives the rbd, mkfs and mount command line tools."""

from typing import Dict, List, Optional

from docker_volume_rbd.cli.lib import fs, rbd
from docker_volume_rbd.cli.lib.rbd import MappedDevice

from .base import Backend


class CommandBackend(Backend):
    """Backend running the host's tools through ``subprocess``.

    Args:
        tool_paths: Resolved paths for ``rbd``, ``mount`` and ``umount``;
            missing entries fall back to the bare tool name.
    """

    def __init__(self, tool_paths: Optional[Dict[str, str]] = None):
        tool_paths = tool_paths or {}
        self.rbd = tool_paths.get("rbd", "rbd")
        self.mount = tool_paths.get("mount", "mount")
        self.umount = tool_paths.get("umount", "umount")

    def list_images(self, pool: str) -> List[str]:
        return rbd.list_images(pool, rbd=self.rbd)

    def create_image(self, pool: str, name: str, size_mb: int) -> None:
        rbd.create_image(pool, name, size_mb, rbd=self.rbd)

    def lock_add(self, pool: str, name: str, lock_id: str) -> None:
        rbd.lock_add(pool, name, lock_id, rbd=self.rbd)

    def lock_list(self, pool: str, name: str) -> str:
        return rbd.lock_list(pool, name, rbd=self.rbd)

    def lock_remove(self, pool: str, name: str, lock_id: str, locker: str) -> None:
        rbd.lock_remove(pool, name, lock_id, locker, rbd=self.rbd)

    def map_image(self, pool: str, name: str) -> str:
        return rbd.map_image(pool, name, rbd=self.rbd)

    def unmap_image(self, device: str) -> None:
        rbd.unmap_image(device, rbd=self.rbd)

    def show_mapped(self) -> List[MappedDevice]:
        return rbd.show_mapped(rbd=self.rbd)

    def format_device(self, device: str, fstype: str) -> None:
        fs.format_device(device, fstype)

    def make_mountpoint(self, mountpoint: str) -> None:
        fs.make_mountpoint(mountpoint)

    def mount_device(self, device: str, mountpoint: str, fstype: str) -> None:
        fs.mount_device(device, mountpoint, fstype, mount=self.mount)

    def unmount_device(self, device: str) -> None:
        fs.unmount_device(device, umount=self.umount)
