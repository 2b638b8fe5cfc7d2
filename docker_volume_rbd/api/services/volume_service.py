"""
Volume service layer.

Sequences the lock, map, format and mount steps for each plugin request and
owns the registry of mounted volumes.
"""

import logging
from typing import Any, Dict, List, Optional

from docker_volume_rbd.api.services.image_service import ImageService
from docker_volume_rbd.api.services.lock_service import LockService
from docker_volume_rbd.api.services.rollback import rollback
from docker_volume_rbd.backends.base import Backend
from docker_volume_rbd.cli.lib.config import DriverConfig
from docker_volume_rbd.cli.lib.names import VolumeSpec, parse_volume_name, volume_mountpoint
from docker_volume_rbd.cli.lib.registry import VolumeRegistry, VolumeState
from docker_volume_rbd.exceptions import AttachError, LockError, MountError, StateNotFoundError, VolumePluginError

logger = logging.getLogger(__name__)


class VolumeService:
    """Lifecycle of RBD backed Docker volumes.

    Args:
        config: Driver configuration
        backend: Command surface used for every external action
        registry: Registry of mounted volumes (a fresh one if omitted)
    """

    def __init__(self, config: DriverConfig, backend: Backend, registry: Optional[VolumeRegistry] = None):
        self.config = config
        self.backend = backend
        self.registry = registry if registry is not None else VolumeRegistry()
        self.locks = LockService(backend, lock_id=config.lock_id)
        self.images = ImageService(backend, self.locks)

    def parse(self, name: str) -> VolumeSpec:
        return parse_volume_name(name, self.config.default_pool, self.config.default_size_mb)

    def mountpoint(self, spec: VolumeSpec) -> str:
        return volume_mountpoint(self.config.volume_root, spec.pool, spec.name)

    def create(self, name: str) -> None:
        """
        Make sure the image behind ``name`` exists.

        A volume that is already mounted is left alone. The registry is not
        modified.

        Raises:
            ParseError, BackendError, ProvisionError
        """
        spec = self.parse(name)

        mountpoint = self.mountpoint(spec)
        if self.registry.contains(mountpoint):
            logger.info("Volume is already in known mounts: %s", mountpoint)
            return

        if self.images.exists(spec.pool, spec.name):
            logger.info("Image %s/%s already exists", spec.pool, spec.name)
            return

        self.images.provision(spec.pool, spec.name, self.config.default_fstype, spec.size_mb)

    def remove(self, name: str) -> None:
        """
        Acknowledge a removal request.

        The image, its locks and mappings are kept.
        """
        spec = self.parse(name)
        logger.info("Remove requested for %s/%s; image is kept", spec.pool, spec.name)

    def path(self, name: str) -> str:
        """Return the mountpoint of ``name`` without touching any resource."""
        return self.mountpoint(self.parse(name))

    def mount(self, name: str) -> str:
        """
        Lock, map and mount a volume.

        On failure everything acquired so far is released in reverse order
        before the original error is re-raised; the outcome of each cleanup
        step is attached to the error as ``cleanup``.

        Returns:
            Mountpoint path

        Raises:
            ParseError, LockError, AttachError, MountError
        """
        spec = self.parse(name)
        pool, image = spec.pool, spec.name
        fstype = self.config.default_fstype
        mountpoint = self.mountpoint(spec)

        locker = self.locks.acquire(pool, image)

        def unlock() -> None:
            self.locks.release(pool, image, locker)

        try:
            device = self.backend.map_image(pool, image)
        except Exception as e:
            logger.error("[Mount] Failed to map image %s/%s: %s", pool, image, e)
            rollback(e, [("unlock", unlock)])
            raise

        def unmap() -> None:
            self.backend.unmap_image(device)

        try:
            self.backend.make_mountpoint(mountpoint)
        except Exception as e:
            logger.error("[Mount] Failed to create mount point %s: %s", mountpoint, e)
            rollback(e, [("unmap", unmap), ("unlock", unlock)])
            raise

        try:
            self.backend.mount_device(device, mountpoint, fstype)
        except Exception as e:
            logger.error("[Mount] Failed to mount %s on %s: %s", device, mountpoint, e)
            rollback(e, [("unmap", unmap), ("unlock", unlock)])
            raise

        state = VolumeState(name=image, device=device, locker=locker, fstype=fstype, pool=pool, volume=name)
        if not self.registry.add(mountpoint, state):
            error = MountError(f"Volume {mountpoint} is already registered")
            logger.error("[Mount] %s", error)
            steps = [
                ("unmount", lambda: self.backend.unmount_device(device)),
                ("unmap", unmap),
                ("unlock", unlock),
            ]
            rollback(error, steps)
            raise error

        logger.info("Mounted %s/%s (%s) on %s", pool, image, device, mountpoint)
        return mountpoint

    def unmount(self, name: str) -> None:
        """
        Unmount, unmap and unlock a mounted volume.

        Steps run in order and the first failure aborts the teardown; the
        raised error then has ``teardown_incomplete`` set and the registry
        entry is kept.

        Raises:
            ParseError, StateNotFoundError, MountError, AttachError, LockError
        """
        spec = self.parse(name)
        mountpoint = self.mountpoint(spec)

        state = self.registry.get(mountpoint)
        if state is None:
            error = StateNotFoundError(f"No state found for {mountpoint}")
            logger.error("[Unmount] %s", error)
            raise error

        steps = [
            ("unmount", MountError, lambda: self.backend.unmount_device(state.device)),
            ("unmap", AttachError, lambda: self.backend.unmap_image(state.device)),
            ("unlock", LockError, lambda: self.locks.release(state.pool, state.name, state.locker)),
        ]
        for step, error_cls, action in steps:
            try:
                action()
            except VolumePluginError as e:
                logger.error("[Unmount] Step %s failed for %s: %s", step, mountpoint, e)
                self._mark_incomplete(e, step, mountpoint)
                raise
            except Exception as e:
                logger.exception("[Unmount] Step %s failed for %s", step, mountpoint)
                error = error_cls(f"Unable to {step} {state.pool}/{state.name}: {e}")
                self._mark_incomplete(error, step, mountpoint)
                raise error from e

        self.registry.remove(mountpoint)
        logger.info("Unmounted %s/%s from %s", state.pool, state.name, mountpoint)

    def get(self, name: str) -> Dict[str, Any]:
        """
        Describe a volume.

        Returns:
            ``{"name", "mountpoint"}``; mountpoint is empty unless mounted

        Raises:
            StateNotFoundError: If the volume is neither mounted nor an image
        """
        spec = self.parse(name)
        mountpoint = self.mountpoint(spec)

        if self.registry.contains(mountpoint):
            return {"name": name, "mountpoint": mountpoint}

        if not self.images.exists(spec.pool, spec.name):
            raise StateNotFoundError(f"Volume {spec.pool}/{spec.name} does not exist")

        return {"name": name, "mountpoint": ""}

    def list(self) -> List[Dict[str, Any]]:
        """List mounted volumes."""
        return self.registry.list_volumes()

    def audit(self) -> Dict[str, Any]:
        """
        Compare the registry with the devices mapped on this host.

        Read-only: reports registered volumes whose device is no longer
        mapped ("stale") and mapped images without a registry entry
        ("orphaned").

        Raises:
            BackendError: If mapped devices cannot be listed
        """
        mapped = self.backend.show_mapped()
        registered = self.registry.snapshot()

        mapped_devices = {m.device for m in mapped}
        known_images = {(s.pool, s.name) for s in registered.values()}

        stale = [
            {"mountpoint": mountpoint, **state.to_dict()}
            for mountpoint, state in sorted(registered.items())
            if state.device not in mapped_devices
        ]
        orphaned = [m._asdict() for m in mapped if (m.pool, m.image) not in known_images]

        for item in stale:
            logger.warning("Registered volume %s is not mapped (device %s)", item["mountpoint"], item["device"])
        for item in orphaned:
            logger.warning("Mapped image %s/%s on %s is not registered", item["pool"], item["image"], item["device"])

        return {
            "registered": len(registered),
            "mapped": len(mapped),
            "stale": stale,
            "orphaned": orphaned,
        }

    @staticmethod
    def _mark_incomplete(error: VolumePluginError, step: str, mountpoint: str) -> None:
        error.teardown_incomplete = True
        error.message = (
            f"{error.message} (unmount of {mountpoint} stopped at {step}; manual reconciliation required)"
        )
        error.args = (error.message,)
