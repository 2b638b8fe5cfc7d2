"""
Image service layer.
"""

import logging

from docker_volume_rbd.api.services.lock_service import LockService
from docker_volume_rbd.api.services.rollback import rollback
from docker_volume_rbd.backends.base import Backend
from docker_volume_rbd.exceptions import ProvisionError, VolumePluginError

logger = logging.getLogger(__name__)


class ImageService:
    """Check for and provision RBD images."""

    def __init__(self, backend: Backend, locks: LockService):
        self.backend = backend
        self.locks = locks

    def exists(self, pool: str, name: str) -> bool:
        """
        Check whether an image exists.

        Returns:
            True on an exact name match in the pool listing

        Raises:
            BackendError: If the pool cannot be listed
        """
        return name in self.backend.list_images(pool)

    def provision(self, pool: str, name: str, fstype: str, size_mb: int) -> None:
        """
        Create an image and leave it formatted, unmapped and unlocked.

        Runs create -> lock -> map -> mkfs -> unmap -> unlock. Once the lock
        is taken it is released on every path.

        Args:
            pool: Ceph pool name
            name: Image name
            fstype: Filesystem to create
            size_mb: Image size in MB

        Raises:
            ProvisionError: On any failing step, chained to the cause
        """
        logger.info("Creating image %s/%s (%d MB, %s)", pool, name, size_mb, fstype)

        try:
            self.backend.create_image(pool, name, size_mb)
            locker = self.locks.acquire(pool, name)
        except ProvisionError:
            raise
        except VolumePluginError as e:
            raise ProvisionError(f"Unable to provision {pool}/{name}: {e.message}") from e

        def unlock() -> None:
            self.locks.release(pool, name, locker)

        try:
            device = self.backend.map_image(pool, name)
        except Exception as e:
            raise self._failed(pool, name, e, [("unlock", unlock)]) from e

        try:
            self.backend.format_device(device, fstype)
        except Exception as e:
            steps = [("unmap", lambda: self.backend.unmap_image(device)), ("unlock", unlock)]
            raise self._failed(pool, name, e, steps) from e

        try:
            self.backend.unmap_image(device)
        except Exception as e:
            raise self._failed(pool, name, e, [("unlock", unlock)]) from e

        try:
            unlock()
        except Exception as e:
            raise self._failed(pool, name, e, []) from e

        logger.info("Image %s/%s is ready", pool, name)

    def _failed(self, pool: str, name: str, cause: Exception, steps) -> ProvisionError:
        logger.error("Provisioning %s/%s failed: %s", pool, name, cause)
        error = ProvisionError(f"Unable to provision {pool}/{name}: {cause}")
        rollback(error, steps)
        return error
