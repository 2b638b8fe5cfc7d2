"""
Lock service layer.

Exclusive access to an image across hosts relies on the cluster's advisory
per-image lock. Releasing a lock needs the locker token the cluster assigned
when it was taken, so acquire() only succeeds once that token is known.
"""

import logging

from docker_volume_rbd.backends.base import Backend
from docker_volume_rbd.cli.lib.config import DEFAULT_LOCK_ID
from docker_volume_rbd.cli.lib.rbd import parse_locker
from docker_volume_rbd.exceptions import LockError

logger = logging.getLogger(__name__)


class LockService:
    """Acquire and release the plugin's lock on RBD images."""

    def __init__(self, backend: Backend, lock_id: str = DEFAULT_LOCK_ID):
        self.backend = backend
        self.lock_id = lock_id

    def acquire(self, pool: str, name: str) -> str:
        """
        Lock an image and resolve the locker token.

        Args:
            pool: Ceph pool name
            name: Image name

        Returns:
            Locker token required by release()

        Raises:
            LockError: If the lock cannot be added, listed, or its holder
                cannot be found in the listing
        """
        self.backend.lock_add(pool, name, self.lock_id)

        output = self.backend.lock_list(pool, name)
        locker = parse_locker(output, self.lock_id)
        if locker is None:
            raise LockError(f"Unable to parse locker ID for {pool}/{name}")

        logger.debug("Locked %s/%s as %s", pool, name, locker)
        return locker

    def release(self, pool: str, name: str, locker: str) -> None:
        """
        Release the lock held by ``locker``.

        Raises:
            LockError: If removal fails
        """
        self.backend.lock_remove(pool, name, self.lock_id, locker)
        logger.debug("Unlocked %s/%s (%s)", pool, name, locker)
