"""Base class for storage backends."""

from abc import ABC, abstractmethod
from typing import List

from docker_volume_rbd.cli.lib.rbd import MappedDevice


class Backend(ABC):
    """Abstract base class for the commands the volume services depend on.

    Every method performs one external action and raises the matching
    plugin exception on failure. Implementations hold no volume state.
    """

    @abstractmethod
    def list_images(self, pool: str) -> List[str]:
        """List image names in a pool.

        Raises:
            BackendError: Listing could not be performed
        """
        pass

    @abstractmethod
    def create_image(self, pool: str, name: str, size_mb: int) -> None:
        """Create an image of ``size_mb`` MB.

        Raises:
            ProvisionError: Creation failed
        """
        pass

    @abstractmethod
    def lock_add(self, pool: str, name: str, lock_id: str) -> None:
        """Add the exclusive lock ``lock_id`` on an image.

        Raises:
            LockError: Lock could not be added
        """
        pass

    @abstractmethod
    def lock_list(self, pool: str, name: str) -> str:
        """Return the raw lock listing of an image (header line first).

        Raises:
            LockError: Listing failed
        """
        pass

    @abstractmethod
    def lock_remove(self, pool: str, name: str, lock_id: str, locker: str) -> None:
        """Remove the lock held by ``locker``.

        Raises:
            LockError: Removal failed
        """
        pass

    @abstractmethod
    def map_image(self, pool: str, name: str) -> str:
        """Map an image and return the device path.

        Raises:
            AttachError: Mapping failed
        """
        pass

    @abstractmethod
    def unmap_image(self, device: str) -> None:
        """Unmap a device.

        Raises:
            AttachError: Unmapping failed
        """
        pass

    @abstractmethod
    def show_mapped(self) -> List[MappedDevice]:
        """List devices mapped on this host.

        Raises:
            BackendError: Listing failed
        """
        pass

    @abstractmethod
    def format_device(self, device: str, fstype: str) -> None:
        """Create a filesystem on a device.

        Raises:
            FormatError: mkfs missing or failed
        """
        pass

    @abstractmethod
    def make_mountpoint(self, mountpoint: str) -> None:
        """Create the mountpoint directory recursively.

        Raises:
            MountError: Directory could not be created
        """
        pass

    @abstractmethod
    def mount_device(self, device: str, mountpoint: str, fstype: str) -> None:
        """Mount a device.

        Raises:
            MountError: Mount failed
        """
        pass

    @abstractmethod
    def unmount_device(self, device: str) -> None:
        """Unmount a device.

        Raises:
            MountError: Unmount failed
        """
        pass
