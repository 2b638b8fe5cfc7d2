"""
Filesystem and mount management functions.
"""

import os
import shutil
import subprocess

from docker_volume_rbd.exceptions import FormatError, MountError

MOUNTPOINT_MODE = 0o775


def format_device(device: str, fstype: str) -> None:
    """
    Create a filesystem on a freshly mapped device.

    Destructive: callers must only pass devices that are not mounted and
    carry no data yet.

    Args:
        device: Device path (e.g. "/dev/rbd0")
        fstype: Filesystem type; ``mkfs.<fstype>`` must be on PATH

    Raises:
        FormatError: If mkfs is missing or fails
    """
    mkfs = shutil.which(f"mkfs.{fstype}")
    if mkfs is None:
        raise FormatError(f"Unable to find mkfs.{fstype}")

    result = subprocess.run(
        [mkfs, device],
        capture_output=True,
        text=True,
        check=False
    )

    if result.returncode != 0:
        raise FormatError(f"Unable to make file system on {device}: {result.stderr}")


def make_mountpoint(mountpoint: str) -> None:
    """
    Create the mountpoint directory and its parents.

    Raises:
        MountError: If the directory cannot be created
    """
    try:
        os.makedirs(mountpoint, mode=MOUNTPOINT_MODE, exist_ok=True)
    except OSError as e:
        raise MountError(f"Unable to create mount point {mountpoint}: {e}") from e


def mount_device(device: str, mountpoint: str, fstype: str, mount: str = "mount") -> None:
    """
    Mount a device.

    Args:
        device: Device path
        mountpoint: Existing directory to mount on
        fstype: Filesystem type passed to ``mount -t``
        mount: Path to the mount binary

    Raises:
        MountError: If mounting fails
    """
    result = subprocess.run(
        [mount, "-t", fstype, device, mountpoint],
        capture_output=True,
        text=True,
        check=False
    )

    if result.returncode != 0:
        raise MountError(f"Unable to mount {device} on {mountpoint}: {result.stderr}")


def unmount_device(device: str, umount: str = "umount") -> None:
    """
    Unmount a device.

    Raises:
        MountError: If unmounting fails
    """
    result = subprocess.run(
        [umount, device],
        capture_output=True,
        text=True,
        check=False
    )

    if result.returncode != 0:
        raise MountError(f"Unable to umount {device}: {result.stderr}")
