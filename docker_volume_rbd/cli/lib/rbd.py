"""
Ceph RBD management functions.

Thin wrappers around the ``rbd`` command line tool. Output parsing is kept in
pure functions so it can be tested without a cluster.
"""

import re
import subprocess
from typing import List, NamedTuple, Optional

from docker_volume_rbd.exceptions import AttachError, BackendError, LockError, ProvisionError


class MappedDevice(NamedTuple):
    """One row of ``rbd showmapped``."""

    pool: str
    image: str
    device: str


def _run(cmd: List[str]) -> subprocess.CompletedProcess:
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        check=False
    )


def list_images(pool: str, rbd: str = "rbd") -> List[str]:
    """
    List the images of a pool.

    Args:
        pool: Ceph pool name
        rbd: Path to the rbd binary

    Returns:
        Image names, one per listed line

    Raises:
        BackendError: If the listing fails
    """
    result = _run([rbd, "ls", pool])

    if result.returncode != 0:
        raise BackendError(f"Unable to list images in pool {pool}: {result.stderr}")

    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def create_image(pool: str, name: str, size_mb: int, rbd: str = "rbd") -> None:
    """
    Create an image.

    Args:
        pool: Ceph pool name
        name: Image name
        size_mb: Size in MB
        rbd: Path to the rbd binary

    Raises:
        ProvisionError: If image creation fails
    """
    result = _run([rbd, "create", "--pool", pool, "--size", str(size_mb), name])

    if result.returncode != 0:
        raise ProvisionError(f"Unable to create the image {pool}/{name}: {result.stderr}")


def lock_add(pool: str, name: str, lock_id: str, rbd: str = "rbd") -> None:
    """
    Take an exclusive lock on an image.

    Raises:
        LockError: If the lock cannot be added (e.g. already held)
    """
    result = _run([rbd, "lock", "add", "--pool", pool, name, lock_id])

    if result.returncode != 0:
        raise LockError(f"Unable to lock the image {pool}/{name}: {result.stderr}")


def lock_list(pool: str, name: str, rbd: str = "rbd") -> str:
    """
    List the locks of an image.

    Returns:
        Raw ``rbd lock list`` output

    Raises:
        LockError: If the listing fails
    """
    result = _run([rbd, "lock", "list", "--pool", pool, name])

    if result.returncode != 0:
        raise LockError(f"Unable to list the locks of {pool}/{name}: {result.stderr}")

    return result.stdout


def lock_remove(pool: str, name: str, lock_id: str, locker: str, rbd: str = "rbd") -> None:
    """
    Remove the lock identified by ``(name, lock_id, locker)``.

    Raises:
        LockError: If removal fails (token mismatch, lock already gone)
    """
    result = _run([rbd, "lock", "remove", "--pool", pool, name, lock_id, locker])

    if result.returncode != 0:
        raise LockError(f"Unable to unlock the image {pool}/{name}: {result.stderr}")


def parse_locker(output: str, lock_id: str) -> Optional[str]:
    """
    Find the holder of ``lock_id`` in ``rbd lock list`` output.

    The first line is a header and is skipped; the first line of the form
    ``client.<N> <lock_id> ...`` wins.

    Args:
        output: Raw lock listing
        lock_id: Lock ID passed to ``rbd lock add``

    Returns:
        Locker token (e.g. ``client.4123``), or None if no line matches
    """
    pattern = re.compile(r"^(client\.[0-9]+)\s+" + re.escape(lock_id) + r"(?:\s|$)")
    for line in output.splitlines()[1:]:
        match = pattern.match(line.strip())
        if match:
            return match.group(1)
    return None


def map_image(pool: str, name: str, rbd: str = "rbd") -> str:
    """
    Map an image to a kernel block device.

    Returns:
        Device path (e.g. ``/dev/rbd0``)

    Raises:
        AttachError: If mapping fails
    """
    result = _run([rbd, "map", "--pool", pool, name])

    if result.returncode != 0:
        raise AttachError(f"Unable to map the image {pool}/{name} to a kernel device: {result.stderr}")

    device = result.stdout.strip()
    if not device:
        raise AttachError(f"Mapping {pool}/{name} returned no device path")

    return device


def unmap_image(device: str, rbd: str = "rbd") -> None:
    """
    Unmap a kernel block device.

    Raises:
        AttachError: If unmapping fails
    """
    result = _run([rbd, "unmap", device])

    if result.returncode != 0:
        raise AttachError(f"Unable to unmap the image from {device}: {result.stderr}")


def parse_showmapped(output: str) -> List[MappedDevice]:
    """
    Parse ``rbd showmapped`` output.

    Columns are located by header name, so both the older
    ``id pool image snap device`` and the newer layout with a ``namespace``
    column are handled.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        return []

    header = lines[0].split()
    try:
        pool_idx = header.index("pool")
        image_idx = header.index("image")
        device_idx = header.index("device")
    except ValueError:
        return []

    mapped = []
    for line in lines[1:]:
        cols = line.split()
        # An empty namespace column collapses under split()
        if "namespace" in header and len(cols) == len(header) - 1:
            cols.insert(header.index("namespace"), "")
        if len(cols) != len(header):
            continue
        mapped.append(MappedDevice(pool=cols[pool_idx], image=cols[image_idx], device=cols[device_idx]))
    return mapped


def show_mapped(rbd: str = "rbd") -> List[MappedDevice]:
    """
    List the images mapped on this host.

    Raises:
        BackendError: If the listing fails
    """
    result = _run([rbd, "showmapped"])

    if result.returncode != 0:
        raise BackendError(f"Unable to list mapped devices: {result.stderr}")

    return parse_showmapped(result.stdout)
