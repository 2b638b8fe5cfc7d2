"""
Volume name parsing.

Docker passes the ``--volume`` name verbatim; it encodes an optional pool and
an optional size in MB: ``[pool/]name[@size]``.
"""

import os
import re
from typing import NamedTuple

from docker_volume_rbd.exceptions import ParseError

NAME_REGEX = re.compile(r"(?:([-_.A-Za-z0-9]+)/)?([-_.A-Za-z0-9]+)(?:@([^/@\r\n]+))?")


class VolumeSpec(NamedTuple):
    """Pool, image name and size (MB) requested for a volume."""

    pool: str
    name: str
    size_mb: int


def parse_volume_name(src: str, default_pool: str, default_size_mb: int) -> VolumeSpec:
    """
    Parse a Docker volume name.

    Args:
        src: Volume name as given to ``docker volume create`` / ``-v``
        default_pool: Pool used when the name has no ``pool/`` prefix
        default_size_mb: Size used when the name has no usable ``@size``

    Returns:
        VolumeSpec with defaults substituted

    Raises:
        ParseError: If the name does not match ``[pool/]name[@size]``
    """
    match = NAME_REGEX.fullmatch(src or "")
    if match is None:
        raise ParseError(f"Unable to parse docker --volume option: {src!r}")

    pool, name, raw_size = match.groups()

    size_mb = default_size_mb
    if raw_size:
        # Only plain ASCII digits set the size; anything else is not fatal
        if raw_size.isascii() and raw_size.isdigit() and int(raw_size) > 0:
            size_mb = int(raw_size)

    return VolumeSpec(pool=pool or default_pool, name=name, size_mb=size_mb)


def volume_mountpoint(volume_root: str, pool: str, name: str) -> str:
    """Return the host directory a volume is mounted on."""
    return os.path.join(volume_root, pool, name)
