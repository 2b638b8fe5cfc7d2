"""
Configuration loader for the RBD volume plugin.

Values come from an INI file (section ``[rbd]``) and may be overridden by
daemon flags. Tool paths are resolved once at startup.
"""

from __future__ import annotations

import configparser
import os
import shutil
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, Optional

from docker_volume_rbd.exceptions import ConfigError


DEFAULT_CONFIG_PATH = Path("/etc/docker-volume-rbd/rbd.conf")

# dkvolume's DefaultDockerRootDirectory joined with the driver id
DEFAULT_VOLUME_ROOT = "/var/lib/docker-volumes/rbd"
DEFAULT_SOCKET_PATH = "/run/docker/plugins/rbd.sock"
DEFAULT_LOCK_ID = "dockerLock"

REQUIRED_TOOLS = ("rbd", "mount", "umount")


@dataclass(frozen=True)
class DriverConfig:
    volume_root: str = DEFAULT_VOLUME_ROOT
    default_pool: str = "rbd"
    default_fstype: str = "xfs"
    default_size_mb: int = 1024
    socket_path: str = DEFAULT_SOCKET_PATH
    lock_id: str = DEFAULT_LOCK_ID
    log_level: str = "info"
    tool_paths: Dict[str, str] = field(default_factory=dict)

    def with_overrides(self, **overrides: Optional[object]) -> "DriverConfig":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values)


def _config_path() -> Path:
    env = os.environ.get("RBD_VOLUME_CONFIG_PATH")
    if env:
        return Path(env)
    return DEFAULT_CONFIG_PATH


def _read_ini(path: Path) -> configparser.ConfigParser:
    parser = configparser.ConfigParser()
    if path.exists():
        parser.read(path, encoding="utf-8")
    return parser


def load_config() -> DriverConfig:
    """
    Load config from ``RBD_VOLUME_CONFIG_PATH`` or
    ``/etc/docker-volume-rbd/rbd.conf``.

    Missing files are not an error; defaults are returned. Tool paths are
    left empty, see :func:`resolve_tool_paths`.
    """
    parser = _read_ini(_config_path())
    section = parser["rbd"] if parser.has_section("rbd") else {}

    def _get(key: str, default: str) -> str:
        if isinstance(section, dict):
            return str(section.get(key, default)).strip()
        return str(section.get(key, fallback=default)).strip()

    def _get_int(key: str, default: int) -> int:
        raw = _get(key, str(default))
        try:
            value = int(raw)
        except ValueError:
            return default
        return value if value > 0 else default

    return DriverConfig(
        volume_root=_get("volume_root", DEFAULT_VOLUME_ROOT).rstrip("/") or DEFAULT_VOLUME_ROOT,
        default_pool=_get("default_pool", "rbd"),
        default_fstype=_get("default_fstype", "xfs"),
        default_size_mb=_get_int("default_size_mb", 1024),
        socket_path=_get("socket_path", DEFAULT_SOCKET_PATH),
        lock_id=_get("lock_id", DEFAULT_LOCK_ID),
        log_level=_get("log_level", "info").lower(),
    )


def resolve_tool_paths(tools: Iterable[str] = REQUIRED_TOOLS) -> Dict[str, str]:
    """
    Resolve external tools on ``PATH``.

    Args:
        tools: Tool names to look up

    Returns:
        Mapping of tool name to absolute path

    Raises:
        ConfigError: If a tool cannot be found
    """
    paths: Dict[str, str] = {}
    for tool in tools:
        path = shutil.which(tool)
        if path is None:
            raise ConfigError(f"Make sure binary {tool} is in your PATH")
        paths[tool] = path
    return paths
