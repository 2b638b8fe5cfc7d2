"""
In-memory registry of mounted volumes.

Keyed by mountpoint. An entry means the image is locked, mapped and mounted
at that path. Nothing is persisted; a restarted daemon starts empty.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class VolumeState:
    """Live state of a mounted volume."""

    name: str
    device: str
    locker: str
    fstype: str
    pool: str
    volume: str = ""  # name as passed by Docker

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class VolumeRegistry:
    """Thread-safe mountpoint -> VolumeState mapping.

    All access goes through methods that hold a single lock; callers only
    ever see copies of the mapping.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._volumes: Dict[str, VolumeState] = {}

    def get(self, mountpoint: str) -> Optional[VolumeState]:
        with self._lock:
            return self._volumes.get(mountpoint)

    def contains(self, mountpoint: str) -> bool:
        with self._lock:
            return mountpoint in self._volumes

    def add(self, mountpoint: str, state: VolumeState) -> bool:
        """Register a volume. Returns False if the mountpoint is already taken."""
        with self._lock:
            if mountpoint in self._volumes:
                return False
            self._volumes[mountpoint] = state
            return True

    def remove(self, mountpoint: str) -> bool:
        with self._lock:
            return self._volumes.pop(mountpoint, None) is not None

    def snapshot(self) -> Dict[str, VolumeState]:
        with self._lock:
            return dict(self._volumes)

    def list_volumes(self) -> List[Dict[str, Any]]:
        return [
            {"mountpoint": mountpoint, **state.to_dict()}
            for mountpoint, state in sorted(self.snapshot().items())
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._volumes)
