"""
Pytest configuration and fixtures.
"""

import shutil
import tempfile
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from docker_volume_rbd.api.services.volume_service import VolumeService
from docker_volume_rbd.backends.base import Backend
from docker_volume_rbd.cli.lib.config import DriverConfig
from docker_volume_rbd.cli.lib.rbd import MappedDevice
from docker_volume_rbd.exceptions import AttachError, LockError, ProvisionError


class FakeBackend(Backend):
    """In-memory cluster recording every call in order.

    Set ``fail[<method>]`` to an exception to make that method raise it.
    """

    def __init__(self):
        self.calls = []
        self.fail = {}
        self.images = {}
        self.locks = {}
        self.mapped = {}
        self.mounted = {}
        self.unparseable_locks = False
        self._lock = threading.RLock()
        self._next_client = 4100
        self._next_device = 0

    @property
    def ops(self):
        return [call[0] for call in self.calls]

    def _record(self, op, *args):
        self.calls.append((op,) + args)
        exc = self.fail.get(op)
        if exc is not None:
            raise exc

    def list_images(self, pool):
        with self._lock:
            self._record("list_images", pool)
            return sorted(self.images.get(pool, set()))

    def create_image(self, pool, name, size_mb):
        with self._lock:
            self._record("create_image", pool, name, size_mb)
            if name in self.images.get(pool, set()):
                raise ProvisionError(f"image {pool}/{name} exists")
            self.images.setdefault(pool, set()).add(name)

    def lock_add(self, pool, name, lock_id):
        with self._lock:
            self._record("lock_add", pool, name, lock_id)
            if (pool, name) in self.locks:
                raise LockError(f"{pool}/{name} is locked")
            self._next_client += 1
            self.locks[(pool, name)] = (lock_id, f"client.{self._next_client}")

    def lock_list(self, pool, name):
        with self._lock:
            self._record("lock_list", pool, name)
            lines = ["There is 1 exclusive lock on this image.", "Locker      ID         Address"]
            if (pool, name) in self.locks and not self.unparseable_locks:
                lock_id, locker = self.locks[(pool, name)]
                lines.append(f"{locker} {lock_id} 10.0.0.1:0/123")
            return "\n".join(lines) + "\n"

    def lock_remove(self, pool, name, lock_id, locker):
        with self._lock:
            self._record("lock_remove", pool, name, lock_id, locker)
            if self.locks.get((pool, name)) != (lock_id, locker):
                raise LockError(f"no lock {lock_id} held by {locker} on {pool}/{name}")
            del self.locks[(pool, name)]

    def map_image(self, pool, name):
        with self._lock:
            self._record("map_image", pool, name)
            device = f"/dev/rbd{self._next_device}"
            self._next_device += 1
            self.mapped[device] = (pool, name)
            return device

    def unmap_image(self, device):
        with self._lock:
            self._record("unmap_image", device)
            if device not in self.mapped:
                raise AttachError(f"{device} is not mapped")
            del self.mapped[device]

    def show_mapped(self):
        with self._lock:
            self._record("show_mapped")
            return [MappedDevice(pool=p, image=n, device=d) for d, (p, n) in sorted(self.mapped.items())]

    def format_device(self, device, fstype):
        with self._lock:
            self._record("format_device", device, fstype)

    def make_mountpoint(self, mountpoint):
        with self._lock:
            self._record("make_mountpoint", mountpoint)

    def mount_device(self, device, mountpoint, fstype):
        with self._lock:
            self._record("mount_device", device, mountpoint, fstype)
            self.mounted[device] = mountpoint

    def unmount_device(self, device):
        with self._lock:
            self._record("unmount_device", device)
            self.mounted.pop(device, None)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for testing."""
    with patch("subprocess.run") as mock:
        yield mock


@pytest.fixture
def driver_config():
    return DriverConfig(
        volume_root="/var/lib/docker-volumes/rbd",
        default_pool="rbd",
        default_fstype="xfs",
        default_size_mb=1024,
        lock_id="dockerLock",
    )


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def volume_service(driver_config, fake_backend):
    return VolumeService(driver_config, fake_backend)
