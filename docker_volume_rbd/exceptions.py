"""Custom exceptions for the RBD volume plugin."""

from typing import List


class VolumePluginError(Exception):
    """Base exception for volume plugin errors.

    Attributes:
        message: Human readable error, returned to Docker as ``Err``
        cleanup: Outcomes of the rollback steps run before raising
        teardown_incomplete: Set when an unmount stopped partway
    """

    def __init__(self, message: str):
        self.message = message
        self.cleanup: List = []
        self.teardown_incomplete = False
        super().__init__(self.message)


class ConfigError(VolumePluginError):
    """Invalid or incomplete driver configuration."""

    pass


class ParseError(VolumePluginError):
    """Volume name does not match ``[pool/]name[@size]``."""

    pass


class BackendError(VolumePluginError):
    """Image listing could not be performed."""

    pass


class ProvisionError(VolumePluginError):
    """Image creation or its format cycle failed."""

    pass


class LockError(VolumePluginError):
    """Lock acquire/release failed or the locker could not be resolved."""

    pass


class AttachError(VolumePluginError):
    """Mapping or unmapping a kernel block device failed."""

    pass


class FormatError(VolumePluginError):
    """Filesystem creation failed."""

    pass


class MountError(VolumePluginError):
    """Mount, unmount or mountpoint creation failed."""

    pass


class StateNotFoundError(VolumePluginError):
    """No live state is known for the requested volume."""

    pass
