"""Backend implementations for the RBD volume plugin."""

from .base import Backend
from .command import CommandBackend

__all__ = ["Backend", "CommandBackend"]
