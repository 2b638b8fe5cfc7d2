"""
docker-volume-rbd - Docker volume plugin backed by Ceph RBD images.

This package provides the plugin daemon (Docker volume protocol over a Unix
socket) and an operator CLI for inspecting names, locks and mapped devices.
"""

__version__ = "0.1.0"
__all__ = ["api", "backends", "cli"]
