"""
Uvicorn server entrypoint for the RBD volume plugin.

Usage:
    sudo docker-volume-rbd
    docker run -it --volume-driver rbd -v foo:/foo alpine sh
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

import uvicorn

from docker_volume_rbd.api import main as api
from docker_volume_rbd.api.services.volume_service import VolumeService
from docker_volume_rbd.backends.command import CommandBackend
from docker_volume_rbd.cli.lib.config import DriverConfig, load_config, resolve_tool_paths
from docker_volume_rbd.exceptions import ConfigError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docker-volume-rbd", description="Docker volume plugin for Ceph RBD")
    parser.add_argument("--volroot", default=None, help="Docker volumes root directory (default: from config)")
    parser.add_argument("--pool", default=None, help="Default Ceph pool for RBD operations (default: from config)")
    parser.add_argument("--fstype", default=None, help="Filesystem created on new images (default: from config)")
    parser.add_argument("--size", type=int, default=None, help="Default image size in MB (default: from config)")
    parser.add_argument("--socket", default=None, help="Plugin socket path (default: from config)")
    parser.add_argument("--log-level", default=None, help="Log level (default: from config or info)")
    return parser


def build_config(argv: list[str] | None = None) -> DriverConfig:
    """Merge the config file with command line flags."""
    args = build_parser().parse_args(argv)
    cfg = load_config()
    return cfg.with_overrides(
        volume_root=args.volroot,
        default_pool=args.pool,
        default_fstype=args.fstype,
        default_size_mb=args.size,
        socket_path=args.socket,
        log_level=args.log_level.lower() if args.log_level else None,
    )


def serve(cfg: DriverConfig) -> int:
    """Resolve tools, install the volume service and serve on the socket."""
    logging.basicConfig(level=cfg.log_level.upper(), format=LOG_FORMAT)

    try:
        cfg = cfg.with_overrides(tool_paths=resolve_tool_paths())
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    api.set_volume_service(VolumeService(cfg, CommandBackend(cfg.tool_paths)))

    os.makedirs(os.path.dirname(cfg.socket_path), exist_ok=True)
    if os.path.exists(cfg.socket_path):
        os.unlink(cfg.socket_path)

    logger.info("Listening on %s", cfg.socket_path)
    uvicorn.run(api.app, uds=cfg.socket_path, log_level=cfg.log_level)
    return 0


def main(argv: list[str] | None = None) -> int:
    return serve(build_config(argv))


if __name__ == "__main__":
    sys.exit(main())
