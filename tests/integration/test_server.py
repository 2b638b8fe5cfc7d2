"""
Integration tests for the daemon entrypoint.
"""

from unittest.mock import patch

import pytest

from docker_volume_rbd.api import main as api
from docker_volume_rbd.api import server
from docker_volume_rbd.exceptions import ConfigError


@pytest.fixture(autouse=True)
def isolated(monkeypatch, temp_dir):
    monkeypatch.setenv("RBD_VOLUME_CONFIG_PATH", str(temp_dir / "missing.conf"))
    yield
    api.set_volume_service(None)


@pytest.mark.integration
def test_flags_override_config():
    cfg = server.build_config(["--volroot", "/srv/rbd", "--pool", "ssd", "--size", "64", "--log-level", "DEBUG"])

    assert cfg.volume_root == "/srv/rbd"
    assert cfg.default_pool == "ssd"
    assert cfg.default_size_mb == 64
    assert cfg.default_fstype == "xfs"
    assert cfg.log_level == "debug"


@pytest.mark.integration
@patch("docker_volume_rbd.api.server.resolve_tool_paths")
def test_missing_tool_fails_startup(mock_resolve):
    mock_resolve.side_effect = ConfigError("Make sure binary rbd is in your PATH")

    assert server.main([]) == 1


@pytest.mark.integration
@patch("docker_volume_rbd.api.server.uvicorn.run")
@patch("docker_volume_rbd.api.server.resolve_tool_paths")
def test_serve_on_socket(mock_resolve, mock_run, temp_dir):
    mock_resolve.return_value = {"rbd": "/usr/bin/rbd", "mount": "/usr/bin/mount", "umount": "/usr/bin/umount"}
    socket_path = temp_dir / "plugins" / "rbd.sock"

    assert server.main(["--socket", str(socket_path)]) == 0

    mock_run.assert_called_once_with(api.app, uds=str(socket_path), log_level="info")
    service = api.get_volume_service()
    assert service.backend.rbd == "/usr/bin/rbd"
    assert service.config.socket_path == str(socket_path)
