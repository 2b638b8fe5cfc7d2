"""
Unit tests for config loader.
"""

from unittest.mock import patch

import pytest

from docker_volume_rbd.exceptions import ConfigError


@pytest.mark.unit
def test_load_config_missing_file(monkeypatch, temp_dir):
    monkeypatch.setenv("RBD_VOLUME_CONFIG_PATH", str(temp_dir / "missing.conf"))
    from docker_volume_rbd.cli.lib.config import load_config

    cfg = load_config()
    assert cfg.volume_root == "/var/lib/docker-volumes/rbd"
    assert cfg.default_pool == "rbd"
    assert cfg.default_fstype == "xfs"
    assert cfg.default_size_mb == 1024
    assert cfg.lock_id == "dockerLock"
    assert cfg.tool_paths == {}


@pytest.mark.unit
def test_load_config_reads_values(monkeypatch, temp_dir):
    config_path = temp_dir / "rbd.conf"
    config_path.write_text(
        "\n".join(
            [
                "[rbd]",
                "volume_root = /srv/volumes/",
                "default_pool = ssd",
                "default_fstype = ext4",
                "default_size_mb = 4096",
                "socket_path = /tmp/rbd.sock",
                "lock_id = testLock",
                "log_level = DEBUG",
                "",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("RBD_VOLUME_CONFIG_PATH", str(config_path))
    from docker_volume_rbd.cli.lib.config import load_config

    cfg = load_config()
    assert cfg.volume_root == "/srv/volumes"
    assert cfg.default_pool == "ssd"
    assert cfg.default_fstype == "ext4"
    assert cfg.default_size_mb == 4096
    assert cfg.socket_path == "/tmp/rbd.sock"
    assert cfg.lock_id == "testLock"
    assert cfg.log_level == "debug"


@pytest.mark.unit
def test_load_config_bad_size_uses_default(monkeypatch, temp_dir):
    config_path = temp_dir / "rbd.conf"
    config_path.write_text("[rbd]\ndefault_size_mb = lots\n", encoding="utf-8")
    monkeypatch.setenv("RBD_VOLUME_CONFIG_PATH", str(config_path))
    from docker_volume_rbd.cli.lib.config import load_config

    assert load_config().default_size_mb == 1024


@pytest.mark.unit
def test_with_overrides_skips_none():
    from docker_volume_rbd.cli.lib.config import DriverConfig

    cfg = DriverConfig().with_overrides(default_pool="ssd", default_size_mb=None)
    assert cfg.default_pool == "ssd"
    assert cfg.default_size_mb == 1024


@pytest.mark.unit
@patch("shutil.which")
def test_resolve_tool_paths(mock_which):
    from docker_volume_rbd.cli.lib.config import resolve_tool_paths

    mock_which.side_effect = lambda tool: f"/usr/bin/{tool}"
    assert resolve_tool_paths() == {"rbd": "/usr/bin/rbd", "mount": "/usr/bin/mount", "umount": "/usr/bin/umount"}


@pytest.mark.unit
@patch("shutil.which")
def test_resolve_tool_paths_missing(mock_which):
    from docker_volume_rbd.cli.lib.config import resolve_tool_paths

    mock_which.side_effect = lambda tool: None if tool == "rbd" else f"/usr/bin/{tool}"
    with pytest.raises(ConfigError, match="binary rbd"):
        resolve_tool_paths()
