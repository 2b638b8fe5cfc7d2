"""
Integration tests for the rbdvol CLI.
"""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from docker_volume_rbd.cli.cli import app
from docker_volume_rbd.cli.lib.rbd import MappedDevice
from docker_volume_rbd.exceptions import BackendError

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_config_file(monkeypatch, temp_dir):
    monkeypatch.setenv("RBD_VOLUME_CONFIG_PATH", str(temp_dir / "missing.conf"))


class TestVolumeParse:
    """Tests for volume parse command."""

    @pytest.mark.integration
    def test_parse(self):
        result = runner.invoke(app, ["volume", "parse", "ssd/db@2048"])

        assert result.exit_code == 0
        assert "pool=ssd" in result.stdout
        assert "name=db" in result.stdout
        assert "size_mb=2048" in result.stdout
        assert "mountpoint=/var/lib/docker-volumes/rbd/ssd/db" in result.stdout

    @pytest.mark.integration
    def test_parse_with_defaults(self):
        result = runner.invoke(app, ["volume", "parse", "db", "--pool", "hdd", "--size", "10"])

        assert result.exit_code == 0
        assert "pool=hdd" in result.stdout
        assert "size_mb=10" in result.stdout

    @pytest.mark.integration
    def test_parse_invalid(self):
        result = runner.invoke(app, ["volume", "parse", "/bad"])

        assert result.exit_code == 1


class TestImageCommands:
    """Tests for image commands."""

    @pytest.mark.integration
    @patch("docker_volume_rbd.cli.commands.image.list_images")
    def test_exists(self, mock_list):
        mock_list.return_value = ["vol1"]

        result = runner.invoke(app, ["image", "exists", "vol1"])

        assert result.exit_code == 0
        assert "rbd/vol1 exists" in result.stdout
        mock_list.assert_called_once_with("rbd")

    @pytest.mark.integration
    @patch("docker_volume_rbd.cli.commands.image.list_images")
    def test_does_not_exist(self, mock_list):
        mock_list.return_value = []

        result = runner.invoke(app, ["image", "exists", "vol1"])

        assert result.exit_code == 2

    @pytest.mark.integration
    @patch("docker_volume_rbd.cli.commands.image.lock_list")
    def test_locks(self, mock_lock_list):
        mock_lock_list.return_value = (
            "There is 1 exclusive lock on this image.\n"
            "Locker      ID         Address\n"
            "client.42   dockerLock 10.0.0.1:0/1\n"
        )

        result = runner.invoke(app, ["image", "locks", "ssd/vol1"])

        assert result.exit_code == 0
        assert "dockerLock holder: client.42" in result.stdout
        mock_lock_list.assert_called_once_with("ssd", "vol1")

    @pytest.mark.integration
    @patch("docker_volume_rbd.cli.commands.image.show_mapped")
    def test_mapped(self, mock_show_mapped):
        mock_show_mapped.return_value = [MappedDevice("rbd", "vol1", "/dev/rbd0")]

        result = runner.invoke(app, ["image", "mapped"])

        assert result.exit_code == 0
        assert "rbd/vol1 device=/dev/rbd0" in result.stdout

    @pytest.mark.integration
    @patch("docker_volume_rbd.cli.commands.image.show_mapped")
    def test_mapped_fails(self, mock_show_mapped):
        mock_show_mapped.side_effect = BackendError("Unable to list mapped devices")

        result = runner.invoke(app, ["image", "mapped"])

        assert result.exit_code == 1


class TestServe:
    """Tests for serve command."""

    @pytest.mark.integration
    @patch("docker_volume_rbd.api.server.main")
    def test_serve_forwards_arguments(self, mock_main):
        mock_main.return_value = 0

        result = runner.invoke(app, ["serve", "--pool", "ssd", "--size", "10"])

        assert result.exit_code == 0
        mock_main.assert_called_once_with(["--pool", "ssd", "--size", "10"])
