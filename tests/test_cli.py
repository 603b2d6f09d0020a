"""Tests for the xssh command line interface."""

from unittest.mock import Mock, patch

import pytest

from xssh.cli import build_parser, main
from xssh.exceptions import TailscaleError
from xssh.models import XsshSettings
from xssh.ssh_config import HostRecord, SSHConfigStore
from xssh.sync import SyncResult


@pytest.fixture
def settings(tmp_path):
    settings = XsshSettings(ssh_config_file=str(tmp_path / "config"))
    with patch("xssh.cli.load_settings", return_value=settings):
        yield settings


class TestBuildParser:
    """Test argument parsing."""

    def test_destination_with_tmux(self):
        args = build_parser().parse_args(["web1", "-t", "main", "--save", "--overwrite"])

        assert args.destination == "web1"
        assert args.tmux == "main"
        assert args.save is True
        assert args.overwrite is True
        assert args.sync is None

    def test_sync(self):
        args = build_parser().parse_args(["--sync", "tailscale"])

        assert args.sync == "tailscale"
        assert args.destination is None
        assert args.overwrite is False

    def test_sync_conflicts_with_destination(self):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["web1", "--sync", "tailscale"])

        assert exc_info.value.code == 2


class TestMain:
    """Test main."""

    def test_no_arguments_prints_help(self, settings, capsys):
        with patch("xssh.cli.launch") as mock_launch:
            assert main([]) == 0

        assert "usage: xssh" in capsys.readouterr().out
        mock_launch.assert_not_called()

    def test_unknown_sync_source(self, settings, tmp_path):
        """Test that an unknown source is reported and nothing is written."""
        mock_sync = Mock()

        with patch.dict("xssh.sync.SYNC_SOURCES", {"tailscale": mock_sync}, clear=True), \
                patch("xssh.cli.display_error") as mock_error:
            exit_code = main(["--sync", "unknownsource"])

        assert exit_code == 0
        mock_error.assert_called_once_with("Invalid sync source!")
        mock_sync.assert_not_called()
        assert not (tmp_path / "config").exists()

    @patch("xssh.cli.display_success")
    @patch("xssh.cli.display_sync_summary")
    def test_sync_tailscale(self, mock_summary, mock_success, settings):
        result = SyncResult(
            store=SSHConfigStore(settings.ssh_config_file),
            records=[HostRecord("web1", "10.0.0.1", "ubuntu")],
            added=["web1"],
        )
        mock_sync = Mock(return_value=result)

        with patch.dict("xssh.sync.SYNC_SOURCES", {"tailscale": mock_sync}):
            exit_code = main(["--sync", "tailscale", "--overwrite"])

        assert exit_code == 0
        mock_sync.assert_called_once_with(overwrite=True, settings=settings)
        mock_summary.assert_called_once_with(result)
        mock_success.assert_called_once()

    @patch("xssh.cli.display_error")
    def test_sync_failure_exits_with_error(self, mock_error, settings):
        mock_sync = Mock(side_effect=TailscaleError("Tailscale status has no 'Peer' field"))

        with patch.dict("xssh.sync.SYNC_SOURCES", {"tailscale": mock_sync}):
            exit_code = main(["--sync", "tailscale"])

        assert exit_code == 1
        mock_error.assert_called_once_with("Error: Tailscale status has no 'Peer' field")

    @patch("xssh.cli.save_destination")
    @patch("xssh.cli.launch", return_value=0)
    def test_connect(self, mock_launch, mock_save, settings):
        exit_code = main(["ubuntu@web1", "--tmux", "main"])

        assert exit_code == 0
        mock_launch.assert_called_once_with(
            ["ssh", "ubuntu@web1", "-t", "tmux", "-u", "new-session", "-A", "-s", "main"]
        )
        mock_save.assert_not_called()

    @patch("xssh.cli.save_destination")
    @patch("xssh.cli.launch", return_value=255)
    def test_connect_with_save(self, mock_launch, mock_save, settings):
        mock_save.return_value = SyncResult(store=SSHConfigStore(settings.ssh_config_file))

        exit_code = main(["ubuntu@web1", "--save"])

        assert exit_code == 255
        mock_save.assert_called_once_with("ubuntu@web1", overwrite=False, settings=settings)
        mock_launch.assert_called_once_with(["ssh", "ubuntu@web1"])

    @patch("xssh.cli.display_error")
    @patch("xssh.cli.launch")
    def test_save_destination_without_host(self, mock_launch, mock_error, settings, tmp_path):
        """Test that an empty host is reported instead of crashing."""
        exit_code = main(["deploy@", "--save"])

        assert exit_code == 1
        mock_error.assert_called_once_with("Error: No host in destination 'deploy@'")
        mock_launch.assert_not_called()
        assert not (tmp_path / "config").exists()

    @patch("xssh.cli.display_warning")
    @patch("xssh.cli.launch", side_effect=KeyboardInterrupt)
    def test_keyboard_interrupt(self, mock_launch, mock_warning, settings):
        assert main(["web1"]) == 1
        mock_warning.assert_called_once_with("\nInterrupted by user")
