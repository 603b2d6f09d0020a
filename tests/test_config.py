"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from xssh.exceptions import SettingsError
from xssh.models import XsshSettings
from xssh.utils.config import load_settings


class TestLoadSettings:
    """Test load_settings."""

    def test_defaults_when_no_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))

        settings = load_settings()

        assert settings == XsshSettings()
        assert settings.candidate_users == ["ubuntu", "debian", "root"]
        assert settings.connect_timeout == 5
        assert settings.server_tag == "tag:server"

    def test_default_location_is_read(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        config_dir = tmp_path / ".config" / "xssh"
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("server_tag: tag:prod\n")

        assert load_settings().server_tag == "tag:prod"

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "xssh.yaml"
        path.write_text(
            "ssh_config_file: ~/.ssh/config.d/tailnet\n"
            "candidate_users: [ec2-user, root]\n"
            "connect_timeout: 2\n"
            "max_workers: 16\n"
        )

        settings = load_settings(str(path))

        assert settings.ssh_config_file == "~/.ssh/config.d/tailnet"
        assert settings.candidate_users == ["ec2-user", "root"]
        assert settings.connect_timeout == 2
        assert settings.max_workers == 16

    def test_explicit_file_missing(self, tmp_path):
        with pytest.raises(SettingsError, match="not found"):
            load_settings(str(tmp_path / "missing.yaml"))

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "xssh.yaml"
        path.write_text("")

        assert load_settings(str(path)) == XsshSettings()

    @pytest.mark.parametrize(
        "content",
        [
            "candidate_users: []\n",
            "connect_timeout: 0\n",
            "unknown_key: 1\n",
            "- just\n- a list\n",
            "candidate_users: [ubuntu, '  ']\n",
            "key: [unclosed\n",
        ],
    )
    def test_invalid_files(self, tmp_path, content):
        path = tmp_path / "xssh.yaml"
        path.write_text(content)

        with pytest.raises(SettingsError):
            load_settings(str(path))


class TestXsshSettings:
    """Test XsshSettings."""

    def test_host_options(self):
        assert XsshSettings().host_options() == {"StrictHostKeyChecking": "no"}
        assert XsshSettings(disable_host_key_checking=False).host_options() == {}

    def test_assignment_is_validated(self):
        settings = XsshSettings()

        with pytest.raises(ValidationError):
            settings.max_workers = 0
