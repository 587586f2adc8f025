"""
Tests for the command-line entry point (upgrade.py).
"""

import argparse

import pytest
from unittest.mock import patch

import upgrade
from nvm_upgrade.config import Config, InstallConfig


@pytest.fixture(autouse=True)
def no_config_files():
    with patch("nvm_upgrade.config.CONFIG_LOCATIONS", []):
        yield


class TestBuildParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test default options."""
        args = upgrade.build_parser().parse_args([])
        assert args.dry_run is False
        assert args.json is False
        assert args.os_override is None
        assert args.strategy is None
        assert args.network_share is False

    def test_invalid_os(self):
        """Test unknown OS names are rejected by argparse."""
        with pytest.raises(SystemExit):
            upgrade.build_parser().parse_args(["--os", "Windows"])


class TestApplyOverrides:
    """Tests for apply_overrides()."""

    def test_no_overrides(self):
        """Test the config is unchanged without options."""
        args = upgrade.build_parser().parse_args([])
        assert upgrade.apply_overrides(Config(), args) == Config()

    def test_overrides(self):
        """Test command-line options win over configuration."""
        config = Config(os_override="Linux", install=InstallConfig(strategy="nvm"))
        args = upgrade.build_parser().parse_args(["--os", "WSL", "--strategy", "manual", "--network-share"])

        result = upgrade.apply_overrides(config, args)

        assert result.os_override == "WSL"
        assert result.install.strategy == "manual"
        assert result.install.network_share is True


class TestMain:
    """Tests for main()."""

    @patch("upgrade.run_upgrade", return_value=0)
    def test_main_runs_upgrade(self, mock_run, tmp_path):
        """Test main wires options into the workflow."""
        exit_code = upgrade.main(["--os", "Linux", "--dry-run", "--json", "--project-dir", str(tmp_path)])

        assert exit_code == 0
        args, kwargs = mock_run.call_args
        config, env, runner, prompter, project_dir = args
        assert env.os_name == "Linux"
        assert project_dir == tmp_path
        assert kwargs == {"dry_run": True, "output_format": "json"}

    @patch("upgrade.run_upgrade", return_value=1)
    def test_main_propagates_exit_code(self, mock_run):
        """Test the workflow's exit code is returned."""
        assert upgrade.main(["--os", "Linux"]) == 1

    def test_main_bad_config_path(self, tmp_path, capsys):
        """Test an unreadable config file exits with status 2."""
        assert upgrade.main(["--config", str(tmp_path / "missing.yml")]) == 2
        assert "Could not load config" in capsys.readouterr().err

    def test_main_invalid_config_value(self, tmp_path):
        """Test an invalid config file is reported."""
        path = tmp_path / "config.yml"
        path.write_text("install:\n  strategy: brew\n")
        assert upgrade.main(["--config", str(path)]) == 2

    @patch("upgrade.run_upgrade", side_effect=KeyboardInterrupt)
    def test_main_interrupted(self, mock_run, capsys):
        """Test Ctrl-C exits with status 130."""
        assert upgrade.main(["--os", "Linux"]) == 130
        assert "Aborted." in capsys.readouterr().err

    @patch("upgrade.run_upgrade")
    def test_main_closes_prompter(self, mock_run):
        """Test the prompter is open during the run and closed afterwards."""
        seen = {}

        def record(config, env, runner, prompter, project_dir, **kwargs):
            seen["prompter"] = prompter
            seen["closed"] = prompter.closed
            return 0

        mock_run.side_effect = record
        upgrade.main(["--os", "Linux"])

        assert seen["closed"] is False
        assert seen["prompter"].closed is True
