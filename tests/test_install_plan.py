"""
Tests for installation plans (nvm_upgrade/install_plan.py).
"""

import json

import pytest

from nvm_upgrade.install_plan import (
    InstallPlan,
    InstallStep,
    LocalArchive,
    NetworkShare,
    Remote,
)
from nvm_upgrade.versions import Version


class TestInstallSources:
    """Tests for the source variants."""

    def test_methods(self):
        """Test each source reports its preference method name."""
        assert Remote().method == "remote"
        assert LocalArchive(path="/tmp/a.tar.xz").method == "local"
        assert NetworkShare(url="http://mirror/a.tar.xz").method == "network"

    def test_describe(self):
        """Test human-readable descriptions."""
        assert "official" in Remote().describe()
        assert "/tmp/a.tar.xz" in LocalArchive(path="/tmp/a.tar.xz").describe()
        assert "http://mirror/a.tar.xz" in NetworkShare(url="http://mirror/a.tar.xz").describe()


class TestInstallStep:
    """Tests for InstallStep."""

    def test_to_dict(self):
        """Test serialization."""
        step = InstallStep("Install", ("nvm", "install", "v22.9.0"))
        assert step.to_dict() == {
            "description": "Install",
            "command": ["nvm", "install", "v22.9.0"],
            "requires_sudo": False,
        }


class TestInstallPlan:
    """Tests for InstallPlan."""

    def test_plan_immutable(self):
        """Test plans cannot be modified."""
        plan = InstallPlan(Version(22, 9, 0), Remote())
        with pytest.raises(AttributeError):
            plan.target_version = Version(24, 0, 0)

    def test_to_dict_remote(self):
        """Test remote plan serialization."""
        plan = InstallPlan(Version(22, 9, 0), Remote())
        assert plan.to_dict() == {
            "target_version": "v22.9.0",
            "source": {"type": "remote"},
        }

    def test_to_dict_local(self):
        """Test local plans carry their path."""
        plan = InstallPlan(Version(19, 2, 0), LocalArchive(path="/tmp/node-v19.2.0-linux-x64.tar.gz"))
        assert plan.to_dict()["source"] == {
            "type": "local",
            "path": "/tmp/node-v19.2.0-linux-x64.tar.gz",
        }

    def test_to_dict_network(self):
        """Test network plans carry their URL."""
        plan = InstallPlan(Version(22, 9, 0), NetworkShare(url="http://mirror/node.tar.xz"))
        assert plan.to_dict()["source"]["url"] == "http://mirror/node.tar.xz"

    def test_to_dict_unknown_version(self):
        """Test a plan without a version."""
        plan = InstallPlan(None, LocalArchive(path="/tmp/node.tar.xz"))
        assert plan.to_dict()["target_version"] is None

    def test_to_json(self):
        """Test JSON output parses back to the dict form."""
        plan = InstallPlan(Version(22, 9, 0), Remote())
        assert json.loads(plan.to_json()) == plan.to_dict()

    def test_to_table(self):
        """Test table output."""
        steps = (
            InstallStep("Install Node.js v22.9.0 with nvm", ("nvm", "install", "v22.9.0")),
            InstallStep("Move files", ("cp", "-R", "a", "b"), requires_sudo=True),
        )
        table = InstallPlan(Version(22, 9, 0), Remote()).to_table(steps)

        assert "Node.js Upgrade Plan" in table
        assert "Target Version:     v22.9.0" in table
        assert "1. Install Node.js v22.9.0 with nvm" in table
        assert "Command: nvm install v22.9.0" in table
        assert "2. Move files [SUDO]" in table
        assert "This is a dry-run. No changes will be made." in table

    def test_to_table_without_steps(self):
        """Test the steps section is omitted when empty."""
        table = InstallPlan(None, LocalArchive(path="/tmp/x.tar.xz")).to_table()
        assert "Installation Steps:" not in table
        assert "Target Version:     unknown" in table
