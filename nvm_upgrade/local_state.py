"""
Local runtime state.

Answers "is this version already installed" and "which version is active"
from the answers of a probe, so the decision logic stays independent of
subprocesses and the filesystem.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .command import CommandError, CommandRunner
from .environment import nvm_version_dir
from .versions import InvalidFormat, Version, parse_version

logger = logging.getLogger(__name__)


class StateProbe(Protocol):
    """Queries the local machine on behalf of the decision functions."""

    def check_version_dir_exists(self, version: Version) -> bool: ...

    def check_via_tool_listing(self, version: Version) -> bool: ...

    def active_version_text(self) -> str: ...

    def default_version_text(self) -> str: ...


def is_installed(version: Version, probe: StateProbe) -> bool:
    """
    Check whether a version is already installed.

    The tool listing only corroborates the directory check, so any failure
    from it counts as "not installed".

    Args:
        version: Version to look for
        probe: State probe

    Returns:
        True if either the version directory or the tool listing reports it
    """
    if probe.check_version_dir_exists(version):
        logger.info(f"Version {version} is already installed in {nvm_version_dir(str(version))}")
        return True

    try:
        listed = probe.check_via_tool_listing(version)
    except Exception as e:
        logger.debug(f"nvm listing check failed for {version}: {e}")
        listed = False

    if listed:
        logger.info(f"Version {version} is installed according to nvm")
        return True

    logger.info(f"Version {version} is not installed")
    return False


def _probe_version(query, label: str) -> Version | None:
    try:
        text = query()
    except Exception as e:
        logger.debug(f"Could not query the {label} Node.js version: {e}")
        return None

    try:
        return parse_version(text)
    except InvalidFormat:
        logger.debug(f"Unrecognised Node.js version output: {text!r}")
        return None


def current_version(probe: StateProbe) -> Version | None:
    """
    Get the active runtime version.

    Returns:
        Active Version, or None when no runtime can be resolved
    """
    return _probe_version(probe.active_version_text, "active")


def default_version(probe: StateProbe) -> Version | None:
    """
    Get the version new shells start with (nvm's ``default`` alias).

    Used to verify an activation; the calling shell may still have the
    previous version on its PATH.

    Returns:
        Default Version, or None when it cannot be resolved
    """
    return _probe_version(probe.default_version_text, "default")


class NvmProbe:
    """
    State probe backed by the nvm directory layout and the nvm CLI.

    Args:
        runner: Command runner used for nvm and node queries
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def check_version_dir_exists(self, version: Version) -> bool:
        return nvm_version_dir(str(version)).is_dir()

    def check_via_tool_listing(self, version: Version) -> bool:
        result = self.runner.nvm("ls", "--no-colors", str(version))
        return str(version) in result.stdout

    def active_version_text(self) -> str:
        return self.runner.in_nvm_shell("node", "--version").stdout

    def default_version_text(self) -> str:
        return self.runner.in_default_shell("node", "--version").stdout

    def nvm_version(self) -> str | None:
        """Return the nvm version, or None if nvm cannot be loaded."""
        try:
            return self.runner.nvm("--version").stdout or None
        except CommandError as e:
            logger.debug(f"nvm --version failed: {e}")
            return None
