"""
Environment detection for OS-aware installation strategies.

Detects whether running on:
- macOS (nvm installs natively)
- Linux (nvm installs natively)
- WSL (Windows Subsystem for Linux, where the manual download path is used)
"""

from __future__ import annotations

import http.client
import os
import platform
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path

from .common import user_home, vlog


VALID_OS_NAMES = ("macOS", "Linux", "WSL", "unknown")
PROC_VERSION_PATH = "/proc/version"
DEFAULT_DIST_URL = "https://nodejs.org/dist"


@dataclass(frozen=True)
class Environment:
    """
    Detected environment information.

    Attributes:
        os_name: 'macOS', 'Linux', 'WSL' or 'unknown'
        arch: Node.js architecture label for release archives ('x64', 'arm64', 'x86')
        indicators: Evidence for the detection decision
        override: Whether the OS was explicitly set by the user
    """
    os_name: str
    arch: str = "x64"
    indicators: tuple[str, ...] = ()
    override: bool = False

    def __str__(self) -> str:
        override_str = " (override)" if self.override else ""
        return f"{self.os_name}{override_str} [{self.arch}]"

    @property
    def is_wsl(self) -> bool:
        return self.os_name == "WSL"


def node_arch(machine: str | None = None) -> str:
    """Map platform.machine() to the architecture label used in Node.js archives."""
    machine = (machine if machine is not None else platform.machine()).lower()
    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    if machine in ("aarch64", "arm64"):
        return "arm64"
    if machine.startswith("armv7"):
        return "armv7l"
    return "x86"


def _read_proc_version() -> str:
    try:
        with open(PROC_VERSION_PATH, "r", encoding="utf-8") as f:
            return f.read()
    except OSError:
        return ""


def detect_environment(override: str | None = None, verbose: bool = False) -> Environment:
    """
    Detect the operating system for installation strategy selection.

    Args:
        override: Explicit OS name ('macOS', 'Linux', 'WSL', or None/'auto')
        verbose: Enable verbose logging

    Returns:
        Environment with detected or overridden OS

    Raises:
        ValueError: If override value is not valid
    """
    arch = node_arch()

    if override and override != "auto":
        if override not in VALID_OS_NAMES:
            raise ValueError(
                f"Invalid OS override: {override}. "
                f"Must be one of: {', '.join(VALID_OS_NAMES)}"
            )
        vlog(f"Operating system explicitly set to: {override}", verbose)
        return Environment(
            os_name=override,
            arch=arch,
            indicators=(f"explicit_override={override}",),
            override=True,
        )

    system = platform.system()
    indicators = [f"platform={system}"]

    if system == "Darwin":
        os_name = "macOS"
    elif system == "Linux":
        proc_version = _read_proc_version()
        if "microsoft" in proc_version.lower():
            indicators.append("proc_version=microsoft")
            os_name = "WSL"
        else:
            os_name = "Linux"
    else:
        os_name = "unknown"

    vlog(f"Operating system detected: {os_name} ({indicators})", verbose)
    return Environment(os_name=os_name, arch=arch, indicators=tuple(indicators))


def get_environment_from_config(config_os: str | None, verbose: bool = False) -> Environment:
    """
    Get environment from configuration file setting.

    Args:
        config_os: OS from config ('auto', 'macOS', 'Linux', 'WSL', or None)
        verbose: Enable verbose logging
    """
    if not config_os or config_os == "auto":
        return detect_environment(override=None, verbose=verbose)
    return detect_environment(override=config_os, verbose=verbose)


def nvm_dir() -> Path:
    """Get the nvm installation directory ($NVM_DIR or ~/.nvm)."""
    configured = os.environ.get("NVM_DIR")
    if configured:
        return Path(configured)
    return user_home() / ".nvm"


def nvm_version_dir(version: str) -> Path:
    """Directory nvm uses for an installed version, e.g. ~/.nvm/versions/node/v22.9.0."""
    return nvm_dir() / "versions" / "node" / version


def check_connectivity(
    url: str = DEFAULT_DIST_URL,
    timeout: float = 3,
    verbose: bool = False,
) -> bool:
    """
    Probe the release server.

    Any timeout or connection error means "no connectivity"; this never raises.

    Args:
        url: URL to probe
        timeout: Seconds before giving up
        verbose: Enable verbose logging

    Returns:
        True if the server answered with HTTP 200
    """
    probe_url = url.rstrip("/") + "/"
    try:
        req = urllib.request.Request(
            probe_url,
            headers={"User-Agent": "nvm-upgrade/1.0"},
            method="HEAD",
        )
        with urllib.request.urlopen(req, timeout=timeout) as response:
            online = response.status == 200
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
        vlog(f"Connectivity probe failed for {probe_url}: {e}", verbose)
        return False

    vlog(f"Connectivity probe {probe_url}: {'ok' if online else 'unexpected status'}", verbose)
    return online
