"""
Installation plans and dry-run output.

An InstallPlan pairs the target version with the source it is installed
from. It is created once per run and never modified.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Sequence, Union

from .versions import Version


@dataclass(frozen=True)
class Remote:
    """Official release server, reached through nvm or a direct download."""
    method = "remote"

    def describe(self) -> str:
        return "official releases"


@dataclass(frozen=True)
class LocalArchive:
    """A Node.js archive already on local disk."""
    path: str
    method = "local"

    def describe(self) -> str:
        return f"local archive {self.path}"


@dataclass(frozen=True)
class NetworkShare:
    """A Node.js archive published on a network share or internal mirror."""
    url: str
    method = "network"

    def describe(self) -> str:
        return f"network share {self.url}"


InstallSource = Union[Remote, LocalArchive, NetworkShare]


@dataclass(frozen=True)
class InstallStep:
    """
    Single step of an installation, shown in dry-run output.

    Attributes:
        description: Human-readable description of the step
        command: Command tuple that would be executed
        requires_sudo: Whether this step requires sudo/root privileges
    """
    description: str
    command: tuple[str, ...] = ()
    requires_sudo: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "description": self.description,
            "command": list(self.command),
            "requires_sudo": self.requires_sudo,
        }


@dataclass(frozen=True)
class InstallPlan:
    """
    What to install and where it comes from.

    Attributes:
        target_version: Version to install (None only when a local archive
            name carried no version; such plans are rejected before installing)
        source: Installation source
    """
    target_version: Version | None
    source: InstallSource

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        source: dict = {"type": self.source.method}
        if isinstance(self.source, LocalArchive):
            source["path"] = self.source.path
        elif isinstance(self.source, NetworkShare):
            source["url"] = self.source.url

        return {
            "target_version": str(self.target_version) if self.target_version else None,
            "source": source,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def to_table(self, steps: Sequence[InstallStep] = (), width: int = 60) -> str:
        """
        Generate human-readable table representation.

        Args:
            steps: Steps the selected strategy would run
            width: Maximum table width

        Returns:
            Formatted table string
        """
        lines = []

        lines.append("=" * width)
        lines.append("Node.js Upgrade Plan")
        lines.append("=" * width)
        lines.append("")
        lines.append(f"Target Version:     {self.target_version or 'unknown'}")
        lines.append(f"Source:             {self.source.describe()}")
        lines.append("")

        if steps:
            lines.append("Installation Steps:")
            lines.append("-" * width)
            for i, step in enumerate(steps, 1):
                sudo_marker = " [SUDO]" if step.requires_sudo else ""
                lines.append(f"{i}. {step.description}{sudo_marker}")
                if step.command:
                    lines.append(f"   Command: {' '.join(step.command)}")
            lines.append("-" * width)
            lines.append("")

        lines.append("This is a dry-run. No changes will be made.")

        return "\n".join(lines)
