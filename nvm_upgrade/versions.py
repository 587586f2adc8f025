"""
Node.js version strings.

Parses, renders and compares the ``vX.Y.Z`` versions used by nvm and the
official release listing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from packaging import version as pkg_version


VERSION_PATTERN = re.compile(r"^[vV]?\d+\.\d+\.\d+$")
FILENAME_VERSION_PATTERN = re.compile(r"[vV]?\d+\.\d+\.\d+")

# Characters stripped from operator input before matching
_TRIM_CHARS = " \t\r\n'\""


class InvalidFormat(ValueError):
    """Raised when text is not a ``vX.Y.Z`` version."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(
            f"Invalid version format: {text!r}. "
            "Use vX.Y.Z or X.Y.Z (for example v20.11.0 or 20.11.0)"
        )


@dataclass(frozen=True, order=True)
class Version:
    """
    A three-component Node.js version.

    The leading ``v`` marker is presentation only: two versions are equal
    when their numeric components are equal.

    Attributes:
        major: Major release line
        minor: Minor version
        patch: Patch version
    """
    major: int
    minor: int
    patch: int

    def __post_init__(self):
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"Version {name} must be a non-negative integer, got {value!r}")

    def __str__(self) -> str:
        return render_version(self)

    @property
    def is_even_major(self) -> bool:
        return self.major % 2 == 0


def clean_text(text: str) -> str:
    """Strip surrounding whitespace and quote characters."""
    return text.strip(_TRIM_CHARS)


def is_valid_version(text: str) -> bool:
    """Check whether text is an acceptable version string."""
    return VERSION_PATTERN.match(clean_text(text)) is not None


def parse_version(text: str) -> Version:
    """
    Parse a version string.

    Args:
        text: Version text such as "v20.11.0", "20.11.0" or "'V18.0.1'"

    Returns:
        Parsed Version

    Raises:
        InvalidFormat: If text does not match ``^[vV]?\\d+\\.\\d+\\.\\d+$``
    """
    if not isinstance(text, str):
        raise InvalidFormat(repr(text))

    cleaned = clean_text(text)
    if not VERSION_PATTERN.match(cleaned):
        raise InvalidFormat(text)

    release = pkg_version.Version(cleaned.lstrip("vV")).release
    major, minor, patch = release[0], release[1], release[2]
    return Version(major=major, minor=minor, patch=patch)


def render_version(v: Version) -> str:
    """Render a version with its leading marker (e.g. "v20.11.0")."""
    return f"v{v.major}.{v.minor}.{v.patch}"


def extract_from_filename(name: str) -> Version | None:
    """
    Find the first version embedded in a file name.

    Args:
        name: File name such as "node-v18.16.0-linux-x64.tar.xz"

    Returns:
        Version, or None if the name carries no version
    """
    match = FILENAME_VERSION_PATTERN.search(name)
    if not match:
        return None
    return parse_version(match.group(0))


def compare_major(a: Version, b: Version) -> int:
    """
    Compare only the major components.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b
    """
    if a.major < b.major:
        return -1
    elif a.major > b.major:
        return 1
    return 0
