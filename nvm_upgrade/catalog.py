"""
Remote release catalog.

Turns the text printed by ``nvm ls-remote --lts --no-colors`` into the
ordered list of even-major LTS versions this tool offers.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from .command import CommandError, CommandRunner
from .versions import InvalidFormat, Version, parse_version

logger = logging.getLogger(__name__)

# A catalog is an ordered, immutable sequence of versions
Catalog = tuple[Version, ...]

# Marker nvm prints in front of the currently active version
_CURRENT_MARKER = "->"

# SGR color sequences nvm wraps around installed and current versions
_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


class CatalogUnavailable(Exception):
    """Raised when the remote release listing cannot be obtained."""
    pass


def _first_version_token(line: str) -> str | None:
    fields = _ANSI_ESCAPE.sub("", line).split()
    if fields and fields[0] == _CURRENT_MARKER:
        fields = fields[1:]
    return fields[0] if fields else None


def filter_even_lts(raw_listing_lines: Iterable[str]) -> Catalog:
    """
    Keep the even-major versions from a release listing.

    Only lines containing a ``v`` marker are considered; the version token is
    the first whitespace-delimited field once color codes are removed. Input
    order is preserved.

    Args:
        raw_listing_lines: Lines such as "v20.11.0   (LTS: Iron)"

    Returns:
        Catalog of even-major versions (empty if none)
    """
    catalog: list[Version] = []
    for line in raw_listing_lines:
        if "v" not in line and "V" not in line:
            continue
        token = _first_version_token(line)
        if token is None:
            continue
        try:
            version = parse_version(token)
        except InvalidFormat:
            continue
        if version.is_even_major:
            catalog.append(version)
    return tuple(catalog)


def fetch_lts_listing(runner: CommandRunner) -> list[str]:
    """
    Retrieve the LTS listing from nvm.

    Args:
        runner: Command runner

    Returns:
        Listing lines

    Raises:
        CatalogUnavailable: If nvm cannot produce the listing
    """
    try:
        result = runner.nvm("ls-remote", "--lts", "--no-colors")
    except CommandError as e:
        raise CatalogUnavailable(f"Could not retrieve remote versions: {e}") from e

    lines = result.stdout.splitlines()
    if not lines or "N/A" in result.stdout.strip().splitlines()[0]:
        raise CatalogUnavailable("nvm returned an empty remote listing")
    return lines


def query_catalog(runner: CommandRunner) -> Catalog:
    """Fetch the remote listing and filter it down to even LTS versions."""
    logger.info("Checking available updates...")
    catalog = filter_even_lts(fetch_lts_listing(runner))
    logger.info(f"Found {len(catalog)} even LTS versions.")
    return catalog
