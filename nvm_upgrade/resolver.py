"""
Upgrade target resolution.

The supported upgrade path moves from one even (LTS) major line to the next,
e.g. v20.x to the newest v22.x in the catalog.
"""

from __future__ import annotations

from typing import Sequence

from .versions import Version, compare_major, parse_version


def next_even_major(current: Version | str, catalog: Sequence[Version]) -> Version | None:
    """
    Pick the newest catalog entry on the major line two above ``current``.

    The catalog is in upstream order (oldest first), so the last match is the
    newest release of that line.

    Args:
        current: Active version (text is parsed and may raise InvalidFormat)
        catalog: Even LTS versions in upstream order

    Returns:
        Target Version, or None if the catalog has nothing on that line
    """
    if isinstance(current, str):
        current = parse_version(current)

    target_line = Version(current.major + 2, 0, 0)
    matches = [v for v in catalog if compare_major(v, target_line) == 0]
    return matches[-1] if matches else None
