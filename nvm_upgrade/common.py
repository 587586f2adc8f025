"""
Common utilities shared across nvm_upgrade modules.
"""

from __future__ import annotations

import os
from pathlib import Path


def user_home() -> Path:
    """
    Get the operator's home directory.

    Returns:
        HOME (or USERPROFILE) if set, otherwise the expanded "~"
    """
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    if home:
        return Path(home)
    return Path(os.path.expanduser("~"))


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("NVM_UPGRADE_DEBUG", "0") == "1":
        from .logging_config import get_logger
        get_logger().debug(msg)
