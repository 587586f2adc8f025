"""
Installation source selection.

Turns the operator's menu choice (plus a version, path or URL where the
choice needs one) into an InstallPlan. Malformed input is re-prompted at the
point of entry; nothing here installs anything.
"""

from __future__ import annotations

import enum
import logging
import os
from pathlib import Path
from typing import Sequence

from .install_plan import InstallPlan, LocalArchive, NetworkShare, Remote
from .prompter import CYAN, RED, YELLOW, Prompter
from .resolver import next_even_major
from .versions import InvalidFormat, Version, clean_text, extract_from_filename, parse_version

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_EXTENSIONS = (".tar.xz", ".tar.gz", ".pkg")
CANCEL_SENTINEL = "cancel"


class MenuChoice(enum.Enum):
    INSTALL_LATEST_EVEN_LTS = "Install the latest even LTS version from the official releases"
    INSTALL_SPECIFIC_REMOTE = "Install a specific version from the official releases"
    INSTALL_FROM_LOCAL_ARCHIVE = "Install from a local archive"
    INSTALL_FROM_NETWORK_SHARE = "Install from a network share"
    LIST_ALL_THEN_CHOOSE_SPECIFIC = "List all available versions"


class FileValidationError(Exception):
    """
    Raised when a local archive path is unusable.

    Attributes:
        path: Path that failed validation
        reason: Which check failed ('missing', 'not_a_file', 'extension')
    """
    def __init__(self, path: str, reason: str, message: str):
        self.path = path
        self.reason = reason
        super().__init__(message)


def menu_choices(network_share: bool = False) -> list[MenuChoice]:
    """Menu entries in display order for the given configuration."""
    choices = [
        MenuChoice.INSTALL_LATEST_EVEN_LTS,
        MenuChoice.INSTALL_SPECIFIC_REMOTE,
        MenuChoice.INSTALL_FROM_LOCAL_ARCHIVE,
    ]
    if network_share:
        choices.append(MenuChoice.INSTALL_FROM_NETWORK_SHARE)
    choices.append(MenuChoice.LIST_ALL_THEN_CHOOSE_SPECIFIC)
    return choices


def clean_path(raw: str) -> str:
    """Strip surrounding whitespace and quotes from a pasted path."""
    return clean_text(raw)


def validate_local_file(
    path: str,
    accepted_extensions: Sequence[str] = DEFAULT_ARCHIVE_EXTENSIONS,
) -> Path:
    """
    Validate a local archive path.

    Checks run in order and stop at the first failure: the path exists, it is
    a regular file, and its name ends with an accepted extension
    (case-insensitive).

    Args:
        path: Candidate archive path
        accepted_extensions: Allowed filename suffixes

    Returns:
        The validated Path

    Raises:
        FileValidationError: If any check fails
    """
    candidate = Path(path)

    if not candidate.exists():
        raise FileValidationError(path, "missing", "The file does not exist at the given path.")

    if not candidate.is_file():
        raise FileValidationError(path, "not_a_file", "The given path is not a file.")

    name = candidate.name.lower()
    if not any(name.endswith(ext.lower()) for ext in accepted_extensions):
        raise FileValidationError(
            path,
            "extension",
            f"The file does not have a valid extension ({', '.join(accepted_extensions)}). "
            f"Detected file name: {name}",
        )

    return candidate


def prompt_version(prompter: Prompter) -> Version:
    """Ask for a version until one parses."""
    while True:
        answer = prompter.ask("Enter the Node.js version to install (format: vX.Y.Z): ")
        try:
            return parse_version(answer)
        except InvalidFormat:
            prompter.show(
                "Invalid version format. Use vX.Y.Z or X.Y.Z (for example v20.11.0 or 20.11.0)",
                RED,
            )


def prompt_local_archive(
    prompter: Prompter,
    accepted_extensions: Sequence[str] = DEFAULT_ARCHIVE_EXTENSIONS,
) -> str | None:
    """
    Ask for a local archive path until a valid one is given.

    Returns:
        Cleaned path, or None if the operator typed the cancel sentinel
    """
    while True:
        answer = prompter.ask(f'Enter the full path of the Node.js archive (or "{CANCEL_SENTINEL}" to exit): ')
        path = clean_path(answer)

        if path.lower() == CANCEL_SENTINEL:
            return None

        logger.info(f"Validating local file: {path}")
        try:
            validate_local_file(path, accepted_extensions)
        except FileValidationError as e:
            logger.error(f"Error: {e}")
            logger.warning("Check that the path is correct and readable.")
            logger.warning(
                "On WSL the path looks like /mnt/c/Users/<user_name>/Downloads/node-<version>-linux-x64.tar.xz"
            )
            prompter.show("Please try again with a valid path.", RED)
            continue

        logger.info("Local file validated.")
        return path


def local_archive_plan(
    prompter: Prompter,
    accepted_extensions: Sequence[str] = DEFAULT_ARCHIVE_EXTENSIONS,
) -> InstallPlan | None:
    """
    Build a plan from a local archive chosen by the operator.

    The target version comes from the archive's file name and may be None;
    the orchestrator rejects such plans before installing.

    Returns:
        InstallPlan, or None if the operator cancelled
    """
    path = prompt_local_archive(prompter, accepted_extensions)
    if path is None:
        logger.info("File selection cancelled by the user.")
        return None

    target = extract_from_filename(os.path.basename(path))
    if target is None:
        logger.warning(f"Could not determine a version from the file name: {os.path.basename(path)}")
    return InstallPlan(target_version=target, source=LocalArchive(path=path))


def prompt_network_share(prompter: Prompter) -> str:
    """Ask for a non-empty network share URL."""
    while True:
        url = prompter.ask("Enter the network share URL of the Node.js archive: ").strip()
        if url:
            return url
        prompter.show("The URL cannot be empty.", RED)


def show_catalog(prompter: Prompter, catalog: Sequence[Version]) -> None:
    prompter.show("Available even LTS versions:", CYAN)
    for version in catalog:
        prompter.show(str(version), YELLOW)


def select_install_plan(
    prompter: Prompter,
    current: Version | None,
    catalog: Sequence[Version],
    network_share: bool = False,
    accepted_extensions: Sequence[str] = DEFAULT_ARCHIVE_EXTENSIONS,
) -> InstallPlan | None:
    """
    Run the source menu and resolve an InstallPlan.

    Args:
        prompter: Operator prompts
        current: Active version (None if no runtime is resolvable)
        catalog: Even LTS versions
        network_share: Offer the network share entry
        accepted_extensions: Allowed local archive suffixes

    Returns:
        InstallPlan, or None when there is nothing to do (no upgrade
        available, or the operator cancelled)
    """
    choices = menu_choices(network_share)
    choice = choices[prompter.choose_from_menu([c.value for c in choices])]
    logger.debug(f"Menu choice: {choice.name}")

    if choice is MenuChoice.INSTALL_LATEST_EVEN_LTS:
        if current is None:
            logger.warning("No active Node.js version; cannot compute the next even LTS line.")
            return None
        target = next_even_major(current, catalog)
        if target is None:
            logger.warning("No updates available for the next even Node.js version.")
            return None
        return InstallPlan(target_version=target, source=Remote())

    if choice is MenuChoice.INSTALL_SPECIFIC_REMOTE:
        return InstallPlan(target_version=prompt_version(prompter), source=Remote())

    if choice is MenuChoice.INSTALL_FROM_LOCAL_ARCHIVE:
        return local_archive_plan(prompter, accepted_extensions)

    if choice is MenuChoice.INSTALL_FROM_NETWORK_SHARE:
        target = prompt_version(prompter)
        return InstallPlan(target_version=target, source=NetworkShare(url=prompt_network_share(prompter)))

    show_catalog(prompter, catalog)
    return InstallPlan(target_version=prompt_version(prompter), source=Remote())
