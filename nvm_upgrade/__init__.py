"""
nvm-upgrade - Node.js runtime upgrades through nvm.

Core Modules:
- Versions and Catalog: version parsing, even LTS release listing
- Resolution: next even-major target, installation source selection
- Foundation: environment detection, config, commands, prompts
- Installation: downloads, archive extraction, OS install strategies
- Orchestration: install, activate, verify, persist
"""

__version__ = "1.0.0"
__author__ = "nvm-upgrade Contributors"

# Version info for backward compatibility
VERSION = __version__

# Versions and Catalog
from .versions import (
    Version,
    InvalidFormat,
    parse_version,
    render_version,
    extract_from_filename,
    compare_major,
    is_valid_version,
)
from .catalog import Catalog, CatalogUnavailable, filter_even_lts, fetch_lts_listing, query_catalog

# Resolution
from .resolver import next_even_major
from .install_plan import InstallPlan, InstallStep, InstallSource, Remote, LocalArchive, NetworkShare
from .sources import (
    MenuChoice,
    FileValidationError,
    validate_local_file,
    select_install_plan,
    local_archive_plan,
)

# Foundation
from .environment import Environment, detect_environment, get_environment_from_config, check_connectivity
from .command import CommandRunner, CommandResult, CommandError
from .prompter import Prompter
from .config import Config, InstallConfig, ProjectConfig, Preferences, PreferenceStore, load_config, load_config_file
from .local_state import NvmProbe, is_installed, current_version, default_version

# Installation
from .downloader import Downloader, DownloadError, NotFound, TransferFailed, node_dist_url
from .installer import (
    InstallError,
    InstallFailed,
    ArchiveExtractor,
    PrivilegedMover,
    InstallStrategy,
    NvmInstallStrategy,
    ManualInstallStrategy,
    select_strategy,
)

# Orchestration
from .upgrade import UpgradeResult, execute_plan, run_upgrade

# Logging configuration
from .logging_config import setup_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Versions and Catalog
    "Version",
    "InvalidFormat",
    "parse_version",
    "render_version",
    "extract_from_filename",
    "compare_major",
    "is_valid_version",
    "Catalog",
    "CatalogUnavailable",
    "filter_even_lts",
    "fetch_lts_listing",
    "query_catalog",
    # Resolution
    "next_even_major",
    "InstallPlan",
    "InstallStep",
    "InstallSource",
    "Remote",
    "LocalArchive",
    "NetworkShare",
    "MenuChoice",
    "FileValidationError",
    "validate_local_file",
    "select_install_plan",
    "local_archive_plan",
    # Foundation
    "Environment",
    "detect_environment",
    "get_environment_from_config",
    "check_connectivity",
    "CommandRunner",
    "CommandResult",
    "CommandError",
    "Prompter",
    "Config",
    "InstallConfig",
    "ProjectConfig",
    "Preferences",
    "PreferenceStore",
    "load_config",
    "load_config_file",
    "NvmProbe",
    "is_installed",
    "current_version",
    "default_version",
    # Installation
    "Downloader",
    "DownloadError",
    "NotFound",
    "TransferFailed",
    "node_dist_url",
    "InstallError",
    "InstallFailed",
    "ArchiveExtractor",
    "PrivilegedMover",
    "InstallStrategy",
    "NvmInstallStrategy",
    "ManualInstallStrategy",
    "select_strategy",
    # Orchestration
    "UpgradeResult",
    "execute_plan",
    "run_upgrade",
    # Logging
    "setup_logging",
    "get_logger",
]
