"""
Upgrade orchestration.

Runs a resolved InstallPlan (skip if installed, acquire, install, activate,
verify, persist) and drives the interactive workflow around it. Nothing is
retried: every failure ends the run and is reported to the operator.
"""

from __future__ import annotations

import datetime
import json
import logging
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path

from .catalog import CatalogUnavailable, query_catalog
from .command import CommandError, CommandRunner
from .config import Config, PreferenceStore
from .downloader import DownloadError
from .environment import Environment, check_connectivity
from .install_plan import InstallPlan
from .installer import InstallError, InstallStrategy, select_strategy
from .local_state import NvmProbe, StateProbe, current_version, default_version, is_installed
from .prompter import CYAN, GREEN, RED, YELLOW, Prompter
from .sources import local_archive_plan, select_install_plan
from .versions import Version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpgradeResult:
    """
    Outcome of executing an InstallPlan.

    Attributes:
        installed_version: Version that was installed (None if the run failed)
        activated: Whether the active version matches the target afterwards
        already_installed: Whether installation was skipped
        dependencies_updated: Whether the project dependency refresh ran
        error_message: Failure detail, surfaced verbatim
        duration_seconds: Total time spent
    """
    installed_version: Version | None
    activated: bool
    already_installed: bool = False
    dependencies_updated: bool = False
    error_message: str | None = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.error_message is None and self.activated

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "installed_version": str(self.installed_version) if self.installed_version else None,
            "activated": self.activated,
            "already_installed": self.already_installed,
            "dependencies_updated": self.dependencies_updated,
            "error_message": self.error_message,
            "duration_seconds": self.duration_seconds,
        }


def write_pin_file(path: Path, version: Version) -> None:
    """Overwrite the version pin file with the activated version."""
    existed = path.exists()
    path.write_text(str(version), encoding="utf-8")
    logger.info(f"{path.name} {'updated' if existed else 'created'} with the new version")


def print_manual_activation(prompter: Prompter, version: Version) -> None:
    prompter.show(f"Could not activate Node.js {version} automatically.", RED)
    prompter.show("Please complete the setup with these commands:", YELLOW)
    prompter.show(f"1. nvm use {version}", CYAN)
    prompter.show(f"2. nvm alias default {version}", CYAN)


def refresh_dependencies(runner: CommandRunner, project_dir: Path) -> bool:
    """
    Run ``npm update`` in the project with the new default Node.js.

    A failure is logged and reported as False; it does not undo the upgrade.
    """
    logger.info("Updating project dependencies...")
    try:
        runner.in_default_shell("npm", "update", cwd=str(project_dir))
    except CommandError as e:
        logger.error(f"Failed to update dependencies: {e}")
        return False
    logger.info("Dependencies updated.")
    return True


def execute_plan(
    plan: InstallPlan,
    strategy: InstallStrategy,
    probe: StateProbe,
    prompter: Prompter,
    preferences: PreferenceStore,
    project_dir: Path,
    pin_file: str = ".nvmrc",
) -> UpgradeResult:
    """
    Install, activate and record an InstallPlan.

    Args:
        plan: Plan to execute
        strategy: OS-specific install strategy
        probe: Local state probe
        prompter: Operator prompts (dependency refresh question)
        preferences: Preference store written after activation
        project_dir: Project root holding the pin file
        pin_file: Pin file name

    Returns:
        UpgradeResult; download and install failures are reported through
        error_message, an activation mismatch through activated=False
    """
    start_time = time.time()
    target = plan.target_version

    if target is None:
        message = "The archive name does not contain a version (expected e.g. node-v20.11.0-linux-x64.tar.xz)"
        logger.error(message)
        return UpgradeResult(
            installed_version=None,
            activated=False,
            error_message=message,
            duration_seconds=time.time() - start_time,
        )

    already_installed = is_installed(target, probe)

    if already_installed:
        prompter.show(f"Version {target} is already installed.", YELLOW)
    else:
        logger.info(f"Installing Node.js {target} from {plan.source.describe()}...")
        try:
            with tempfile.TemporaryDirectory(prefix="nvm-upgrade-") as work_dir:
                material = strategy.acquire(plan, work_dir)
                strategy.install(plan, material)
        except (DownloadError, InstallError) as e:
            logger.error(f"Error installing Node.js {target}: {e}")
            remediation = getattr(e, "remediation", None)
            if remediation:
                prompter.show(remediation, YELLOW)
            return UpgradeResult(
                installed_version=None,
                activated=False,
                error_message=str(e),
                duration_seconds=time.time() - start_time,
            )
        prompter.show(f"Node.js {target} installed.", GREEN)

    try:
        strategy.activate(target)
        active = default_version(probe)
    except CommandError as e:
        logger.error(f"Error switching to Node.js {target}: {e}")
        active = None

    if active != target:
        logger.error(f"Active version ({active or 'none'}) does not match the installed version ({target})")
        print_manual_activation(prompter, target)
        return UpgradeResult(
            installed_version=target,
            activated=False,
            already_installed=already_installed,
            duration_seconds=time.time() - start_time,
        )

    logger.info(f"Node.js upgraded to {target}")

    write_pin_file(project_dir / pin_file, target)
    preferences.set("lastUsedVersion", str(target))
    preferences.set("preferredInstallMethod", plan.source.method)

    dependencies_updated = False
    if prompter.confirm("Update the project dependencies with the new Node.js version?"):
        dependencies_updated = refresh_dependencies(strategy.runner, project_dir)

    return UpgradeResult(
        installed_version=target,
        activated=True,
        already_installed=already_installed,
        dependencies_updated=dependencies_updated,
        duration_seconds=time.time() - start_time,
    )


def write_report(
    path: Path,
    env: Environment,
    previous: Version | None,
    plan: InstallPlan,
    result: UpgradeResult,
) -> None:
    """Write the post-run JSON report."""
    report = {
        "timestamp": datetime.datetime.now().isoformat(timespec="seconds"),
        "os": env.os_name,
        "arch": env.arch,
        "previous_version": str(previous) if previous else None,
        "plan": plan.to_dict(),
        "result": result.to_dict(),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    logger.info(f"Report written to {path}")


def resolve_plan(
    config: Config,
    runner: CommandRunner,
    prompter: Prompter,
    current: Version | None,
) -> InstallPlan | None:
    """
    Decide what to install.

    Offline, or when the remote listing is unavailable or empty, the operator
    is sent straight to the local archive prompt.
    """
    extensions = config.install.accepted_extensions

    if not check_connectivity(config.install.dist_url, config.timeout_seconds):
        logger.warning(f"Could not connect to {config.install.dist_url}")
        prompter.show("No connectivity detected. Continuing with installation from a local file.", YELLOW)
        return local_archive_plan(prompter, extensions)
    logger.info("Connectivity verified.")

    try:
        catalog = query_catalog(runner)
        if not catalog:
            raise CatalogUnavailable("No even LTS versions were found.")
    except CatalogUnavailable as e:
        logger.error(f"Error getting available versions: {e}")
        prompter.show("Continuing with installation from a local file.", YELLOW)
        return local_archive_plan(prompter, extensions)

    return select_install_plan(
        prompter,
        current,
        catalog,
        network_share=bool(config.install.network_share),
        accepted_extensions=extensions,
    )


def run_upgrade(
    config: Config,
    env: Environment,
    runner: CommandRunner,
    prompter: Prompter,
    project_dir: Path,
    strategy: InstallStrategy | None = None,
    probe: NvmProbe | None = None,
    dry_run: bool = False,
    output_format: str = "table",
) -> int:
    """
    Interactive upgrade workflow.

    Args:
        config: Loaded configuration
        env: Detected environment
        runner: Command runner
        prompter: Open prompter
        project_dir: Project root for the pin file and dependency refresh
        strategy: Install strategy (selected from env and config if None)
        probe: State probe (NvmProbe if None)
        dry_run: Print the plan instead of executing it
        output_format: Dry-run format ('table' or 'json')

    Returns:
        Process exit code (0 = nothing failed)
    """
    prompter.show("Welcome to the Node.js Upgrader", CYAN)
    prompter.show("===============================", CYAN)
    logger.info(f"Detected operating system: {env}")

    probe = probe or NvmProbe(runner)
    strategy = strategy or select_strategy(
        env, runner, config.install.strategy, dist_url=config.install.dist_url
    )

    logger.info("Checking nvm...")
    nvm_version = probe.nvm_version()
    if nvm_version is None:
        logger.error("nvm could not be loaded or is not installed correctly.")
        return 1
    logger.info(f"nvm found. Version: {nvm_version}")

    previous = current_version(probe)
    if previous is None:
        logger.warning("Could not determine the current Node.js version.")
    else:
        prompter.show(f"Current Node.js version: {previous}", YELLOW)

    plan = resolve_plan(config, runner, prompter, previous)
    if plan is None:
        prompter.show("Nothing to upgrade.", YELLOW)
        return 0

    if dry_run:
        if output_format == "json":
            prompter.show(plan.to_json())
        else:
            prompter.show(plan.to_table(strategy.plan_steps(plan)))
        return 0

    prompter.show(f"Target version for the upgrade: {plan.target_version or 'unknown'}", YELLOW)
    if not prompter.confirm("Do you want to upgrade to this version?"):
        logger.info("Upgrade cancelled by the user.")
        return 0

    result = execute_plan(
        plan,
        strategy,
        probe,
        prompter,
        PreferenceStore(config.project.preferences_file),
        project_dir,
        pin_file=config.project.pin_file,
    )

    if config.project.report_file:
        write_report(project_dir / config.project.report_file, env, previous, plan, result)

    if result.error_message:
        prompter.show(f"Error: {result.error_message}", RED)
        return 1
    return 0
