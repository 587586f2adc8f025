"""
Installation execution.

Extracts archives, moves them into nvm's version directory with elevated
privileges, and selects the OS-specific install strategy:

- NvmInstallStrategy: nvm downloads and installs remote versions itself
- ManualInstallStrategy: download the official archive and place it by hand
  (used on WSL, where nvm's installer is unreliable)
"""

from __future__ import annotations

import getpass
import logging
import os
import shutil
import tempfile
from pathlib import Path

from .command import CommandError, CommandRunner
from .downloader import Downloader, node_dist_url
from .environment import DEFAULT_DIST_URL, Environment, nvm_version_dir
from .install_plan import InstallPlan, InstallStep, LocalArchive, NetworkShare, Remote
from .versions import Version

logger = logging.getLogger(__name__)

VALID_STRATEGIES = ("auto", "nvm", "manual")

# Windows drives are mounted here under WSL
WSL_MOUNT_PREFIX = "/mnt/"


class InstallError(Exception):
    """
    Base exception for installation errors.

    Attributes:
        message: Human-readable error message
        remediation: Suggested fix for the error
    """
    def __init__(self, message: str, remediation: str | None = None):
        self.message = message
        self.remediation = remediation
        super().__init__(message)


class InstallFailed(InstallError):
    """Raised when extraction, the privileged move or nvm install fails."""
    pass


def _needs_sudo() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is None or geteuid() != 0


class ArchiveExtractor:
    """
    Unpacks Node.js archives into a fresh temporary directory.

    Args:
        runner: Command runner used for tar/pkgutil
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def extract(self, archive_path: str | os.PathLike) -> Path:
        """
        Extract an archive.

        Args:
            archive_path: .tar.xz, .tar.gz or .pkg file

        Returns:
            Temporary directory whose top level holds bin/, lib/, include/...

        Raises:
            InstallFailed: If extraction fails
        """
        archive = str(archive_path)
        target = Path(tempfile.mkdtemp(prefix="node-temp-"))
        logger.info(f"Extracting {archive} into {target}")

        try:
            if archive.lower().endswith(".pkg"):
                self._extract_pkg(archive, target)
            else:
                self.runner.run(["tar", "-xf", archive, "-C", str(target), "--strip-components=1"])
        except CommandError as e:
            shutil.rmtree(target, ignore_errors=True)
            raise InstallFailed(f"Failed to extract {archive}: {e}") from e
        except InstallFailed:
            shutil.rmtree(target, ignore_errors=True)
            raise

        logger.info("Archive extracted")
        return target

    def _extract_pkg(self, archive: str, target: Path) -> None:
        stage = Path(tempfile.mkdtemp(prefix="node-pkg-"))
        try:
            expanded = stage / "expanded"
            self.runner.run(["pkgutil", "--expand-full", archive, str(expanded)])
            payloads = [p for p in expanded.glob("*/Payload/usr/local") if (p / "bin").is_dir()]
            if not payloads:
                raise InstallFailed(f"No Node.js payload found in {archive}")
            try:
                for entry in payloads[0].iterdir():
                    shutil.move(str(entry), str(target / entry.name))
            except OSError as e:
                raise InstallFailed(f"Failed to unpack the payload of {archive}: {e}") from e
        finally:
            shutil.rmtree(stage, ignore_errors=True)


class PrivilegedMover:
    """
    Copies a directory into a system location, then removes the source.

    The source is removed only after the copy succeeded, so a failed copy
    leaves the extracted files in place.

    Args:
        runner: Command runner
        use_sudo: Prefix commands with sudo (default: unless running as root)
    """

    def __init__(self, runner: CommandRunner, use_sudo: bool | None = None):
        self.runner = runner
        self.use_sudo = _needs_sudo() if use_sudo is None else use_sudo

    def _cmd(self, *args: str) -> list[str]:
        return ["sudo", *args] if self.use_sudo else list(args)

    def move(self, source_dir: str | os.PathLike, dest_dir: str | os.PathLike) -> None:
        """
        Move directory contents.

        Raises:
            InstallFailed: If any command fails
        """
        source, dest = str(source_dir), str(dest_dir)
        logger.info(f"Moving files from {source} to {dest}")
        try:
            self.runner.run(self._cmd("mkdir", "-p", dest))
            self.runner.run(self._cmd("cp", "-R", f"{source}/.", f"{dest}/"))
            self.runner.run(self._cmd("rm", "-rf", source))
        except CommandError as e:
            logger.warning(f"Extracted files were left in {source}; remove them once the problem is fixed")
            raise InstallFailed(f"Failed to move {source} to {dest}: {e}") from e
        logger.info(f"Moved contents of {source} to {dest}")

    def take_ownership(self, path: str | os.PathLike) -> None:
        """Give the current user ownership and write access (after a sudo copy)."""
        if not self.use_sudo:
            return
        user = getpass.getuser()
        try:
            self.runner.run(self._cmd("chown", "-R", user, str(path)))
            self.runner.run(self._cmd("chmod", "-R", "u+w", str(path)))
        except CommandError as e:
            raise InstallFailed(f"Failed to set ownership of {path}: {e}") from e


class InstallStrategy:
    """
    Acquires, installs and activates a version for one kind of platform.

    Args:
        runner: Command runner
        downloader: Archive downloader
        extractor: Archive extractor (built from runner if None)
        mover: Privileged mover (built from runner if None)
        arch: Node.js architecture label
        dist_url: Base URL of the official releases
    """
    name = "base"
    remote_uses_nvm = True

    def __init__(
        self,
        runner: CommandRunner,
        downloader: Downloader | None = None,
        extractor: ArchiveExtractor | None = None,
        mover: PrivilegedMover | None = None,
        arch: str = "x64",
        dist_url: str = DEFAULT_DIST_URL,
    ):
        self.runner = runner
        self.downloader = downloader or Downloader()
        self.extractor = extractor or ArchiveExtractor(runner)
        self.mover = mover or PrivilegedMover(runner)
        self.arch = arch
        self.dist_url = dist_url

    # -- acquire ---------------------------------------------------------

    def acquire(self, plan: InstallPlan, work_dir: str | os.PathLike) -> Path | None:
        """
        Obtain the archive for a plan.

        Returns:
            Local archive path, or None when the version manager fetches it

        Raises:
            NotFound, TransferFailed: If a download fails
        """
        source = plan.source
        if isinstance(source, LocalArchive):
            return self.stage_local_archive(Path(source.path), Path(work_dir))
        if isinstance(source, NetworkShare):
            return self.downloader.fetch(source.url, work_dir)
        return self.acquire_remote(plan.target_version, Path(work_dir))

    def stage_local_archive(self, path: Path, work_dir: Path) -> Path:
        return path

    def acquire_remote(self, version: Version, work_dir: Path) -> Path | None:
        raise NotImplementedError

    # -- install ---------------------------------------------------------

    def install(self, plan: InstallPlan, material: Path | None) -> None:
        """
        Install the acquired material.

        Raises:
            InstallFailed: If installation fails
        """
        version = plan.target_version
        if material is None:
            self.install_with_nvm(version)
        else:
            self.install_archive(material, version)

    def install_with_nvm(self, version: Version) -> None:
        logger.info(f"Installing Node.js {version} from the official releases...")
        try:
            self.runner.nvm("install", str(version))
        except CommandError as e:
            raise InstallFailed(
                f"Failed to install Node.js {version}: {e}",
                remediation=f"Try running 'nvm install {version}' manually.",
            ) from e

    def install_archive(self, archive: Path, version: Version) -> None:
        destination = nvm_version_dir(str(version))
        temp_dir = self.extractor.extract(archive)
        self.mover.move(temp_dir, destination)
        self.mover.take_ownership(destination)
        logger.info(f"Node.js {version} installed in {destination}")

    # -- activate --------------------------------------------------------

    def activate(self, version: Version) -> None:
        """
        Make a version the default for new shells.

        Raises:
            CommandError: If nvm rejects the version
        """
        logger.info(f"Activating Node.js {version}...")
        self.runner.nvm("alias", "default", str(version))

    # -- dry run ---------------------------------------------------------

    def plan_steps(self, plan: InstallPlan) -> tuple[InstallStep, ...]:
        """Describe the steps install() and activate() would run."""
        version = str(plan.target_version)
        destination = str(nvm_version_dir(version))
        steps: list[InstallStep] = []

        source = plan.source
        uses_nvm = isinstance(source, Remote) and self.remote_uses_nvm
        if isinstance(source, NetworkShare):
            steps.append(InstallStep(f"Download {source.url}"))
        elif isinstance(source, Remote) and not uses_nvm:
            steps.append(InstallStep(f"Download {node_dist_url(plan.target_version, self.arch, self.dist_url)}"))

        if uses_nvm:
            steps.append(InstallStep(f"Install Node.js {version} with nvm", ("nvm", "install", version)))
        else:
            steps.append(InstallStep("Extract archive", ("tar", "-xf", "<archive>", "--strip-components=1")))
            steps.append(InstallStep(f"Move files into {destination}", ("cp", "-R", "<temp>/.", destination),
                                     requires_sudo=self.mover.use_sudo))

        steps.append(InstallStep(f"Set Node.js {version} as default", ("nvm", "alias", "default", version)))
        return tuple(steps)


class NvmInstallStrategy(InstallStrategy):
    """Let nvm download and install remote versions (macOS, Linux)."""
    name = "nvm"
    remote_uses_nvm = True

    def acquire_remote(self, version: Version, work_dir: Path) -> Path | None:
        return None


class ManualInstallStrategy(InstallStrategy):
    """Download the official Linux archive and install it by hand (WSL)."""
    name = "manual"
    remote_uses_nvm = False

    def acquire_remote(self, version: Version, work_dir: Path) -> Path | None:
        logger.info(f"Downloading Node.js {version} for {self.arch}...")
        return self.downloader.fetch(node_dist_url(version, self.arch, self.dist_url), work_dir)

    def stage_local_archive(self, path: Path, work_dir: Path) -> Path:
        # Reading from the Windows mount while extracting is slow and can fail
        if not str(path).startswith(WSL_MOUNT_PREFIX):
            return path
        staged = work_dir / path.name
        logger.info(f"Copying {path} to {staged}...")
        try:
            shutil.copy2(path, staged)
        except OSError as e:
            raise InstallFailed(f"Failed to copy {path} into WSL: {e}") from e
        return staged


def select_strategy(
    env: Environment,
    runner: CommandRunner,
    configured: str = "auto",
    downloader: Downloader | None = None,
    dist_url: str = DEFAULT_DIST_URL,
) -> InstallStrategy:
    """
    Pick the install strategy for an environment.

    Args:
        env: Detected environment
        runner: Command runner
        configured: 'auto' (WSL -> manual, otherwise nvm), 'nvm' or 'manual'
        downloader: Downloader shared with the strategy
        dist_url: Base URL of the official releases

    Raises:
        ValueError: If configured is not a known strategy
    """
    if configured not in VALID_STRATEGIES:
        raise ValueError(
            f"Invalid install strategy: {configured}. "
            f"Must be one of: {', '.join(VALID_STRATEGIES)}"
        )

    if configured == "auto":
        configured = "manual" if env.is_wsl else "nvm"

    strategy_cls = ManualInstallStrategy if configured == "manual" else NvmInstallStrategy
    logger.debug(f"Using {strategy_cls.name} install strategy for {env.os_name}")
    return strategy_cls(runner, downloader=downloader, arch=env.arch, dist_url=dist_url)
