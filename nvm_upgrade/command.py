"""
Subprocess execution for nvm, node and helper commands.

Every command is an argument list. nvm is a shell function, so nvm-aware
commands run through ``bash -c`` with a fixed loader script and receive their
arguments as positional parameters, never interpolated into the script text.
"""

from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass
from typing import Sequence

from .common import vlog
from .environment import nvm_dir


# Sources nvm.sh (if present) then runs "$@" so functions like `nvm` resolve
NVM_LOADER_SCRIPT = (
    'if [ -s "$NVM_DIR/nvm.sh" ]; then . "$NVM_DIR/nvm.sh"; fi; "$@"'
)

# Loading nvm keeps whatever node the inherited PATH already points at, so
# switch to the `default` alias explicitly before running "$@"
NVM_DEFAULT_SCRIPT = (
    'if [ -s "$NVM_DIR/nvm.sh" ]; then . "$NVM_DIR/nvm.sh"; fi; '
    'nvm use --silent default >/dev/null && "$@"'
)


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of a finished subprocess.

    Attributes:
        args: Argument list that was executed
        stdout: Captured standard output (stripped)
        stderr: Captured standard error (stripped)
        exit_code: Process exit code (-1 if it never started or timed out)
        duration_seconds: Wall time spent waiting for the process
    """
    args: tuple[str, ...]
    stdout: str
    stderr: str
    exit_code: int
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandError(Exception):
    """
    Raised when a command exits non-zero and errors are not suppressed.

    Attributes:
        args_list: Argument list that failed
        exit_code: Process exit code
        stderr: Captured standard error, used as the failure detail
    """
    def __init__(self, args_list: Sequence[str], exit_code: int, stderr: str):
        self.args_list = tuple(args_list)
        self.exit_code = exit_code
        self.stderr = stderr
        detail = stderr.strip() or f"Command failed with exit code {exit_code}"
        super().__init__(detail)


def nvm_shell_command(args: Sequence[str], script: str = NVM_LOADER_SCRIPT) -> list[str]:
    """
    Wrap an argument list so it runs in a shell with nvm loaded.

    Args:
        args: Command and arguments, e.g. ("nvm", "ls-remote", "--lts")
        script: Shell prelude that runs the arguments

    Returns:
        Argument list for subprocess
    """
    return ["bash", "-c", script, "nvm-upgrade", *args]


class CommandRunner:
    """
    Runs one subprocess at a time and waits for it to exit.

    Args:
        timeout: Optional per-command timeout in seconds
        verbose: Enable verbose logging
    """

    def __init__(self, timeout: int | None = None, verbose: bool = False):
        self.timeout = timeout
        self.verbose = verbose

    def run(
        self,
        args: Sequence[str],
        suppress_errors: bool = False,
        cwd: str | None = None,
    ) -> CommandResult:
        """
        Execute a command and capture its output.

        Args:
            args: Command and arguments
            suppress_errors: Return the result instead of raising on failure
            cwd: Working directory for the command

        Returns:
            CommandResult with stripped stdout

        Raises:
            CommandError: If the command fails and suppress_errors is False
        """
        command = list(args)
        vlog(f"Executing: {' '.join(command)}", self.verbose)
        env = dict(os.environ)
        env.setdefault("NVM_DIR", str(nvm_dir()))

        start_time = time.time()
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
                cwd=cwd,
                env=env,
            )
            result = CommandResult(
                args=tuple(command),
                stdout=(completed.stdout or "").strip(),
                stderr=(completed.stderr or "").strip(),
                exit_code=completed.returncode,
                duration_seconds=time.time() - start_time,
            )
        except subprocess.TimeoutExpired:
            result = CommandResult(
                args=tuple(command),
                stdout="",
                stderr=f"Command timed out after {self.timeout}s",
                exit_code=-1,
                duration_seconds=time.time() - start_time,
            )
        except FileNotFoundError:
            result = CommandResult(
                args=tuple(command),
                stdout="",
                stderr=f"Command not found: {command[0]}",
                exit_code=-1,
                duration_seconds=time.time() - start_time,
            )

        if not result.success and not suppress_errors:
            vlog(f"Command failed ({result.exit_code}): {result.stderr}", self.verbose)
            raise CommandError(command, result.exit_code, result.stderr)

        return result

    def nvm(self, *args: str, suppress_errors: bool = False, cwd: str | None = None) -> CommandResult:
        """Run an nvm subcommand, e.g. ``runner.nvm("install", "v22.9.0")``."""
        return self.run(nvm_shell_command(("nvm", *args)), suppress_errors=suppress_errors, cwd=cwd)

    def in_nvm_shell(self, *args: str, suppress_errors: bool = False, cwd: str | None = None) -> CommandResult:
        """Run a program (node, npm) with nvm loaded and the inherited PATH."""
        return self.run(nvm_shell_command(args), suppress_errors=suppress_errors, cwd=cwd)

    def in_default_shell(self, *args: str, suppress_errors: bool = False, cwd: str | None = None) -> CommandResult:
        """Run a program (node, npm) with the nvm ``default`` alias active."""
        return self.run(
            nvm_shell_command(args, NVM_DEFAULT_SCRIPT),
            suppress_errors=suppress_errors,
            cwd=cwd,
        )
