"""Subprocess helpers for proxy control commands.

Control commands (``nginx -t``, ``systemctl reload nginx``) are run with
captured output and a deadline. A command that cannot be started or that
overruns its deadline comes back as a failed CommandResult, so callers
deal with a single result type instead of a family of exceptions.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Conventional shell exit codes for "not found" and "timed out".
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one control command.

    Attributes:
        stdout: Captured standard output.
        stderr: Captured standard error. nginx writes its diagnostics here.
        returncode: Exit status, or EXIT_NOT_FOUND / EXIT_TIMEOUT when the
            command never ran to completion.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """True when the command exited with status 0."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Diagnostics for display: stderr first, then stdout, both stripped."""
        return "\n".join(part for part in (self.stderr.strip(), self.stdout.strip()) if part)

    @classmethod
    def failure(cls, message: str, returncode: int = 1) -> "CommandResult":
        """Build a failed result carrying only an error message."""
        return cls(stdout="", stderr=message, returncode=returncode)


def run_command(args: list[str], *, timeout: float = DEFAULT_TIMEOUT) -> CommandResult:
    """Run a control command and capture its outcome.

    Args:
        args: Executable and arguments; no shell is involved.
        timeout: Seconds to wait before giving up on the command.

    Returns:
        CommandResult. A missing executable yields EXIT_NOT_FOUND and an
        overrun yields EXIT_TIMEOUT, each with a message in ``stderr``.
    """
    try:
        completed = subprocess.run(
            args,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.debug("Command not found: %s", args[0])
        return CommandResult.failure(f"Command not found: {args[0]}", EXIT_NOT_FOUND)
    except subprocess.TimeoutExpired:
        logger.debug("Command timed out after %.1fs: %s", timeout, " ".join(args))
        return CommandResult.failure(
            f"Timed out after {timeout:g}s: {' '.join(args)}", EXIT_TIMEOUT
        )
    return CommandResult(
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
        returncode=completed.returncode,
    )


def command_exists(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None
