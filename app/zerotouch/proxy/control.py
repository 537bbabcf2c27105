"""Proxy process control.

Defines the ProxyController interface the reload orchestrator drives
(offline validation, graceful reload, liveness) and the nginx
implementation of it.
"""

import logging
import os
import signal
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from zerotouch.core.settings import ProxySettings
from zerotouch.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)


class ProxyController(ABC):
    """Abstract interface to the reverse proxy process.

    Example:
        >>> proxy = NginxController(settings.proxy)
        >>> if proxy.validate(Path("/tmp/check.conf")).success:
        ...     proxy.reload()
        ...     proxy.confirm(timeout=3.0, interval=0.25)
    """

    @abstractmethod
    def validate(self, config_path: Path) -> CommandResult:
        """Run the proxy's offline syntax check against a config file.

        Args:
            config_path: Complete configuration to check.

        Returns:
            CommandResult; ``success`` is False on a syntax error and the
            output holds the tool's diagnostics.
        """

    @abstractmethod
    def reload(self) -> CommandResult:
        """Send the proxy a graceful reload.

        Returns:
            CommandResult describing whether the signal was delivered.
        """

    @abstractmethod
    def is_running(self) -> bool:
        """Check whether the proxy process is alive."""

    def confirm(
        self,
        timeout: float,
        interval: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> bool:
        """Confirm the proxy stays alive for a bounded window after a reload.

        Args:
            timeout: Length of the window in seconds.
            interval: Polling interval in seconds.
            sleep: Sleep function (tests pass a no-op).

        Returns:
            True if the process was alive at every poll, False as soon as
            it is seen dead.
        """
        polls = max(1, int(timeout / interval))
        for _ in range(polls):
            if not self.is_running():
                return False
            sleep(interval)
        return self.is_running()


class NginxController(ProxyController):
    """Controls a local nginx master process.

    Validation runs the configured command (``nginx -t`` by default).
    Reload runs ``reload_command`` when configured, otherwise sends
    SIGHUP to the pid found in ``pid_file``.
    """

    def __init__(self, settings: ProxySettings | None = None) -> None:
        self._settings = settings if settings is not None else ProxySettings()

    def validate(self, config_path: Path) -> CommandResult:
        args = [
            part.replace("{config}", str(config_path))
            for part in self._settings.validate_command
        ]
        logger.debug("Validating proxy config: %s", " ".join(args))
        return self._run(args)

    def reload(self) -> CommandResult:
        if self._settings.reload_command:
            logger.debug("Reloading proxy: %s", " ".join(self._settings.reload_command))
            return self._run(list(self._settings.reload_command))

        pid = self.read_pid()
        if pid is None:
            return CommandResult.failure(f"No pid in {self._settings.pid_file}")
        try:
            os.kill(pid, signal.SIGHUP)
        except OSError as e:
            return CommandResult.failure(f"Cannot signal pid {pid}: {e}")
        logger.debug("Sent SIGHUP to nginx master %d", pid)
        return CommandResult(stdout=f"SIGHUP sent to {pid}", stderr="", returncode=0)

    def is_running(self) -> bool:
        pid = self.read_pid()
        if pid is None:
            return False
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            # Exists, owned by another user.
            return True
        return True

    def read_pid(self) -> int | None:
        """Read the master pid from the pid file.

        Returns:
            The pid, or None if the file is missing or malformed.
        """
        try:
            return int(self._settings.pid_file.read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            return None

    def _run(self, args: list[str]) -> CommandResult:
        return run_command(args, timeout=self._settings.command_timeout_seconds)
