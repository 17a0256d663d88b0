from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from enum import Enum

DEFAULT_UNIT_TEMPLATE = "wg-quick@{interface}.service"


class UnitQueryError(RuntimeError):
    pass


class RestartStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    INVOCATION_ERROR = "invocation_error"


@dataclass(frozen=True, slots=True)
class RestartOutcome:
    status: RestartStatus
    exit_code: int | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status is RestartStatus.SUCCEEDED


def unit_name_for(interface: str, template: str = DEFAULT_UNIT_TEMPLATE) -> str:
    return template.format(interface=interface)


class SystemdUnitController:
    """Queries and restarts a systemd unit through ``systemctl``.

    Both calls block until systemctl returns. ``restart`` is the only place in
    the program that changes the unit's running state.
    """

    def __init__(self, systemctl: str = "systemctl", timeout: float | None = None):
        self.systemctl = systemctl
        self.timeout = timeout
        self.logger = logging.getLogger("wg_restarter.units")

    def _run(self, *args: str) -> subprocess.CompletedProcess[bytes]:
        return subprocess.run(
            [self.systemctl, *args],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            timeout=self.timeout,
            check=False,
        )

    def is_active(self, unit_name: str) -> bool:
        try:
            proc = self._run("is-active", "-q", unit_name)
        except (OSError, subprocess.SubprocessError) as exc:
            raise UnitQueryError(f"failed to run `{self.systemctl} is-active`: {exc}") from exc
        return proc.returncode == 0

    def restart(self, unit_name: str) -> RestartOutcome:
        self.logger.info("--> %s restart %s", self.systemctl, unit_name)
        try:
            proc = self._run("restart", unit_name)
        except (OSError, subprocess.SubprocessError) as exc:
            return RestartOutcome(RestartStatus.INVOCATION_ERROR, detail=str(exc))
        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip() if proc.stderr else ""
            return RestartOutcome(RestartStatus.FAILED, exit_code=proc.returncode, detail=stderr)
        return RestartOutcome(RestartStatus.SUCCEEDED, exit_code=0)
