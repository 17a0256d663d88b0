from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from wg_restarter.config import MonitorConfig
from wg_restarter.handshake import first_peer_handshake
from wg_restarter.liveness import Verdict, elapsed_since, evaluate
from wg_restarter.units import RestartOutcome, RestartStatus, UnitQueryError
from wg_restarter.wg import StatusQueryError


class StatusSource(Protocol):
    def latest_handshakes(self, interface: str) -> str: ...


class UnitController(Protocol):
    def is_active(self, unit_name: str) -> bool: ...

    def restart(self, unit_name: str) -> RestartOutcome: ...


class StartupFailure(str, Enum):
    UNIT_INACTIVE = "unit_inactive"
    UNIT_QUERY_FAILED = "unit_query_failed"


class StepOutcome(str, Enum):
    CONTINUE_NORMAL = "continue_normal"
    CONTINUE_AFTER_COOLDOWN = "continue_after_cooldown"


class Supervisor:
    """Polls handshakes for one interface and restarts its unit when stale.

    ``step`` runs one iteration and reports how long the driver should wait
    before the next one; ``run`` is the driver. No state is carried between
    iterations besides the immutable config.
    """

    def __init__(
        self,
        config: MonitorConfig,
        status_source: StatusSource,
        units: UnitController,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.status_source = status_source
        self.units = units
        self.clock = clock
        self.sleep = sleep
        self.logger = logging.getLogger("wg_restarter.supervisor")

    def startup(self) -> StartupFailure | None:
        unit = self.config.unit_name
        try:
            active = self.units.is_active(unit)
        except UnitQueryError as exc:
            self.logger.error("cannot query state of unit=%s: %s", unit, exc)
            return StartupFailure.UNIT_QUERY_FAILED
        if not active:
            self.logger.error("systemd unit %s is not active; nothing to monitor", unit)
            return StartupFailure.UNIT_INACTIVE
        self.logger.info(
            "monitoring interface=%s unit=%s timeout=%ss interval=%ss cooldown=%ss",
            self.config.interface,
            unit,
            self.config.timeout,
            self.config.poll_interval,
            self.config.cooldown,
        )
        return None

    def step(self) -> StepOutcome:
        cfg = self.config
        try:
            sample = self.status_source.latest_handshakes(cfg.interface)
        except StatusQueryError as exc:
            if exc.stderr:
                self.logger.error("%s: %s", exc, exc.stderr)
            else:
                self.logger.error("%s", exc)
            return StepOutcome.CONTINUE_NORMAL

        timestamp = first_peer_handshake(sample)
        if timestamp is None:
            self.logger.warning("unexpected latest-handshakes output: %r", sample)
            return StepOutcome.CONTINUE_NORMAL

        now = self.clock()
        verdict = evaluate(timestamp, now, cfg.timeout)
        if verdict is Verdict.UNKNOWN:
            self.logger.info("no handshake recorded yet on interface=%s; waiting", cfg.interface)
            return StepOutcome.CONTINUE_NORMAL
        elapsed = elapsed_since(timestamp, now)
        if verdict is Verdict.FRESH:
            self.logger.debug("handshake fresh elapsed=%ds", elapsed)
            return StepOutcome.CONTINUE_NORMAL

        self.logger.warning(
            "handshake timeout; %ds > %ds. restarting unit=%s",
            elapsed,
            cfg.timeout,
            cfg.unit_name,
        )
        self._restart()
        return StepOutcome.CONTINUE_AFTER_COOLDOWN

    def _restart(self) -> None:
        outcome = self.units.restart(self.config.unit_name)
        if outcome.status is RestartStatus.SUCCEEDED:
            self.logger.info("restarted unit=%s", self.config.unit_name)
        elif outcome.status is RestartStatus.FAILED:
            self.logger.error(
                "restart of unit=%s failed status=%s stderr=%s",
                self.config.unit_name,
                outcome.exit_code,
                outcome.detail,
            )
        else:
            self.logger.error("failed to execute restart of unit=%s: %s", self.config.unit_name, outcome.detail)

    def delay_for(self, outcome: StepOutcome) -> float:
        if outcome is StepOutcome.CONTINUE_AFTER_COOLDOWN:
            return self.config.cooldown
        return self.config.poll_interval

    def run(self, iterations: int | None = None) -> None:
        done = 0
        while iterations is None or done < iterations:
            self.sleep(self.delay_for(self.step()))
            done += 1
