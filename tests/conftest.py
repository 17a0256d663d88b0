from __future__ import annotations

import pytest

from wg_restarter.config import MonitorConfig
from wg_restarter.units import RestartOutcome, RestartStatus, UnitQueryError
from wg_restarter.wg import StatusQueryError


class FakeStatusSource:
    def __init__(self, *samples: str | StatusQueryError):
        self.samples = list(samples)
        self.calls: list[str] = []

    def latest_handshakes(self, interface: str) -> str:
        self.calls.append(interface)
        sample = self.samples.pop(0) if len(self.samples) > 1 else self.samples[0]
        if isinstance(sample, StatusQueryError):
            raise sample
        return sample


class FakeUnits:
    def __init__(
        self,
        active: bool | UnitQueryError = True,
        outcome: RestartOutcome = RestartOutcome(RestartStatus.SUCCEEDED, exit_code=0),
    ):
        self.active = active
        self.outcome = outcome
        self.is_active_calls: list[str] = []
        self.restart_calls: list[str] = []

    def is_active(self, unit_name: str) -> bool:
        self.is_active_calls.append(unit_name)
        if isinstance(self.active, UnitQueryError):
            raise self.active
        return self.active

    def restart(self, unit_name: str) -> RestartOutcome:
        self.restart_calls.append(unit_name)
        return self.outcome


@pytest.fixture
def monitor_config() -> MonitorConfig:
    return MonitorConfig(
        interface="wg0",
        unit_name="wg-quick@wg0.service",
        timeout=60.0,
        poll_interval=15.0,
        cooldown=45.0,
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []
