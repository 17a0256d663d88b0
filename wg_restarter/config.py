from __future__ import annotations

import math
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from wg_restarter.units import DEFAULT_UNIT_TEMPLATE, unit_name_for


class ConfigError(ValueError):
    pass


class BlankInterfaceError(ConfigError):
    pass


DEFAULTS: dict[str, Any] = {
    "interface": None,
    "timeout": "10m",
    "loop_interval": "60s",
    "retry_after_unit_restart": "30s",
    "log_level": "info",
    "unit_template": DEFAULT_UNIT_TEMPLATE,
    "wg_bin": "wg",
    "systemctl_bin": "systemctl",
    "command_timeout": None,
}

_DURATION_UNITS = {
    "ms": 0.001,
    "msec": 0.001,
    "millis": 0.001,
    "s": 1.0,
    "sec": 1.0,
    "secs": 1.0,
    "second": 1.0,
    "seconds": 1.0,
    "m": 60.0,
    "min": 60.0,
    "mins": 60.0,
    "minute": 60.0,
    "minutes": 60.0,
    "h": 3600.0,
    "hr": 3600.0,
    "hrs": 3600.0,
    "hour": 3600.0,
    "hours": 3600.0,
    "d": 86400.0,
    "day": 86400.0,
    "days": 86400.0,
}
_NUMBER = re.compile(r"\d+(?:\.\d+)?")
_DURATION_PART = re.compile(r"\s*(\d+(?:\.\d+)?)\s*([A-Za-z]+)\s*")


@dataclass(frozen=True, slots=True)
class MonitorConfig:
    interface: str
    unit_name: str
    timeout: float
    poll_interval: float
    cooldown: float


def load_yaml(path: str) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"config file does not exist: {path}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid yaml in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")
    return data


def parse_duration(value: Any) -> float:
    """Parse ``10m``, ``1h 30m``, ``500ms`` or a bare number of seconds."""
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ConfigError(f"duration must not be negative: {value!r}")
        return _bounded(float(value), value)
    text = str(value).strip()
    if _NUMBER.fullmatch(text):
        return _bounded(float(text), value)
    if not text:
        raise ConfigError("duration must not be empty")
    total = 0.0
    pos = 0
    while pos < len(text):
        m = _DURATION_PART.match(text, pos)
        if not m:
            raise ConfigError(f"invalid duration: {value!r}")
        unit = _DURATION_UNITS.get(m.group(2).lower())
        if unit is None:
            raise ConfigError(f"unknown duration unit {m.group(2)!r} in {value!r}")
        total += float(m.group(1)) * unit
        pos = m.end()
    return _bounded(total, value)


def _bounded(seconds: float, raw: Any) -> float:
    # time.sleep and subprocess timeouts reject anything above TIMEOUT_MAX
    if not math.isfinite(seconds) or seconds > threading.TIMEOUT_MAX:
        raise ConfigError(f"duration out of range: {raw!r}")
    return seconds


def merge_settings(file_cfg: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(DEFAULTS)
    merged.update({k: v for k, v in file_cfg.items() if v is not None})
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return merged


def build_monitor_config(settings: Mapping[str, Any]) -> MonitorConfig:
    interface = str(settings.get("interface") or "").strip()
    if not interface:
        raise BlankInterfaceError("interface name cannot be empty")
    template = str(settings.get("unit_template") or DEFAULT_UNIT_TEMPLATE)
    if "{interface}" not in template:
        raise ConfigError(f"unit_template must contain {{interface}}: {template!r}")
    try:
        unit_name = unit_name_for(interface, template)
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigError(f"invalid unit_template {template!r}: {exc}") from exc
    return MonitorConfig(
        interface=interface,
        unit_name=unit_name,
        timeout=parse_duration(settings.get("timeout", DEFAULTS["timeout"])),
        poll_interval=parse_duration(settings.get("loop_interval", DEFAULTS["loop_interval"])),
        cooldown=parse_duration(
            settings.get("retry_after_unit_restart", DEFAULTS["retry_after_unit_restart"])
        ),
    )


def command_timeout(settings: Mapping[str, Any]) -> float | None:
    raw = settings.get("command_timeout")
    if raw is None:
        return None
    return parse_duration(raw)
