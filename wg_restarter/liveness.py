from __future__ import annotations

from enum import Enum


class Verdict(str, Enum):
    FRESH = "fresh"
    STALE = "stale"
    UNKNOWN = "unknown"


def elapsed_since(timestamp: int, now: float) -> float:
    # a handshake in the future (clock skew) counts as just now
    return max(0.0, now - timestamp)


def evaluate(timestamp: int | None, now: float, timeout: float) -> Verdict:
    if not timestamp:
        return Verdict.UNKNOWN
    if elapsed_since(timestamp, now) <= timeout:
        return Verdict.FRESH
    return Verdict.STALE
