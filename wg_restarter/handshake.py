from __future__ import annotations

import re

_UNSIGNED = re.compile(r"\+?[0-9]+")
U64_MAX = 2**64 - 1


def first_peer_handshake(output: str) -> int | None:
    """Return the latest-handshake timestamp of the first peer line.

    `wg show <iface> latest-handshakes` prints ``<public-key>\\t<unix-seconds>``
    per peer. Only the first line is looked at. ``None`` means no timestamp
    could be read from it; ``0`` is passed through as reported.
    """
    lines = output.splitlines()
    if not lines:
        return None
    _, sep, value = lines[0].partition("\t")
    if not sep:
        return None
    value = value.strip()
    if not _UNSIGNED.fullmatch(value):
        return None
    timestamp = int(value)
    if timestamp > U64_MAX:
        return None
    return timestamp
