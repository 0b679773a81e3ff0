from __future__ import annotations

"""Minimal tracing helpers (Explain Mode).

Enable with the ``--explain`` CLI flag or ``explain: true`` in config; the
engine then emits one terse line per lifecycle milestone.
"""

import json
import sys
from typing import Any, Dict

_ENABLED = False


def enable(flag: bool = True) -> None:
    global _ENABLED
    _ENABLED = bool(flag)


def enabled() -> bool:
    return _ENABLED


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not _ENABLED:
        return
    data = payload or {}
    # one line JSON; timestamps and enums fall back to str()
    line = json.dumps(data, separators=(",", ":"), default=str)
    print(f"[EXPLAIN] {event} :: {line}", file=sys.stderr)
