from __future__ import annotations

"""Tiny pub/sub event bus for quiz lifecycle notifications."""

from typing import Any, Callable, Dict, List

from .explain import trace as xtrace

QUIZ_READY = "quiz_ready"
GENERATION_CANCELLED = "generation_cancelled"
SESSION_COMPLETED = "session_completed"
SCORE_SAVED = "score_saved"
SCORE_SAVE_FAILED = "score_save_failed"


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self._subs.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        handlers = self._subs.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        xtrace(event)
        for h in list(self._subs.get(event, [])):
            try:
                h(payload)
            except Exception as exc:
                # A broken listener must not stop the others or the session
                xtrace("listener_failed", {"event": event, "error": repr(exc)})
