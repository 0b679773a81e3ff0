from __future__ import annotations

"""Session Manager: orchestrates quiz generation, the session, scoring and persistence.

Generation is cancellable through a per-manager epoch guard: each request
holds a token, and any later ``cancel()`` or newer request makes that token
stale. A stale request drops its result at the next checkpoint instead of
starting a session.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..backend.client import BackendClient
from ..errors import InvalidTransition, QuizError
from ..quiz.models import Quiz
from ..quiz.normalizer import normalize
from ..session.state import CANCELLED, COMPLETED, QuizSession
from ..stats.scoring import ScoreResult, score
from .events import GENERATION_CANCELLED, QUIZ_READY, SCORE_SAVE_FAILED, SCORE_SAVED, SESSION_COMPLETED, EventBus
from .explain import trace as xtrace


class GenerationGuard:
    """Monotonic epoch counter; bumping it invalidates every outstanding token."""

    def __init__(self) -> None:
        self.epoch = 0

    def issue(self) -> "CancellationToken":
        self.epoch += 1
        return CancellationToken(self, self.epoch)

    def invalidate(self) -> None:
        self.epoch += 1


class CancellationToken:
    def __init__(self, guard: GenerationGuard, epoch: int) -> None:
        self._guard = guard
        self.epoch = epoch

    @property
    def cancelled(self) -> bool:
        return self._guard.epoch != self.epoch


@dataclass(frozen=True)
class CompletionResult:
    score: ScoreResult
    saved: bool
    message: Optional[str] = None
    error: Optional[QuizError] = None


class SessionManager:
    def __init__(self, client: BackendClient, cfg: Optional[Dict[str, Any]] = None, bus: Optional[EventBus] = None) -> None:
        self.client = client
        self.cfg = cfg or {}
        self.bus = bus or EventBus()
        self.guard = GenerationGuard()
        self.session: Optional[QuizSession] = None
        self._completion: Optional[asyncio.Future] = None

    @property
    def default_question_count(self) -> int:
        return int(self.cfg.get("quiz", {}).get("question_count", 10))

    def begin_generation(self) -> CancellationToken:
        return self.guard.issue()

    def _discard(self, title: str) -> None:
        xtrace("generation_discarded", {"title": title, "epoch": self.guard.epoch})
        self.bus.emit(GENERATION_CANCELLED, title)
        return None

    async def generate_quiz(
        self,
        title: str,
        question_count: Optional[int] = None,
        token: Optional[CancellationToken] = None,
    ) -> Optional[Quiz]:
        """Generate a quiz for ``title`` and start a session on it.

        Returns None when the request was cancelled (or superseded) before its
        result could be used; in that case nothing about the manager changes.
        Errors from a cancelled request are dropped as well.
        """
        token = token or self.guard.issue()
        count = question_count or self.default_question_count
        if token.cancelled:
            return self._discard(title)
        xtrace("generation_started", {"title": title, "questions": count, "epoch": token.epoch})
        try:
            raw = await self.client.generate_quiz(title, count)
            if token.cancelled:
                return self._discard(title)
            quiz = normalize(raw, title=title)
        except QuizError:
            if token.cancelled:
                return self._discard(title)
            raise
        if token.cancelled:
            return self._discard(title)
        self.start(quiz)
        self.bus.emit(QUIZ_READY, quiz)
        return quiz

    def cancel(self) -> None:
        """Cancel any in-flight generation and the active session."""
        self.guard.invalidate()
        if self.session is not None and self.session.phase != CANCELLED:
            self.session.cancel()
        xtrace("cancel", {"epoch": self.guard.epoch})

    def start(self, quiz: Quiz) -> QuizSession:
        self._completion = None
        self.session = QuizSession.start(quiz, on_complete=self._on_session_completed)
        return self.session

    def restart(self) -> QuizSession:
        if self.session is None:
            raise InvalidTransition("No quiz to restart")
        return self.start(self.session.quiz)

    def exit(self) -> None:
        self.session = None
        self._completion = None

    def _on_session_completed(self, session: QuizSession) -> None:
        self.bus.emit(SESSION_COMPLETED, session)
        if session is not self.session:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet; finish() will start the work when awaited
            return
        self._ensure_completion(session)

    def _ensure_completion(self, session: QuizSession) -> asyncio.Future:
        if self._completion is None:
            self._completion = asyncio.ensure_future(self._score_and_submit(session))
        return self._completion

    async def finish(self) -> CompletionResult:
        """Score the completed session and submit it, exactly once.

        Repeated or concurrent calls share the first call's result.
        """
        if self.session is None or self.session.phase != COMPLETED:
            phase = self.session.phase if self.session else "absent"
            raise InvalidTransition(f"Cannot finish a session that is {phase}")
        return await asyncio.shield(self._ensure_completion(self.session))

    async def _score_and_submit(self, session: QuizSession) -> CompletionResult:
        result = score(session)
        title = session.quiz.title
        xtrace("score_computed", {"title": title, "score": result.percentage})
        try:
            submit = await self.client.submit_score(title, result.percentage)
        except QuizError as exc:
            xtrace("score_save_failed", {"title": title, "error": str(exc)})
            self.bus.emit(SCORE_SAVE_FAILED, exc)
            return CompletionResult(score=result, saved=False, error=exc)
        self.bus.emit(SCORE_SAVED, result)
        return CompletionResult(score=result, saved=True, message=submit.message)
