from __future__ import annotations

"""Error kinds raised by the quiz lifecycle engine.

Every error here is recoverable: callers catch the specific subclass at the
boundary where it occurs and report it without tearing down the process.
"""


class QuizError(Exception):
    """Base class for all engine errors."""


class NormalizationError(QuizError):
    """The AI payload could not be turned into a usable quiz."""


class MalformedPayload(NormalizationError):
    """The payload string (or response body) is not valid JSON."""


class UnexpectedShape(NormalizationError):
    """Valid JSON, but not a list of questions."""


class NoValidQuestions(NormalizationError):
    """Every question in the payload was rejected."""


class NetworkFailure(QuizError):
    """Transport or HTTP-level failure talking to the backend."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PersistenceFailure(QuizError):
    """The backend rejected a score submission."""


class InvalidTransition(QuizError):
    """A session operation was attempted in a phase that does not allow it."""
