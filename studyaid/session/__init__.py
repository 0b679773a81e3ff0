from .state import CANCELLED, COMPLETED, IN_PROGRESS, NavEntry, QuizSession, SessionState

__all__ = ["CANCELLED", "COMPLETED", "IN_PROGRESS", "NavEntry", "QuizSession", "SessionState"]
