from __future__ import annotations

"""Quiz-taking session state machine.

A session owns one Quiz (read-only) plus the question pointer, the recorded
answers and the phase. Phases: in-progress -> completed | cancelled.
Cancelled is terminal; a new attempt means a new session.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..app.explain import trace as xtrace
from ..errors import InvalidTransition
from ..quiz.models import Question, Quiz

IN_PROGRESS = "in-progress"
COMPLETED = "completed"
CANCELLED = "cancelled"

PHASES = {IN_PROGRESS, COMPLETED, CANCELLED}


@dataclass
class SessionState:
    quiz: Quiz
    current_index: int = 0
    answers: Dict[int, Any] = field(default_factory=dict)
    phase: str = IN_PROGRESS


@dataclass(frozen=True)
class NavEntry:
    """One row of the question navigator."""

    index: int
    question_id: int
    answered: bool
    current: bool


class QuizSession:
    def __init__(self, quiz: Quiz) -> None:
        self.state = SessionState(quiz=quiz)
        self._on_complete: List[Callable[["QuizSession"], None]] = []
        self._completion_announced = False

    @classmethod
    def start(cls, quiz: Quiz, on_complete: Optional[Callable[["QuizSession"], None]] = None) -> "QuizSession":
        session = cls(quiz)
        if on_complete is not None:
            session.add_completion_listener(on_complete)
        xtrace("session_started", {"title": quiz.title, "questions": len(quiz)})
        return session

    # --- read-only views ---

    @property
    def quiz(self) -> Quiz:
        return self.state.quiz

    @property
    def phase(self) -> str:
        return self.state.phase

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def answers(self) -> Dict[int, Any]:
        return dict(self.state.answers)

    @property
    def current_question(self) -> Question:
        return self.quiz.questions[self.state.current_index]

    @property
    def is_last(self) -> bool:
        return self.state.current_index == len(self.quiz) - 1

    @property
    def answered_count(self) -> int:
        return len(self.state.answers)

    @property
    def progress(self) -> float:
        """Percentage of the way through the quiz, counting the current question."""
        return (self.state.current_index + 1) / len(self.quiz) * 100

    def can_advance(self) -> bool:
        return self.phase == IN_PROGRESS and self.current_question.id in self.state.answers

    def navigator(self) -> List[NavEntry]:
        return [
            NavEntry(
                index=i,
                question_id=q.id,
                answered=q.id in self.state.answers,
                current=i == self.state.current_index,
            )
            for i, q in enumerate(self.quiz.questions)
        ]

    # --- transitions ---

    def add_completion_listener(self, callback: Callable[["QuizSession"], None]) -> None:
        self._on_complete.append(callback)

    def _require_in_progress(self, op: str) -> None:
        if self.state.phase != IN_PROGRESS:
            raise InvalidTransition(f"Cannot {op} while session is {self.state.phase}")

    def record_answer(self, question_id: int, value: Any) -> None:
        """Upsert the answer for a question. The pointer does not move."""
        self._require_in_progress("record an answer")
        self.quiz.question_by_id(question_id)
        self.state.answers[question_id] = value

    def advance(self) -> bool:
        """Move to the next question, or complete on the last one.

        Returns False (and changes nothing) while the current question is
        unanswered.
        """
        self._require_in_progress("advance")
        if not self.can_advance():
            return False
        if self.is_last:
            self.state.phase = COMPLETED
            self._announce_completion()
        else:
            self.state.current_index += 1
        return True

    def retreat(self) -> bool:
        self._require_in_progress("go back")
        if self.state.current_index <= 0:
            return False
        self.state.current_index -= 1
        return True

    def jump_to(self, index: int) -> None:
        self._require_in_progress("jump")
        if not 0 <= index < len(self.quiz):
            raise IndexError(f"Question index {index} out of range 0..{len(self.quiz) - 1}")
        self.state.current_index = index

    def cancel(self) -> None:
        self.state.answers.clear()
        self.state.phase = CANCELLED
        xtrace("session_cancelled", {"title": self.quiz.title})

    def _announce_completion(self) -> None:
        if self._completion_announced:
            return
        self._completion_announced = True
        xtrace("session_completed", {"title": self.quiz.title, "answered": self.answered_count})
        for cb in list(self._on_complete):
            cb(self)
