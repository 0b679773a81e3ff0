from __future__ import annotations

"""Scoring for completed quiz sessions and summary formatting."""

import math
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any, List, Optional

from ..errors import InvalidTransition
from ..quiz.models import SHORT_ANSWER, Question
from ..session.state import COMPLETED, QuizSession

NOT_ANSWERED = "Not answered"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def grade_label(percentage: int) -> str:
    if percentage >= 80:
        return "Excellent!"
    if percentage >= 60:
        return "Good Job!"
    return "Keep Practicing!"


@dataclass(frozen=True)
class ReviewRow:
    question_id: int
    question: str
    your_answer: str
    correct_answer: Optional[str]
    correct: bool


@dataclass(frozen=True)
class ScoreResult:
    percentage: int
    correct_count: int
    total: int
    verdicts: List[bool] = field(default_factory=list)
    review: List[ReviewRow] = field(default_factory=list)

    @property
    def label(self) -> str:
        return grade_label(self.percentage)


def is_correct(question: Question, answer: Any) -> bool:
    """Type-specific correctness; unanswered or mistyped answers are wrong."""
    if answer is None:
        return False
    if question.type == SHORT_ANSWER:
        return isinstance(answer, str) and answer.strip() != ""
    if isinstance(answer, bool) or not isinstance(answer, Integral):
        return False
    return int(answer) == question.correct


def _answer_text(question: Question, answer: Any) -> str:
    if answer is None:
        return NOT_ANSWERED
    if question.type == SHORT_ANSWER:
        return str(answer).strip() or NOT_ANSWERED
    text = question.option_text(answer)
    return text if text is not None else NOT_ANSWERED


def score(session: QuizSession) -> ScoreResult:
    if session.phase != COMPLETED:
        raise InvalidTransition(f"Cannot score a session that is {session.phase}")
    answers = session.answers
    verdicts: List[bool] = []
    review: List[ReviewRow] = []
    for q in session.quiz.questions:
        answer = answers.get(q.id)
        ok = is_correct(q, answer)
        verdicts.append(ok)
        review.append(
            ReviewRow(
                question_id=q.id,
                question=q.question,
                your_answer=_answer_text(q, answer),
                correct_answer=q.option_text(q.correct) if q.type != SHORT_ANSWER else None,
                correct=ok,
            )
        )
    total = len(verdicts)
    correct_count = sum(verdicts)
    return ScoreResult(
        percentage=round_half_up(100 * correct_count / total),
        correct_count=correct_count,
        total=total,
        verdicts=verdicts,
        review=review,
    )


def format_summary(result: ScoreResult, *, with_review: bool = True) -> str:
    """Return a human-readable summary of a scored session."""
    lines = [
        f"Score: {result.percentage}% ({result.label})",
        f"You scored {result.correct_count} out of {result.total} questions correctly",
    ]
    if with_review:
        lines.append("")
        lines.append("Review:")
        for row in result.review:
            mark = "+" if row.correct else "-"
            lines.append(f"{mark} {row.question_id}. {row.question}")
            lines.append(f"    Your answer: {row.your_answer}")
            if not row.correct and row.correct_answer is not None:
                lines.append(f"    Correct answer: {row.correct_answer}")
    return "\n".join(lines)
