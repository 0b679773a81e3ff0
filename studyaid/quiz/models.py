from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ..errors import NoValidQuestions

MULTIPLE_CHOICE = "multiple-choice"
TRUE_FALSE = "true-false"
SHORT_ANSWER = "short-answer"

QUESTION_TYPES = {MULTIPLE_CHOICE, TRUE_FALSE, SHORT_ANSWER}


@dataclass(frozen=True)
class Question:
    id: int
    question: str
    options: tuple[str, ...] = ()
    correct: int = 0
    type: str = MULTIPLE_CHOICE

    def __post_init__(self) -> None:
        object.__setattr__(self, "options", tuple(self.options))

    @property
    def is_indexed(self) -> bool:
        """True for variants answered by picking an option index."""
        return self.type in (MULTIPLE_CHOICE, TRUE_FALSE)

    def option_text(self, index: Any) -> str | None:
        if isinstance(index, bool) or not isinstance(index, int):
            return None
        if 0 <= index < len(self.options):
            return self.options[index]
        return None

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "question": self.question,
            "options": list(self.options),
            "correct": self.correct,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Question":
        return cls(
            id=int(data.get("id", 0)),
            question=str(data.get("question", "")),
            options=tuple(data.get("options", ())),
            correct=int(data.get("correct", 0)),
            type=data.get("type", MULTIPLE_CHOICE),
        )


@dataclass(frozen=True)
class Quiz:
    title: str
    questions: tuple[Question, ...]

    def __post_init__(self) -> None:
        if not self.questions:
            raise NoValidQuestions("No valid questions could be generated from the AI response")
        object.__setattr__(self, "questions", tuple(self.questions))

    def __len__(self) -> int:
        return len(self.questions)

    def question_by_id(self, question_id: int) -> Question:
        for q in self.questions:
            if q.id == question_id:
                return q
        raise KeyError(question_id)

    def to_json(self) -> Dict[str, Any]:
        return {"title": self.title, "questions": [q.to_json() for q in self.questions]}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Quiz":
        return cls(
            title=str(data.get("title", "")),
            questions=tuple(Question.from_json(q) for q in data.get("questions", [])),
        )
