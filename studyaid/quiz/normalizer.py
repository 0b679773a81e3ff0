from __future__ import annotations

"""Normalize AI-generated quiz payloads into canonical questions.

The generation service answers with loosely-typed data: a JSON array, a JSON
string (often wrapped in markdown code fences), or something else entirely.
Individual questions use several field spellings for the same thing. This
module resolves all of that into a ``Quiz`` or raises a
``NormalizationError`` subclass.

Pipeline:
- classify the raw value (list / text / other) and parse text once
- per element, run ordered extractor chains for text, options and answer
- drop unusable questions, number the survivors 1..n
"""

import json
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence

from ..app.explain import trace as xtrace
from ..errors import MalformedPayload, NoValidQuestions, UnexpectedShape
from .models import MULTIPLE_CHOICE, Question, Quiz

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")

PLACEHOLDER_LETTERS = frozenset("ABCD")
ANSWER_LETTERS = {"a": 0, "b": 1, "c": 2, "d": 3, "A": 0, "B": 1, "C": 2, "D": 3}


class PayloadKind(Enum):
    LIST = "list"
    TEXT = "text"
    OTHER = "other"


@dataclass(frozen=True)
class ClassifiedPayload:
    kind: PayloadKind
    value: Any


def classify(raw: Any) -> ClassifiedPayload:
    if isinstance(raw, (list, tuple)):
        return ClassifiedPayload(PayloadKind.LIST, list(raw))
    if isinstance(raw, str):
        return ClassifiedPayload(PayloadKind.TEXT, raw)
    return ClassifiedPayload(PayloadKind.OTHER, raw)


def strip_fences(text: str) -> str:
    """Remove surrounding whitespace and markdown code-fence markers."""
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def parse_payload(raw: Any) -> List[Any]:
    """Resolve a raw payload into the list of question items it carries."""
    payload = classify(raw)
    if payload.kind is PayloadKind.TEXT:
        try:
            decoded = json.loads(strip_fences(payload.value))
        except json.JSONDecodeError as exc:
            raise MalformedPayload(f"Failed to parse quiz JSON: {exc}") from exc
        # Parsed text is classified again but never decoded a second time
        payload = classify(decoded)
    if payload.kind is PayloadKind.LIST:
        return payload.value
    raise UnexpectedShape(f"Quiz data is not an array. Received: {type(payload.value).__name__}")


# --- Extractors ---
# Each extractor is total: it returns a value or None, never raises.

TextExtractor = Callable[[Mapping[str, Any], int], Optional[str]]
OptionsExtractor = Callable[[Mapping[str, Any]], Optional[List[Any]]]
CorrectExtractor = Callable[[Mapping[str, Any], Sequence[str]], Optional[int]]


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _number(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


def text_field(name: str) -> TextExtractor:
    def extract(item: Mapping[str, Any], position: int) -> Optional[str]:
        value = item.get(name)
        return value if _is_text(value) else None

    return extract


def generated_text(item: Mapping[str, Any], position: int) -> Optional[str]:
    return f"Question {position}"


def options_list(item: Mapping[str, Any]) -> Optional[List[Any]]:
    value = item.get("options")
    if isinstance(value, (list, tuple)):
        return list(value)
    return None


def discrete_fields(*names: str) -> OptionsExtractor:
    def extract(item: Mapping[str, Any]) -> Optional[List[Any]]:
        found = [item.get(n) for n in names if _is_text(item.get(n))]
        return found or None

    return extract


def numeric_field(name: str, offset: int = 0) -> CorrectExtractor:
    def extract(item: Mapping[str, Any], options: Sequence[str]) -> Optional[int]:
        n = _number(item.get(name))
        return None if n is None else n + offset

    return extract


def answer_text(item: Mapping[str, Any], options: Sequence[str]) -> Optional[int]:
    answer = item.get("answer")
    if not isinstance(answer, str):
        return None
    for i, opt in enumerate(options):
        if opt == answer:
            return i
    return ANSWER_LETTERS.get(answer, 0)


QUESTION_TEXT_CHAIN: tuple[TextExtractor, ...] = (
    text_field("question"),
    text_field("q"),
    generated_text,
)

OPTIONS_CHAIN: tuple[OptionsExtractor, ...] = (
    options_list,
    discrete_fields("option1", "option2", "option3", "option4"),
    discrete_fields("a", "b", "c", "d"),
)

CORRECT_CHAIN: tuple[CorrectExtractor, ...] = (
    numeric_field("correct"),
    numeric_field("correctAnswer"),
    numeric_field("correctOption", offset=-1),
    answer_text,
)


def first_result(chain: Sequence[Callable[..., Any]], *args: Any) -> Any:
    for extractor in chain:
        value = extractor(*args)
        if value is not None:
            return value
    return None


def is_placeholder_set(options: Sequence[str]) -> bool:
    """True when the options are just the letters A-D standing in for real answers."""
    letters = [o.strip().upper() for o in options]
    if any(len(ch) != 1 for ch in letters):
        return False
    return len(letters) == len(PLACEHOLDER_LETTERS) and set(letters) == PLACEHOLDER_LETTERS


def clamp_index(index: int, n_options: int) -> int:
    return max(0, min(n_options - 1, index))


def normalize_question(item: Any, position: int, question_id: int) -> Optional[Question]:
    """Build one canonical question, or None when the item is unusable.

    position is the 1-based index in the raw payload (used for the default
    text), question_id the id the question gets if it survives.
    """
    fields: Mapping[str, Any] = item if isinstance(item, Mapping) else {}
    text = first_result(QUESTION_TEXT_CHAIN, fields, position)
    raw_options = first_result(OPTIONS_CHAIN, fields) or []
    options = [o for o in raw_options if _is_text(o)]

    if len(options) < 2:
        xtrace("question_dropped", {"position": position, "reason": "insufficient_options", "count": len(options)})
        return None
    if is_placeholder_set(options):
        xtrace("question_dropped", {"position": position, "reason": "placeholder_options"})
        return None

    correct = first_result(CORRECT_CHAIN, fields, options)
    if correct is None:
        correct = 0
    return Question(
        id=question_id,
        question=text,
        options=options,
        correct=clamp_index(correct, len(options)),
        type=MULTIPLE_CHOICE,
    )


def normalize(raw: Any, title: str = "") -> Quiz:
    """Turn a raw generation payload into a Quiz.

    Raises:
        MalformedPayload: text payload is not valid JSON.
        UnexpectedShape: payload is not a list.
        NoValidQuestions: every question was rejected.
    """
    items = parse_payload(raw)
    questions: List[Question] = []
    for position, item in enumerate(items, start=1):
        q = normalize_question(item, position, len(questions) + 1)
        if q is not None:
            questions.append(q)
    if not questions:
        raise NoValidQuestions("No valid questions could be generated from the AI response")
    xtrace("quiz_normalized", {"title": title, "received": len(items), "kept": len(questions)})
    return Quiz(title=title, questions=tuple(questions))
