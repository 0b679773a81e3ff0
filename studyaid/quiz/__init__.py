from .models import MULTIPLE_CHOICE, SHORT_ANSWER, TRUE_FALSE, Question, Quiz
from .normalizer import classify, normalize, parse_payload, strip_fences

__all__ = [
    "MULTIPLE_CHOICE",
    "SHORT_ANSWER",
    "TRUE_FALSE",
    "Question",
    "Quiz",
    "classify",
    "normalize",
    "parse_payload",
    "strip_fences",
]
