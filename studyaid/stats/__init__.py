from .scoring import ScoreResult, format_summary, grade_label, is_correct, round_half_up, score

__all__ = ["ScoreResult", "format_summary", "grade_label", "is_correct", "round_half_up", "score"]
