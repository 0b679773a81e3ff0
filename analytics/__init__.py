from .config import AnalyticsConfig
from .courses import CourseSummary, course_summaries, search_courses
from .metrics import AnalyticsFilter, AnalyticsView, Band, ScoreBucket, aggregate
from .paging import Page, paginate
from .prepare import load_history, validate_records
from .schema import AttemptRecord

__all__ = [
    "AnalyticsConfig",
    "AnalyticsFilter",
    "AnalyticsView",
    "AttemptRecord",
    "Band",
    "CourseSummary",
    "Page",
    "ScoreBucket",
    "aggregate",
    "course_summaries",
    "load_history",
    "paginate",
    "search_courses",
    "validate_records",
]
