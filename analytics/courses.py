from __future__ import annotations

"""Per-course rollups over attempt history."""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

import pandas as pd

from studyaid.stats.scoring import round_half_up

from .prepare import load_history, plain_number


@dataclass(frozen=True)
class CourseSummary:
    title: str
    count: int
    average: int
    latest: int | float


def course_summaries(
    history: Iterable[Any] | pd.DataFrame,
    titles: Optional[Sequence[str]] = None,
) -> List[CourseSummary]:
    """Count, rounded average and most recent score per course.

    Courses are listed in ``titles`` order when given (titles without
    attempts are skipped), otherwise by their earliest attempt.
    """
    df = load_history(history)
    if df.empty:
        return []
    grouped = df.groupby("title", sort=False, observed=True)["score"]
    stats = pd.DataFrame({"count": grouped.size(), "mean": grouped.mean(), "latest": grouped.last()})
    order = [t for t in titles if t in stats.index] if titles is not None else list(stats.index)
    seen = set()
    out = []
    for title in order:
        if title in seen:
            continue
        seen.add(title)
        row = stats.loc[title]
        out.append(
            CourseSummary(
                title=str(title),
                count=int(row["count"]),
                average=round_half_up(float(row["mean"])),
                latest=plain_number(row["latest"]),
            )
        )
    return out


def search_courses(summaries: Iterable[CourseSummary], query: str) -> List[CourseSummary]:
    """Case-insensitive substring match on the course title."""
    needle = (query or "").strip().lower()
    return [s for s in summaries if needle in s.title.lower()]
