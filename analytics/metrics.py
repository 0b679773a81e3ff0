from __future__ import annotations

"""History aggregation: filters, summary metrics, trend and score buckets.

Everything here is recomputed from scratch on each call; nothing is cached.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from studyaid.stats.scoring import round_half_up

from .config import AnalyticsConfig
from .paging import Page, paginate
from .prepare import frame_records, load_history, plain_number
from .schema import AttemptRecord

SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class AnalyticsFilter:
    course: Optional[str] = None
    window: str = "all"


@dataclass(frozen=True)
class ScoreBucket:
    start: int
    label: str
    count: int


@dataclass(frozen=True)
class Band:
    name: str
    count: int


@dataclass
class AnalyticsView:
    frame: pd.DataFrame = field(repr=False)
    count: int = 0
    average: int = 0
    max: int | float = 0
    trend: int | float = 0
    buckets: List[ScoreBucket] = field(default_factory=list)
    distribution: List[Band] = field(default_factory=list)

    @property
    def records(self) -> List[AttemptRecord]:
        return frame_records(self.frame)

    def series(self) -> List[Dict[str, Any]]:
        """Chart points in time order: Q1..Qn with score and date."""
        return [
            {"name": f"Q{i + 1}", "score": plain_number(s), "date": c.date().isoformat()}
            for i, (s, c) in enumerate(zip(self.frame["score"], self.frame["created_at"]))
        ]

    def recent(self, page: int = 1, per_page: int = 4) -> Page[AttemptRecord]:
        """Newest attempts first, one page at a time."""
        return paginate(list(reversed(self.records)), page, per_page)


def filter_course(df: pd.DataFrame, course: Optional[str]) -> pd.DataFrame:
    if course is None:
        return df
    return df[df["title"] == course]


def filter_window(df: pd.DataFrame, days: Optional[int], now: datetime) -> pd.DataFrame:
    if days is None:
        return df
    age_days = (pd.Timestamp(now) - df["created_at"]).dt.total_seconds() / SECONDS_PER_DAY
    return df[age_days <= days]


def compute_trend(df: pd.DataFrame) -> int | float:
    """Latest minus earliest score; df must already be in ascending time order."""
    if len(df) < 2:
        return 0
    return plain_number(df["score"].iloc[-1] - df["score"].iloc[0])


def score_buckets(scores: pd.Series, cfg: AnalyticsConfig) -> List[ScoreBucket]:
    """Fixed-width histogram of capped scores; 100 folds into the top range."""
    if scores.empty:
        return []
    width = cfg.bucket_width
    top = cfg.top_bucket_start
    capped = scores.clip(upper=100).to_numpy(dtype="float64")
    starts = (np.floor(capped / width) * width).astype(int)
    starts = np.minimum(starts, top)
    counts = pd.Series(starts).value_counts().sort_index()
    buckets = []
    for start, n in counts.items():
        start = int(start)
        label = f"{start}-100%" if start == top else f"{start}-{start + width - 1}%"
        buckets.append(ScoreBucket(start=start, label=label, count=int(n)))
    return buckets


def score_bands(scores: pd.Series, cfg: AnalyticsConfig) -> List[Band]:
    """Qualitative distribution; empty bands are left out."""
    ex, good, fair = cfg.excellent, cfg.good, cfg.fair
    bands = [
        Band(f"Excellent ({ex:g}-100%)", int((scores >= ex).sum())),
        Band(f"Good ({good:g}-{ex - 1:g}%)", int(((scores >= good) & (scores < ex)).sum())),
        Band(f"Fair ({fair:g}-{good - 1:g}%)", int(((scores >= fair) & (scores < good)).sum())),
        Band(f"Needs Work (<{fair:g}%)", int((scores < fair).sum())),
    ]
    return [b for b in bands if b.count > 0]


def aggregate(
    history: Iterable[Any] | pd.DataFrame,
    flt: Optional[AnalyticsFilter] = None,
    *,
    now: Optional[datetime] = None,
    cfg: Optional[AnalyticsConfig] = None,
) -> AnalyticsView:
    """Filter history by course then window and compute the derived metrics.

    ``now`` is captured once so every record in one call is measured against
    the same instant; naive values are read as UTC.
    """
    flt = flt or AnalyticsFilter()
    cfg = cfg or AnalyticsConfig()
    if flt.window not in cfg.windows:
        raise ValueError(f"Unknown window: {flt.window}")
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    df = load_history(history)
    df = filter_course(df, flt.course)
    df = filter_window(df, cfg.windows[flt.window], now)
    df = df.reset_index(drop=True)

    scores = df["score"].astype("float64")
    count = len(df)
    return AnalyticsView(
        frame=df,
        count=count,
        average=round_half_up(float(scores.mean())) if count else 0,
        max=plain_number(scores.max()) if count else 0,
        trend=compute_trend(df),
        buckets=score_buckets(scores, cfg),
        distribution=score_bands(scores, cfg),
    )
