from __future__ import annotations

"""Validate attempt history and load it into a time-ordered frame."""

from typing import Any, Iterable, List

import pandas as pd

from .schema import DTYPES, AttemptRecord


def _empty_df() -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in DTYPES.items()})


def validate_records(history: Iterable[Any]) -> List[AttemptRecord]:
    """Coerce dicts (backend shape, ``createdAt`` key) into AttemptRecord."""
    return [r if isinstance(r, AttemptRecord) else AttemptRecord.model_validate(r) for r in history]


def sort_by_time(df: pd.DataFrame) -> pd.DataFrame:
    """Stable ascending sort on created_at; ``attempt_idx`` is renumbered 0..n-1."""
    df = df.sort_values("created_at", kind="stable").reset_index(drop=True)
    df["attempt_idx"] = range(len(df))
    return df


def load_history(history: Iterable[Any] | pd.DataFrame) -> pd.DataFrame:
    """Build a frame of attempts sorted ascending by created_at.

    - The sort is stable, so attempts sharing a timestamp keep input order.
    - Adds ``attempt_idx`` (0..n-1) in time order.
    - A frame passed in is copied and re-sorted, whatever its row order.
    """
    if isinstance(history, pd.DataFrame):
        return sort_by_time(history.copy())
    records = validate_records(history)
    if not records:
        df = _empty_df()
    else:
        df = pd.DataFrame([{"title": r.title, "score": r.score, "created_at": r.created_at} for r in records])
        for col, dt in DTYPES.items():
            df[col] = df[col].astype(dt)
    return sort_by_time(df)


def frame_records(df: pd.DataFrame) -> List[AttemptRecord]:
    return [
        AttemptRecord(title=str(t), score=plain_number(s), created_at=c.to_pydatetime())
        for t, s, c in zip(df["title"], df["score"], df["created_at"])
    ]


def plain_number(value: Any) -> int | float:
    v = float(value)
    return int(v) if v.is_integer() else v
