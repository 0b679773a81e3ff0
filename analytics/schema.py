from __future__ import annotations

"""Pydantic model and frame dtypes for historical quiz attempts."""

from datetime import datetime, timezone
from typing import Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator

DTYPES = {
    "title": "string",
    "score": "float64",
    # timezone-aware UTC timestamps
    "created_at": pd.DatetimeTZDtype(tz="UTC"),
}


class AttemptRecord(BaseModel):
    """One past quiz attempt as reported by the backend. Immutable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    score: Union[int, float] = Field(ge=0)
    created_at: datetime = Field(alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def to_json(self) -> dict:
        return {"title": self.title, "score": self.score, "createdAt": self.created_at.isoformat()}
