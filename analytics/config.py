from __future__ import annotations

"""Analytics configuration (hyperparameters) using Pydantic."""

from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator


class AnalyticsConfig(BaseModel):
    """Hyperparameters for history aggregation.

    - windows: relative time filters in days (None = unbounded)
    - bucket_width: histogram range width in score points; must divide 100
    - excellent/good/fair: lower bounds of the qualitative bands
    """

    windows: Dict[str, Optional[int]] = Field(
        default_factory=lambda: {"7d": 7, "30d": 30, "90d": 90, "all": None}
    )
    bucket_width: int = Field(10, gt=0, le=100)
    excellent: float = Field(90, ge=0, le=100)
    good: float = Field(80, ge=0, le=100)
    fair: float = Field(70, ge=0, le=100)

    @model_validator(mode="after")
    def _check(self) -> "AnalyticsConfig":
        if 100 % self.bucket_width != 0:
            raise ValueError("bucket_width must divide 100")
        if not (self.excellent >= self.good >= self.fair):
            raise ValueError("band thresholds must satisfy excellent >= good >= fair")
        return self

    @property
    def top_bucket_start(self) -> int:
        return 100 - self.bucket_width
