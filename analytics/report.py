from __future__ import annotations

"""Write an analytics report: plots plus a CSV snapshot of the filtered attempts."""

from pathlib import Path
from typing import List, Optional

from .metrics import AnalyticsView
from .plots import plot_bands, plot_buckets, plot_scores, plot_trend

SNAPSHOT_COLS = ["attempt_idx", "title", "score", "created_at"]


def write_report(view: AnalyticsView, outdir: Path, *, title: Optional[str] = None) -> List[Path]:
    """Render every chart for ``view`` into ``outdir`` and return the written paths.

    Charts are skipped when the view is empty; the CSV snapshot is always written.
    """
    outdir = Path(outdir)
    outdir.mkdir(exist_ok=True, parents=True)
    written: List[Path] = []
    if view.count:
        targets = {
            "scores.png": lambda p: plot_scores(view.frame, title=title, save_path=p),
            "trend.png": lambda p: plot_trend(view.frame, title=title, save_path=p),
            "buckets.png": lambda p: plot_buckets(view.buckets, save_path=p),
            "bands.png": lambda p: plot_bands(view.distribution, save_path=p),
        }
        for name, draw in targets.items():
            path = outdir / name
            draw(path)
            written.append(path)

    snapshot = outdir / "analytics_snapshot.csv"
    view.frame[[c for c in SNAPSHOT_COLS if c in view.frame.columns]].to_csv(snapshot, index=False)
    written.append(snapshot)
    return written
