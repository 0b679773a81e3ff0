from __future__ import annotations

"""Matplotlib plots for attempt scores, trend, score buckets and bands."""

from typing import Optional, Sequence

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from .metrics import Band, ScoreBucket

BAND_COLORS = {"Excellent": "#10b981", "Good": "#3b82f6", "Fair": "#f59e0b", "Needs Work": "#ef4444"}


def plot_scores(
    df: pd.DataFrame,
    *,
    title: Optional[str] = None,
    save_path: Optional[str | bytes | "os.PathLike[str]"] = None,
) -> None:
    """One column per attempt, in time order."""
    if df.empty:
        return
    labels = [f"Q{i + 1}" for i in range(len(df))]
    plt.figure()
    plt.bar(labels, df["score"], color="#3b82f6")
    plt.ylim(0, 100)
    if len(labels) > 8:
        plt.xticks(rotation=-45, ha="left")
    plt.xlabel("Attempt")
    plt.ylabel("Score (%)")
    plt.title("Quiz scores" + (f": {title}" if title else ""))
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()


def plot_trend(
    df: pd.DataFrame,
    *,
    title: Optional[str] = None,
    save_path: Optional[str | bytes | "os.PathLike[str]"] = None,
) -> None:
    """Score over time as a filled area."""
    if df.empty:
        return
    x = df["created_at"].dt.tz_convert(None).to_numpy()
    y = df["score"].to_numpy(dtype="float64")
    plt.figure()
    plt.plot(x, y, marker="o")
    plt.fill_between(x, y, alpha=0.2)
    plt.ylim(0, 100)
    plt.xlabel("Date")
    plt.ylabel("Score (%)")
    plt.title("Trend" + (f": {title}" if title else ""))
    plt.gcf().autofmt_xdate()
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()


def plot_buckets(
    buckets: Sequence[ScoreBucket],
    *,
    save_path: Optional[str | bytes | "os.PathLike[str]"] = None,
) -> None:
    if not buckets:
        return
    plt.figure()
    plt.bar([b.label for b in buckets], [b.count for b in buckets], color="#10b981")
    plt.xlabel("Score range")
    plt.ylabel("Attempts")
    plt.title("Score distribution")
    plt.yticks(np.arange(0, max(b.count for b in buckets) + 1))
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()


def plot_bands(
    bands: Sequence[Band],
    *,
    save_path: Optional[str | bytes | "os.PathLike[str]"] = None,
) -> None:
    if not bands:
        return
    fig = plt.figure()
    ax = fig.add_subplot(111)
    ax.pie(
        [b.count for b in bands],
        labels=[b.name for b in bands],
        colors=[BAND_COLORS[b.name.split(" (")[0]] for b in bands],
        autopct="%1.0f%%",
    )
    ax.set_title("Performance bands")
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()
