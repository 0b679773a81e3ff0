from __future__ import annotations

"""Configuration loading and validation for StudyAid.

This module loads YAML configuration, applies defaults, and falls back to
safe values (with a warning) when a setting is out of range.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

ALLOWED_WINDOWS = {"7d", "30d", "90d", "all"}
MAX_QUESTIONS = 50
BACKEND_URL_ENV = "STUDYAID_BACKEND_URL"


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        cfg = _load_yaml(Path(path))
    else:
        cfg = _load_yaml(Path(__file__).with_name("defaults.yml"))
    return cfg


def _positive_int(section: Dict[str, Any], key: str, default: int, upper: Optional[int] = None) -> None:
    value = section.get(key)
    try:
        n = int(value)
    except (TypeError, ValueError):
        n = 0
    if n <= 0 or (upper is not None and n > upper):
        print(f"WARNING: Invalid {key} '{value}', using {default}.", file=sys.stderr)
        n = default
    section[key] = n


def validate_config(cfg: Dict[str, Any], env: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Apply defaults, environment overrides and sanity checks.

    Args:
        cfg: The raw configuration dictionary.
        env: Environment mapping (defaults to os.environ).

    Returns:
        The validated and merged configuration dictionary.
    """
    env = os.environ if env is None else env

    cfg.setdefault("backend", {})
    cfg.setdefault("quiz", {})
    cfg.setdefault("analytics", {})
    cfg.setdefault("explain", False)

    backend = cfg["backend"]
    quiz = cfg["quiz"]
    analytics = cfg["analytics"]

    backend.setdefault("base_url", "http://localhost:4000")
    backend.setdefault("api_prefix", "/api/transcribe")
    backend.setdefault("timeout_s", 60)

    quiz.setdefault("question_count", 10)

    analytics.setdefault("window", "all")
    analytics.setdefault("recent_per_page", 4)
    analytics.setdefault("courses_per_page", 6)

    if env.get(BACKEND_URL_ENV):
        backend["base_url"] = env[BACKEND_URL_ENV]
    backend["base_url"] = str(backend["base_url"]).rstrip("/")

    try:
        timeout = float(backend.get("timeout_s"))
    except (TypeError, ValueError):
        timeout = 0.0
    if timeout <= 0:
        print(f"WARNING: Invalid timeout_s '{backend.get('timeout_s')}', using 60.", file=sys.stderr)
        timeout = 60.0
    backend["timeout_s"] = timeout

    _positive_int(quiz, "question_count", 10, upper=MAX_QUESTIONS)
    _positive_int(analytics, "recent_per_page", 4)
    _positive_int(analytics, "courses_per_page", 6)

    window = analytics.get("window")
    if window not in ALLOWED_WINDOWS:
        print(f"WARNING: Unsupported analytics window '{window}', using 'all'.", file=sys.stderr)
        analytics["window"] = "all"

    cfg["explain"] = bool(cfg.get("explain", False))
    return cfg
