from __future__ import annotations

"""CLI for StudyAid using SessionManager, BackendClient and the analytics package."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from dotenv import load_dotenv

from analytics.courses import course_summaries, search_courses
from analytics.metrics import AnalyticsFilter, aggregate
from analytics.paging import paginate
from analytics.prepare import validate_records

from .. import __version__
from ..backend.client import BackendClient
from ..config.config import ALLOWED_WINDOWS, load_config, validate_config
from ..errors import QuizError
from ..quiz.models import SHORT_ANSWER
from ..quiz.normalizer import normalize
from ..session.state import CANCELLED, IN_PROGRESS, QuizSession
from ..stats.scoring import format_summary
from . import explain
from .session_manager import SessionManager

HELP_TEXT = "Enter an option number, n (next), p (previous), g <k> (go to question k), c (cancel)"


def _build_ui() -> Dict[str, Callable[..., Any]]:
    def ask(prompt: str) -> str:
        return input(prompt)

    def inform(msg: str) -> None:
        print(msg)

    return {"ask": ask, "inform": inform}


def _make_client(cfg: Dict[str, Any]) -> BackendClient:
    backend = cfg["backend"]
    return BackendClient(backend["base_url"], api_prefix=backend["api_prefix"], timeout_s=backend["timeout_s"])


def render_question(session: QuizSession) -> List[str]:
    q = session.current_question
    lines = [f"Question {session.current_index + 1} of {len(session.quiz)} ({session.progress:.0f}%)", q.question]
    current = session.answers.get(q.id)
    for i, opt in enumerate(q.options):
        mark = "*" if current == i else " "
        lines.append(f" {mark}{i + 1}. {opt}")
    return lines


def run_quiz_loop(session: QuizSession, ui: Dict[str, Callable[..., Any]]) -> str:
    """Drive one session from the terminal until it completes or is cancelled."""
    ask, inform = ui["ask"], ui["inform"]
    inform(HELP_TEXT)
    while session.phase == IN_PROGRESS:
        for line in render_question(session):
            inform(line)
        raw = ask("> ").strip()
        q = session.current_question
        if raw.lower() == "c":
            session.cancel()
        elif raw.lower() == "n":
            if not session.advance():
                inform("Answer the question before moving on.")
        elif raw.lower() == "p":
            session.retreat()
        elif raw.lower().startswith("g"):
            try:
                session.jump_to(int(raw[1:].strip()) - 1)
            except (ValueError, IndexError):
                inform(f"Pick a question between 1 and {len(session.quiz)}.")
        elif q.type == SHORT_ANSWER:
            session.record_answer(q.id, raw)
        elif raw.isdigit() and 1 <= int(raw) <= len(q.options):
            session.record_answer(q.id, int(raw) - 1)
        else:
            inform(HELP_TEXT)
    return session.phase


async def _take(cfg: Dict[str, Any], args: argparse.Namespace, ui: Dict[str, Callable[..., Any]]) -> int:
    async with _make_client(cfg) as client:
        manager = SessionManager(client, cfg)
        ui["inform"](f"Generating quiz for '{args.title}'...")
        quiz = await manager.generate_quiz(args.title, args.questions)
        if quiz is None:
            ui["inform"]("Quiz generation cancelled")
            return 1
        ui["inform"](f"AI Quiz generated successfully! {len(quiz)} questions created.")
        if run_quiz_loop(manager.session, ui) == CANCELLED:
            ui["inform"]("Quiz cancelled")
            return 1
        outcome = await manager.finish()
        ui["inform"](format_summary(outcome.score))
        if outcome.saved:
            ui["inform"]("Score saved to analytics!")
        else:
            ui["inform"](f"Score not saved: {outcome.error}")
        return 0


async def _notes(cfg: Dict[str, Any]) -> int:
    async with _make_client(cfg) as client:
        for note in await client.fetch_notes():
            print(note.title)
    return 0


def _read_history(args: argparse.Namespace, cfg: Dict[str, Any]):
    if args.history_file:
        data = json.loads(Path(args.history_file).read_text(encoding="utf-8"))
        records = validate_records(data)
        return records, None

    async def fetch():
        async with _make_client(cfg) as client:
            return await client.fetch_history()

    history = asyncio.run(fetch())
    return history.records, history.courses


def _analytics(cfg: Dict[str, Any], args: argparse.Namespace) -> int:
    records, _ = _read_history(args, cfg)
    window = args.window or cfg["analytics"]["window"]
    view = aggregate(records, AnalyticsFilter(course=args.course, window=window))
    print(f"Quizzes taken: {view.count}")
    print(f"Average score: {view.average}%")
    print(f"Highest score: {view.max}%")
    print(f"Trend: {view.trend:+}")
    for b in view.buckets:
        print(f"  {b.label:>8}  {b.count}")
    for band in view.distribution:
        print(f"  {band.name}: {band.count}")
    recent = view.recent(1, cfg["analytics"]["recent_per_page"])
    if recent.items:
        print("Recent:")
        for r in recent.items:
            print(f"  {r.created_at:%Y-%m-%d}  {r.title}  {r.score}%")
    if args.report:
        from analytics.report import write_report

        for path in write_report(view, Path(args.report), title=args.course):
            print(f"Wrote {path}")
    return 0


def _courses(cfg: Dict[str, Any], args: argparse.Namespace) -> int:
    records, titles = _read_history(args, cfg)
    summaries = search_courses(course_summaries(records, titles), args.search or "")
    if not summaries:
        print(f'No courses found matching "{args.search or ""}"')
        return 0
    page = paginate(summaries, args.page, cfg["analytics"]["courses_per_page"])
    for s in page.items:
        noun = "quiz" if s.count == 1 else "quizzes"
        print(f"{s.title}: {s.count} {noun} taken, average {s.average}%, latest {s.latest}%")
    if page.total_pages > 1:
        print(f"Page {page.page} of {page.total_pages}")
    return 0


def _normalize_file(args: argparse.Namespace) -> int:
    text = Path(args.file).read_text(encoding="utf-8")
    try:
        raw = json.loads(text)
    except json.JSONDecodeError:
        # Fenced or otherwise wrapped text goes to the normalizer as-is
        raw = text
    if isinstance(raw, dict) and "quiz" in raw:
        raw = raw["quiz"]
    quiz = normalize(raw, title=args.title or Path(args.file).stem)
    print(json.dumps(quiz.to_json(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="studyaid")
    p.add_argument("--config", default=None, help="Path to YAML config")
    p.add_argument("--explain", action="store_true", help="Trace lifecycle milestones to stderr")
    p.add_argument("--version", action="version", version=f"studyaid {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("notes", help="List stored note titles")

    tp = sub.add_parser("take", help="Generate and take a quiz")
    tp.add_argument("--title", required=True)
    tp.add_argument("--questions", type=int, default=None)

    np_ = sub.add_parser("normalize", help="Normalize a saved AI quiz payload")
    np_.add_argument("file")
    np_.add_argument("--title", default=None)

    ap = sub.add_parser("analytics", help="Summarize past quiz attempts")
    ap.add_argument("--course", default=None)
    ap.add_argument("--window", choices=sorted(ALLOWED_WINDOWS), default=None)
    ap.add_argument("--history-file", default=None, help="JSON list of {title, score, createdAt}")
    ap.add_argument("--report", default=None, help="Directory for plots and CSV snapshot")

    cp = sub.add_parser("courses", help="Per-course rollups")
    cp.add_argument("--search", default=None)
    cp.add_argument("--page", type=int, default=1)
    cp.add_argument("--history-file", default=None)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    cfg = validate_config(load_config(args.config))
    explain.enable(args.explain or cfg["explain"])

    try:
        if args.cmd == "notes":
            return asyncio.run(_notes(cfg))
        if args.cmd == "take":
            return asyncio.run(_take(cfg, args, _build_ui()))
        if args.cmd == "normalize":
            return _normalize_file(args)
        if args.cmd == "analytics":
            return _analytics(cfg, args)
        if args.cmd == "courses":
            return _courses(cfg, args)
    except QuizError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    except (OSError, ValueError) as exc:
        # unreadable files and history that fails validation
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("Cancelled", file=sys.stderr)
        return 130
    return 1
