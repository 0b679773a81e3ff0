from __future__ import annotations

"""Console entry point for StudyAid."""

from .app.cli import main


def cli() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    cli()
