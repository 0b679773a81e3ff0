"""StudyAid package initialization.

The quiz lifecycle engine lives in the subpackages: ``quiz`` (payload
normalization), ``session`` (quiz-taking state machine), ``stats`` (scoring),
``backend`` (async API client) and ``app`` (orchestration and CLI).
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
