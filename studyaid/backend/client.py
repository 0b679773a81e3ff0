"""
Backend API client (async)
==========================
Talks to the study-aid backend with httpx.AsyncClient. Per-course history
requests run concurrently with asyncio.gather; a failing course is skipped
rather than failing the whole history.

Every response is treated as untrusted input.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from analytics.schema import AttemptRecord

from ..app.explain import trace as xtrace
from ..errors import MalformedPayload, NetworkFailure, PersistenceFailure, QuizError

DEFAULT_PREFIX = "/api/transcribe"


@dataclass(frozen=True)
class Note:
    title: str
    content: str = ""
    date: Optional[str] = None
    type: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Note":
        return cls(
            title=str(data.get("title", "")),
            content=str(data.get("content") or ""),
            date=data.get("date"),
            type=data.get("type"),
        )


@dataclass(frozen=True)
class SubmitResult:
    success: bool
    message: Optional[str] = None


@dataclass
class History:
    records: List[AttemptRecord] = field(default_factory=list)
    courses: List[str] = field(default_factory=list)


class BackendClient:
    def __init__(
        self,
        base_url: str,
        *,
        api_prefix: str = DEFAULT_PREFIX,
        timeout_s: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_prefix = api_prefix.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json"},
            follow_redirects=True,
            timeout=timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Closes the async client session."""
        await self.client.aclose()

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = f"{self.api_prefix}/{path}"
        try:
            return await self.client.request(method, url, json=payload)
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"{method} {url} failed: {exc}") from exc

    @staticmethod
    def _decode(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedPayload(f"Response from {response.request.url} is not valid JSON: {exc}") from exc
        if not isinstance(body, dict):
            raise MalformedPayload(f"Response from {response.request.url} is not a JSON object")
        return body

    @staticmethod
    def _check_status(response: httpx.Response) -> None:
        if response.is_error:
            raise NetworkFailure(f"HTTP error! status: {response.status_code}", status_code=response.status_code)

    async def fetch_notes(self) -> List[Note]:
        resp = await self._request("GET", "getNotes")
        self._check_status(resp)
        body = self._decode(resp)
        if not body.get("success"):
            raise NetworkFailure("Failed to get notes")
        notes = body.get("notes") or []
        if not isinstance(notes, list):
            raise MalformedPayload(f"Notes list expected, got {type(notes).__name__}")
        return [Note.from_json(n) for n in notes if isinstance(n, dict)]

    async def generate_quiz(self, title: str, question_count: int) -> Any:
        """Ask the AI service for a quiz; returns the raw ``quiz`` value unparsed."""
        resp = await self._request("POST", "getQuiz", {"title": title, "questionCount": int(question_count)})
        self._check_status(resp)
        body = self._decode(resp)
        if body.get("success") is False:
            raise NetworkFailure(str(body.get("message") or "Quiz generation failed"))
        return body.get("quiz")

    async def submit_score(self, title: str, score: int) -> SubmitResult:
        resp = await self._request("POST", "score", {"title": title, "score": score})
        if resp.is_error:
            raise PersistenceFailure(f"Server error ({resp.status_code}): {resp.text}")
        try:
            body = self._decode(resp)
        except MalformedPayload as exc:
            raise PersistenceFailure(str(exc)) from exc
        message = body.get("message")
        if not body.get("success"):
            raise PersistenceFailure(f"Failed to save quiz score: {message or 'Unknown error'}")
        return SubmitResult(success=True, message=message)

    async def fetch_attempts(self, title: str) -> List[AttemptRecord]:
        """Past attempts for one course. Items that fail validation are skipped."""
        resp = await self._request("POST", "quizAnalysis", {"title": title})
        self._check_status(resp)
        body = self._decode(resp)
        if not body.get("success"):
            return []
        quizzes = body.get("quizzes") or []
        if not isinstance(quizzes, list):
            raise MalformedPayload(f"Attempt list for '{title}' expected, got {type(quizzes).__name__}")
        records = []
        for item in quizzes:
            if not isinstance(item, dict):
                continue
            try:
                records.append(AttemptRecord(title=title, score=item.get("score"), created_at=item.get("createdAt")))
            except ValidationError as exc:
                xtrace("attempt_skipped", {"title": title, "errors": exc.error_count()})
        return records

    async def _attempts_or_empty(self, title: str) -> List[AttemptRecord]:
        try:
            return await self.fetch_attempts(title)
        except QuizError as exc:
            xtrace("course_history_skipped", {"title": title, "error": str(exc)})
            return []

    async def fetch_history(self, titles: Optional[List[str]] = None) -> History:
        """
        Main history flow:
        1. Fetch notes (unless titles are given) and de-duplicate titles
        2. Fetch every course's attempts in parallel
        3. Merge, sorted ascending by createdAt
        """
        if titles is None:
            titles = [n.title for n in await self.fetch_notes()]
        unique = list(dict.fromkeys(titles))
        results = await asyncio.gather(*(self._attempts_or_empty(t) for t in unique))
        history = History()
        for title, records in zip(unique, results):
            if records:
                history.records.extend(records)
                history.courses.append(title)
        history.records.sort(key=lambda r: r.created_at)
        return history
