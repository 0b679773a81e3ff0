import json
import unittest

import httpx

from studyaid.backend.client import BackendClient
from studyaid.errors import MalformedPayload, NetworkFailure, PersistenceFailure

ATTEMPTS = {
    "Biology": [
        {"score": 80, "createdAt": "2026-03-02T10:00:00Z"},
        {"score": 90, "createdAt": "2026-03-05T10:00:00Z"},
    ],
    "Physics": [
        {"score": 70, "createdAt": "2026-03-03T10:00:00Z"},
        {"score": "not a number", "createdAt": "2026-03-04T10:00:00Z"},
    ],
    "Chemistry": [],
}


def backend_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    body = json.loads(request.content) if request.content else {}
    if path == "/api/transcribe/getNotes":
        notes = [{"title": t, "content": "..."} for t in ("Biology", "Physics", "Biology", "Chemistry", "Broken")]
        return httpx.Response(200, json={"success": True, "notes": notes})
    if path == "/api/transcribe/quizAnalysis":
        if body["title"] == "Broken":
            return httpx.Response(500, text="boom")
        return httpx.Response(200, json={"success": True, "quizzes": ATTEMPTS[body["title"]]})
    if path == "/api/transcribe/getQuiz":
        return httpx.Response(200, json={"success": True, "quiz": f"```json\n[]\n``` {body['questionCount']}"})
    if path == "/api/transcribe/score":
        return httpx.Response(200, json={"success": True, "message": f"saved {body['score']}"})
    return httpx.Response(404)


def client_for(handler) -> BackendClient:
    return BackendClient("http://backend.test", transport=httpx.MockTransport(handler))


class BackendClientTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.client = client_for(backend_handler)

    async def asyncTearDown(self) -> None:
        await self.client.close()

    async def test_fetch_notes(self) -> None:
        notes = await self.client.fetch_notes()
        self.assertEqual([n.title for n in notes], ["Biology", "Physics", "Biology", "Chemistry", "Broken"])

    async def test_generate_returns_raw_quiz(self) -> None:
        raw = await self.client.generate_quiz("Biology", 5)
        self.assertEqual(raw, "```json\n[]\n``` 5")

    async def test_submit_score(self) -> None:
        result = await self.client.submit_score("Biology", 85)
        self.assertTrue(result.success)
        self.assertEqual(result.message, "saved 85")

    async def test_history_skips_failed_courses(self) -> None:
        history = await self.client.fetch_history()
        self.assertEqual(history.courses, ["Biology", "Physics"])
        self.assertEqual([(r.title, r.score) for r in history.records], [("Biology", 80), ("Physics", 70), ("Biology", 90)])

    async def test_history_for_given_titles(self) -> None:
        history = await self.client.fetch_history(["Physics"])
        self.assertEqual(history.courses, ["Physics"])
        self.assertEqual(len(history.records), 1)


class BackendFailureTests(unittest.IsolatedAsyncioTestCase):
    async def _call(self, handler, method: str, *args):
        async with client_for(handler) as client:
            return await getattr(client, method)(*args)

    async def test_http_error_status(self) -> None:
        with self.assertRaises(NetworkFailure) as ctx:
            await self._call(lambda r: httpx.Response(503), "generate_quiz", "Bio", 3)
        self.assertEqual(ctx.exception.status_code, 503)

    async def test_unsuccessful_generation(self) -> None:
        with self.assertRaises(NetworkFailure):
            await self._call(lambda r: httpx.Response(200, json={"success": False}), "generate_quiz", "Bio", 3)

    async def test_transport_error(self) -> None:
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertRaises(NetworkFailure):
            await self._call(refuse, "fetch_notes")

    async def test_invalid_json_body(self) -> None:
        with self.assertRaises(MalformedPayload):
            await self._call(lambda r: httpx.Response(200, text="<html>"), "generate_quiz", "Bio", 3)

    async def test_notes_failure_is_reported(self) -> None:
        with self.assertRaises(NetworkFailure):
            await self._call(lambda r: httpx.Response(200, json={"success": False}), "fetch_history")

    async def test_score_rejected(self) -> None:
        rejected = lambda r: httpx.Response(200, json={"success": False, "message": "quota"})
        with self.assertRaises(PersistenceFailure) as ctx:
            await self._call(rejected, "submit_score", "Bio", 50)
        self.assertIn("quota", str(ctx.exception))
        with self.assertRaises(PersistenceFailure):
            await self._call(lambda r: httpx.Response(500, text="db down"), "submit_score", "Bio", 50)


class MalformedHistoryTests(unittest.IsolatedAsyncioTestCase):
    @staticmethod
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("getNotes"):
            return httpx.Response(200, json={"success": True, "notes": "Biology"})
        title = json.loads(request.content)["title"]
        quizzes = {"Odd": 5, "Flag": True, "Good": [{"score": 64, "createdAt": "2026-03-01T09:00:00Z"}]}[title]
        return httpx.Response(200, json={"success": True, "quizzes": quizzes})

    async def asyncSetUp(self) -> None:
        self.client = client_for(self.handler)

    async def asyncTearDown(self) -> None:
        await self.client.close()

    async def test_non_list_attempts_skip_only_that_course(self) -> None:
        history = await self.client.fetch_history(["Odd", "Good", "Flag"])
        self.assertEqual(history.courses, ["Good"])
        self.assertEqual([r.score for r in history.records], [64])

    async def test_non_list_attempts_are_malformed(self) -> None:
        with self.assertRaises(MalformedPayload):
            await self.client.fetch_attempts("Odd")

    async def test_non_list_notes_are_malformed(self) -> None:
        with self.assertRaises(MalformedPayload):
            await self.client.fetch_notes()
        with self.assertRaises(MalformedPayload):
            await self.client.fetch_history()


if __name__ == "__main__":
    unittest.main()
