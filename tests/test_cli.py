import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout

from studyaid.app.cli import main, run_quiz_loop
from studyaid.quiz.models import Question, Quiz
from studyaid.session.state import CANCELLED, COMPLETED, QuizSession


def scripted_ui(inputs):
    replies = iter(inputs)
    shown = []
    return {"ask": lambda prompt: next(replies), "inform": shown.append}, shown


def two_questions() -> QuizSession:
    quiz = Quiz(
        title="Biology",
        questions=(
            Question(id=1, question="Powerhouse of the cell?", options=["Nucleus", "Mitochondria"], correct=1),
            Question(id=2, question="Basic unit of life?", options=["Cell", "Atom"], correct=0),
        ),
    )
    return QuizSession.start(quiz)


class QuizLoopTests(unittest.TestCase):
    def test_answers_and_completes(self) -> None:
        session = two_questions()
        ui, shown = scripted_ui(["n", "2", "n", "x", "1", "n"])
        self.assertEqual(run_quiz_loop(session, ui), COMPLETED)
        self.assertEqual(session.answers, {1: 1, 2: 0})
        self.assertIn("Answer the question before moving on.", shown)
        self.assertIn("  2. Atom", shown)

    def test_jump_and_cancel(self) -> None:
        session = two_questions()
        ui, shown = scripted_ui(["g 2", "g 9", "c"])
        self.assertEqual(run_quiz_loop(session, ui), CANCELLED)
        self.assertIn("Pick a question between 1 and 2.", shown)


class MainTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def _write(self, name: str, text: str) -> str:
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def _run(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_normalize_fenced_file(self) -> None:
        path = self._write("bio.txt", '```json\n[{"question": "Q1", "options": ["A", "B"], "answer": "B"}]\n```')
        code, out, _ = self._run(["normalize", path])
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["title"], "bio")
        self.assertEqual(data["questions"][0]["correct"], 1)

    def test_normalize_failure_exit_code(self) -> None:
        path = self._write("bad.json", json.dumps({"quiz": []}))
        code, _, err = self._run(["normalize", path])
        self.assertEqual(code, 2)
        self.assertIn("ERROR:", err)

    def test_analytics_from_history_file(self) -> None:
        history = [
            {"title": "Biology", "score": 60, "createdAt": "2026-03-01T10:00:00Z"},
            {"title": "Biology", "score": 80, "createdAt": "2026-03-11T10:00:00Z"},
            {"title": "Physics", "score": 90, "createdAt": "2026-03-21T10:00:00Z"},
        ]
        path = self._write("history.json", json.dumps(history))
        code, out, _ = self._run(["analytics", "--history-file", path])
        self.assertEqual(code, 0)
        self.assertIn("Quizzes taken: 3", out)
        self.assertIn("Average score: 77%", out)
        self.assertIn("Highest score: 90%", out)
        self.assertIn("Trend: +30", out)

        code, out, _ = self._run(["courses", "--history-file", path, "--search", "bio"])
        self.assertEqual(code, 0)
        self.assertIn("Biology: 2 quizzes taken, average 70%, latest 80%", out)
        self.assertNotIn("Physics", out)

    def test_invalid_history_file(self) -> None:
        path = self._write("history.json", json.dumps([{"title": "Biology", "score": -1}]))
        code, _, err = self._run(["analytics", "--history-file", path])
        self.assertEqual(code, 2)
        self.assertIn("ERROR:", err)


if __name__ == "__main__":
    unittest.main()
