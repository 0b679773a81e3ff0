import io
import unittest
from contextlib import redirect_stderr

from studyaid.config.config import BACKEND_URL_ENV, load_config, validate_config


class ConfigTests(unittest.TestCase):
    def test_defaults_file(self) -> None:
        cfg = validate_config(load_config(), env={})
        self.assertEqual(cfg["backend"]["base_url"], "http://localhost:4000")
        self.assertEqual(cfg["backend"]["api_prefix"], "/api/transcribe")
        self.assertEqual(cfg["quiz"]["question_count"], 10)
        self.assertEqual(cfg["analytics"]["window"], "all")
        self.assertEqual(cfg["analytics"]["recent_per_page"], 4)
        self.assertIs(cfg["explain"], False)

    def test_empty_config_gets_defaults(self) -> None:
        cfg = validate_config({}, env={})
        self.assertEqual(cfg["backend"]["timeout_s"], 60.0)
        self.assertEqual(cfg["analytics"]["courses_per_page"], 6)

    def test_env_overrides_backend_url(self) -> None:
        cfg = validate_config({"backend": {"base_url": "http://a"}}, env={BACKEND_URL_ENV: "https://study.example/"})
        self.assertEqual(cfg["backend"]["base_url"], "https://study.example")

    def test_invalid_values_fall_back_with_warning(self) -> None:
        raw = {
            "backend": {"timeout_s": "soon"},
            "quiz": {"question_count": 500},
            "analytics": {"window": "1y", "recent_per_page": -2},
        }
        err = io.StringIO()
        with redirect_stderr(err):
            cfg = validate_config(raw, env={})
        self.assertEqual(cfg["backend"]["timeout_s"], 60.0)
        self.assertEqual(cfg["quiz"]["question_count"], 10)
        self.assertEqual(cfg["analytics"]["window"], "all")
        self.assertEqual(cfg["analytics"]["recent_per_page"], 4)
        warnings = err.getvalue()
        self.assertIn("WARNING: Unsupported analytics window '1y'", warnings)
        self.assertIn("WARNING: Invalid question_count '500'", warnings)

    def test_missing_file_exits(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                load_config("/nonexistent/studyaid.yml")


if __name__ == "__main__":
    unittest.main()
