"""Integration tests — E2E via subprocess against logs/sample.log."""

import json
import os
import subprocess
import sys
import tempfile
import unittest

SAMPLE_LOG = os.path.join(os.path.dirname(__file__), "..", "logs", "sample.log")
MAIN_PY = os.path.join(os.path.dirname(__file__), "..", "main.py")


def _run(*args: str, files=(SAMPLE_LOG,)) -> subprocess.CompletedProcess:
    """Run main.py with given args, return CompletedProcess."""
    return subprocess.run(
        [sys.executable, MAIN_PY, *files, "--year", "2025", *args],
        capture_output=True,
        text=True,
    )


def _lines(result: subprocess.CompletedProcess) -> list[str]:
    return [l for l in result.stdout.strip().split("\n") if l]


class TestNoFlags(unittest.TestCase):
    def test_all_events_displayed(self):
        result = _run()
        self.assertEqual(result.returncode, 0, result.stderr)
        self.assertEqual(len(_lines(result)), 13)

    def test_events_in_log_order(self):
        lines = _lines(_run())
        self.assertTrue(lines[0].startswith("2025-01-05 10:22:31 connection"))
        self.assertTrue(lines[-1].startswith("2025-01-05 10:26:30 relay connect"))


class TestFilters(unittest.TestCase):
    def test_component(self):
        lines = _lines(_run("--component", "relay"))
        self.assertEqual(len(lines), 2)
        self.assertTrue(all(" relay " in l for l in lines))

    def test_queue_id(self):
        lines = _lines(_run("--queue-id", "ABC123"))
        self.assertEqual(len(lines), 5)

    def test_within_excludes_old_events(self):
        result = _run("--within", "1d")
        self.assertEqual(result.returncode, 0)
        self.assertEqual(result.stdout.strip(), "")

    def test_invalid_duration(self):
        result = _run("--within", "soon")
        self.assertEqual(result.returncode, 1)
        self.assertIn("Invalid duration", result.stderr)


class TestJsonOutput(unittest.TestCase):
    def test_ndjson(self):
        lines = _lines(_run("--output", "json"))
        records = [json.loads(l) for l in lines]
        self.assertEqual(len(records), 13)
        relay = next(r for r in records if r["component"] == "relay")
        self.assertEqual(relay["status"], "sent")
        self.assertEqual(relay["status_message"], "OK")
        self.assertEqual(relay["relay"], "mx.y.com")


class TestStats(unittest.TestCase):
    def test_json_stats(self):
        result = _run("--stats", "--output", "json")
        self.assertEqual(result.returncode, 0)
        stats = json.loads(result.stdout)
        self.assertEqual(stats["total_events"], 13)
        self.assertEqual(stats["component_counts"]["connection"], 4)
        self.assertEqual(stats["component_counts"]["queue-manager"], 3)
        self.assertEqual(stats["status_counts"], {"sent": 2})
        self.assertEqual(stats["error_count"], 1)

    def test_text_stats(self):
        result = _run("--stats")
        self.assertIn("Total events: 13", result.stdout)


class TestErrors(unittest.TestCase):
    def test_show_errors(self):
        result = _run("--show-errors")
        self.assertEqual(result.returncode, 0)
        self.assertIn("sample.log:10:", result.stderr)
        self.assertIn("size", result.stderr)

    def test_missing_file(self):
        result = _run(files=("/nonexistent/mail.log",))
        self.assertEqual(result.returncode, 1)
        self.assertIn("File not found", result.stderr)

    def test_invalid_config(self):
        with tempfile.NamedTemporaryFile("w", suffix=".yml", delete=False) as f:
            f.write("bogus: 1\n")
            path = f.name
        try:
            result = _run("--config", path)
            self.assertEqual(result.returncode, 1)
            self.assertIn("Invalid config", result.stderr)
        finally:
            os.unlink(path)

    def test_invalid_env_settings_exit_cleanly(self):
        for key, value in (("MAILLOG_LOG_LEVEL", "verbose"), ("MAILLOG_ENCODING", "no-such-codec")):
            with self.subTest(key=key):
                env = dict(os.environ, **{key: value})
                result = subprocess.run(
                    [sys.executable, MAIN_PY, SAMPLE_LOG, "--year", "2025"],
                    capture_output=True,
                    text=True,
                    env=env,
                )
                self.assertEqual(result.returncode, 1)
                self.assertIn("Error:", result.stderr)
                self.assertNotIn("Traceback", result.stderr)


if __name__ == "__main__":
    unittest.main()
