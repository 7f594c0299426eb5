"""Tests for heartbeat emission rules."""

import shutil
import tempfile
import unittest
from unittest.mock import MagicMock

from conftest import FakeClock

from codepulse.activity_monitor import ActivityMonitor
from codepulse.config import Config
from codepulse.emitter import HeartbeatEmitter
from codepulse.models import DailyTotal
from codepulse.state import StatusListener


class TestHeartbeatEmitter(unittest.TestCase):
    """Test cases for HeartbeatEmitter class."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config = Config(config_dir=self.temp_dir)
        self.config.api_key = "key"
        self.config.base_url = "https://ziit.example"

        self.clock = FakeClock()
        self.status = MagicMock(spec=StatusListener)
        self.monitor = ActivityMonitor(DailyTotal(), status=self.status, clock=self.clock)
        self.emitter = HeartbeatEmitter(
            self.config,
            self.monitor,
            project_resolver=lambda doc: "my-project",
            branch_resolver=lambda doc: "main",
            status=self.status,
            clock=self.clock,
        )

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_no_document_no_heartbeat(self):
        self.assertIsNone(self.emitter.evaluate(force=True))

    def test_builds_full_heartbeat(self):
        """Heartbeat carries document, project, branch and host identifiers."""
        self.monitor.set_active_document("/work/my-project/src/a.ts", "typescript")

        hb = self.emitter.evaluate()

        self.assertEqual(hb.file, "a.ts")
        self.assertEqual(hb.language, "typescript")
        self.assertEqual(hb.project, "my-project")
        self.assertEqual(hb.branch, "main")
        self.assertEqual(hb.editor, "codepulse")
        self.assertIsNotNone(hb.os)
        self.assertTrue(hb.timestamp.endswith("Z"))
        self.assertEqual(self.emitter.heartbeat_count, 1)

    def test_same_file_within_interval_is_skipped(self):
        self.monitor.set_active_document("/work/a.ts", "typescript")
        self.assertIsNotNone(self.emitter.evaluate())

        self.clock.advance(30)

        self.assertIsNone(self.emitter.evaluate())

    def test_file_change_sends_within_interval(self):
        self.monitor.set_active_document("/work/a.ts", "typescript")
        self.emitter.evaluate()
        self.clock.advance(5)
        self.monitor.set_active_document("/work/b.ts", "typescript")

        hb = self.emitter.evaluate()

        self.assertEqual(hb.file, "b.ts")

    def test_interval_elapsed_sends_same_file(self):
        self.monitor.set_active_document("/work/a.ts", "typescript")
        self.emitter.evaluate()
        self.clock.advance(120)

        self.assertIsNotNone(self.emitter.evaluate())

    def test_forced_bypasses_interval(self):
        self.monitor.set_active_document("/work/a.ts", "typescript")
        self.emitter.evaluate()
        self.clock.advance(1)

        self.assertIsNotNone(self.emitter.evaluate(force=True))

    def test_timer_requires_effective_activity(self):
        """Timer tick skips and reports not tracking when the user is idle."""
        self.monitor.set_active_document("/work/a.ts", "typescript")
        self.clock.advance(16 * 60)

        self.assertIsNone(self.emitter.evaluate_timer())
        self.status.stop_tracking.assert_called()

    def test_timer_sends_when_active(self):
        self.monitor.set_active_document("/work/a.ts", "typescript")
        self.emitter.evaluate()
        self.clock.advance(60)
        self.monitor.record_interaction()

        self.assertIsNotNone(self.emitter.evaluate_timer())

    def test_timer_without_document(self):
        self.assertIsNone(self.emitter.evaluate_timer())

    def test_disabled_tracking_skips(self):
        self.config.enabled = False
        self.monitor.set_active_document("/work/a.ts", "typescript")

        self.assertIsNone(self.emitter.evaluate(force=True))

    def test_missing_credentials_skip_silently(self):
        self.monitor.set_active_document("/work/a.ts", "typescript")

        self.config.api_key = ""
        self.assertIsNone(self.emitter.evaluate(force=True))

        self.config.api_key = "key"
        self.config.base_url = ""
        self.assertIsNone(self.emitter.evaluate(force=True))

    def test_unresolvable_project_skips(self):
        self.emitter.project_resolver = lambda doc: None
        self.monitor.set_active_document("/tmp/scratch.txt", "plaintext")

        self.assertIsNone(self.emitter.evaluate(force=True))
        self.assertEqual(self.emitter.heartbeat_count, 0)

    def test_timestamps_never_decrease(self):
        """A backwards clock step does not produce an older timestamp."""
        self.monitor.set_active_document("/work/a.ts", "typescript")
        first = self.emitter.evaluate(force=True)

        self.clock.advance(-30)
        second = self.emitter.evaluate(force=True)

        self.assertGreaterEqual(second.timestamp, first.timestamp)


if __name__ == "__main__":
    unittest.main()
