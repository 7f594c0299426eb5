"""Tests for the data records."""

import unittest

from codepulse.models import DailyTotal, DocumentInfo, Heartbeat


class TestHeartbeat(unittest.TestCase):
    """Test cases for Heartbeat."""

    def test_to_dict_omits_unset_fields(self):
        """Optional fields left as None are not sent."""
        hb = Heartbeat(timestamp="2024-01-15T14:00:00.000Z", file="a.ts")

        self.assertEqual(
            hb.to_dict(), {"timestamp": "2024-01-15T14:00:00.000Z", "file": "a.ts"}
        )

    def test_from_dict_ignores_unknown_keys(self):
        """Records from newer versions with extra keys still load."""
        hb = Heartbeat.from_dict(
            {"timestamp": "t", "project": "p", "someFutureField": 1}
        )

        self.assertEqual(hb.project, "p")
        self.assertIsNone(hb.language)

    def test_from_dict_requires_timestamp(self):
        """A record without a timestamp is rejected."""
        with self.assertRaises(ValueError):
            Heartbeat.from_dict({"project": "p"})

        with self.assertRaises(ValueError):
            Heartbeat.from_dict(["not", "a", "dict"])

    def test_heartbeat_is_immutable(self):
        """Heartbeats cannot be changed after creation."""
        hb = Heartbeat(timestamp="t")
        with self.assertRaises(AttributeError):
            hb.file = "other.py"


class TestDocumentInfo(unittest.TestCase):
    """Test cases for DocumentInfo."""

    def test_file_is_basename(self):
        doc = DocumentInfo(path="/home/user/project/src/a.ts", language="typescript")
        self.assertEqual(doc.file, "a.ts")


class TestDailyTotal(unittest.TestCase):
    """Test cases for DailyTotal."""

    def test_display_is_sum(self):
        total = DailyTotal(server_acknowledged_seconds=100, unsynced_local_seconds=20)
        self.assertEqual(total.display_seconds, 120)

    def test_add_local_ignores_non_positive(self):
        total = DailyTotal()
        total.add_local(0)
        total.add_local(-5)
        total.add_local(7)
        self.assertEqual(total.unsynced_local_seconds, 7)

    def test_acknowledge_resets_unsynced(self):
        total = DailyTotal(server_acknowledged_seconds=10, unsynced_local_seconds=30)
        total.acknowledge(500)

        self.assertEqual(total.server_acknowledged_seconds, 500)
        self.assertEqual(total.unsynced_local_seconds, 0)
        self.assertEqual(total.display_seconds, 500)


if __name__ == "__main__":
    unittest.main()
