"""Tests for connectivity/credential state."""

import unittest
from unittest.mock import MagicMock, patch

from codepulse.log import AgentLogger
from codepulse.state import ConnectivityState, ConsoleStatus, StatusListener


class TestConnectivityState(unittest.TestCase):
    """Test cases for ConnectivityState."""

    def setUp(self):
        """Set up test fixtures."""
        self.listener = MagicMock(spec=StatusListener)
        self.on_reconnect = MagicMock()
        self.state = ConnectivityState(self.listener, on_reconnect=self.on_reconnect)

    def test_initially_optimistic(self):
        self.assertTrue(self.state.online)
        self.assertTrue(self.state.credentials_valid)

    def test_unchanged_value_is_noop(self):
        """Setting the current value does not notify."""
        self.assertFalse(self.state.set_online(True))
        self.assertFalse(self.state.set_credentials_valid(True))

        self.listener.set_online.assert_not_called()
        self.listener.set_credentials_valid.assert_not_called()
        self.on_reconnect.assert_not_called()

    def test_going_offline_notifies_once(self):
        self.assertTrue(self.state.set_online(False))
        self.assertFalse(self.state.set_online(False))

        self.listener.set_online.assert_called_once_with(False)
        self.on_reconnect.assert_not_called()

    def test_reconnect_triggers_callback(self):
        """Flipping back online fires the reconnect hook exactly once."""
        self.state.set_online(False)
        self.state.set_online(True)
        self.state.set_online(True)

        self.on_reconnect.assert_called_once()

    def test_credentials_edge_triggered(self):
        self.state.set_credentials_valid(False)
        self.state.set_credentials_valid(False)
        self.state.set_credentials_valid(True)

        self.assertEqual(self.listener.set_credentials_valid.call_count, 2)
        self.assertTrue(self.state.credentials_valid)

    def test_default_listener(self):
        state = ConnectivityState()
        self.assertTrue(state.set_online(False))


class TestConsoleStatus(unittest.TestCase):
    """Test cases for ConsoleStatus."""

    def setUp(self):
        self.status = ConsoleStatus(AgentLogger(verbose=False))

    def test_label_reflects_state(self):
        self.status.update_time(3 * 3600 + 120)
        self.assertEqual(self.status.label, "3 hrs 2 mins coding")

        self.status.set_online(False)
        self.assertIn("offline", self.status.label)

        self.status.set_credentials_valid(False)
        self.assertIn("invalid API key", self.status.label)

    def test_tracking_toggle(self):
        self.status.start_tracking()
        self.assertTrue(self.status.is_tracking)
        self.status.stop_tracking()
        self.assertFalse(self.status.is_tracking)


class TestAgentLogger(unittest.TestCase):
    """Test cases for AgentLogger helpers."""

    @patch("builtins.print")
    def test_log_heartbeat_sent(self, mock_print):
        AgentLogger(verbose=True).log_heartbeat_sent(3)

        mock_print.assert_called_once()
        self.assertIn("Heartbeat #3 sent successfully", mock_print.call_args[0][0])

    @patch("builtins.print")
    def test_log_heartbeat_sent_quiet(self, mock_print):
        AgentLogger(verbose=False).log_heartbeat_sent(3)

        mock_print.assert_not_called()


if __name__ == "__main__":
    unittest.main()
