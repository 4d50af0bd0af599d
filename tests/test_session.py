"""
Unit tests for run session management.
"""

import re
import time

import pytest

from wptrun.core.session import RunSession, SessionManager


class TestRunSession:
    """Test cases for RunSession."""

    def test_to_dict(self):
        session = RunSession(run_id="20260101-abc", metadata={"tests": 2})

        data = session.to_dict()

        assert data["run_id"] == "20260101-abc"
        assert data["metadata"] == {"tests": 2}
        assert data["duration"] >= 0

    def test_duration_grows(self):
        session = RunSession(run_id="r", start_time=time.time() - 5)

        assert session.duration >= 5


class TestSessionManager:
    """Test cases for SessionManager."""

    def test_run_id_format(self, temp_config):
        manager = SessionManager(temp_config)

        run_id = manager.generate_run_id()

        assert re.fullmatch(r"\d{8}-[0-9a-f]{16}", run_id)
        assert run_id != manager.generate_run_id()

    def test_session_lifecycle(self, temp_config):
        manager = SessionManager(temp_config)

        session = manager.start_session({"prefixes": ["/dom"]})
        manager.update_metadata(tests=3)

        assert manager.current_session is session
        assert session.metadata == {"prefixes": ["/dom"], "tests": 3}

        manager.end_session(success=True)

        assert manager.current_session is None

    def test_failed_session_logs_error(self, temp_config, caplog):
        manager = SessionManager(temp_config)
        manager.start_session()

        with caplog.at_level("ERROR", logger="wptrun.session"):
            manager.end_session(success=False, error=RuntimeError("boom"))

        record = caplog.records[-1]
        assert record.metadata["error"] == "boom"
        assert record.metadata["error_type"] == "RuntimeError"

    def test_end_without_session_warns(self, temp_config, caplog):
        manager = SessionManager(temp_config)

        with caplog.at_level("WARNING", logger="wptrun.session"):
            manager.end_session()

        assert "no run is active" in caplog.text
