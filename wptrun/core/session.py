"""
Run session management for wptrun.

Handles run ID generation so that log lines and the written report of one
invocation can be correlated.
"""

import uuid
import time
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from .config import Config
from .logging_config import get_logger


@dataclass
class RunSession:
    """Context information for one runner invocation."""

    run_id: str
    start_time: float = field(default_factory=time.time)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> float:
        """Get current session duration in seconds."""
        return time.time() - self.start_time

    @property
    def start_timestamp(self) -> str:
        """Get formatted start timestamp."""
        return datetime.fromtimestamp(self.start_time).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "start_time": self.start_timestamp,
            "duration": self.duration,
            "metadata": self.metadata,
        }


class SessionManager:
    """Manages the lifetime of a run session."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config.from_env()
        self.logger = get_logger("wptrun.session")
        self._current_session: Optional[RunSession] = None

    def generate_run_id(self) -> str:
        """
        Generate a unique, chronologically sortable run ID.

        Returns:
            Identifier of the form YYYYMMDD-<16 hex chars>
        """
        suffix = uuid.uuid4().hex[:16]
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d")
        return f"{timestamp}-{suffix}"

    def start_session(self, metadata: Optional[Dict[str, Any]] = None) -> RunSession:
        """
        Start a new run session.

        Args:
            metadata: Optional metadata to associate with the run

        Returns:
            The active session
        """
        session = RunSession(run_id=self.generate_run_id(), metadata=metadata or {})
        self._current_session = session

        self.logger.info(
            f"Run started: {session.run_id}",
            extra={
                "metadata": {
                    "run_id": session.run_id,
                    "start_time": session.start_timestamp,
                    "config": self.config.to_dict(),
                    **session.metadata,
                }
            },
        )

        return session

    def end_session(self, success: bool = True, error: Optional[Exception] = None) -> None:
        """
        End the current run session.

        Args:
            success: Whether the run completed successfully
            error: Optional error that caused the run to fail
        """
        if not self._current_session:
            self.logger.warning("Attempted to end run but no run is active")
            return

        session = self._current_session
        duration = session.duration

        log_data = {
            "metadata": {
                "run_id": session.run_id,
                "duration": duration,
                "success": success,
                **session.metadata,
            }
        }

        if error:
            log_data["metadata"]["error"] = str(error)
            log_data["metadata"]["error_type"] = error.__class__.__name__

        if success:
            self.logger.info(
                f"Run completed: {session.run_id} ({duration:.2f}s)", extra=log_data
            )
        else:
            self.logger.error(
                f"Run failed: {session.run_id} ({duration:.2f}s)", extra=log_data
            )

        self._current_session = None

    @property
    def current_session(self) -> Optional[RunSession]:
        """Get the active session."""
        return self._current_session

    def update_metadata(self, **metadata) -> None:
        """Add key-value pairs to the active session's metadata."""
        if self._current_session:
            self._current_session.metadata.update(metadata)
        else:
            self.logger.warning(
                "Attempted to update run metadata but no run is active"
            )
