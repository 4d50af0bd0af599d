"""
Per-test lifecycle controller.

Races the page's completion signal against the external timeout and resolves
the single waiter exactly once.
"""

import asyncio
import time
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..core.logging_config import get_logger
from ..results.models import HarnessStatus, RawResult, Result


class TestController:
    """
    Owns one test's timing and completion race.

    start() arms the timeout; finish() is the only external completion path.
    Whichever happens first finalizes the Result, the other is a no-op.
    """

    __test__ = False

    def __init__(self, test: str):
        self.test = test
        self.logger = get_logger(__name__, test=test)
        self._future: Optional[asyncio.Future] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._time_start: Optional[float] = None

    @property
    def started(self) -> bool:
        return self._time_start is not None

    @property
    def finalized(self) -> bool:
        return self._future is not None and self._future.done()

    def _get_future(self) -> asyncio.Future:
        if self._future is None:
            self._future = asyncio.get_running_loop().create_future()
        return self._future

    def start(self, timeout_ms: int) -> None:
        """
        Arm the timeout and record the start time.

        Args:
            timeout_ms: Milliseconds before the test is finalized as TIMEOUT
        """
        future = self._get_future()
        if future.done():
            return
        self._time_start = time.monotonic()
        self._timer = asyncio.get_running_loop().call_later(
            timeout_ms / 1000, self._on_timeout
        )
        self.logger.debug(f"Armed {timeout_ms}ms timeout")

    def _on_timeout(self) -> None:
        self._timer = None
        future = self._get_future()
        if future.done():
            return
        self.logger.debug("Timed out waiting for completion")
        future.set_result(Result(test=self.test, status=HarnessStatus.TIMEOUT))

    def finish(
        self,
        raw: Union[RawResult, Dict[str, Any]],
        screenshot: Optional[bytes] = None,
    ) -> None:
        """
        Finalize with a page-reported result.

        A call after the test already finalized (timeout or an earlier
        finish) is dropped.

        Args:
            raw: Completion payload from the page
            screenshot: Rendered image for reftests
        """
        future = self._get_future()
        if future.done():
            self.logger.debug("Dropping completion that arrived after finalization")
            return

        self.cancel()

        duration = None
        if self._time_start is not None:
            duration = int((time.monotonic() - self._time_start) * 1000)

        try:
            result = Result.from_raw(
                self.test, raw, duration=duration, screenshot=screenshot
            )
        except PydanticValidationError as e:
            self.logger.warning(f"Malformed completion payload: {e}")
            result = Result(
                test=self.test,
                status=HarnessStatus.ERROR,
                message=f"Malformed completion payload: {e.error_count()} error(s)",
                duration=duration,
            )

        self.logger.debug(
            f"Finished with {result.status.name}",
            extra={"status": result.status.name, "duration": duration},
        )
        future.set_result(result)

    def cancel(self) -> None:
        """Disarm the timeout without finalizing."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait(self) -> Result:
        """Wait for the finalized Result."""
        return await asyncio.shield(self._get_future())
