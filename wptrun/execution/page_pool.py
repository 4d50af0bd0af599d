"""
Page leasing.

Every test gets a fresh page from the pool and returns it when finalized.
A page that cannot be closed in time marks its browser context as stuck and
the context is recreated before the next lease.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Tuple

from playwright.async_api import Error as PlaywrightError

from ..core.logging_config import get_logger


class PagePool:
    """Hands out one page at a time from a browser context."""

    def __init__(
        self,
        browser,
        viewport: Tuple[int, int],
        close_timeout_ms: int = 5000,
    ):
        """
        Initialize the pool.

        Args:
            browser: Playwright browser to open contexts on
            viewport: (width, height) of every leased page
            close_timeout_ms: How long releasing a page may take before the
                context is considered stuck
        """
        self.browser = browser
        self.viewport = viewport
        self.close_timeout_ms = close_timeout_ms
        self.logger = get_logger(__name__)
        self._context = None
        self._leased = None
        self._stuck = False
        self._leases = 0

    @property
    def leases(self) -> int:
        """Number of pages handed out so far."""
        return self._leases

    async def _ensure_context(self):
        if self._context is not None and self._stuck:
            self.logger.warning("Recreating stuck browser context")
            try:
                await asyncio.wait_for(
                    self._context.close(), timeout=self.close_timeout_ms / 1000
                )
            except (asyncio.TimeoutError, PlaywrightError) as e:
                self.logger.warning(f"Failed to close stuck browser context: {e}")
            self._context = None
            self._stuck = False

        if self._context is None:
            width, height = self.viewport
            self._context = await self.browser.new_context(
                viewport={"width": width, "height": height},
                ignore_https_errors=True,
            )
        return self._context

    @asynccontextmanager
    async def lease(self) -> AsyncIterator:
        """
        Lease a fresh page for one test.

        Raises:
            RuntimeError: If a page is already leased
        """
        if self._leased is not None:
            raise RuntimeError("A page is already leased; one test per page at a time")

        context = await self._ensure_context()
        page = await context.new_page()
        self._leased = page
        self._leases += 1
        try:
            yield page
        finally:
            self._leased = None
            await self._release(page)

    async def _release(self, page) -> None:
        try:
            await asyncio.wait_for(page.close(), timeout=self.close_timeout_ms / 1000)
        except (asyncio.TimeoutError, PlaywrightError) as e:
            self.logger.warning(f"Page did not close cleanly, recycling context: {e}")
            self._stuck = True

    async def close(self) -> None:
        """Close the pool's browser context."""
        if self._context is not None:
            await self._context.close()
            self._context = None
