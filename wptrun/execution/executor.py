"""
Test executors.

An executor composes a TestController with page navigation. The testharness
variant waits for testharness.js to report through the finish binding; the
reftest variant waits for the page to become visually ready and finalizes
with a screenshot.
"""

import asyncio
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from playwright.async_api import Error as PlaywrightError

from ..actions.dispatcher import Actions
from ..core.exceptions import NavigationError
from ..core.logging_config import get_logger
from ..results.models import HarnessStatus, RawResult, Result
from .bindings import (
    ACTION_SEQUENCE_BINDING,
    CLICK_BINDING,
    FINISH_BINDING,
    SCREENSHOT_BINDING,
    TYPE_BINDING,
    PageBindings,
)
from .controller import TestController


class ExecutorState(Enum):
    """Lifecycle of one executor run."""

    IDLE = "idle"
    ARMED = "armed"
    NAVIGATING = "navigating"
    AWAITING_SIGNAL = "awaiting-signal"
    FINALIZED = "finalized"


class Executor(ABC):
    """
    Runs one test on one page.

    Bindings must be installed before run_test() so that requests the page
    makes while loading find their handlers.
    """

    def __init__(self, page, test: str, timeout_ms: int):
        """
        Initialize the executor.

        Args:
            page: Playwright page exclusively owned by this executor
            test: Test identifier, typically the URL path
            timeout_ms: External timeout for the whole test
        """
        self.page = page
        self.test = test
        self.timeout_ms = timeout_ms
        self.controller = TestController(test)
        self.bindings = PageBindings(test)
        self.state = ExecutorState.IDLE
        self.logger = get_logger(__name__, test=test)

    async def install_bindings(self) -> None:
        """Install the variant's completion binding."""
        await self.bindings.install(self.page)

    async def install_testdriver_bindings(self) -> None:
        """Install the testdriver.js endpoints backed by the action dispatcher."""
        self.bindings.register(ACTION_SEQUENCE_BINDING, self.action_sequence)
        self.bindings.register(CLICK_BINDING, self.click)
        self.bindings.register(TYPE_BINDING, self.send_keys)
        await self.bindings.install(self.page)

    async def prepare(self, testdriver: bool = False) -> None:
        """Install every binding the test needs."""
        await self.install_bindings()
        if testdriver:
            await self.install_testdriver_bindings()

    async def action_sequence(self, payload: List[Dict[str, Any]]) -> None:
        actions = Actions(payload)
        actions.process()
        await actions.dispatch(self.page)

    async def click(self, selector: str) -> None:
        await self.page.click(selector)

    async def send_keys(self, selector: str, keys: str) -> None:
        await self.page.type(selector, keys)

    @abstractmethod
    async def run_test(self, url: str) -> Result:
        """Run the test at url on the page and return its finalized Result."""

    def _on_crash(self, page) -> None:
        self.logger.error("Page crashed")
        self.controller.finish(
            RawResult(status=HarnessStatus.CRASH, message="page crashed")
        )

    async def _navigate(
        self, url: str, after_load: Optional[Callable[[], Awaitable[None]]] = None
    ) -> None:
        self.state = ExecutorState.NAVIGATING
        self.logger.debug(f"Navigating to {url}")
        await self.page.goto(url, timeout=self.timeout_ms)
        if after_load is not None:
            await after_load()

    async def _run(
        self, url: str, after_load: Optional[Callable[[], Awaitable[None]]] = None
    ) -> Result:
        """
        Arm the timeout, navigate and wait for finalization.

        Raises:
            NavigationError: If navigation fails before the test finalized
        """
        self.page.on("crash", self._on_crash)
        self.controller.start(self.timeout_ms)
        self.state = ExecutorState.ARMED

        navigation = asyncio.ensure_future(self._navigate(url, after_load))
        completion = asyncio.ensure_future(self.controller.wait())

        try:
            await asyncio.wait(
                {navigation, completion}, return_when=asyncio.FIRST_COMPLETED
            )
            if not completion.done():
                error = navigation.exception()
                if error is not None:
                    self.controller.cancel()
                    self.state = ExecutorState.FINALIZED
                    raise NavigationError(
                        f"Navigation to {url} failed: {error}",
                        url=url,
                        test_name=self.test,
                    ) from error
                self.state = ExecutorState.AWAITING_SIGNAL
            result = await completion
        finally:
            if not navigation.done():
                navigation.cancel()
            elif not navigation.cancelled() and navigation.exception() is not None:
                self.logger.debug(
                    f"Navigation error after finalization: {navigation.exception()}"
                )
            if not completion.done():
                completion.cancel()
            self.page.remove_listener("crash", self._on_crash)

        self.state = ExecutorState.FINALIZED
        return result


class TestharnessExecutor(Executor):
    """Executor for testharness.js tests."""

    __test__ = False

    async def install_bindings(self) -> None:
        self.bindings.register(FINISH_BINDING, self.finish)
        await super().install_bindings()

    def finish(self, payload: Union[RawResult, Dict[str, Any]]) -> None:
        self.controller.finish(payload)

    async def run_test(self, url: str) -> Result:
        return await self._run(url)


class RefTestExecutor(Executor):
    """Executor that renders a page and finalizes with its screenshot."""

    # Executed in browser context. Requests the screenshot once the document
    # has loaded, the root element lost its reftest-wait class and fonts
    # are ready.
    WAIT_FOR_SCREENSHOT_JS = """
    () => {
      const root = document.documentElement;
      let requested = false;
      const rootWait = () => {
        if (requested || root.classList.contains("reftest-wait")) {
          return;
        }
        requested = true;
        observer.disconnect();
        if (document.fonts) {
          document.fonts.ready.then(() => window._wptrunner_screenshot_());
        } else {
          window._wptrunner_screenshot_();
        }
      };
      const observer = new MutationObserver(rootWait);
      observer.observe(root, {attributes: true});
      if (document.readyState !== "complete") {
        window.addEventListener("load", rootWait);
      } else {
        rootWait();
      }
    }
    """

    async def install_bindings(self) -> None:
        self.bindings.register(SCREENSHOT_BINDING, self.screenshot)
        await super().install_bindings()

    async def screenshot(self) -> None:
        """Capture the rendered page and finalize with it."""
        if self.controller.finalized:
            return
        try:
            image = await self.page.screenshot()
        except PlaywrightError as e:
            self.logger.warning(f"Screenshot capture failed: {e}")
            self.controller.finish(
                RawResult(status=HarnessStatus.ERROR, message=f"screenshot failed: {e}")
            )
            return
        self.controller.finish(RawResult(status=HarnessStatus.OK), screenshot=image)

    async def _wait_for_screenshot(self) -> None:
        await self.page.evaluate(self.WAIT_FOR_SCREENSHOT_JS)

    async def run_test(self, url: str) -> Result:
        return await self._run(url, after_load=self._wait_for_screenshot)
