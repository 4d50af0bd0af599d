"""
Run orchestration.

Walks the manifest, leases a page per test, picks the executor for the test
type and collects the finalized results. Testharness tests and reftests run
in separate browser instances because they use different viewport sizes.
"""

import time
from typing import Iterable, List, Optional, Type

from playwright.async_api import Error as PlaywrightError, async_playwright

from .core.config import Config
from .core.exceptions import WPTRunError
from .core.logging_config import get_logger, log_performance
from .execution.executor import Executor, RefTestExecutor, TestharnessExecutor
from .execution.page_pool import PagePool
from .manifest.reader import ManifestReader, RefTestItem, TestExtras
from .reftest.comparator import RefTestComparator
from .reporting.generator import ReportGenerator
from .results.models import HarnessStatus, Result


def normalize_prefixes(prefixes: Optional[Iterable[str]]) -> List[str]:
    """Make every prefix start with "/"; no prefixes means run everything."""
    normalized = [p if p.startswith("/") else f"/{p}" for p in prefixes or []]
    return normalized or ["/"]


def should_run(test: str, prefixes: Iterable[str]) -> bool:
    return any(test.startswith(prefix) for prefix in prefixes)


class WPTRunner:
    """
    Runs the tests of a WPT manifest in Chromium.

    One page is leased per test execution; reftests lease one page for the
    candidate and one for every reference the comparator asks for.
    """

    def __init__(
        self,
        config: Config,
        manifest: ManifestReader,
        report: Optional[ReportGenerator] = None,
        playwright_factory=async_playwright,
    ):
        """
        Initialize the runner.

        Args:
            config: wptrun configuration
            manifest: Manifest to take tests from
            report: Report generator used to log result lines
            playwright_factory: Callable returning the Playwright async
                context manager
        """
        self.config = config
        self.manifest = manifest
        self.report = report or ReportGenerator(config.report_path)
        self.playwright_factory = playwright_factory
        self.comparator = RefTestComparator()
        self.logger = get_logger(__name__)

    async def run(self, prefixes: Optional[Iterable[str]] = None) -> List[Result]:
        """
        Run every selected test.

        Args:
            prefixes: Test path prefixes to run; all tests when empty

        Returns:
            Results in execution order, testharness tests first
        """
        prefixes = normalize_prefixes(prefixes)

        testharness = [
            item
            for item in self.manifest.testharness()
            if not item.extras.jsshell and should_run(item.url, prefixes)
        ]
        reftests = [
            item
            for item in self.manifest.reftests()
            if item.references and should_run(item.url, prefixes)
        ]
        self.logger.info(
            f"Selected {len(testharness)} testharness test(s) and {len(reftests)} reftest(s)",
            extra={"metadata": {"prefixes": prefixes}},
        )

        results: List[Result] = []
        start_time = time.monotonic()

        async with self.playwright_factory() as playwright:
            if testharness:
                pool = await self._open_pool(playwright, self.config.testharness_viewport)
                try:
                    for item in testharness:
                        result = await self.run_single_test(
                            pool, TestharnessExecutor, item.url, item.extras
                        )
                        self._record(results, result)
                finally:
                    await self._close_pool(pool)

            if reftests:
                pool = await self._open_pool(playwright, self.config.reftest_viewport)
                try:
                    for item in reftests:
                        result = await self.run_reftest(pool, item)
                        self._record(results, result)
                finally:
                    await self._close_pool(pool)

        log_performance(
            self.logger,
            "run",
            (time.monotonic() - start_time) * 1000,
            tests=len(results),
        )
        return results

    def _record(self, results: List[Result], result: Result) -> None:
        results.append(result)
        self.report.log_result(result)

    async def _open_pool(self, playwright, viewport) -> PagePool:
        browser = await playwright.chromium.launch(
            headless=self.config.get_effective_headless_mode(),
            args=self.config.browser_args,
            executable_path=self.config.browser_executable,
        )
        self.logger.debug(
            f"Launched browser with {viewport[0]}x{viewport[1]} viewport"
        )
        return PagePool(browser, viewport, self.config.page_close_timeout_ms)

    async def _close_pool(self, pool: PagePool) -> None:
        await pool.close()
        await pool.browser.close()

    async def run_single_test(
        self,
        pool: PagePool,
        executor_class: Type[Executor],
        test: str,
        extras: TestExtras,
    ) -> Result:
        """
        Run one test on a freshly leased page.

        Errors raised for this test (navigation failures, transport errors)
        become an ERROR result so the run continues with the next test.
        """
        timeout_ms = self.config.get_test_timeout_ms(extras.timeout)
        url = self.config.get_test_url(test)

        async with pool.lease() as page:
            executor = executor_class(page, test, timeout_ms)
            try:
                await executor.prepare(testdriver=extras.testdriver)
                return await executor.run_test(url)
            except (WPTRunError, PlaywrightError) as e:
                self.logger.error(
                    f"Test {test} failed to run: {e}",
                    extra={"test": test, "status": HarnessStatus.ERROR.name},
                )
                return Result(test=test, status=HarnessStatus.ERROR, message=str(e))

    async def run_reftest(self, pool: PagePool, item: RefTestItem) -> Result:
        """Render a reftest and its references and decide the verdict."""
        candidate = await self.run_single_test(
            pool, RefTestExecutor, item.url, item.extras
        )

        async def render(reference_url: str) -> Result:
            return await self.run_single_test(
                pool, RefTestExecutor, reference_url, item.extras
            )

        try:
            return await self.comparator.compare(candidate, item.references, render)
        except WPTRunError as e:
            self.logger.error(f"Reftest {item.url} could not be compared: {e}")
            return candidate.with_verdict(HarnessStatus.ERROR, str(e))
