"""
Reference-test comparator.

Turns a candidate render and a chain of lazily rendered references into a
PASS/FAIL/TIMEOUT verdict, or ERROR when a reference cannot be rendered.
"""

from typing import Awaitable, Callable, Sequence, Tuple

from ..core.exceptions import InvalidArgumentError
from ..core.logging_config import get_logger
from ..results.models import HarnessStatus, Result, SubtestStatus


RELATIONS = ("==", "!=")

Reference = Tuple[str, str]
RenderFn = Callable[[str], Awaitable[Result]]


class RefTestComparator:
    """Evaluates a reference chain against a candidate render."""

    def __init__(self):
        self.logger = get_logger(__name__)

    async def compare(
        self,
        candidate: Result,
        references: Sequence[Reference],
        render: RenderFn,
    ) -> Result:
        """
        Decide the verdict for one reftest.

        References are rendered one at a time in chain order and evaluation
        stops at the first satisfied reference.

        Args:
            candidate: Render of the test itself
            references: (reference_url, relation) pairs, relation "==" or "!="
            render: Coroutine function rendering a reference URL

        Returns:
            The candidate carrying the verdict; the candidate unchanged when
            its own render did not succeed; an ERROR verdict when a reference
            failed to render for any reason other than a timeout
        """
        if candidate.status is not HarnessStatus.OK:
            self.logger.debug(
                f"Candidate render {candidate.status.name}, skipping references",
                extra={"test": candidate.test},
            )
            return candidate

        for _, relation in references:
            if relation not in RELATIONS:
                raise InvalidArgumentError(f"Unknown reftest relation: {relation!r}")

        candidate_hash = candidate.screenshot_hash()

        for reference_url, relation in references:
            reference = await render(reference_url)

            if reference.status is HarnessStatus.TIMEOUT:
                return candidate.with_verdict(SubtestStatus.TIMEOUT, "ref timeout")

            if reference.status is not HarnessStatus.OK:
                self.logger.warning(
                    f"Reference {reference_url} did not render: {reference.status.name}",
                    extra={"test": candidate.test},
                )
                return candidate.with_verdict(
                    HarnessStatus.ERROR,
                    f"ref {reference.status.name.lower()}: {reference.message}",
                )

            same = candidate_hash == reference.screenshot_hash()
            self.logger.debug(
                f"{candidate.test} {relation} {reference_url}: "
                f"{'identical' if same else 'different'}",
                extra={"test": candidate.test},
            )
            if (relation == "==") == same:
                return candidate.with_verdict(SubtestStatus.PASS)

        return candidate.with_verdict(SubtestStatus.FAIL)
