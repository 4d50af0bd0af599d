"""
Report writer.

Writes the wptreport.json produced at the end of a run and logs the
per-test result lines.
"""

import json
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from ..core.exceptions import FileOperationError
from ..results.models import Result


class ReportGenerator:
    """Serializes results into the JSON report."""

    def __init__(self, report_path: Union[str, Path], logger: Optional[logging.Logger] = None):
        self.report_path = Path(report_path)
        self.logger = logger or logging.getLogger(__name__)

    def log_result(self, result: Result) -> None:
        """Log the status line of a result followed by its subtests."""
        self.logger.info(
            str(result),
            extra={
                "test": result.test,
                "status": result.status.name,
                "duration": result.duration,
            },
        )
        for subtest in result.subtests:
            self.logger.info(f"  {subtest}", extra={"test": result.test})

    @staticmethod
    def summarize(results: Sequence[Result]) -> Dict[str, int]:
        """Count results by status name."""
        return dict(Counter(result.status.name for result in results))

    def write(self, results: Sequence[Result], run_id: Optional[str] = None) -> Path:
        """
        Write the report.

        Args:
            results: Finalized results in execution order
            run_id: Run identifier to correlate the report with the logs

        Returns:
            Path of the written report
        """
        report = {
            "run_id": run_id,
            "summary": self.summarize(results),
            "results": [result.to_report() for result in results],
        }

        try:
            self.report_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.report_path, "w", encoding="utf-8") as f:
                f.write(json.dumps(report, ensure_ascii=False) + "\n")
        except OSError as e:
            raise FileOperationError(
                f"Failed to write report: {e}",
                file_path=str(self.report_path),
                operation="write",
            ) from e

        self.logger.info(
            f"Report written to {self.report_path}",
            extra={"metadata": {"results": len(results), **report["summary"]}},
        )
        return self.report_path
