"""
wptrun application entry point.

Sets up the run session and logging, runs the selected tests and writes the
report.
"""

import asyncio
import sys
import traceback
from typing import List, Optional

from .core.config import Config
from .core.exceptions import WPTRunError, ValidationError
from .core.logging_config import setup_logging, get_logger
from .core.session import SessionManager
from .manifest.reader import ManifestReader
from .reporting.generator import ReportGenerator
from .runner import WPTRunner


def run_application(config: Config, prefixes: Optional[List[str]] = None) -> int:
    """
    Run the tests selected by prefixes and write the report.

    Args:
        config: wptrun configuration
        prefixes: Test path prefixes; everything when empty

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    session_manager = SessionManager(config)
    session = session_manager.start_session({"prefixes": prefixes or []})
    setup_logging(config, session.run_id)
    logger = get_logger("wptrun.main", run_id=session.run_id)

    try:
        config.validate()

        manifest = ManifestReader(config.manifest_path)
        report = ReportGenerator(config.report_path)
        runner = WPTRunner(config, manifest, report=report)

        logger.info(
            "wptrun starting up", extra={"metadata": {"config": config.to_dict()}}
        )
        results = asyncio.run(runner.run(prefixes))

        report.write(results, run_id=session.run_id)
        session_manager.update_metadata(results=len(results))
        session_manager.end_session(success=True)
        return 0

    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e.message}",
            extra={"metadata": e.to_dict()},
        )
        session_manager.end_session(success=False, error=e)
        return 1

    except WPTRunError as e:
        logger.error(f"wptrun error: {e.message}", extra={"metadata": e.to_dict()})
        session_manager.end_session(success=False, error=e)
        return 1

    except Exception as e:
        logger.error(
            f"Unexpected error: {str(e)}",
            extra={
                "metadata": {
                    "error_type": e.__class__.__name__,
                    "traceback": traceback.format_exc(),
                }
            },
        )
        session_manager.end_session(success=False, error=e)
        return 1


def main() -> int:
    """Run with configuration from the environment and prefixes from argv."""
    return run_application(Config.from_env(), sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
