"""
wptrun - Web Platform Tests runner

Drives Chromium through Playwright to execute testharness.js tests and
reftests, replaying testdriver.js input through WebDriver-style action
sequences.
"""

__version__ = "0.1.0"

from .core.config import Config
from .core.exceptions import WPTRunError
from .core.logging_config import setup_logging
from .results.models import HarnessStatus, SubtestStatus, Result

__all__ = [
    "Config",
    "WPTRunError",
    "setup_logging",
    "HarnessStatus",
    "SubtestStatus",
    "Result",
]
