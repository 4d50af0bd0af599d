"""
Configuration management for wptrun.

Handles environment variables, defaults, and configuration validation
for the runner, the browser launch and the per-test timeouts.
"""

import json
import os
from typing import Optional, Dict, Any, List, Tuple
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_BROWSER_ARGS = [
    "--enable-experimental-web-platform-features",
    "--autoplay-policy=no-user-gesture-required",
    "--use-fake-ui-for-media-stream",
    "--use-fake-device-for-media-stream",
    # Without this, serviceworker tests still fail because of HTTPS errors.
    "--ignore-certificate-errors",
]


@dataclass
class Config:
    """Configuration class for wptrun with environment variable support."""

    # Environment detection
    ci_mode: bool = field(default=False)

    # Browser settings
    headless_mode: Optional[bool] = field(default=None)
    browser_executable: Optional[str] = field(default=None)
    browser_args: List[str] = field(default_factory=lambda: list(DEFAULT_BROWSER_ARGS))
    testharness_viewport: Tuple[int, int] = field(default=(800, 600))
    # Reftests use a different viewport size.
    reftest_viewport: Tuple[int, int] = field(default=(600, 600))
    page_close_timeout_ms: int = field(default=5000)

    # WPT server
    wpt_dir: Path = field(default_factory=lambda: Path.home() / "github" / "wpt")
    host: str = field(default="web-platform.test")
    http_port: int = field(default=8000)
    https_port: int = field(default=8443)

    # Timeouts in milliseconds
    timeout_multiplier: int = field(default=2)
    harness_timeouts: Dict[str, int] = field(
        default_factory=lambda: {"long": 60000, "normal": 10000}
    )

    # Logging configuration
    log_level: str = field(default="INFO")
    log_format: str = field(default="text")

    # Output paths
    report_path: Path = field(default_factory=lambda: Path.cwd() / "wptreport.json")
    logs_dir: Path = field(default_factory=lambda: Path.cwd() / "logs")

    def __post_init__(self):
        """Post-initialization validation and setup."""
        ci_env = os.getenv("CI", "").lower() == "true"
        if ci_env and self.ci_mode is False:
            self.ci_mode = True

        headless_env = os.getenv("WPTRUN_HEADLESS")
        if headless_env is not None:
            self.headless_mode = headless_env.lower() == "true"

        valid_log_levels = ["DEBUG", "INFO", "WARN", "ERROR"]
        if self.log_level.upper() not in valid_log_levels:
            self.log_level = "INFO"
        else:
            self.log_level = self.log_level.upper()

        # JSON logs in CI unless explicitly set otherwise
        if self.ci_mode and self.log_format == "text":
            self.log_format = "json"

        self.wpt_dir = Path(self.wpt_dir).expanduser()
        self.report_path = Path(self.report_path)
        self.logs_dir = Path(self.logs_dir)

    @property
    def is_ci_mode(self) -> bool:
        """Check if running in CI environment."""
        return self.ci_mode

    @property
    def debug_enabled(self) -> bool:
        """Check if debug logging is enabled."""
        return self.log_level == "DEBUG"

    @property
    def manifest_path(self) -> Path:
        """Path of the MANIFEST.json inside the WPT checkout."""
        return self.wpt_dir / "MANIFEST.json"

    def get_log_file_path(self) -> Path:
        """Get the main log file path."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        return self.logs_dir / "wptrun.log"

    def get_effective_headless_mode(self) -> bool:
        """Get effective headless mode based on CI and override settings."""
        if self.headless_mode is not None:
            return self.headless_mode
        return self.ci_mode

    def get_test_timeout_ms(self, timeout: Optional[str] = None) -> int:
        """
        Get the external timeout for a test.

        Args:
            timeout: Manifest timeout class ("long" or "normal")

        Returns:
            Timeout in milliseconds, harness timeout times the multiplier
        """
        harness_timeout = self.harness_timeouts[timeout or "normal"]
        return self.timeout_multiplier * harness_timeout

    def get_test_url(self, test: str) -> str:
        """Build the URL the WPT server serves a test path under."""
        if test == "about:blank":
            return test
        use_https = ".https." in test or ".serviceworker." in test
        if use_https:
            return f"https://{self.host}:{self.https_port}{test}"
        return f"http://{self.host}:{self.http_port}{test}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for logging."""
        return {
            "ci_mode": self.ci_mode,
            "headless_mode": self.headless_mode,
            "browser_executable": self.browser_executable,
            "wpt_dir": str(self.wpt_dir),
            "host": self.host,
            "http_port": self.http_port,
            "https_port": self.https_port,
            "timeout_multiplier": self.timeout_multiplier,
            "log_level": self.log_level,
            "log_format": self.log_format,
            "report_path": str(self.report_path),
            "logs_dir": str(self.logs_dir),
        }

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        ci = os.getenv("CI", "").lower() == "true"
        headless_env = os.getenv("WPTRUN_HEADLESS")
        headless = headless_env.lower() == "true" if headless_env is not None else None
        log_level = os.getenv("WPTRUN_LOG_LEVEL", "INFO").upper()
        log_format = "json" if ci else "text"
        wpt_dir = os.getenv("WPTRUN_WPT_DIR")
        report = os.getenv("WPTRUN_REPORT")

        try:
            multiplier = int(os.getenv("WPTRUN_TIMEOUT_MULTIPLIER", "2"))
        except ValueError:
            multiplier = 2

        kwargs: Dict[str, Any] = dict(
            ci_mode=ci,
            headless_mode=headless,
            browser_executable=os.getenv("WPTRUN_BROWSER"),
            log_level=log_level,
            log_format=log_format,
            timeout_multiplier=multiplier,
        )
        if wpt_dir:
            kwargs["wpt_dir"] = Path(wpt_dir)
        if report:
            kwargs["report_path"] = Path(report)

        return cls(**kwargs)

    @classmethod
    def from_file(cls, config_file_path: Path) -> "Config":
        """
        Load configuration from the environment, then apply a JSON file on top.

        Args:
            config_file_path: Path to a JSON object of Config field overrides

        Returns:
            Merged configuration
        """
        from .exceptions import ValidationError

        config = cls.from_env()

        try:
            with open(config_file_path, "r", encoding="utf-8") as f:
                file_config = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise ValidationError(
                f"Could not load config file {config_file_path}: {e}",
                validation_type="config_file",
            ) from e

        for key, value in file_config.items():
            if not hasattr(config, key):
                continue
            if key.endswith("_dir") or key.endswith("_path"):
                value = Path(value).expanduser()
            elif key.endswith("_viewport"):
                value = tuple(value)
            setattr(config, key, value)

        return config

    def validate(self) -> None:
        """Validate configuration and raise ValidationError if invalid."""
        from .exceptions import ValidationError

        errors = []

        valid_log_levels = ["DEBUG", "INFO", "WARN", "ERROR"]
        if self.log_level not in valid_log_levels:
            errors.append(
                f"Invalid log level: {self.log_level}. Must be one of {valid_log_levels}"
            )

        if self.log_format not in ("text", "json"):
            errors.append(f"Invalid log format: {self.log_format}")

        if self.timeout_multiplier < 1:
            errors.append(
                f"Timeout multiplier must be at least 1, got {self.timeout_multiplier}"
            )

        for name in ("long", "normal"):
            if name not in self.harness_timeouts:
                errors.append(f"Missing harness timeout: {name}")

        for name in ("testharness_viewport", "reftest_viewport"):
            width, height = getattr(self, name)
            if width <= 0 or height <= 0:
                errors.append(f"Invalid {name}: {width}x{height}")

        if not self.wpt_dir.exists():
            errors.append(f"WPT directory does not exist: {self.wpt_dir}")
        elif not self.manifest_path.exists():
            errors.append(f"WPT manifest not found: {self.manifest_path}")

        if errors:
            message = "Configuration validation failed: " + "; ".join(errors)
            raise ValidationError(
                message,
                validation_type="config",
                violations=errors,
            )
