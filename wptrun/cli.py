"""
Main CLI interface for wptrun.

Provides command-line entry points for running tests, checking the
configuration and installing the page-side resources into a WPT checkout.
"""

import argparse
import shutil
import sys
from pathlib import Path
from typing import Optional, List

from . import __version__
from .app import run_application
from .core.config import Config
from .core.exceptions import WPTRunError, ValidationError
from .manifest.reader import ManifestReader


RESOURCES_DIR = Path(__file__).parent / "resources"


def load_config(args: argparse.Namespace) -> Config:
    """Build the configuration from env, an optional file, and CLI overrides."""
    config_file = getattr(args, "config", None)
    config = Config.from_file(Path(config_file)) if config_file else Config.from_env()

    if getattr(args, "wpt_dir", None):
        config.wpt_dir = Path(args.wpt_dir).expanduser()
    if getattr(args, "report", None):
        config.report_path = Path(args.report)
    if getattr(args, "headless", False):
        config.headless_mode = True
    if getattr(args, "timeout_multiplier", None) is not None:
        config.timeout_multiplier = args.timeout_multiplier
    if getattr(args, "verbose", False):
        config.log_level = "DEBUG"

    return config


def cmd_run(args: argparse.Namespace) -> int:
    """Run the tests matching the given prefixes."""
    try:
        config = load_config(args)
    except ValidationError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1

    return run_application(config, args.prefixes)


def cmd_check(args: argparse.Namespace) -> int:
    """Validate the configuration and the manifest."""
    try:
        config = load_config(args)
        config.validate()
        manifest = ManifestReader(config.manifest_path)
    except ValidationError as e:
        print("❌ Configuration validation failed:")
        for violation in e.violations or [e.message]:
            print(f"   • {violation}")
        return 1
    except WPTRunError as e:
        print(f"❌ {e.message}")
        return 1

    testharness = sum(1 for _ in manifest.testharness())
    reftests = sum(1 for _ in manifest.reftests())

    print("✅ Configuration is valid")
    print(f"   WPT directory: {config.wpt_dir}")
    print(f"   Test URL base: {config.get_test_url('/')}")
    print(f"   Manifest: {testharness} testharness test(s), {reftests} reftest(s)")
    return 0


def cmd_install_resources(args: argparse.Namespace) -> int:
    """Copy the runner's testharnessreport.js and testdriver-vendor.js into WPT."""
    config = load_config(args)
    target_dir = config.wpt_dir / "resources"

    if not target_dir.is_dir():
        print(f"❌ WPT resources directory not found: {target_dir}")
        return 1

    for resource in sorted(RESOURCES_DIR.glob("*.js")):
        target = target_dir / resource.name
        if target.exists() and not args.force:
            print(f"⚠️  {target} exists, use --force to overwrite")
            continue
        shutil.copyfile(resource, target)
        print(f"✅ Installed {target}")

    return 0


def cmd_version(args: argparse.Namespace) -> int:
    print(f"wptrun {__version__}")
    return 0


def _add_config_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="JSON file with configuration overrides")
    parser.add_argument("--wpt-dir", help="Path to the WPT checkout")


def create_main_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="wptrun",
        description="Run Web Platform Tests in Chromium",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  wptrun run dom/events
  wptrun run --wpt-dir ~/wpt --headless /css/css-flexbox
  wptrun check
  wptrun install-resources --force
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run tests")
    run_parser.add_argument(
        "prefixes",
        nargs="*",
        help="Test path prefixes to run (default: everything)",
    )
    _add_config_arguments(run_parser)
    run_parser.add_argument("--report", help="Path of the JSON report to write")
    run_parser.add_argument(
        "--headless", action="store_true", help="Run the browser headless"
    )
    run_parser.add_argument(
        "--timeout-multiplier",
        type=int,
        help="Multiplier applied to the harness timeouts",
    )
    run_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    run_parser.set_defaults(func=cmd_run)

    check_parser = subparsers.add_parser(
        "check", help="Validate configuration and manifest"
    )
    _add_config_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    install_parser = subparsers.add_parser(
        "install-resources", help="Install the page-side scripts into WPT"
    )
    _add_config_arguments(install_parser)
    install_parser.add_argument(
        "--force", action="store_true", help="Overwrite existing files"
    )
    install_parser.set_defaults(func=cmd_install_resources)

    version_parser = subparsers.add_parser("version", help="Show version information")
    version_parser.set_defaults(func=cmd_version)

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_main_parser()

    if args is None:
        args = sys.argv[1:]

    parsed_args = parser.parse_args(args)

    if not hasattr(parsed_args, "func"):
        parser.print_help()
        return 1

    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
