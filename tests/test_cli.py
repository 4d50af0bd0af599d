"""
Unit tests for main CLI interface.

Tests the run, check, install-resources and version commands.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from wptrun.cli import (
    RESOURCES_DIR,
    cmd_check,
    cmd_install_resources,
    cmd_version,
    create_main_parser,
    load_config,
    main,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CI", "WPTRUN_HEADLESS", "WPTRUN_WPT_DIR", "WPTRUN_REPORT"):
        monkeypatch.delenv(name, raising=False)


class TestParser:
    """Test cases for argument parsing."""

    def test_run_arguments(self):
        args = create_main_parser().parse_args(
            ["run", "dom/events", "/css", "--headless", "--timeout-multiplier", "3", "-v"]
        )

        assert args.command == "run"
        assert args.prefixes == ["dom/events", "/css"]
        assert args.headless is True
        assert args.timeout_multiplier == 3
        assert args.verbose is True

    def test_load_config_overrides(self, tmp_path):
        args = create_main_parser().parse_args(
            [
                "run",
                "--wpt-dir",
                str(tmp_path),
                "--report",
                str(tmp_path / "r.json"),
                "--headless",
                "--timeout-multiplier",
                "4",
                "--verbose",
            ]
        )

        config = load_config(args)

        assert config.wpt_dir == tmp_path
        assert config.report_path == tmp_path / "r.json"
        assert config.headless_mode is True
        assert config.timeout_multiplier == 4
        assert config.log_level == "DEBUG"


class TestCLICommands:
    """Test cases for CLI commands."""

    @patch("wptrun.cli.run_application", return_value=0)
    def test_cmd_run(self, mock_run):
        assert main(["run", "dom"]) == 0

        config, prefixes = mock_run.call_args.args
        assert prefixes == ["dom"]

    def test_cmd_check_valid(self, temp_wpt_dir, capsys):
        args = create_main_parser().parse_args(["check", "--wpt-dir", str(temp_wpt_dir)])

        assert cmd_check(args) == 0

        output = capsys.readouterr().out
        assert "Configuration is valid" in output
        assert "4 testharness test(s), 2 reftest(s)" in output

    def test_cmd_check_invalid(self, tmp_path, capsys):
        args = create_main_parser().parse_args(
            ["check", "--wpt-dir", str(tmp_path / "missing")]
        )

        assert cmd_check(args) == 1
        assert "WPT directory does not exist" in capsys.readouterr().out

    def test_install_resources(self, temp_wpt_dir):
        args = create_main_parser().parse_args(
            ["install-resources", "--wpt-dir", str(temp_wpt_dir)]
        )

        assert cmd_install_resources(args) == 0

        installed = sorted(p.name for p in (temp_wpt_dir / "resources").glob("*.js"))
        assert installed == ["testdriver-vendor.js", "testharnessreport.js"]

    def test_install_resources_keeps_existing_without_force(self, temp_wpt_dir):
        existing = temp_wpt_dir / "resources" / "testharnessreport.js"
        existing.write_text("// local")
        parser = create_main_parser()

        cmd_install_resources(
            parser.parse_args(["install-resources", "--wpt-dir", str(temp_wpt_dir)])
        )
        assert existing.read_text() == "// local"

        cmd_install_resources(
            parser.parse_args(
                ["install-resources", "--wpt-dir", str(temp_wpt_dir), "--force"]
            )
        )
        assert existing.read_text() == (RESOURCES_DIR / "testharnessreport.js").read_text()

    def test_install_resources_missing_dir(self, tmp_path):
        args = create_main_parser().parse_args(
            ["install-resources", "--wpt-dir", str(tmp_path / "nowhere")]
        )

        assert cmd_install_resources(args) == 1

    def test_cmd_version(self, capsys):
        assert cmd_version(None) == 0
        assert capsys.readouterr().out.strip() == "wptrun 0.1.0"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage: wptrun" in capsys.readouterr().out

    def test_resources_shipped(self):
        assert (RESOURCES_DIR / "testharnessreport.js").exists()
        assert isinstance(RESOURCES_DIR, Path)
