"""
Pytest configuration and shared fixtures for wptrun tests.

Provides a fake Playwright page, temporary configuration and a sample
manifest so no test needs a real browser.
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from wptrun.core.config import Config


@pytest.fixture
def fake_page():
    """Create a mock Playwright page with an 800x600 viewport."""
    page = MagicMock()
    page.viewport_size = {"width": 800, "height": 600}

    page.mouse = MagicMock()
    page.mouse.move = AsyncMock()
    page.mouse.down = AsyncMock()
    page.mouse.up = AsyncMock()

    page.keyboard = MagicMock()
    page.keyboard.down = AsyncMock()
    page.keyboard.up = AsyncMock()

    page.goto = AsyncMock(return_value=None)
    page.evaluate = AsyncMock(return_value=None)
    page.screenshot = AsyncMock(return_value=b"\x89PNG rendered")
    page.expose_function = AsyncMock()
    page.click = AsyncMock()
    page.type = AsyncMock()
    page.close = AsyncMock()
    page.on = MagicMock()
    page.remove_listener = MagicMock()
    return page


@pytest.fixture
def sample_manifest_data():
    """Manifest items in the layout of WPT's MANIFEST.json."""
    return {
        "items": {
            "testharness": {
                "dom/events/Event-constructors.html": [
                    ["/dom/events/Event-constructors.html", {}],
                ],
                "dom/events/EventTarget-dispatch.html": [
                    ["/dom/events/EventTarget-dispatch.html", {"timeout": "long"}],
                ],
                "infrastructure/testdriver/click.html": [
                    ["/infrastructure/testdriver/click.html", {"testdriver": True}],
                ],
                "dom/nodes/Node-jsshell.any.js": [
                    ["/dom/nodes/Node-jsshell.any.js", {"jsshell": True}],
                ],
            },
            "reftest": {
                "css/css-flexbox/align-items-001.html": [
                    [
                        "/css/css-flexbox/align-items-001.html",
                        [["/css/css-flexbox/align-items-001-ref.html", "=="]],
                        {},
                    ],
                ],
                "css/css-flexbox/no-refs.html": [
                    ["/css/css-flexbox/no-refs.html", [], {}],
                ],
            },
            "manual": {},
        }
    }


@pytest.fixture
def temp_wpt_dir(tmp_path, sample_manifest_data):
    """Create a WPT checkout with a MANIFEST.json and resources directory."""
    wpt_dir = tmp_path / "wpt"
    (wpt_dir / "resources").mkdir(parents=True)
    (wpt_dir / "MANIFEST.json").write_text(json.dumps(sample_manifest_data))
    return wpt_dir


@pytest.fixture
def temp_config(tmp_path, temp_wpt_dir, monkeypatch):
    """Create a configuration pointing at temporary directories."""
    monkeypatch.delenv("CI", raising=False)
    monkeypatch.delenv("WPTRUN_HEADLESS", raising=False)

    config = Config(
        wpt_dir=temp_wpt_dir,
        logs_dir=tmp_path / "logs",
        report_path=tmp_path / "wptreport.json",
        log_level="DEBUG",
    )
    return config
