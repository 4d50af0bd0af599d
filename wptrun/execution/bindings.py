"""
Host functions a test page can call by name.

Handlers are registered in a PageBindings registry and exposed onto one page.
Exposed functions do not survive page recreation, so every new page needs its
own registry installed.
"""

import inspect
from typing import Any, Callable, Dict, List, Set

from ..core.logging_config import get_logger


# Names must match resources/testharnessreport.js and testdriver-vendor.js
FINISH_BINDING = "_wptrunner_finish_"
SCREENSHOT_BINDING = "_wptrunner_screenshot_"
ACTION_SEQUENCE_BINDING = "_wptrunner_action_sequence_"
CLICK_BINDING = "_wptrunner_click_"
TYPE_BINDING = "_wptrunner_type_"


class PageBindings:
    """Registry of named inbound handlers for one page."""

    def __init__(self, test: str = ""):
        self._handlers: Dict[str, Callable[..., Any]] = {}
        self._installed: Set[str] = set()
        self.logger = get_logger(__name__, test=test)

    def register(self, name: str, handler: Callable[..., Any]) -> None:
        """
        Register a handler under a binding name.

        Raises:
            ValueError: If the name is already registered
        """
        if name in self._handlers:
            raise ValueError(f"Binding already registered: {name}")
        self._handlers[name] = handler

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    @property
    def names(self) -> List[str]:
        return list(self._handlers)

    @property
    def installed(self) -> List[str]:
        return sorted(self._installed)

    async def call(self, name: str, *args: Any) -> Any:
        """Invoke a handler by name the way the page would."""
        handler = self._handlers[name]
        self.logger.debug(f"Binding called: {name}", extra={"binding": name})
        try:
            result = handler(*args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            self.logger.warning(
                f"Binding {name} failed: {e}", extra={"binding": name}
            )
            raise
        return result

    def _make_callable(self, name: str) -> Callable[..., Any]:
        async def binding(*args: Any) -> Any:
            return await self.call(name, *args)

        return binding

    async def install(self, page) -> None:
        """Expose every registered handler not yet installed onto the page."""
        for name in self._handlers:
            if name in self._installed:
                continue
            await page.expose_function(name, self._make_callable(name))
            self._installed.add(name)
            self.logger.debug(f"Installed binding {name}", extra={"binding": name})
