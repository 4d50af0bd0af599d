"""
Synthetic input dispatcher.

Replays a WebDriver action-sequence payload against a live Playwright page.
Processing validates the payload and groups its actions into ticks without
touching the page; dispatching then performs one tick at a time, running the
actions of a tick concurrently.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from ..core.exceptions import (
    InvalidArgumentError,
    MoveTargetOutOfBoundsError,
    UnsupportedOperationError,
)
from ..core.logging_config import get_logger
from .models import (
    ALLOWED_ACTIONS,
    ActionItem,
    ActionSequence,
    KeyDownAction,
    KeyUpAction,
    PauseAction,
    PointerCancelAction,
    PointerDownAction,
    PointerMoveAction,
    PointerType,
    PointerUpAction,
    Source,
    SourceType,
)


# WebDriver button ids to Playwright button names. Only mouse buttons.
BUTTONS = {0: "left", 1: "middle", 2: "right"}

# Executed in browser context: in-view center point of an element's first
# client rect, clipped to the viewport.
ELEMENT_CENTER_JS = """
(selector) => {
  const element = document.querySelector(selector);
  if (element === null) {
    return null;
  }
  const rects = element.getClientRects();
  if (rects.length === 0) {
    return [-1, -1];
  }
  const rect = rects[0];
  const left = Math.max(0, Math.min(rect.x, rect.x + rect.width));
  const right = Math.min(window.innerWidth, Math.max(rect.x, rect.x + rect.width));
  const top = Math.max(0, Math.min(rect.y, rect.y + rect.height));
  const bottom = Math.min(window.innerHeight, Math.max(rect.y, rect.y + rect.height));
  return [Math.floor((left + right) / 2), Math.floor((top + bottom) / 2)];
}
"""

VIEWPORT_SIZE_JS = "() => [window.innerWidth, window.innerHeight]"

_payload_adapter = TypeAdapter(List[ActionSequence])

Tick = List[Tuple[Source, ActionItem]]


class Actions:
    """
    One action-sequence payload bound for a page.

    Call process() to validate the payload and build the tick table, then
    dispatch(page) to perform it.
    """

    def __init__(self, payload: Sequence[Union[ActionSequence, Dict[str, Any]]]):
        self.payload = payload
        self.sources: Dict[str, Source] = {}
        self.ticks: List[Tick] = []
        self._processed = False
        self.logger = get_logger(__name__)

    def process(self) -> List[Tick]:
        """
        Validate the payload and organize its actions by tick.

        Returns:
            Tick table: tick index to the (source, action) pairs of that tick

        Raises:
            InvalidArgumentError: If the payload is malformed, an action does
                not belong to its source type, or two sequences share an id
                but describe different sources
        """
        sequences = self._parse_payload()

        sources: Dict[str, Source] = {}
        columns: List[Tuple[Source, List[ActionItem]]] = []

        for sequence in sequences:
            source = Source.from_sequence(sequence)
            existing = sources.get(source.id)
            if existing is not None and existing != source:
                raise InvalidArgumentError(
                    f"Source {source.id!r} redefined with a different type or parameters",
                    source_id=source.id,
                )
            sources[source.id] = source

            allowed = ALLOWED_ACTIONS[source.type]
            for action in sequence.actions:
                if action.type not in allowed:
                    raise InvalidArgumentError(
                        f"Action {action.type!r} is not valid for a {source.type.value} source",
                        source_id=source.id,
                    )

            columns.append((source, list(sequence.actions)))

        tick_count = max((len(actions) for _, actions in columns), default=0)
        ticks: List[Tick] = [[] for _ in range(tick_count)]
        for source, actions in columns:
            for index, action in enumerate(actions):
                ticks[index].append((source, action))

        self.sources = sources
        self.ticks = ticks
        self._processed = True
        return ticks

    def _parse_payload(self) -> List[ActionSequence]:
        try:
            return _payload_adapter.validate_python(
                [
                    s.model_dump(by_alias=True) if isinstance(s, ActionSequence) else s
                    for s in self.payload
                ]
            )
        except PydanticValidationError as e:
            violations = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise InvalidArgumentError(
                "Malformed action sequence payload", violations=violations
            ) from e
        except TypeError as e:
            raise InvalidArgumentError(f"Malformed action sequence payload: {e}") from e

    async def dispatch(self, page) -> None:
        """
        Perform every tick in order against the page.

        All actions of a tick run concurrently and the next tick starts only
        after every one of them has settled. The first rejected action fails
        the dispatch; its siblings are left to finish on their own.

        Args:
            page: Playwright page to drive
        """
        if not self._processed:
            self.process()

        for index, tick in enumerate(self.ticks):
            self.logger.debug(
                f"Dispatching tick {index} with {len(tick)} action(s)",
                extra={"tick": index},
            )
            await asyncio.gather(
                *(self.dispatch_action(page, source, action) for source, action in tick)
            )

    async def dispatch_action(self, page, source: Source, action: ActionItem) -> None:
        """Perform a single action for a source."""
        if isinstance(action, PauseAction):
            await self._pause(action.duration)
            return

        if isinstance(action, KeyDownAction):
            await page.keyboard.down(action.value)
            return

        if isinstance(action, KeyUpAction):
            await page.keyboard.up(action.value)
            return

        # Everything else is a pointer action
        if source.pointer_type != PointerType.MOUSE:
            raise UnsupportedOperationError(
                f"Unsupported pointer type: {source.pointer_type.value if source.pointer_type else None}",
                action_type=action.type,
                source_id=source.id,
            )

        if isinstance(action, PointerDownAction):
            await page.mouse.down(button=self._button_name(action, source))
        elif isinstance(action, PointerUpAction):
            await page.mouse.up(button=self._button_name(action, source))
        elif isinstance(action, PointerMoveAction):
            await self._pointer_move(page, source, action)
        elif isinstance(action, PointerCancelAction):
            raise UnsupportedOperationError(
                "pointerCancel is not implemented",
                action_type=action.type,
                source_id=source.id,
            )

    @staticmethod
    async def _pause(duration: float) -> None:
        await asyncio.sleep(duration / 1000)

    @staticmethod
    def _button_name(action: Union[PointerDownAction, PointerUpAction], source: Source) -> str:
        try:
            return BUTTONS[action.button]
        except KeyError:
            raise UnsupportedOperationError(
                f"unsupported button: {action.button}",
                action_type=action.type,
                source_id=source.id,
            ) from None

    async def _pointer_move(self, page, source: Source, action: PointerMoveAction) -> None:
        width, height = await self.get_viewport_size(page)
        origin = await self.resolve_origin(page, source, action.origin)
        target = (origin[0] + action.x, origin[1] + action.y)

        for point in (origin, target):
            if not (0 <= point[0] <= width and 0 <= point[1] <= height):
                raise MoveTargetOutOfBoundsError(
                    f"Pointer move to {point} is out of bounds of the {width}x{height} viewport",
                    point=point,
                    viewport=(width, height),
                )

        if action.duration:
            await asyncio.gather(
                page.mouse.move(target[0], target[1]),
                self._pause(action.duration),
            )
        else:
            await page.mouse.move(target[0], target[1])

    async def resolve_origin(
        self, page, source: Source, origin: Optional[str]
    ) -> Tuple[int, int]:
        """
        Resolve a pointerMove origin to viewport coordinates.

        Args:
            page: Playwright page
            source: Source performing the move
            origin: "viewport", "pointer", None, or an element selector

        Returns:
            (x, y); (-1, -1) for an element with no client rect
        """
        if origin is None or origin == "viewport":
            return (0, 0)

        if origin == "pointer":
            raise UnsupportedOperationError(
                "Pointer-relative origin is not implemented",
                action_type="pointerMove",
                source_id=source.id,
            )

        point = await page.evaluate(ELEMENT_CENTER_JS, origin)
        if point is None:
            raise InvalidArgumentError(
                f"No element matches origin selector {origin!r}", source_id=source.id
            )
        return (int(point[0]), int(point[1]))

    @staticmethod
    async def get_viewport_size(page) -> Tuple[int, int]:
        """Get the page's viewport size, asking the page when it has none fixed."""
        size = page.viewport_size
        if size:
            return (size["width"], size["height"])
        width, height = await page.evaluate(VIEWPORT_SIZE_JS)
        return (int(width), int(height))
