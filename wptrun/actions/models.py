"""
Pydantic models for WebDriver action-sequence payloads.

A payload is a list of ActionSequence objects, one per input source, as sent
by testdriver.js through the action-sequence binding.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SourceType(str, Enum):
    """Kind of input device an action sequence drives."""

    POINTER = "pointer"
    KEY = "key"
    NONE = "none"


class PointerType(str, Enum):
    MOUSE = "mouse"
    PEN = "pen"
    TOUCH = "touch"


class PointerParameters(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pointer_type: PointerType = Field(PointerType.MOUSE, alias="pointerType")


class PauseAction(BaseModel):
    type: Literal["pause"]
    duration: float = Field(0, ge=0, description="Milliseconds")


class KeyDownAction(BaseModel):
    type: Literal["keyDown"]
    value: str


class KeyUpAction(BaseModel):
    type: Literal["keyUp"]
    value: str


class PointerDownAction(BaseModel):
    type: Literal["pointerDown"]
    button: int


class PointerUpAction(BaseModel):
    type: Literal["pointerUp"]
    button: int


class PointerMoveAction(BaseModel):
    type: Literal["pointerMove"]
    x: float = 0
    y: float = 0
    # "viewport", "pointer", or a selector string for an element origin
    origin: Optional[str] = None
    duration: Optional[float] = Field(None, ge=0, description="Milliseconds")


class PointerCancelAction(BaseModel):
    type: Literal["pointerCancel"]


ActionItem = Annotated[
    Union[
        PauseAction,
        KeyDownAction,
        KeyUpAction,
        PointerDownAction,
        PointerUpAction,
        PointerMoveAction,
        PointerCancelAction,
    ],
    Field(discriminator="type"),
]


# Action subtypes each source type may carry
ALLOWED_ACTIONS = {
    SourceType.NONE: {"pause"},
    SourceType.KEY: {"pause", "keyDown", "keyUp"},
    SourceType.POINTER: {
        "pause",
        "pointerDown",
        "pointerUp",
        "pointerMove",
        "pointerCancel",
    },
}


class ActionSequence(BaseModel):
    """Actions of one input source."""

    model_config = ConfigDict(populate_by_name=True)

    type: SourceType
    id: str = Field(..., min_length=1)
    parameters: Optional[PointerParameters] = None
    actions: List[ActionItem] = Field(default_factory=list)


@dataclass(frozen=True)
class Source:
    """One logical input device, identified by its id within a payload."""

    id: str
    type: SourceType
    pointer_type: Optional[PointerType] = None

    @classmethod
    def from_sequence(cls, sequence: ActionSequence) -> "Source":
        pointer_type = None
        if sequence.type == SourceType.POINTER:
            parameters = sequence.parameters or PointerParameters()
            pointer_type = parameters.pointer_type
        return cls(id=sequence.id, type=sequence.type, pointer_type=pointer_type)
