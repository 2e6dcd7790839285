"""Input event and annotation contracts."""

from __future__ import annotations

from typing import Annotated, Literal, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

Button = Literal["left", "right", "middle", "x1", "x2"]
BUTTONS: tuple[str, ...] = get_args(Button)

EventType = Literal["key_down", "key_up", "mouse_move", "mouse_wheel", "mouse_button"]


class _TimestampedRecord(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    qpc_ts: int


class KeyDown(_TimestampedRecord):
    type: Literal["key_down"] = "key_down"
    key: str = Field(min_length=1)


class KeyUp(_TimestampedRecord):
    type: Literal["key_up"] = "key_up"
    key: str = Field(min_length=1)


class MouseMove(_TimestampedRecord):
    type: Literal["mouse_move"] = "mouse_move"
    dx: int
    dy: int


class MouseWheel(_TimestampedRecord):
    type: Literal["mouse_wheel"] = "mouse_wheel"
    delta: int


class MouseButton(_TimestampedRecord):
    type: Literal["mouse_button"] = "mouse_button"
    button: Button
    is_down: bool


InputEvent = Annotated[
    Union[KeyDown, KeyUp, MouseMove, MouseWheel, MouseButton],
    Field(discriminator="type"),
]

EVENT_ADAPTER: TypeAdapter[InputEvent] = TypeAdapter(InputEvent)


class ThoughtAnnotation(_TimestampedRecord):
    """Free-text annotation recorded alongside the input stream."""

    text: str


def event_to_wire(event: InputEvent) -> dict:
    """Return the event in its documented line schema."""

    return event.model_dump(mode="json")
