"""Roll messages handed to the host for display.

The rules engine never renders anything itself. It packs each result into a
``RollMessage`` and gives it to a ``RollSink``; the host decides how to show
it. Visibility follows the host's roll modes: GM and blind rolls whisper to
the GM, self rolls whisper to the roller.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, Literal, Protocol

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

MessageKind = Literal["roll", "evasion", "damage", "empty_clip"]


class Visibility(str, Enum):
    PUBLIC = "public"
    GM = "gm"
    SELF = "self"


_ROLL_MODE_ALIASES: dict[str, Visibility] = {
    "public": Visibility.PUBLIC,
    "publicroll": Visibility.PUBLIC,
    "roll": Visibility.PUBLIC,
    "gm": Visibility.GM,
    "gmroll": Visibility.GM,
    "blindroll": Visibility.GM,
    "private-to-gm": Visibility.GM,
    "self": Visibility.SELF,
    "selfroll": Visibility.SELF,
    "private-to-self": Visibility.SELF,
}


def normalize_visibility(mode: str | Visibility | None) -> Visibility:
    if isinstance(mode, Visibility):
        return mode
    key = (mode or "public").strip().lower()
    vis = _ROLL_MODE_ALIASES.get(key)
    if vis is None:
        log.warning("dispatch.visibility.unrecognized", mode=mode)
        return Visibility.PUBLIC
    return vis


class RollMessage(BaseModel):
    kind: MessageKind
    visibility: Visibility = Visibility.PUBLIC
    name: str = ""
    item_id: str | None = None
    owner_id: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = dict(extra="forbid", frozen=True)

    @property
    def whisper(self) -> Literal["gm", "self"] | None:
        if self.visibility is Visibility.GM:
            return "gm"
        if self.visibility is Visibility.SELF:
            return "self"
        return None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)

    @classmethod
    def from_json(cls, data: str) -> "RollMessage":
        return cls.model_validate_json(data)


class RollSink(Protocol):
    def publish(self, message: RollMessage) -> None:
        ...


class CollectingSink:
    """Keeps published messages in memory; handy for scripts and tests."""

    def __init__(self) -> None:
        self.messages: list[RollMessage] = []

    def publish(self, message: RollMessage) -> None:
        self.messages.append(message)


def build_message(
    kind: MessageKind,
    result: Any,
    *,
    visibility: str | Visibility | None = None,
    name: str = "",
    item_id: str | None = None,
    owner_id: str | None = None,
) -> RollMessage:
    payload = dataclasses.asdict(result) if dataclasses.is_dataclass(result) else dict(result or {})
    return RollMessage(
        kind=kind,
        visibility=normalize_visibility(visibility),
        name=name,
        item_id=item_id,
        owner_id=owner_id,
        payload=payload,
    )
