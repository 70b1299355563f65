"""Message content: the opaque, type-tagged payload of an Instant message.

Wire format::

    {
        "type"    : 0x01,          // message type
        "sn"      : 1234,          // serial number
        "group"   : "Group ID",    // for group message
        "text"    : "text",        // for text message
        "command" : "Name",        // for system command
        ...
    }

Only ``type``, ``sn`` and ``group`` are interpreted here; every other field is
kept verbatim in ``extra`` so that unknown payloads round-trip unchanged.
"""
from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Mapping, Optional, Union

from ..exceptions import MalformedMessageError


class MessageType(IntEnum):
    """Known content type codes."""
    TEXT = 0x01

    FILE = 0x10
    IMAGE = 0x12
    AUDIO = 0x14
    VIDEO = 0x16

    PAGE = 0x20

    COMMAND = 0x88
    HISTORY = 0x89  # entity history command

    # top-secret message forwarded by a proxy (service provider)
    FORWARD = 0xFF


_RESERVED_FIELDS = ("type", "sn", "group")


def _coerce_type(code: int) -> Union[MessageType, int]:
    try:
        return MessageType(code)
    except ValueError:
        # unknown codes are preserved opaquely
        return int(code)


def generate_serial_number() -> int:
    """Random non-zero 32-bit serial number."""
    return secrets.randbelow(0xFFFFFFFF) + 1


@dataclass(frozen=True)
class Content:
    """Type-tagged message payload.

    Parameters:
        type: A MessageType, or the raw int code of an unknown type.
        serial_number: Serial number, serialized as ``sn``.
        group: Group identifier for group messages.
        extra: Type-specific fields (``text``, ``command``, ...).
    """
    type: Union[MessageType, int]
    serial_number: int
    group: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.type, bool) or not isinstance(self.type, int):
            raise MalformedMessageError(f"content type must be an int, got {self.type!r}")
        if isinstance(self.serial_number, bool) or not isinstance(self.serial_number, int):
            raise MalformedMessageError(f"serial number must be an int, got {self.serial_number!r}")
        if self.group is not None and not isinstance(self.group, str):
            raise MalformedMessageError("content group must be a string")
        clash = sorted(set(self.extra) & set(_RESERVED_FIELDS))
        if clash:
            raise MalformedMessageError(f"content extra fields shadow reserved fields: {clash}")
        object.__setattr__(self, "type", _coerce_type(self.type))
        object.__setattr__(self, "extra", dict(self.extra))

    @classmethod
    def create(
        cls,
        type: Union[MessageType, int],
        group: Optional[str] = None,
        serial_number: Optional[int] = None,
        **fields: Any,
    ) -> "Content":
        """Build a content with a fresh serial number unless one is given."""
        if serial_number is None:
            serial_number = generate_serial_number()
        return cls(type=type, serial_number=serial_number, group=group, extra=fields)

    def get(self, name: str, default: Any = None) -> Any:
        """Look up a type-specific field."""
        return self.extra.get(name, default)

    def __getitem__(self, name: str) -> Any:
        if name == "type":
            return int(self.type)
        if name == "sn":
            return self.serial_number
        if name == "group":
            return self.group
        return self.extra[name]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": int(self.type), "sn": self.serial_number}
        if self.group is not None:
            out["group"] = self.group
        for k, v in self.extra.items():
            out[k] = v
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Content":
        """Parse a content mapping; unknown fields are kept in ``extra``.

        Raises:
            MalformedMessageError: If ``type`` or ``sn`` is missing.
        """
        if not isinstance(data, Mapping):
            raise MalformedMessageError("content must be a mapping")
        if "type" not in data:
            raise MalformedMessageError("content is missing 'type'")
        if "sn" not in data:
            raise MalformedMessageError("content is missing 'sn'")
        extra = {k: v for k, v in data.items() if k not in _RESERVED_FIELDS}
        return cls(
            type=data["type"],
            serial_number=data["sn"],
            group=data.get("group"),
            extra=extra,
        )


# --- Typed payloads ---


def TextContent(text: str, group: Optional[str] = None, serial_number: Optional[int] = None) -> Content:
    return Content.create(MessageType.TEXT, group=group, serial_number=serial_number, text=text)


def CommandContent(
    command: str,
    group: Optional[str] = None,
    serial_number: Optional[int] = None,
    **fields: Any,
) -> Content:
    return Content.create(
        MessageType.COMMAND, group=group, serial_number=serial_number, command=command, **fields
    )


def HistoryContent(
    command: str,
    time: int,
    group: Optional[str] = None,
    serial_number: Optional[int] = None,
    **fields: Any,
) -> Content:
    """Entity history command; ``time`` is when the command was issued."""
    return Content.create(
        MessageType.HISTORY,
        group=group,
        serial_number=serial_number,
        command=command,
        time=time,
        **fields,
    )


def ForwardContent(forward: Any, serial_number: Optional[int] = None) -> Content:
    """Wrap a (usually reliable) message for forwarding through a proxy."""
    return Content.create(MessageType.FORWARD, serial_number=serial_number, forward=forward)
