"""JSON wire form of the three message states.

The state of a decoded message is determined by its populated fields:
``content`` means Instant, ``signature`` means Reliable, ``data`` means Secure.
Binary fields are already base64 text inside the message objects, so encoding
is a plain mapping conversion.
"""
from __future__ import annotations

import json
from typing import Any, Mapping

from ..exceptions import MalformedMessageError
from ..protocol.content import Content
from ..protocol.messages import Envelope, InstantMessage, Message, ReliableMessage, SecureMessage

_ENVELOPE_FIELDS = ("sender", "receiver", "time")
_INSTANT_FIELDS = _ENVELOPE_FIELDS + ("content",)
_SECURE_FIELDS = _ENVELOPE_FIELDS + ("data", "key", "keys", "group")
_RELIABLE_FIELDS = _SECURE_FIELDS + ("signature", "meta")


def message_to_dict(msg: Message) -> dict[str, Any]:
    """Convert a message to its JSON-compatible mapping.

    Optional fields that are unset are omitted; ``meta`` is always present on
    reliable messages.
    """
    out: dict[str, Any] = {
        "sender": msg.sender,
        "receiver": msg.receiver,
        "time": msg.time,
    }
    if isinstance(msg, InstantMessage):
        out["content"] = msg.content.to_dict()
    elif isinstance(msg, SecureMessage):
        out["data"] = msg.data
        if msg.key is not None:
            out["key"] = msg.key
        if msg.keys is not None:
            out["keys"] = dict(msg.keys)
        if msg.group is not None:
            out["group"] = msg.group
        if isinstance(msg, ReliableMessage):
            out["signature"] = msg.signature
            out["meta"] = msg.meta
    else:
        raise MalformedMessageError(f"not a message: {type(msg).__name__}")
    for k, v in msg.extra.items():
        out.setdefault(k, v)
    return out


def _extra(data: Mapping[str, Any], known: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


def message_from_dict(data: Mapping[str, Any]) -> Message:
    """Build the message state described by ``data``.

    Raises:
        MalformedMessageError: If the mapping does not describe any state or
            required fields are missing or ill-typed.
    """
    if not isinstance(data, Mapping):
        raise MalformedMessageError("message must be a JSON object")
    for name in _ENVELOPE_FIELDS:
        if name not in data:
            raise MalformedMessageError(f"message is missing '{name}'")
    envelope = Envelope(data["sender"], data["receiver"], data["time"])

    if "content" in data:
        return InstantMessage(
            envelope=envelope,
            content=Content.from_dict(data["content"]),
            extra=_extra(data, _INSTANT_FIELDS),
        )
    if "data" not in data:
        raise MalformedMessageError("message has neither 'content' nor 'data'")

    common: dict[str, Any] = dict(
        envelope=envelope,
        data=data["data"],
        key=data.get("key"),
        keys=data.get("keys"),
        group=data.get("group"),
    )
    if "signature" in data:
        return ReliableMessage(
            signature=data["signature"],
            meta=data.get("meta"),
            extra=_extra(data, _RELIABLE_FIELDS),
            **common,
        )
    return SecureMessage(extra=_extra(data, _SECURE_FIELDS), **common)


def encode_message(msg: Message) -> bytes:
    """Serialize a message as UTF-8 JSON."""
    return json.dumps(message_to_dict(msg), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode_message(raw: bytes) -> Message:
    """Parse UTF-8 JSON into the matching message state."""
    try:
        data = json.loads(raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedMessageError("message is not valid JSON") from e
    return message_from_dict(data)
