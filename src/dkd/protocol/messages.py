"""Message states: Instant, Secure and Reliable.

::

    Instant Message <-> Secure Message <-> Reliable Message
    +-------------+     +------------+     +--------------+
    |  sender     |     |  sender    |     |  sender      |
    |  receiver   |     |  receiver  |     |  receiver    |
    |  time       |     |  time      |     |  time        |
    |             |     |            |     |              |
    |  content    |     |  data      |     |  data        |
    +-------------+     |  key/keys  |     |  key/keys    |
                        +------------+     |  signature   |
                                           +--------------+

    data      = password.encrypt(content)
    key       = receiver.public_key.encrypt(password)
    signature = sender.private_key.sign(data)

Binary fields (``data``, ``key``, values of ``keys``, ``signature``) hold base64
text. Each state is a separate frozen dataclass; transforms always build new
values with :func:`dataclasses.replace` or the constructors below.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from ..exceptions import MalformedMessageError
from .content import Content

Keys = dict[str, str]

_ENVELOPE_FIELDS = ("sender", "receiver", "time")
# extras travel across every state, so none may reuse a field of any state
_MESSAGE_FIELDS = _ENVELOPE_FIELDS + ("content", "data", "key", "keys", "group", "signature", "meta")


def _check_extra(extra: dict[str, Any]) -> dict[str, Any]:
    clash = sorted(set(extra) & set(_MESSAGE_FIELDS))
    if clash:
        raise MalformedMessageError(f"extra fields shadow message fields: {clash}")
    return dict(extra)


@dataclass(frozen=True)
class Envelope:
    """Sender, receiver and timestamp shared by every message state."""
    sender: str
    receiver: str
    time: Union[int, float]

    def __post_init__(self) -> None:
        if not isinstance(self.sender, str) or not self.sender:
            raise MalformedMessageError("envelope sender must be a non-empty string")
        if not isinstance(self.receiver, str) or not self.receiver:
            raise MalformedMessageError("envelope receiver must be a non-empty string")
        if isinstance(self.time, bool) or not isinstance(self.time, (int, float)):
            raise MalformedMessageError("envelope time must be a number")


@dataclass(frozen=True)
class _Message:
    envelope: Envelope

    @property
    def sender(self) -> str:
        return self.envelope.sender

    @property
    def receiver(self) -> str:
        return self.envelope.receiver

    @property
    def time(self) -> Union[int, float]:
        return self.envelope.time


@dataclass(frozen=True)
class InstantMessage(_Message):
    """Plaintext message; the only state that holds ``content``."""
    content: Content
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.content, Content):
            raise MalformedMessageError("instant message content must be a Content")
        object.__setattr__(self, "extra", _check_extra(self.extra))

    @classmethod
    def create(
        cls,
        sender: str,
        receiver: str,
        time: Union[int, float],
        content: Content,
        **extra: Any,
    ) -> "InstantMessage":
        return cls(Envelope(sender, receiver, time), content, extra)

    @property
    def group(self) -> Optional[str]:
        return self.content.group


@dataclass(frozen=True)
class SecureMessage(_Message):
    """Instant message whose content has been encrypted with a symmetric key.

    ``key`` addresses a single recipient, ``keys`` maps each group member to the
    symmetric key encrypted for that member; at most one of them is set.
    ``group`` records the group identifier once a group message has been
    narrowed to a single member.
    """
    data: str
    key: Optional[str] = None
    keys: Optional[Keys] = None
    group: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.data, str) or not self.data:
            raise MalformedMessageError("secure message requires non-empty 'data'")
        if self.key is not None and self.keys is not None:
            raise MalformedMessageError("secure message cannot carry both 'key' and 'keys'")
        if self.key is not None and not isinstance(self.key, str):
            raise MalformedMessageError("'key' must be base64 text")
        if self.keys is not None:
            if not isinstance(self.keys, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in self.keys.items()
            ):
                raise MalformedMessageError("'keys' must map identifiers to base64 text")
            object.__setattr__(self, "keys", dict(self.keys))
        if self.group is not None and not isinstance(self.group, str):
            raise MalformedMessageError("'group' must be a string")
        object.__setattr__(self, "extra", _check_extra(self.extra))

    @property
    def is_group_message(self) -> bool:
        return self.keys is not None


@dataclass(frozen=True)
class ReliableMessage(SecureMessage):
    """Secure message signed by the sender over its ``data``.

    ``meta`` is opaque identity metadata; it is passed through unchanged.
    """
    signature: str = ""
    meta: Any = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if not isinstance(self.signature, str) or not self.signature:
            raise MalformedMessageError("reliable message requires non-empty 'signature'")


Message = Union[InstantMessage, SecureMessage, ReliableMessage]
