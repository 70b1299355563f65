"""Message states and the transform engine."""

from .content import Content, MessageType
from .messages import Envelope, InstantMessage, SecureMessage, ReliableMessage, Keys
from .transform import Transform

__all__ = [
    "Content",
    "MessageType",
    "Envelope",
    "InstantMessage",
    "SecureMessage",
    "ReliableMessage",
    "Keys",
    "Transform",
]
