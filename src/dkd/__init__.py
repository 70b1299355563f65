"""dkd: message transform protocol for end-to-end encrypted messaging.

Instant (plaintext) <-> Secure (encrypted) <-> Reliable (signed) messages,
with per-member key fan-out for group messages.
"""

from .protocol.content import (
    Content,
    MessageType,
    TextContent,
    CommandContent,
    HistoryContent,
    ForwardContent,
)
from .protocol.messages import Envelope, InstantMessage, SecureMessage, ReliableMessage, Keys
from .protocol.transform import Transform
from .crypto.crypto_provider import CryptoProvider
from .exceptions import (
    DKDError,
    MalformedMessageError,
    MissingKeyError,
    KeyDecryptionError,
    ContentDecryptionError,
    SignatureVerificationError,
)

__version__ = "0.1.0"

__all__ = [
    "Content",
    "MessageType",
    "TextContent",
    "CommandContent",
    "HistoryContent",
    "ForwardContent",
    "Envelope",
    "InstantMessage",
    "SecureMessage",
    "ReliableMessage",
    "Keys",
    "Transform",
    "CryptoProvider",
    "DKDError",
    "MalformedMessageError",
    "MissingKeyError",
    "KeyDecryptionError",
    "ContentDecryptionError",
    "SignatureVerificationError",
]
