from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Union

from ..crypto.crypto_provider import CryptoProvider
from ..exceptions import MalformedMessageError
from ..interop.wire import decode_message, encode_message
from ..protocol.messages import InstantMessage, ReliableMessage
from ..protocol.transform import Transform

logger = logging.getLogger(__name__)


class Messenger:
    """High-level wrapper around :class:`dkd.protocol.transform.Transform`.

    Packs outgoing Instant messages into signed Reliable messages and unpacks
    incoming Reliable messages back into Instant messages, with optional byte
    I/O through the JSON wire codec. Not tied to any transport.

    Parameters:
        crypto: Crypto provider used by the underlying transform.
        password_factory: Returns a fresh symmetric key for each outgoing
            message when ``pack`` is called without one. Defaults to the
            provider's ``generate_password`` if it has one.
    """

    def __init__(self, crypto: CryptoProvider, password_factory: Optional[Callable[[], bytes]] = None):
        self._transform = Transform(crypto)
        if password_factory is None:
            password_factory = getattr(crypto, "generate_password", None)
        self._password_factory = password_factory

    @property
    def transform(self) -> Transform:
        return self._transform

    def _password(self, password: Optional[bytes]) -> bytes:
        if password is not None:
            return password
        if self._password_factory is None:
            raise MalformedMessageError("no password given and no password factory configured")
        return self._password_factory()

    # --- Outgoing ---
    def pack(
        self,
        instant: InstantMessage,
        password: Optional[bytes] = None,
        members: Optional[Sequence[str]] = None,
    ) -> Union[ReliableMessage, list[ReliableMessage]]:
        """Encrypt and sign an outgoing message.

        Parameters:
            instant: Message to send.
            password: Symmetric key; generated when omitted.
            members: Group members. A group message is split into one signed
                message per member, in member order.

        Returns:
            A ReliableMessage, or a list of them for a group message.
        """
        secure = self._transform.encrypt(instant, self._password(password), members)
        if members is None:
            return self._transform.sign(secure)
        # sign once; every member copy carries the same data
        reliable = self._transform.sign(secure)
        out = self._transform.split(reliable, members)
        logger.debug("packed group message from %s for %d members", instant.sender, len(out))
        return out  # type: ignore[return-value]

    def pack_bytes(self, instant: InstantMessage, password: Optional[bytes] = None) -> bytes:
        """Encrypt, sign and serialize a single-recipient message."""
        secure = self._transform.encrypt(instant, self._password(password))
        return encode_message(self._transform.sign(secure))

    # --- Incoming ---
    def unpack(self, reliable: ReliableMessage, member: Optional[str] = None) -> InstantMessage:
        """Verify and decrypt an incoming message.

        Parameters:
            reliable: Received message.
            member: For group messages, the local member identifier.
        """
        secure = self._transform.verify(reliable)
        return self._transform.decrypt(secure, member)

    def unpack_bytes(self, raw: bytes, member: Optional[str] = None) -> InstantMessage:
        """Parse, verify and decrypt a serialized Reliable message."""
        msg = decode_message(raw)
        if not isinstance(msg, ReliableMessage):
            raise MalformedMessageError("expected a signed (reliable) message")
        return self.unpack(msg, member)
