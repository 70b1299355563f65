"""Message transforming between the Instant, Secure and Reliable states.

Instant --encrypt--> Secure --sign--> Reliable
Reliable --verify--> Secure --decrypt--> Instant

Group messages additionally go through ``split`` (one Secure message per
member) or ``trim`` (a single member's view). Every operation returns a new
message and never mutates its input.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from ..codec.fields import b64decode, b64encode
from ..crypto.crypto_provider import CryptoProvider
from ..exceptions import MalformedMessageError, MissingKeyError, SignatureVerificationError
from .messages import InstantMessage, Keys, ReliableMessage, SecureMessage

logger = logging.getLogger(__name__)


class Transform:
    """Stateless protocol engine converting messages between states.

    Parameters:
        crypto: Crypto capability used for every cryptographic step.
    """

    def __init__(self, crypto: CryptoProvider):
        self._crypto = crypto

    @property
    def crypto(self) -> CryptoProvider:
        return self._crypto

    # --- Instant <-> Secure ---
    def encrypt(
        self,
        instant: InstantMessage,
        password: bytes,
        members: Optional[Sequence[str]] = None,
    ) -> SecureMessage:
        """Encrypt message content with a symmetric key.

        Parameters:
            instant: Plaintext message.
            password: Symmetric key for the content; not retained.
            members: Group members; when given, the key is encrypted once per
                member and the result carries ``keys`` instead of ``key``.

        Returns:
            SecureMessage without ``content``.

        Raises:
            MalformedMessageError: If instant is not an InstantMessage, or
                members is an empty sequence.
        """
        if not isinstance(instant, InstantMessage):
            raise MalformedMessageError(f"encrypt expects an InstantMessage, got {type(instant).__name__}")
        if members is not None and len(members) == 0:
            raise MalformedMessageError("group encryption requires at least one member")

        data = b64encode(self._crypto.encrypt_content(instant, instant.content, password))

        if members is None:
            key = b64encode(self._crypto.encrypt_key(instant, password, instant.receiver))
            logger.debug("encrypted message %s -> %s", instant.sender, instant.receiver)
            return SecureMessage(
                envelope=instant.envelope,
                data=data,
                key=key,
                group=instant.content.group,
                extra=instant.extra,
            )

        keys: Keys = {}
        for member in members:
            # each member gets the password sealed to its own public key
            keys[member] = b64encode(self._crypto.encrypt_key(instant, password, member))
        logger.debug(
            "encrypted group message %s -> %s for %d members",
            instant.sender, instant.receiver, len(keys),
        )
        return SecureMessage(
            envelope=instant.envelope,
            data=data,
            keys=keys,
            group=instant.content.group,
            extra=instant.extra,
        )

    def decrypt(self, secure: SecureMessage, member: Optional[str] = None) -> InstantMessage:
        """Decrypt a Secure message back into an Instant message.

        Parameters:
            secure: Encrypted message.
            member: For group messages, the member whose key should be used.

        Returns:
            InstantMessage with the recovered content.

        Raises:
            MissingKeyError: If no key can be resolved.
            KeyDecryptionError, ContentDecryptionError: From the crypto provider.
        """
        if not isinstance(secure, SecureMessage):
            raise MalformedMessageError(f"decrypt expects a SecureMessage, got {type(secure).__name__}")

        group = secure.group
        key = secure.key
        receiver = secure.receiver
        if member is not None:
            if group is None:
                group = secure.receiver
            if secure.keys is not None:
                key = secure.keys.get(member)
            receiver = member
        if not key:
            raise MissingKeyError(
                f"decrypt key not found for message {secure.sender} -> {secure.receiver}"
                + (f" (member {member})" if member is not None else "")
            )

        password = self._crypto.decrypt_key(
            secure, b64decode(key, "key"), secure.sender, receiver, group
        )
        content = self._crypto.decrypt_content(secure, b64decode(secure.data, "data"), password)
        logger.debug("decrypted message %s -> %s", secure.sender, receiver)
        return InstantMessage(envelope=secure.envelope, content=content, extra=secure.extra)

    # --- Secure <-> Reliable ---
    def sign(self, secure: SecureMessage) -> ReliableMessage:
        """Sign the message data with the sender's private key.

        Raises:
            MalformedMessageError: If secure is not a SecureMessage or its data
                is not valid base64.
        """
        if not isinstance(secure, SecureMessage):
            raise MalformedMessageError(f"sign expects a SecureMessage, got {type(secure).__name__}")
        signature = self._crypto.sign(secure, b64decode(secure.data, "data"), secure.sender)
        return ReliableMessage(
            envelope=secure.envelope,
            data=secure.data,
            key=secure.key,
            keys=secure.keys,
            group=secure.group,
            extra=secure.extra,
            signature=b64encode(signature),
            meta=getattr(secure, "meta", None),
        )

    def verify(self, reliable: ReliableMessage) -> SecureMessage:
        """Verify the sender's signature and strip it.

        Raises:
            SignatureVerificationError: If the signature does not verify.
        """
        if not isinstance(reliable, ReliableMessage):
            raise MalformedMessageError(f"verify expects a ReliableMessage, got {type(reliable).__name__}")
        data = b64decode(reliable.data, "data")
        signature = b64decode(reliable.signature, "signature")
        if not self._crypto.verify(reliable, data, signature, reliable.sender):
            raise SignatureVerificationError(
                f"signature verification failed for message from {reliable.sender}"
            )
        return SecureMessage(
            envelope=reliable.envelope,
            data=reliable.data,
            key=reliable.key,
            keys=reliable.keys,
            group=reliable.group,
            extra=reliable.extra,
        )

    # --- Group messages ---
    def split(self, secure: SecureMessage, members: Sequence[str]) -> list[SecureMessage]:
        """Fan a group message out into one single-key message per member.

        Members without an entry in ``keys`` get ``key=None``; their key is not
        available yet, which is not an error here.

        Raises:
            MalformedMessageError: If secure carries no ``keys``.
        """
        if not isinstance(secure, SecureMessage) or secure.keys is None:
            raise MalformedMessageError("split requires a group message carrying 'keys'")
        keys = secure.keys
        group = secure.group or secure.receiver
        messages = [
            replace(secure, key=keys.get(member), keys=None, group=group)
            for member in members
        ]
        logger.debug("split group message from %s into %d messages", secure.sender, len(messages))
        return messages

    def trim(self, secure: SecureMessage, member: str) -> SecureMessage:
        """Narrow a group message to ``member``'s single-key view.

        A message that no longer carries ``keys`` is returned as an equal copy.
        """
        if not isinstance(secure, SecureMessage):
            raise MalformedMessageError(f"trim expects a SecureMessage, got {type(secure).__name__}")
        if secure.keys is None:
            return replace(secure)
        return replace(
            secure,
            key=secure.keys.get(member),
            keys=None,
            group=secure.group or secure.receiver,
        )
