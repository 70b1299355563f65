from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..protocol.content import Content
    from ..protocol.messages import InstantMessage, ReliableMessage, SecureMessage


class CryptoProvider(ABC):
    """Cryptographic capability consumed by :class:`dkd.protocol.transform.Transform`.

    All values cross this boundary as raw bytes; base64 encoding of message
    fields is the transform engine's job. Implementations must be free of
    hidden per-call state so that they can be invoked from any thread.
    """

    @abstractmethod
    def encrypt_content(self, instant: "InstantMessage", content: "Content", password: bytes) -> bytes:
        """
        Encrypt message content with the symmetric key ``password``.
        """
        pass

    @abstractmethod
    def encrypt_key(self, instant: "InstantMessage", password: bytes, receiver: str) -> bytes:
        """
        Encrypt the symmetric key with the public key of ``receiver``.
        """
        pass

    @abstractmethod
    def decrypt_key(
        self,
        secure: "SecureMessage",
        encrypted_key: bytes,
        sender: str,
        receiver: str,
        group: Optional[str] = None,
    ) -> bytes:
        """
        Recover the symmetric key with the private key of ``receiver``.

        Raises KeyDecryptionError if the key cannot be decrypted.
        """
        pass

    @abstractmethod
    def decrypt_content(self, secure: "SecureMessage", data: bytes, password: bytes) -> "Content":
        """
        Decrypt message content with the symmetric key ``password``.

        Raises ContentDecryptionError on authentication or format failure.
        """
        pass

    @abstractmethod
    def sign(self, secure: "SecureMessage", data: bytes, sender: str) -> bytes:
        pass

    @abstractmethod
    def verify(self, reliable: "ReliableMessage", data: bytes, signature: bytes, sender: str) -> bool:
        pass
