from __future__ import annotations

import hashlib
import json
from typing import Optional

from dkd import (
    Content,
    ContentDecryptionError,
    CryptoProvider,
    InstantMessage,
    KeyDecryptionError,
    ReliableMessage,
    SecureMessage,
)


def has_hpke() -> bool:
    try:
        from rfc9180 import AEADID, HPKE, KDFID, KEMID  # noqa: F401
    except Exception:
        return False
    return True


class FakeCryptoProvider(CryptoProvider):
    """Reversible, deterministic provider that records every key operation.

    Content is wrapped together with the password so that decrypting with
    the wrong password fails; keys are tagged with their target receiver so
    that decrypting for anyone else fails.
    """

    def __init__(self) -> None:
        self.encrypt_key_calls: list[str] = []
        self.decrypt_key_calls: list[tuple[str, str, Optional[str]]] = []

    def encrypt_content(self, instant: InstantMessage, content: Content, password: bytes) -> bytes:
        return json.dumps({"p": password.hex(), "c": content.to_dict()}).encode("utf-8")

    def decrypt_content(self, secure: SecureMessage, data: bytes, password: bytes) -> Content:
        try:
            wrapped = json.loads(data.decode("utf-8"))
        except ValueError as e:
            raise ContentDecryptionError("bad content") from e
        if wrapped.get("p") != password.hex():
            raise ContentDecryptionError("wrong password")
        return Content.from_dict(wrapped["c"])

    def encrypt_key(self, instant: InstantMessage, password: bytes, receiver: str) -> bytes:
        self.encrypt_key_calls.append(receiver)
        return b"K:" + receiver.encode("utf-8") + b"\x00" + password

    def decrypt_key(
        self,
        secure: SecureMessage,
        encrypted_key: bytes,
        sender: str,
        receiver: str,
        group: Optional[str] = None,
    ) -> bytes:
        self.decrypt_key_calls.append((sender, receiver, group))
        if not encrypted_key.startswith(b"K:") or b"\x00" not in encrypted_key:
            raise KeyDecryptionError("bad key blob")
        target, password = encrypted_key[2:].split(b"\x00", 1)
        if target.decode("utf-8") != receiver:
            raise KeyDecryptionError(f"key is not for {receiver}")
        return password

    def sign(self, secure: SecureMessage, data: bytes, sender: str) -> bytes:
        return hashlib.sha256(sender.encode("utf-8") + b"\x00" + data).digest()

    def verify(self, reliable: ReliableMessage, data: bytes, signature: bytes, sender: str) -> bool:
        return signature == self.sign(reliable, data, sender)


def make_instant(
    sender: str = "alice",
    receiver: str = "bob",
    time: int = 1000,
    text: str = "hi",
    group: Optional[str] = None,
) -> InstantMessage:
    content = Content(type=1, serial_number=1, group=group, extra={"text": text})
    return InstantMessage.create(sender, receiver, time, content)


def make_identities(*identifiers: str, suite_id: int = 0x0001):
    """Return a DefaultCryptoProvider whose key store holds the given identities."""
    from dkd.crypto.default_crypto_provider import DefaultCryptoProvider
    from dkd.crypto.keystore import KeyStore

    crypto = DefaultCryptoProvider(KeyStore(), suite_id=suite_id)
    for identifier in identifiers:
        crypto.keystore.generate(identifier, crypto)
    return crypto
