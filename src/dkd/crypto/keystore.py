"""In-memory identity key material for :class:`DefaultCryptoProvider`.

Identity resolution belongs to the caller; this store is the simplest
possible source of public and private keys for local use and tests.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterator, Optional, TYPE_CHECKING

from ..exceptions import IdentityNotFoundError

if TYPE_CHECKING:
    from .default_crypto_provider import DefaultCryptoProvider


@dataclass(frozen=True)
class Identity:
    """Key material for one identifier.

    Private keys are absent for identities known only by their public keys.
    """
    identifier: str
    encryption_public_key: bytes
    signing_public_key: bytes
    encryption_private_key: Optional[bytes] = None
    signing_private_key: Optional[bytes] = None

    def __repr__(self) -> str:
        return (
            f"Identity(identifier={self.identifier!r}, "
            f"private={self.encryption_private_key is not None})"
        )


class KeyStore:
    def __init__(self) -> None:
        self._identities: dict[str, Identity] = {}
        self._lock = threading.Lock()

    def add(self, identity: Identity) -> None:
        """Register or replace an identity."""
        with self._lock:
            self._identities[identity.identifier] = identity

    def generate(self, identifier: str, crypto: "DefaultCryptoProvider") -> Identity:
        """Generate and register fresh key pairs for the provider's active suite."""
        enc_sk, enc_pk = crypto.generate_key_pair()
        sig_sk, sig_pk = crypto.generate_signature_key_pair()
        identity = Identity(
            identifier=identifier,
            encryption_public_key=enc_pk,
            signing_public_key=sig_pk,
            encryption_private_key=enc_sk,
            signing_private_key=sig_sk,
        )
        self.add(identity)
        return identity

    def get(self, identifier: str) -> Identity:
        try:
            return self._identities[identifier]
        except KeyError:
            raise IdentityNotFoundError(f"unknown identifier: {identifier}") from None

    def remove(self, identifier: str) -> None:
        with self._lock:
            self._identities.pop(identifier, None)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._identities

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._identities))

    def __len__(self) -> int:
        return len(self._identities)

    # --- Key lookups ---
    def encryption_public_key(self, identifier: str) -> bytes:
        return self.get(identifier).encryption_public_key

    def signing_public_key(self, identifier: str) -> bytes:
        return self.get(identifier).signing_public_key

    def encryption_private_key(self, identifier: str) -> bytes:
        key = self.get(identifier).encryption_private_key
        if key is None:
            raise IdentityNotFoundError(f"no private encryption key for {identifier}")
        return key

    def signing_private_key(self, identifier: str) -> bytes:
        key = self.get(identifier).signing_private_key
        if key is None:
            raise IdentityNotFoundError(f"no private signing key for {identifier}")
        return key
