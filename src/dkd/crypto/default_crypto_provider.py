"""Concrete CryptoProvider using the 'cryptography' and 'rfc9180-py' packages.

This module provides DefaultCryptoProvider, which implements the CryptoProvider
interface with:

- AEAD (AES-GCM or ChaCha20-Poly1305) over the JSON-encoded content,
  ``data = nonce || ciphertext``, with the sender bound as associated data;
- HPKE base mode (rfc9180-py) to seal the symmetric key to each receiver,
  ``key = kem_output || ciphertext``;
- Ed25519, Ed448 or ECDSA signatures over the message data.

Public and private keys are looked up by identifier in a :class:`KeyStore`.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Optional

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.asymmetric.ed448 import (
    Ed448PrivateKey,
    Ed448PublicKey,
)
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305
from cryptography.exceptions import InvalidSignature, InvalidTag

from .crypto_provider import CryptoProvider
from .ciphersuites import (
    AEAD,
    DEFAULT_CIPHERSUITE_ID,
    Ciphersuite,
    SignatureScheme,
    get_ciphersuite_by_id,
    list_ciphersuite_ids,
)
from .hpke_backend import (
    hpke_generate_key_pair as _hpke_generate_key_pair,
    hpke_open as _hpke_open_backend,
    hpke_seal as _hpke_seal_backend,
)
from .keystore import KeyStore
from ..exceptions import (
    ConfigurationError,
    ContentDecryptionError,
    IdentityNotFoundError,
    KeyDecryptionError,
    MalformedMessageError,
    UnsupportedCipherSuiteError,
)
from ..protocol.content import Content
from ..protocol.messages import InstantMessage, ReliableMessage, SecureMessage

logger = logging.getLogger(__name__)

KEY_INFO = b"dkd 1.0 message key"
NONCE_SIZE = 12
TAG_SIZE = 16


def _key_aad(sender: str, receiver: str) -> bytes:
    return sender.encode("utf-8") + b"\x00" + receiver.encode("utf-8")


class DefaultCryptoProvider(CryptoProvider):
    """Concrete CryptoProvider implementation using cryptography and rfc9180-py.

    Parameters:
        keystore: Source of public/private keys by identifier.
        suite_id: Cipher suite id (default 0x0001).

    Raises:
        UnsupportedCipherSuiteError: If suite_id is unknown.
    """

    def __init__(self, keystore: Optional[KeyStore] = None, suite_id: int = DEFAULT_CIPHERSUITE_ID):
        self._keystore = keystore if keystore is not None else KeyStore()
        self._suite: Ciphersuite = self._lookup_suite(suite_id)

    @staticmethod
    def _lookup_suite(suite_id: int) -> Ciphersuite:
        cs = get_ciphersuite_by_id(suite_id)
        if not cs:
            raise UnsupportedCipherSuiteError(f"Unsupported ciphersuite id: {suite_id:#06x}")
        return cs

    @property
    def keystore(self) -> KeyStore:
        return self._keystore

    @property
    def supported_ciphersuites(self) -> list[int]:
        return list_ciphersuite_ids()

    @property
    def active_ciphersuite(self) -> Ciphersuite:
        return self._suite

    def set_ciphersuite(self, suite_id: int) -> None:
        """Switch the active cipher suite by id.

        Keys already in the key store must match the new suite.

        Raises:
            UnsupportedCipherSuiteError: If suite_id is unknown.
        """
        self._suite = self._lookup_suite(suite_id)

    # --- Internals for algorithm selection ---
    def _aead_impl(self):
        if self._suite.aead == AEAD.AES_128_GCM or self._suite.aead == AEAD.AES_256_GCM:
            return AESGCM
        if self._suite.aead == AEAD.CHACHA20_POLY1305:
            return ChaCha20Poly1305
        raise UnsupportedCipherSuiteError("Unsupported AEAD")

    def _load_ec_private(self, data: bytes):
        """Load an EC private key from DER or PEM bytes."""
        try:
            return serialization.load_der_private_key(data, password=None)
        except ValueError:
            try:
                return serialization.load_pem_private_key(data, password=None)
            except ValueError as e:
                raise ConfigurationError("Invalid EC private key encoding (expect DER/PEM)") from e

    def _load_ec_public(self, data: bytes, curve: ec.EllipticCurve):
        """Load an EC public key from uncompressed point, DER, or PEM."""
        if data and data[0] == 0x04:
            try:
                return ec.EllipticCurvePublicKey.from_encoded_point(curve, data)
            except ValueError:
                pass
        try:
            return serialization.load_der_public_key(data)
        except ValueError:
            try:
                return serialization.load_pem_public_key(data)
            except ValueError as e:
                raise ConfigurationError("Invalid EC public key encoding (expect DER/PEM)") from e

    # --- Key generation ---
    def aead_key_size(self) -> int:
        return self._suite.key_size

    def generate_password(self) -> bytes:
        """Fresh random symmetric key for the active AEAD."""
        return os.urandom(self.aead_key_size())

    def generate_key_pair(self) -> tuple[bytes, bytes]:
        """Generate an HPKE KEM key pair (private, public)."""
        return _hpke_generate_key_pair(self._suite.kem, self._suite.kdf, self._suite.aead)

    def generate_signature_key_pair(self) -> tuple[bytes, bytes]:
        """Generate a signing key pair (private, public) for the active scheme."""
        scheme = self._suite.signature
        if scheme == SignatureScheme.ED25519:
            sk = Ed25519PrivateKey.generate()
            return sk.private_bytes_raw(), sk.public_key().public_bytes_raw()
        if scheme == SignatureScheme.ED448:
            sk_448 = Ed448PrivateKey.generate()
            return sk_448.private_bytes_raw(), sk_448.public_key().public_bytes_raw()
        if scheme == SignatureScheme.ECDSA_SECP256R1_SHA256:
            curve: ec.EllipticCurve = ec.SECP256R1()
        elif scheme == SignatureScheme.ECDSA_SECP521R1_SHA512:
            curve = ec.SECP521R1()
        else:
            raise UnsupportedCipherSuiteError("Unsupported signature scheme")
        sk_ec = ec.generate_private_key(curve)
        private = sk_ec.private_bytes(
            serialization.Encoding.DER,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        )
        public = sk_ec.public_key().public_bytes(
            serialization.Encoding.X962,
            serialization.PublicFormat.UncompressedPoint,
        )
        return private, public

    # --- Content ---
    def encrypt_content(self, instant: InstantMessage, content: Content, password: bytes) -> bytes:
        plaintext = json.dumps(content.to_dict(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        nonce = os.urandom(NONCE_SIZE)
        try:
            aead = self._aead_impl()(password)
        except ValueError as e:
            raise ConfigurationError(f"symmetric key must be {self.aead_key_size()} bytes") from e
        return nonce + aead.encrypt(nonce, plaintext, instant.sender.encode("utf-8"))

    def decrypt_content(self, secure: SecureMessage, data: bytes, password: bytes) -> Content:
        if len(data) < NONCE_SIZE + TAG_SIZE:
            raise ContentDecryptionError("content ciphertext too short")
        nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
        try:
            plaintext = self._aead_impl()(password).decrypt(
                nonce, ciphertext, secure.sender.encode("utf-8")
            )
        except (InvalidTag, ValueError) as e:
            raise ContentDecryptionError("content authentication failed") from e
        try:
            return Content.from_dict(json.loads(plaintext.decode("utf-8")))
        except (UnicodeDecodeError, ValueError, MalformedMessageError) as e:
            raise ContentDecryptionError("decrypted content is not a valid content record") from e

    # --- Keys ---
    def encrypt_key(self, instant: InstantMessage, password: bytes, receiver: str) -> bytes:
        public_key = self._keystore.encryption_public_key(receiver)
        kem_output, ciphertext = _hpke_seal_backend(
            kem=self._suite.kem,
            kdf=self._suite.kdf,
            aead=self._suite.aead,
            recipient_public_key=public_key,
            info=KEY_INFO,
            aad=_key_aad(instant.sender, receiver),
            plaintext=password,
        )
        return kem_output + ciphertext

    def decrypt_key(
        self,
        secure: SecureMessage,
        encrypted_key: bytes,
        sender: str,
        receiver: str,
        group: Optional[str] = None,
    ) -> bytes:
        try:
            private_key = self._keystore.encryption_private_key(receiver)
        except IdentityNotFoundError as e:
            raise KeyDecryptionError(f"no private key to decrypt message key for {receiver}") from e
        enc_size = self._suite.enc_size
        if len(encrypted_key) <= enc_size:
            raise KeyDecryptionError("encrypted key too short")
        try:
            return _hpke_open_backend(
                kem=self._suite.kem,
                kdf=self._suite.kdf,
                aead=self._suite.aead,
                recipient_private_key=private_key,
                kem_output=encrypted_key[:enc_size],
                info=KEY_INFO,
                aad=_key_aad(sender, receiver),
                ciphertext=encrypted_key[enc_size:],
            )
        except (InvalidTag, ValueError) as e:
            raise KeyDecryptionError(f"cannot decrypt message key for {receiver}") from e

    # --- Signatures ---
    def sign(self, secure: SecureMessage, data: bytes, sender: str) -> bytes:
        private_key = self._keystore.signing_private_key(sender)
        scheme = self._suite.signature
        if scheme == SignatureScheme.ED25519:
            return Ed25519PrivateKey.from_private_bytes(private_key).sign(data)
        if scheme == SignatureScheme.ED448:
            return Ed448PrivateKey.from_private_bytes(private_key).sign(data)
        if scheme == SignatureScheme.ECDSA_SECP256R1_SHA256:
            sk = self._load_ec_private(private_key)
            return sk.sign(data, ec.ECDSA(hashes.SHA256()))
        if scheme == SignatureScheme.ECDSA_SECP521R1_SHA512:
            sk = self._load_ec_private(private_key)
            return sk.sign(data, ec.ECDSA(hashes.SHA512()))
        raise UnsupportedCipherSuiteError("Unsupported signature scheme")

    def verify(self, reliable: ReliableMessage, data: bytes, signature: bytes, sender: str) -> bool:
        try:
            public_key = self._keystore.signing_public_key(sender)
        except IdentityNotFoundError:
            logger.warning("no signing key known for %s; rejecting signature", sender)
            return False
        scheme = self._suite.signature
        try:
            if scheme == SignatureScheme.ED25519:
                Ed25519PublicKey.from_public_bytes(public_key).verify(signature, data)
                return True
            if scheme == SignatureScheme.ED448:
                Ed448PublicKey.from_public_bytes(public_key).verify(signature, data)
                return True
            if scheme == SignatureScheme.ECDSA_SECP256R1_SHA256:
                pk = self._load_ec_public(public_key, ec.SECP256R1())
                pk.verify(signature, data, ec.ECDSA(hashes.SHA256()))
                return True
            if scheme == SignatureScheme.ECDSA_SECP521R1_SHA512:
                pk = self._load_ec_public(public_key, ec.SECP521R1())
                pk.verify(signature, data, ec.ECDSA(hashes.SHA512()))
                return True
        except (InvalidSignature, ValueError):
            return False
        except ConfigurationError:
            logger.warning("stored signing key for %s is not a valid EC public key", sender)
            return False
        raise UnsupportedCipherSuiteError("Unsupported signature scheme")
