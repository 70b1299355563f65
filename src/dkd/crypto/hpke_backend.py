"""HPKE backend wrapper using rfc9180-py.

Message keys are sealed to each recipient with HPKE base mode through the
rfc9180-py package (imported as ``rfc9180``).
"""
from __future__ import annotations

from typing import Tuple

from rfc9180 import HPKE, KEMID, KDFID, AEADID
from rfc9180.exceptions import OpenError
from cryptography.exceptions import InvalidTag

from ..exceptions import ConfigurationError
from .ciphersuites import KEM, KDF, AEAD


def map_hpke_enums(kem: KEM, kdf: KDF, aead: AEAD) -> Tuple[KEMID, KDFID, AEADID]:
    """Map cipher-suite enums to rfc9180-py KEM/KDF/AEAD identifiers.

    Raises:
        ConfigurationError: If any component is not supported by rfc9180-py.
    """
    kem_map = {
        KEM.DHKEM_X25519_HKDF_SHA256: KEMID.DHKEM_X25519_HKDF_SHA256,
        KEM.DHKEM_X448_HKDF_SHA512: KEMID.DHKEM_X448_HKDF_SHA512,
        KEM.DHKEM_P256_HKDF_SHA256: KEMID.DHKEM_P256_HKDF_SHA256,
        KEM.DHKEM_P384_HKDF_SHA384: KEMID.DHKEM_P384_HKDF_SHA384,
        KEM.DHKEM_P521_HKDF_SHA512: KEMID.DHKEM_P521_HKDF_SHA512,
    }
    kdf_map = {
        KDF.HKDF_SHA256: KDFID.HKDF_SHA256,
        KDF.HKDF_SHA384: KDFID.HKDF_SHA384,
        KDF.HKDF_SHA512: KDFID.HKDF_SHA512,
    }
    aead_map = {
        AEAD.AES_128_GCM: AEADID.AES_128_GCM,
        AEAD.AES_256_GCM: AEADID.AES_256_GCM,
        AEAD.CHACHA20_POLY1305: AEADID.CHACHA20_POLY1305,
    }
    try:
        return kem_map[kem], kdf_map[kdf], aead_map[aead]
    except KeyError as e:
        raise ConfigurationError(f"Unsupported HPKE ciphersuite component: {e}") from e


def _hpke(kem: KEM, kdf: KDF, aead: AEAD) -> HPKE:
    kem_id, kdf_id, aead_id = map_hpke_enums(kem, kdf, aead)
    return HPKE(kem_id, kdf_id, aead_id)


def hpke_generate_key_pair(kem: KEM, kdf: KDF, aead: AEAD) -> Tuple[bytes, bytes]:
    """Generate a serialized (private_key, public_key) KEM key pair."""
    hpke = _hpke(kem, kdf, aead)
    sk, pk = hpke.generate_key_pair()
    return hpke.serialize_private_key(sk), hpke.serialize_public_key(pk)


def hpke_seal(
    kem: KEM,
    kdf: KDF,
    aead: AEAD,
    recipient_public_key: bytes,
    info: bytes,
    aad: bytes,
    plaintext: bytes,
) -> Tuple[bytes, bytes]:
    """HPKE base mode seal (encrypt for recipient).

    Returns:
        (kem_output, ciphertext) where kem_output is the encapsulated key share.
    """
    return _hpke(kem, kdf, aead).seal_base(recipient_public_key, info, aad, plaintext)


def hpke_open(
    kem: KEM,
    kdf: KDF,
    aead: AEAD,
    recipient_private_key: bytes,
    kem_output: bytes,
    info: bytes,
    aad: bytes,
    ciphertext: bytes,
) -> bytes:
    """HPKE base mode open (decrypt with recipient private key).

    Raises:
        InvalidTag: If decryption or authentication fails.
    """
    hpke = _hpke(kem, kdf, aead)
    try:
        return hpke.open_base(kem_output, recipient_private_key, info, aad, ciphertext)
    except OpenError as e:
        raise InvalidTag("Decryption failed") from e
