from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Tuple


class KEM(IntEnum):
    """HPKE key encapsulation mechanisms (RFC 9180 §7.1)."""
    DHKEM_P256_HKDF_SHA256 = 0x0010
    DHKEM_P384_HKDF_SHA384 = 0x0011
    DHKEM_P521_HKDF_SHA512 = 0x0012
    DHKEM_X25519_HKDF_SHA256 = 0x0020
    DHKEM_X448_HKDF_SHA512 = 0x0021


class KDF(IntEnum):
    """HPKE key derivation functions (RFC 9180 §7.2)."""
    HKDF_SHA256 = 0x0001
    HKDF_SHA384 = 0x0002
    HKDF_SHA512 = 0x0003


class AEAD(IntEnum):
    """AEAD algorithms for message content and HPKE (RFC 9180 §7.3)."""
    AES_128_GCM = 0x0001
    AES_256_GCM = 0x0002
    CHACHA20_POLY1305 = 0x0003


class SignatureScheme(Enum):
    """
    Signature schemes used to sign message data.
    Names include the curve and hash when applicable to avoid ambiguity.
    """

    ED25519 = "Ed25519"
    ED448 = "Ed448"
    ECDSA_SECP256R1_SHA256 = "ECDSA_SECP256R1_SHA256"
    ECDSA_SECP521R1_SHA512 = "ECDSA_SECP521R1_SHA512"


# Nenc for each DHKEM; the encapsulated key share is prefixed to sealed keys.
KEM_ENC_SIZES: Dict[KEM, int] = {
    KEM.DHKEM_P256_HKDF_SHA256: 65,
    KEM.DHKEM_P384_HKDF_SHA384: 97,
    KEM.DHKEM_P521_HKDF_SHA512: 133,
    KEM.DHKEM_X25519_HKDF_SHA256: 32,
    KEM.DHKEM_X448_HKDF_SHA512: 56,
}

AEAD_KEY_SIZES: Dict[AEAD, int] = {
    AEAD.AES_128_GCM: 16,
    AEAD.AES_256_GCM: 32,
    AEAD.CHACHA20_POLY1305: 32,
}


@dataclass(frozen=True)
class Ciphersuite:
    """
    Cipher suite combining the HPKE triple used to seal message keys, the AEAD
    used for message content, and the signature scheme used for message data.
    """

    suite_id: int
    name: str
    kem: KEM
    kdf: KDF
    aead: AEAD
    signature: SignatureScheme

    @property
    def triple(self) -> Tuple[KEM, KDF, AEAD]:
        return (self.kem, self.kdf, self.aead)

    @property
    def key_size(self) -> int:
        return AEAD_KEY_SIZES[self.aead]

    @property
    def enc_size(self) -> int:
        return KEM_ENC_SIZES[self.kem]


_REGISTRY_BY_ID: Dict[int, Ciphersuite] = {
    0x0001: Ciphersuite(
        suite_id=0x0001,
        name="DKD_128_DHKEMX25519_AES128GCM_SHA256_Ed25519",
        kem=KEM.DHKEM_X25519_HKDF_SHA256,
        kdf=KDF.HKDF_SHA256,
        aead=AEAD.AES_128_GCM,
        signature=SignatureScheme.ED25519,
    ),
    0x0002: Ciphersuite(
        suite_id=0x0002,
        name="DKD_128_DHKEMP256_AES128GCM_SHA256_P256",
        kem=KEM.DHKEM_P256_HKDF_SHA256,
        kdf=KDF.HKDF_SHA256,
        aead=AEAD.AES_128_GCM,
        signature=SignatureScheme.ECDSA_SECP256R1_SHA256,
    ),
    0x0003: Ciphersuite(
        suite_id=0x0003,
        name="DKD_128_DHKEMX25519_CHACHAPOLY_SHA256_Ed25519",
        kem=KEM.DHKEM_X25519_HKDF_SHA256,
        kdf=KDF.HKDF_SHA256,
        aead=AEAD.CHACHA20_POLY1305,
        signature=SignatureScheme.ED25519,
    ),
    0x0004: Ciphersuite(
        suite_id=0x0004,
        name="DKD_256_DHKEMX448_AES256GCM_SHA512_Ed448",
        kem=KEM.DHKEM_X448_HKDF_SHA512,
        kdf=KDF.HKDF_SHA512,
        aead=AEAD.AES_256_GCM,
        signature=SignatureScheme.ED448,
    ),
    0x0005: Ciphersuite(
        suite_id=0x0005,
        name="DKD_256_DHKEMP521_AES256GCM_SHA512_P521",
        kem=KEM.DHKEM_P521_HKDF_SHA512,
        kdf=KDF.HKDF_SHA512,
        aead=AEAD.AES_256_GCM,
        signature=SignatureScheme.ECDSA_SECP521R1_SHA512,
    ),
}

_REGISTRY_BY_NAME: Dict[str, Ciphersuite] = {
    cs.name: cs for cs in _REGISTRY_BY_ID.values()
}

DEFAULT_CIPHERSUITE_ID = 0x0001


def get_ciphersuite_by_id(suite_id: int) -> Optional[Ciphersuite]:
    return _REGISTRY_BY_ID.get(suite_id)


def get_ciphersuite_by_name(name: str) -> Optional[Ciphersuite]:
    return _REGISTRY_BY_NAME.get(name)


def list_ciphersuite_ids() -> List[int]:
    return sorted(_REGISTRY_BY_ID.keys())
