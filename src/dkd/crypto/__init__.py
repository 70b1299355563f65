"""Crypto capability interface and the cryptography/rfc9180-py reference provider.

The reference provider is imported lazily so that the protocol layer does not
require rfc9180-py.
"""

from .crypto_provider import CryptoProvider

__all__ = ["CryptoProvider"]
