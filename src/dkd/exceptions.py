"""Exception hierarchy for the dkd message transform protocol."""
from __future__ import annotations


class DKDError(Exception):
    """Base class for all dkd errors."""


class MalformedMessageError(DKDError):
    """A message is missing required fields, or they have the wrong type, for the requested operation."""


class MissingKeyError(DKDError):
    """No symmetric key could be resolved for decryption (neither 'key' nor 'keys[member]')."""


class KeyDecryptionError(DKDError):
    """The encrypted symmetric key could not be decrypted with the expected private key."""


class ContentDecryptionError(DKDError):
    """Message content could not be decrypted or authenticated."""


class SignatureVerificationError(DKDError):
    """The signature over a message's data did not verify."""


class UnsupportedCipherSuiteError(DKDError):
    """The requested cipher suite is unknown or not supported."""


class ConfigurationError(DKDError):
    """A crypto provider was configured with unsupported parameters."""


class IdentityNotFoundError(DKDError):
    """No key material is registered for the requested identifier."""
