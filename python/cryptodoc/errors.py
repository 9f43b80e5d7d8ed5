"""
Exception classes for encrypted document operations.

Authentication failure is deliberately absent from the low-level API:
``decrypt`` reports it through ``DecryptResult.authentic``. ``AuthenticationError``
is only raised by the text helpers, which must never hand back unverified bytes.
"""

from __future__ import annotations


class CryptodocError(Exception):
    """Base exception for all cryptodoc operations."""

    pass


class CryptoError(CryptodocError):
    """Cryptographic primitive misused (bad key, nonce or argument type)."""

    pass


class RandomnessUnavailableError(CryptoError):
    """The platform's secure random source could not be read."""

    pass


class FormatError(CryptodocError, ValueError):
    """Envelope text is not three hex fields of the expected lengths."""

    pass


class AuthenticationError(CryptodocError):
    """Wrong password or corrupted document."""

    pass


class DocumentDecodeError(CryptodocError):
    """Authentic plaintext is not valid text in the requested encoding."""

    pass


class StorageError(CryptodocError):
    """Document storage backend error (filesystem, in-memory)."""

    pass


class DocumentNotFoundError(StorageError):
    """Document not found in storage."""

    pass


class ConfigError(CryptodocError):
    """Configuration error."""

    pass
