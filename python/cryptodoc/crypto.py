"""
Cryptographic primitives for password-protected documents.

This module provides:
- SecureKey: Secure key wrapper with automatic zeroization
- KeyDerivation / PaddedKeyDerivation: password -> 16-byte key
- generate_nonce: fresh random nonce per encryption
- AesGcmCipher: AES-GCM seal/open with a detached authentication tag
"""

from __future__ import annotations

import logging
import secrets
from abc import ABC, abstractmethod
from typing import NamedTuple, Optional, Tuple, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import CryptoError, RandomnessUnavailableError

logger = logging.getLogger(__name__)

# Cryptographic constants
KEY_SIZE: int = 16  # 128 bits
NONCE_SIZE: int = 12  # 96 bits (standard for AES-GCM)
TAG_SIZE: int = 16  # 128 bits (authentication tag)

# GCM encrypts the payload in counter mode starting from inc32(nonce || 1).
_FIRST_PAYLOAD_COUNTER: bytes = (2).to_bytes(4, "big")

Password = Union[bytes, bytearray, str]


class SecureKey:
    """
    Secure key wrapper with automatic memory cleanup on deletion.

    Uses bytearray internally for mutable zeroing in __del__.
    Note: Python's garbage collector doesn't guarantee immediate cleanup,
    so this is best-effort zeroization.
    """

    __slots__ = ("_bytes",)

    def __init__(self, key_bytes: bytes | bytearray) -> None:
        if not isinstance(key_bytes, (bytes, bytearray)):
            raise CryptoError("Key must be bytes or bytearray")
        self._bytes = bytearray(key_bytes)

    def as_bytes(self) -> bytes:
        """Return key as immutable bytes."""
        return bytes(self._bytes)

    def __len__(self) -> int:
        return len(self._bytes)

    def __repr__(self) -> str:
        """Redacted representation to prevent accidental key disclosure."""
        return "SecureKey([REDACTED])"

    def __del__(self) -> None:
        """Zero memory on deletion (best-effort)."""
        if hasattr(self, "_bytes"):
            for i in range(len(self._bytes)):
                self._bytes[i] = 0


def _password_bytes(password: Password) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    if isinstance(password, (bytes, bytearray)):
        return bytes(password)
    raise CryptoError(f"Password must be str or bytes, got {type(password).__name__}")


class KeyDerivation(ABC):
    """
    Maps a password to a KEY_SIZE symmetric key.

    Implementations must be deterministic: the same password always yields
    the same key, since nothing but the password is available on decrypt.
    """

    @abstractmethod
    def derive(self, password: Password) -> SecureKey:
        """Derive a key from ``password``."""
        ...


class PaddedKeyDerivation(KeyDerivation):
    """
    Fixed-width key derivation: zero-pad or truncate the password to 16 bytes.

    This is not a password-hashing KDF (no salt, no work factor). It is kept
    so existing ``.cryptodoc`` files stay readable; swap in another
    KeyDerivation to strengthen new documents.
    """

    def derive(self, password: Password) -> SecureKey:
        raw = _password_bytes(password)[:KEY_SIZE]
        return SecureKey(raw.ljust(KEY_SIZE, b"\x00"))


DEFAULT_KDF: KeyDerivation = PaddedKeyDerivation()


def derive_key(password: Password) -> SecureKey:
    """Derive the document key for ``password`` with the default policy."""
    return DEFAULT_KDF.derive(password)


def generate_nonce(length: int = NONCE_SIZE) -> bytes:
    """
    Generate a fresh nonce from the OS CSPRNG.

    Raises:
        CryptoError: If length is not positive
        RandomnessUnavailableError: If the random source cannot be read
    """
    if length <= 0:
        raise CryptoError(f"Nonce length must be positive, got {length}")
    try:
        return secrets.token_bytes(length)
    except (OSError, NotImplementedError) as e:
        raise RandomnessUnavailableError(f"Secure random source unavailable: {e}") from e


class OpenResult(NamedTuple):
    """Outcome of AesGcmCipher.open; ``plaintext`` is garbage unless ``authentic``."""

    authentic: bool
    plaintext: bytes


class AesGcmCipher:
    """
    AES-GCM authenticated encryption with a detached tag.

    Key size follows the derived key (16 bytes, AES-128). No associated data
    is bound unless ``aad`` is passed explicitly.
    """

    @staticmethod
    def _check_params(key: SecureKey, nonce: bytes) -> None:
        if len(key) != KEY_SIZE:
            raise CryptoError(f"Invalid key size: expected {KEY_SIZE}, got {len(key)}")
        if len(nonce) != NONCE_SIZE:
            raise CryptoError(f"Invalid nonce size: expected {NONCE_SIZE}, got {len(nonce)}")

    @staticmethod
    def seal(
        key: SecureKey,
        nonce: bytes,
        plaintext: bytes,
        aad: Optional[bytes] = None,
    ) -> Tuple[bytes, bytes]:
        """
        Encrypt plaintext under (key, nonce).

        The same (key, nonce) pair must never seal two different plaintexts.

        Args:
            key: 16-byte document key
            nonce: 12-byte nonce
            plaintext: Data to encrypt
            aad: Optional Additional Authenticated Data

        Returns:
            (ciphertext, tag) with len(ciphertext) == len(plaintext)

        Raises:
            CryptoError: If key or nonce size is invalid
        """
        AesGcmCipher._check_params(key, nonce)
        sealed = AESGCM(key.as_bytes()).encrypt(nonce, bytes(plaintext), aad)
        return sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]

    @staticmethod
    def open(
        key: SecureKey,
        nonce: bytes,
        ciphertext: bytes,
        tag: bytes,
        aad: Optional[bytes] = None,
    ) -> OpenResult:
        """
        Verify the tag and decrypt.

        A bad tag does not raise. The result carries ``authentic=False`` and the
        unverified counter-mode decryption, which callers must discard.

        Raises:
            CryptoError: If key, nonce or tag size is invalid
        """
        AesGcmCipher._check_params(key, nonce)
        if len(tag) != TAG_SIZE:
            raise CryptoError(f"Invalid tag size: expected {TAG_SIZE}, got {len(tag)}")

        try:
            plaintext = AESGCM(key.as_bytes()).decrypt(nonce, ciphertext + tag, aad)
        except InvalidTag:
            logger.debug("Tag verification failed for %d-byte ciphertext", len(ciphertext))
            return OpenResult(False, AesGcmCipher._ctr_decrypt(key, nonce, ciphertext))

        return OpenResult(True, plaintext)

    @staticmethod
    def _ctr_decrypt(key: SecureKey, nonce: bytes, ciphertext: bytes) -> bytes:
        decryptor = Cipher(
            algorithms.AES(key.as_bytes()),
            modes.CTR(nonce + _FIRST_PAYLOAD_COUNTER),
        ).decryptor()
        return decryptor.update(ciphertext) + decryptor.finalize()
