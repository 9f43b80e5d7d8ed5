"""
Password-based document encryption.

Encrypt: derive key -> fresh nonce -> AES-GCM seal -> envelope text.
Decrypt: parse envelope -> derive key -> AES-GCM open.

``decrypt`` does not raise on a wrong password. It returns a DecryptResult
whose ``authentic`` flag must be checked before the plaintext is used.
"""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from .crypto import AesGcmCipher, DEFAULT_KDF, KeyDerivation, NONCE_SIZE, Password, generate_nonce
from .envelope import Envelope
from .errors import AuthenticationError, DocumentDecodeError

logger = logging.getLogger(__name__)


class DecryptResult(NamedTuple):
    """Authenticity flag plus decrypted bytes (garbage when not authentic)."""

    authentic: bool
    plaintext: bytes

    def text(self, encoding: str = "utf-8") -> str:
        """
        Return the plaintext as text.

        Raises:
            AuthenticationError: If the tag did not verify
            DocumentDecodeError: If authentic bytes are not valid ``encoding``
        """
        if not self.authentic:
            raise AuthenticationError("Password is incorrect or the document is corrupted")
        try:
            return self.plaintext.decode(encoding)
        except UnicodeDecodeError as e:
            raise DocumentDecodeError(f"Document is not valid {encoding} text") from e


def encrypt(plaintext: bytes, password: Password, *, kdf: Optional[KeyDerivation] = None) -> str:
    """
    Encrypt a document and return its envelope text.

    Raises:
        RandomnessUnavailableError: If no secure nonce can be generated
    """
    key = (kdf or DEFAULT_KDF).derive(password)
    nonce = generate_nonce(NONCE_SIZE)
    ciphertext, tag = AesGcmCipher.seal(key, nonce, plaintext)
    logger.debug("Encrypted %d-byte document", len(ciphertext))
    return Envelope(nonce=nonce, ciphertext=ciphertext, tag=tag).to_string()


def decrypt(envelope: str, password: Password, *, kdf: Optional[KeyDerivation] = None) -> DecryptResult:
    """
    Decrypt envelope text.

    Raises:
        FormatError: If the envelope cannot be parsed
    """
    parsed = Envelope.from_string(envelope)
    key = (kdf or DEFAULT_KDF).derive(password)
    result = AesGcmCipher.open(key, parsed.nonce, parsed.ciphertext, parsed.tag)
    if not result.authentic:
        logger.info("Document failed authentication")
    return DecryptResult(result.authentic, result.plaintext)


def encrypt_text(text: str, password: Password, *, kdf: Optional[KeyDerivation] = None) -> str:
    """Encrypt a text document (UTF-8)."""
    return encrypt(text.encode("utf-8"), password, kdf=kdf)


def decrypt_text(envelope: str, password: Password, *, kdf: Optional[KeyDerivation] = None) -> str:
    """
    Decrypt a text document.

    Raises:
        FormatError: If the envelope cannot be parsed
        AuthenticationError: If the password is wrong or the document was altered
        DocumentDecodeError: If the document is not UTF-8 text
    """
    return decrypt(envelope, password, kdf=kdf).text()
