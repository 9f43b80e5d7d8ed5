"""
Envelope codec for encrypted documents.

An envelope is the text persisted to a ``.cryptodoc`` file::

    <hex(nonce)>/<hex(ciphertext)>/<hex(tag)>

Lowercase hex on output, no whitespace, no trailing delimiter. The password
is never part of the envelope.
"""

from __future__ import annotations

import binascii
from dataclasses import dataclass

from .crypto import NONCE_SIZE, TAG_SIZE
from .errors import FormatError

DELIMITER = "/"

_FIELD_NAMES = ("nonce", "ciphertext", "tag")


@dataclass(frozen=True)
class Envelope:
    """Nonce, ciphertext and detached tag of one encrypted document."""

    nonce: bytes  # 12 bytes
    ciphertext: bytes  # same length as the plaintext
    tag: bytes  # 16 bytes

    def to_string(self) -> str:
        """Encode as ``nonce/ciphertext/tag`` hex text."""
        return DELIMITER.join(
            field.hex() for field in (self.nonce, self.ciphertext, self.tag)
        )

    @classmethod
    def from_string(cls, text: str) -> Envelope:
        """
        Parse envelope text.

        Args:
            text: Envelope produced by to_string

        Returns:
            Envelope instance

        Raises:
            FormatError: If the text is not three hex fields, or the nonce or
                tag has the wrong length
        """
        if not isinstance(text, str):
            raise FormatError(f"Envelope must be text, got {type(text).__name__}")

        fields = text.split(DELIMITER)
        if len(fields) != len(_FIELD_NAMES):
            raise FormatError(
                f"Envelope must have {len(_FIELD_NAMES)} fields, got {len(fields)}"
            )

        nonce, ciphertext, tag = (
            _unhex(name, value) for name, value in zip(_FIELD_NAMES, fields)
        )

        if len(nonce) != NONCE_SIZE:
            raise FormatError(f"Invalid nonce size: expected {NONCE_SIZE}, got {len(nonce)}")
        if len(tag) != TAG_SIZE:
            raise FormatError(f"Invalid tag size: expected {TAG_SIZE}, got {len(tag)}")

        return cls(nonce=nonce, ciphertext=ciphertext, tag=tag)


def _unhex(name: str, value: str) -> bytes:
    # unhexlify rejects whitespace, which bytes.fromhex would skip
    try:
        return binascii.unhexlify(value)
    except ValueError as e:
        raise FormatError(f"Envelope {name} field is not valid hex") from e


def serialize(nonce: bytes, ciphertext: bytes, tag: bytes) -> str:
    """Hex-encode the three fields and join them with ``/``."""
    return Envelope(nonce=bytes(nonce), ciphertext=bytes(ciphertext), tag=bytes(tag)).to_string()


def deserialize(text: str) -> Envelope:
    """Parse envelope text; see Envelope.from_string."""
    return Envelope.from_string(text)
