"""
Cryptodoc

Password-protected, tamper-evident document files for a small text editor.

Quick Start
-----------
```python
from cryptodoc import decrypt, encrypt

envelope = encrypt(b"hello world", "secret")
# e.g. "5f0c...e1/9a7b...33/c4d2...08"  (nonce/ciphertext/tag, hex)

authentic, plaintext = decrypt(envelope, "secret")
assert authentic and plaintext == b"hello world"

authentic, garbage = decrypt(envelope, "wrong")
assert not authentic  # never render or store `garbage`
```

Key Features
------------
- **AES-GCM**: Authenticated encryption with a detached 16-byte tag
- **Fresh Nonces**: 12 random bytes per encryption from the OS CSPRNG
- **Hex Envelope**: ``nonce/ciphertext/tag`` text stored in ``.cryptodoc`` files
- **Explicit Results**: Wrong password is a flag, malformed input is FormatError
- **Pluggable KDF**: Key derivation behind the KeyDerivation interface

Modules
-------
- `crypto`: Key derivation, nonce generation, AES-GCM seal/open
- `envelope`: Envelope text codec
- `document`: encrypt/decrypt and text helpers
- `storage`: Document storage backends
- `config`: Environment-driven settings
- `errors`: Error types and exception classes
"""

__version__ = "0.1.0"

# =============================================================================
# Crypto Exports
# =============================================================================

from .crypto import (
    KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    AesGcmCipher,
    KeyDerivation,
    OpenResult,
    PaddedKeyDerivation,
    SecureKey,
    derive_key,
    generate_nonce,
)

# =============================================================================
# Envelope Exports
# =============================================================================

from .envelope import (
    Envelope,
    deserialize,
    serialize,
)

# =============================================================================
# Document Exports (Primary API)
# =============================================================================

from .document import (
    DecryptResult,
    decrypt,
    decrypt_text,
    encrypt,
    encrypt_text,
)

# =============================================================================
# Error Exports
# =============================================================================

from .errors import (
    AuthenticationError,
    ConfigError,
    CryptoError,
    CryptodocError,
    DocumentDecodeError,
    DocumentNotFoundError,
    FormatError,
    RandomnessUnavailableError,
    StorageError,
)

# =============================================================================
# Storage Exports
# =============================================================================

from .storage import (
    DOCUMENT_SUFFIX,
    DocumentStorage,
    DocumentStore,
    FileSystemDocumentStorage,
    InMemoryDocumentStorage,
    load_save_folder,
    store_save_folder,
)

# =============================================================================
# Public API
# =============================================================================

__all__ = [
    # Version
    "__version__",
    # Crypto
    "KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
    "AesGcmCipher",
    "KeyDerivation",
    "OpenResult",
    "PaddedKeyDerivation",
    "SecureKey",
    "derive_key",
    "generate_nonce",
    # Envelope
    "Envelope",
    "serialize",
    "deserialize",
    # Document
    "DecryptResult",
    "encrypt",
    "decrypt",
    "encrypt_text",
    "decrypt_text",
    # Errors
    "CryptodocError",
    "CryptoError",
    "RandomnessUnavailableError",
    "FormatError",
    "AuthenticationError",
    "DocumentDecodeError",
    "StorageError",
    "DocumentNotFoundError",
    "ConfigError",
    # Storage
    "DOCUMENT_SUFFIX",
    "DocumentStorage",
    "DocumentStore",
    "FileSystemDocumentStorage",
    "InMemoryDocumentStorage",
    "load_save_folder",
    "store_save_folder",
]
