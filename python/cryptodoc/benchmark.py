"""
Cryptodoc Benchmark CLI.

Usage:
    cryptodoc-benchmark

Or run directly:
    python -m cryptodoc.benchmark

Parameters come from the environment or a .env file:
    CRYPTODOC_BENCH_ITERATIONS (default 1000)
    CRYPTODOC_BENCH_DOC_SIZE   (default 4096 bytes)
"""

from __future__ import annotations

import asyncio
import secrets
import sys
import tempfile
import time
from typing import Callable

from cryptodoc.config import load_settings
from cryptodoc.crypto import derive_key
from cryptodoc.document import decrypt, encrypt
from cryptodoc.envelope import Envelope
from cryptodoc.errors import ConfigError
from cryptodoc.logging_config import configure_logging
from cryptodoc.storage import DocumentStore, FileSystemDocumentStorage


def _time_op(iterations: int, op: Callable[[], object]) -> float:
    start = time.perf_counter()
    for _ in range(iterations):
        op()
    return time.perf_counter() - start


def _report(label: str, iterations: int, duration: float) -> str:
    rate = f"{iterations / duration:.2f}"
    print(f"[PERF] {label}: {duration * 1000:.3f}ms total | {rate} ops/sec")
    return rate


async def run_benchmark() -> None:
    """Run the document encryption benchmark."""
    print("=== Cryptodoc Benchmark ===\n")

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    configure_logging(settings.log_level)

    iterations = settings.bench_iterations
    doc_size = settings.bench_doc_size
    print(f"Testing with {iterations} iterations on {doc_size}-byte documents\n")

    password = "benchmark password"
    plaintext = secrets.token_bytes(doc_size)
    envelope = encrypt(plaintext, password)

    print("=" * 70)
    print("                    BENCHMARK START")
    print("=" * 70 + "\n")

    # ========================================================================
    # Demo 1: Key derivation
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Demo 1: Key Derivation                                           |")
    print("+" + "-" * 68 + "+")

    kdf_rate = _report("Derive", iterations, _time_op(iterations, lambda: derive_key(password)))
    print()

    # ========================================================================
    # Demo 2: Encryption/Decryption
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Demo 2: Encryption/Decryption Benchmark                          |")
    print("+" + "-" * 68 + "+")

    enc_rate = _report("Encryption", iterations, _time_op(iterations, lambda: encrypt(plaintext, password)))
    dec_rate = _report("Decryption", iterations, _time_op(iterations, lambda: decrypt(envelope, password)))

    authentic, recovered = decrypt(envelope, password)
    if not authentic or recovered != plaintext:
        print("[ERROR] Round-trip mismatch")
        sys.exit(1)
    print("[OK] Data encrypted/decrypted successfully\n")

    # ========================================================================
    # Demo 3: Wrong password detection
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Demo 3: Wrong Password Detection                                 |")
    print("+" + "-" * 68 + "+")

    wrong_rate = _report(
        "Rejection", iterations, _time_op(iterations, lambda: decrypt(envelope, "not the password"))
    )
    if decrypt(envelope, "not the password").authentic:
        print("[ERROR] Wrong password was accepted")
        sys.exit(1)
    print("[OK] Wrong password rejected\n")

    # ========================================================================
    # Demo 4: Envelope parsing
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Demo 4: Envelope Parsing                                         |")
    print("+" + "-" * 68 + "+")

    parse_rate = _report("Parse", iterations, _time_op(iterations, lambda: Envelope.from_string(envelope)))
    print()

    # ========================================================================
    # Demo 5: File round-trip
    # ========================================================================
    print("+" + "-" * 68 + "+")
    print("|  Demo 5: Save/Open .cryptodoc Files                               |")
    print("+" + "-" * 68 + "+")

    file_ops = min(100, iterations)
    with tempfile.TemporaryDirectory() as tmp:
        store = DocumentStore(FileSystemDocumentStorage(tmp))
        file_start = time.perf_counter()
        for i in range(file_ops):
            await store.save_document(f"doc-{i}", plaintext, password)
            result = await store.open_document(f"doc-{i}", password)
            if not result.authentic:
                print(f"[ERROR] doc-{i} failed authentication")
                sys.exit(1)
        file_duration = time.perf_counter() - file_start
    file_rate = _report("Save+Open", file_ops, file_duration)
    print()

    # ========================================================================
    # Summary
    # ========================================================================
    print("=" * 70)
    print("                    BENCHMARK SUMMARY")
    print("=" * 70 + "\n")

    print("+- Performance Summary ---------------------------------------------+")
    print("|                                                                    |")
    for label, rate in (
        ("Key Derivation:", kdf_rate),
        ("Encryption:", enc_rate),
        ("Decryption:", dec_rate),
        ("Rejection:", wrong_rate),
        ("Envelope Parse:", parse_rate),
        ("File Save+Open:", file_rate),
    ):
        print(f"|  {label:<18} {rate} ops/sec" + " " * (37 - len(rate)) + "|")
    print("|                                                                    |")
    print("+--------------------------------------------------------------------+")

    print("\nTest Configuration:")
    print(f"  - Iterations: {iterations}")
    print(f"  - Document size: {doc_size} bytes")
    print("  - Crypto: AES-128-GCM, 12-byte nonce, 16-byte tag")
    print("  - Envelope: hex(nonce)/hex(ciphertext)/hex(tag)")

    print("\n" + "=" * 70)
    print("                    BENCHMARK COMPLETE")
    print("=" * 70 + "\n")


def main() -> None:
    """CLI entry point for cryptodoc-benchmark command."""
    asyncio.run(run_benchmark())


if __name__ == "__main__":
    main()
