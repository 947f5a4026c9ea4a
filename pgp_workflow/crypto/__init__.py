"""
Cryptographic capabilities for the PGP workflow.

This module provides:
- The crypto capability provider protocol
- A pgpy-backed provider
- Secure passphrase handling
"""

from pgp_workflow.crypto.pgpy_backend import PgpyBackend, PgpyKey, PgpyUnlockedKey
from pgp_workflow.crypto.protocol import CryptoProvider, KeyHandle, UnlockedKeyHandle
from pgp_workflow.crypto.secure_bytes import SecureBytes

__all__ = [
    "SecureBytes",
    "CryptoProvider",
    "KeyHandle",
    "UnlockedKeyHandle",
    "PgpyBackend",
    "PgpyKey",
    "PgpyUnlockedKey",
]
