"""
Crypto capability provider implementation using pgpy library.

pgpy is synchronous, so each primitive runs in a worker thread. Calls are
serialized because pgpy key objects are mutated while unlocked.
"""

import asyncio
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, TypeVar

import pgpy
import structlog
from pgpy.errors import PGPDecryptionError, PGPError

from pgp_workflow.crypto.secure_bytes import SecureBytes
from pgp_workflow.exceptions import (
    DecryptError,
    EncryptError,
    KeyParseError,
    SignError,
    UnlockError,
    VerifyError,
)
from pgp_workflow.models.operation import DecryptFailure, VerificationResult

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class PgpyKey:
    """Wrapper around pgpy.PGPKey to implement KeyHandle protocol."""

    _key: pgpy.PGPKey

    @property
    def is_private(self) -> bool:
        return not self._key.is_public

    @property
    def is_locked(self) -> bool:
        return self.is_private and self._key.is_protected

    @property
    def user_ids(self) -> tuple[str, ...]:
        return tuple(uid.userid for uid in self._key.userids if uid.userid)

    @property
    def fingerprint(self) -> str:
        return str(self._key.fingerprint)

    @property
    def pgpy_key(self) -> pgpy.PGPKey:
        return self._key


@dataclass
class PgpyUnlockedKey(PgpyKey):
    """
    A private key proven to open with `_passphrase`.

    pgpy only exposes secret material inside `PGPKey.unlock()`, so the passphrase
    is kept and the key is re-opened for each operation.
    """

    _passphrase: SecureBytes = field(default_factory=lambda: SecureBytes(b""))

    @property
    def is_locked(self) -> bool:
        return False

    def wipe(self) -> None:
        self._passphrase.clear()

    @contextmanager
    def unlocked(self) -> Iterator[pgpy.PGPKey]:
        """Yield the pgpy key with its secret material available."""
        if not self._key.is_protected:
            yield self._key
            return
        with self._key.unlock(self._passphrase.decode()):
            yield self._key


class PgpyBackend:
    """
    Crypto capability provider implementation using pgpy.

    Example:
        provider = PgpyBackend()
        key = await provider.parse_key(armored_key)
        unlocked = await provider.unlock_key(key, "passphrase")
        signed = await provider.sign("Hello", unlocked)
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    async def parse_key(self, armored_key: str) -> PgpyKey:
        return await self._run(self._parse_key, armored_key)

    async def unlock_key(self, key: PgpyKey, passphrase: str) -> PgpyUnlockedKey:
        return await self._run(self._unlock_key, key, passphrase)

    async def encrypt(self, plaintext: str, key: PgpyKey) -> str:
        return await self._run(self._encrypt, plaintext, key)

    async def decrypt(self, armored_message: str, key: PgpyUnlockedKey) -> str:
        return await self._run(self._decrypt, armored_message, key)

    async def sign(self, plaintext: str, key: PgpyUnlockedKey) -> str:
        return await self._run(self._sign, plaintext, key)

    async def verify(self, armored_signed: str, key: PgpyKey) -> VerificationResult:
        return await self._run(self._verify, armored_signed, key)

    async def _run(self, func: Callable[..., T], *args: object) -> T:
        async with self._lock:
            return await asyncio.to_thread(func, *args)

    @staticmethod
    def _parse_key(armored_key: str) -> PgpyKey:
        """
        Load a key from ASCII-armored format.

        Raises:
            KeyParseError: If the key cannot be parsed.
        """
        try:
            key, _ = pgpy.PGPKey.from_blob(armored_key)
        except Exception as e:
            msg = f"Failed to load key: {e}"
            raise KeyParseError(msg) from e
        return PgpyKey(_key=key)

    @staticmethod
    def _unlock_key(key: PgpyKey, passphrase: str) -> PgpyUnlockedKey:
        """
        Check the passphrase against the key.

        Raises:
            UnlockError: If the key is public or the passphrase is incorrect.
        """
        if not key.is_private:
            msg = "Public keys cannot be unlocked"
            raise UnlockError(msg)
        if not key.pgpy_key.is_protected:
            return PgpyUnlockedKey(_key=key.pgpy_key)
        try:
            with key.pgpy_key.unlock(passphrase):
                pass
        except Exception as e:
            msg = f"Failed to unlock key: {e}"
            raise UnlockError(msg) from e
        return PgpyUnlockedKey(_key=key.pgpy_key, _passphrase=SecureBytes.from_string(passphrase))

    @staticmethod
    def _encrypt(plaintext: str, key: PgpyKey) -> str:
        try:
            message = pgpy.PGPMessage.new(plaintext)
            return str(key.pgpy_key.pubkey.encrypt(message))
        except Exception as e:
            msg = f"Encryption failed: {e}"
            raise EncryptError(msg) from e

    def _decrypt(self, armored_message: str, key: PgpyUnlockedKey) -> str:
        """
        Decrypt a PGP message.

        Raises:
            DecryptError: MALFORMED when the armor does not hold a readable encrypted message,
                INTEGRITY when the ciphertext fails to decrypt, NO_MATCHING_KEY when
                the message was not encrypted to this key.
        """
        try:
            message = pgpy.PGPMessage.from_blob(armored_message)
        except Exception as e:
            msg = f"Malformed encrypted message: {e}"
            raise DecryptError(msg, reason=DecryptFailure.MALFORMED) from e
        if not message.is_encrypted:
            msg = "Message is not encrypted"
            raise DecryptError(msg, reason=DecryptFailure.MALFORMED)

        try:
            with key.unlocked() as pgpy_key:
                decrypted = pgpy_key.decrypt(message)
        except PGPDecryptionError as e:
            msg = f"Failed to decrypt message: {e}"
            raise DecryptError(msg, reason=DecryptFailure.INTEGRITY) from e
        except PGPError as e:
            msg = f"Message cannot be decrypted with this key: {e}"
            raise DecryptError(msg, reason=DecryptFailure.NO_MATCHING_KEY) from e
        except ValueError as e:
            msg = f"Damaged encrypted message: {e}"
            raise DecryptError(msg, reason=DecryptFailure.MALFORMED) from e
        except Exception as e:
            msg = f"Decryption failed: {e}"
            raise DecryptError(msg) from e
        return self._normalize_text(decrypted.message)

    @staticmethod
    def _sign(plaintext: str, key: PgpyUnlockedKey) -> str:
        try:
            message = pgpy.PGPMessage.new(plaintext, cleartext=True)
            with key.unlocked() as pgpy_key:
                message |= pgpy_key.sign(message)
            return str(message)
        except Exception as e:
            msg = f"Signing failed: {e}"
            raise SignError(msg) from e

    def _verify(self, armored_signed: str, key: PgpyKey) -> VerificationResult:
        """
        Verify a cleartext-signed message.

        Raises:
            VerifyError: If the message cannot be parsed or carries no signature.
        """
        try:
            message = pgpy.PGPMessage.from_blob(armored_signed)
        except Exception as e:
            msg = f"Malformed signed message: {e}"
            raise VerifyError(msg) from e
        if not message.is_signed:
            msg = "Message carries no signature"
            raise VerifyError(msg)

        text = self._normalize_text(message.message)
        try:
            verification = key.pgpy_key.pubkey.verify(message)
        except PGPError:
            logger.debug("No signature by this key", fingerprint=key.fingerprint)
            return VerificationResult(verified=False, text=text)
        except Exception as e:
            msg = f"Verification failed: {e}"
            raise VerifyError(msg) from e

        verified = bool(verification) and any(True for _ in verification.good_signatures)
        return VerificationResult(
            verified=verified,
            signer_identity=key.user_ids if verified else (),
            text=text,
        )

    @staticmethod
    def _normalize_text(content: bytes | str | bytearray) -> str:
        if isinstance(content, (bytes, bytearray)):
            return bytes(content).decode("utf-8", errors="replace")
        return content
