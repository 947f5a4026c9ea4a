"""
Crypto capability provider protocol definition.

The workflow core treats OpenPGP primitives as black boxes behind this interface,
so the underlying library (pgpy, python-gnupg, ...) can be swapped without
changing the state machine.
"""

from typing import Protocol, runtime_checkable

from pgp_workflow.models.operation import VerificationResult


@runtime_checkable
class KeyHandle(Protocol):
    """Protocol for a parsed key object."""

    @property
    def is_private(self) -> bool:
        """Whether the key carries secret material."""
        ...

    @property
    def is_locked(self) -> bool:
        """Whether the secret material is protected by a passphrase."""
        ...

    @property
    def user_ids(self) -> tuple[str, ...]:
        """User ID strings bound to the key, possibly empty."""
        ...

    @property
    def fingerprint(self) -> str:
        """Get the key fingerprint."""
        ...


@runtime_checkable
class UnlockedKeyHandle(KeyHandle, Protocol):
    """Protocol for a private key whose secret material is usable."""

    def wipe(self) -> None:
        """Discard the unlocked secret material. Idempotent."""
        ...


@runtime_checkable
class CryptoProvider(Protocol):
    """
    Abstract interface for the asynchronous OpenPGP capability calls.

    Every method must return control to the event loop while the primitive runs.
    Implementations own no workflow state and return results by value.
    """

    async def parse_key(self, armored_key: str) -> KeyHandle:
        """
        Parse an ASCII-armored public or private key.

        Raises:
            KeyParseError: If the key is malformed or unsupported.
        """
        ...

    async def unlock_key(self, key: KeyHandle, passphrase: str) -> UnlockedKeyHandle:
        """
        Unlock a private key with its passphrase.

        Raises:
            UnlockError: If the passphrase is wrong or the key is corrupt.
        """
        ...

    async def encrypt(self, plaintext: str, key: KeyHandle) -> str:
        """
        Encrypt plaintext to the public half of `key`.

        Returns:
            ASCII-armored PGP message.

        Raises:
            EncryptError: If encryption fails.
        """
        ...

    async def decrypt(self, armored_message: str, key: UnlockedKeyHandle) -> str:
        """
        Decrypt an ASCII-armored PGP message.

        Raises:
            DecryptError: With reason INTEGRITY, MALFORMED or NO_MATCHING_KEY.
        """
        ...

    async def sign(self, plaintext: str, key: UnlockedKeyHandle) -> str:
        """
        Produce a cleartext-signed message.

        Raises:
            SignError: If signing fails.
        """
        ...

    async def verify(self, armored_signed: str, key: KeyHandle) -> VerificationResult:
        """
        Check a cleartext-signed message against the public half of `key`.

        A signature that does not verify is a result, not an error.

        Raises:
            VerifyError: If the message cannot be parsed.
        """
        ...
