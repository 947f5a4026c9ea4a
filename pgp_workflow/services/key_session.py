"""
Key session lifecycle.

Owns one pasted key from parse to unlock to clear:
UNSET → PUBLIC | PRIVATE_LOCKED | INVALID, PRIVATE_LOCKED → PRIVATE_UNLOCKED.
Superseded parse and unlock results are dropped on arrival.
"""

from typing import Self

import structlog

from pgp_workflow.core.generation import Generation
from pgp_workflow.crypto.protocol import CryptoProvider, KeyHandle, UnlockedKeyHandle
from pgp_workflow.exceptions import UnlockError
from pgp_workflow.models.key import KeyKind, KeySummary

logger = structlog.get_logger(__name__)


class KeySession:
    """
    The currently loaded key.

    Concurrency:
    - `load()` and `unlock()` each tag their call with a generation; only the latest
      call's result is applied, whatever order the provider answers in
    - `clear()` and a new `load()` invalidate every pending call immediately
    """

    def __init__(self, provider: CryptoProvider) -> None:
        """
        Args:
            provider: Crypto capability provider used to parse and unlock.
        """
        self._provider = provider

        self._raw_text = ""
        self._kind = KeyKind.UNSET
        self._handle: KeyHandle | None = None
        self._unlocked: UnlockedKeyHandle | None = None
        self._invalid_reason: str | None = None
        self._unlock_error: str | None = None

        self._load_generation = Generation()
        self._unlock_generation = Generation()
        self._loading = False
        self._unlocking = False

    @property
    def raw_text(self) -> str:
        return self._raw_text

    @property
    def kind(self) -> KeyKind:
        return self._kind

    @property
    def handle(self) -> KeyHandle | None:
        """Parsed key, None unless kind is PUBLIC or private."""
        return self._handle

    @property
    def unlocked_handle(self) -> UnlockedKeyHandle | None:
        """Unlocked private key, None unless kind is PRIVATE_UNLOCKED."""
        return self._unlocked

    @property
    def display_identity(self) -> tuple[str, ...]:
        if self._handle is None:
            return ()
        return self._handle.user_ids

    @property
    def invalid_reason(self) -> str | None:
        return self._invalid_reason

    @property
    def unlock_error(self) -> str | None:
        return self._unlock_error

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_unlocking(self) -> bool:
        return self._unlocking

    def summary(self) -> KeySummary:
        """Build a read-only summary for the presentation layer."""
        return KeySummary(
            kind=self._kind,
            display_identity=self.display_identity,
            fingerprint=self._handle.fingerprint if self._handle is not None else None,
            invalid_reason=self._invalid_reason,
            unlock_error=self._unlock_error,
            loading=self._loading,
            unlocking=self._unlocking,
        )

    async def load(self, text: str) -> Self:
        """
        Parse `text` as an OpenPGP key.

        The previous key state is dropped before parsing starts. Blank text leaves
        the session UNSET without calling the provider. Parse failures set kind to
        INVALID; they are never raised.

        Args:
            text: Pasted key text.

        Returns:
            This session.
        """
        generation = self._load_generation.next()
        self._reset(raw_text=text)
        if not text.strip():
            return self

        self._loading = True
        try:
            handle = await self._provider.parse_key(text)
            unlocked = None
            if handle.is_private and not handle.is_locked:
                unlocked = await self._provider.unlock_key(handle, "")
        except Exception as e:
            if not self._load_generation.is_current(generation):
                logger.debug("Discarding superseded key parse", generation=generation)
                return self
            self._loading = False
            self._kind = KeyKind.INVALID
            self._invalid_reason = str(e)
            logger.warning("Key could not be parsed", error_type=type(e).__name__)
            return self

        if not self._load_generation.is_current(generation):
            logger.debug("Discarding superseded key parse", generation=generation)
            if unlocked is not None:
                unlocked.wipe()
            return self

        self._loading = False
        self._handle = handle
        if not handle.is_private:
            self._kind = KeyKind.PUBLIC
        elif unlocked is None:
            self._kind = KeyKind.PRIVATE_LOCKED
        else:
            self._unlocked = unlocked
            self._kind = KeyKind.PRIVATE_UNLOCKED
        logger.info("Key loaded", kind=self._kind.value, fingerprint=handle.fingerprint)
        return self

    async def unlock(self, passphrase: str) -> bool:
        """
        Unlock the private key with `passphrase`.

        A later call supersedes this one: if another unlock, load or clear happens
        before the provider answers, the answer is dropped and False is returned.

        Args:
            passphrase: Key passphrase.

        Returns:
            True if this call's result was applied (the key is now unlocked),
            False if it was superseded.

        Raises:
            ValueError: If the key is not a locked private key.
            UnlockError: If the passphrase is wrong or the key is corrupt.
        """
        if self._kind is not KeyKind.PRIVATE_LOCKED or self._handle is None:
            msg = f"Cannot unlock a key in state {self._kind.value}"
            raise ValueError(msg)

        generation = self._unlock_generation.next()
        self._unlocking = True
        try:
            unlocked = await self._provider.unlock_key(self._handle, passphrase)
        except Exception as e:
            if not self._unlock_generation.is_current(generation):
                logger.debug("Discarding superseded unlock", generation=generation)
                return False
            self._unlocking = False
            self._unlock_error = str(e)
            logger.warning("Key unlock failed", error_type=type(e).__name__)
            if isinstance(e, UnlockError):
                raise
            msg = f"Failed to unlock key: {e}"
            raise UnlockError(msg) from e

        if not self._unlock_generation.is_current(generation):
            logger.debug("Discarding superseded unlock", generation=generation)
            unlocked.wipe()
            return False

        self._unlocking = False
        self._unlocked = unlocked
        self._unlock_error = None
        self._kind = KeyKind.PRIVATE_UNLOCKED
        logger.info("Key unlocked", fingerprint=unlocked.fingerprint)
        return True

    def clear(self) -> None:
        """Reset to UNSET, wipe unlocked key material and invalidate pending calls."""
        self._load_generation.next()
        self._reset(raw_text="")
        logger.debug("Key session cleared")

    def _reset(self, *, raw_text: str) -> None:
        self._unlock_generation.next()
        if self._unlocked is not None:
            self._unlocked.wipe()
        self._raw_text = raw_text
        self._kind = KeyKind.UNSET
        self._handle = None
        self._unlocked = None
        self._invalid_reason = None
        self._unlock_error = None
        self._loading = False
        self._unlocking = False
