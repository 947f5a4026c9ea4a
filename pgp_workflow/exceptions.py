"""
PGP workflow exception hierarchy.

All exceptions inherit from PGPWorkflowError for easy catching.
"""

from typing import Any

from pgp_workflow.models.operation import DecryptFailure, ErrorKind


class PGPWorkflowError(Exception):
    """Base exception for all pgp_workflow errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class CryptoError(PGPWorkflowError):
    """A crypto capability call failed."""

    kind: ErrorKind = ErrorKind.ENCRYPT


class KeyParseError(CryptoError):
    """Key material is malformed or unsupported."""

    kind = ErrorKind.KEY_PARSE


class UnlockError(CryptoError):
    """Wrong passphrase or corrupt locked key."""

    kind = ErrorKind.UNLOCK


class EncryptError(CryptoError):
    """Encryption failed."""

    kind = ErrorKind.ENCRYPT


class DecryptError(CryptoError):
    """Decryption failed."""

    def __init__(self, message: str, *, reason: DecryptFailure = DecryptFailure.UNKNOWN) -> None:
        super().__init__(message, reason=reason.value)
        self.reason = reason

    @property
    def kind(self) -> ErrorKind:  # type: ignore[override]
        match self.reason:
            case DecryptFailure.INTEGRITY:
                return ErrorKind.DECRYPT_INTEGRITY
            case DecryptFailure.MALFORMED:
                return ErrorKind.DECRYPT_MALFORMED
            case _:
                return ErrorKind.DECRYPT


class SignError(CryptoError):
    """Signing failed."""

    kind = ErrorKind.SIGN


class VerifyError(CryptoError):
    """The signed message could not be checked at all (malformed input)."""

    kind = ErrorKind.VERIFY
