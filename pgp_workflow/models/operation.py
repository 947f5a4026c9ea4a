"""
Operation domain models.

Modes, operation status and the result values published by the orchestrator.
"""

from dataclasses import dataclass
from enum import StrEnum


class Mode(StrEnum):
    """Operating mode derived from the key and message state."""

    IDLE = "idle"
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    SIGN = "sign"
    VERIFY = "verify"

    @property
    def requires_secret(self) -> bool:
        """Whether this mode needs an unlocked private key."""
        return self in (Mode.DECRYPT, Mode.SIGN)


class OperationStatus(StrEnum):
    PENDING = "pending"
    AWAITING_UNLOCK = "awaiting_unlock"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (OperationStatus.SUCCEEDED, OperationStatus.FAILED)


class ErrorKind(StrEnum):
    """Category of a failed crypto capability call."""

    KEY_PARSE = "key_parse"
    UNLOCK = "unlock"
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    DECRYPT_INTEGRITY = "decrypt_integrity"
    DECRYPT_MALFORMED = "decrypt_malformed"
    SIGN = "sign"
    VERIFY = "verify"

    @classmethod
    def for_mode(cls, mode: Mode) -> "ErrorKind":
        """Default error kind for a failure raised while running `mode`."""
        match mode:
            case Mode.DECRYPT:
                return cls.DECRYPT
            case Mode.SIGN:
                return cls.SIGN
            case Mode.VERIFY:
                return cls.VERIFY
            case _:
                return cls.ENCRYPT


class DecryptFailure(StrEnum):
    """Why a decryption failed, when the provider can tell."""

    INTEGRITY = "integrity"
    MALFORMED = "malformed"
    NO_MATCHING_KEY = "no_matching_key"
    UNKNOWN = "unknown"


@dataclass(frozen=True, kw_only=True)
class VerificationResult:
    """
    Outcome of checking a cleartext-signed message.

    Attributes:
        verified: True when at least one signature by the key is valid and none is bad.
        signer_identity: User IDs of the verifying key, empty when not verified.
        text: The signed cleartext.
    """

    verified: bool
    signer_identity: tuple[str, ...] = ()
    text: str = ""


@dataclass(frozen=True, kw_only=True)
class Operation:
    """
    One crypto call launched by the orchestrator.

    Attributes:
        generation: Submission number, strictly increasing.
        mode: Mode the call runs in.
        status: Current status.
        output: Armored or plain output for a succeeded call.
        error_kind: Category of the failure for a failed call.
        error_message: Human readable failure message.
        verification: Signature check outcome for a succeeded VERIFY call.
    """

    generation: int
    mode: Mode
    status: OperationStatus
    output: str = ""
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    verification: VerificationResult | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
