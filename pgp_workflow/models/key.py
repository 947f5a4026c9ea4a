"""
Key session domain models.
"""

from dataclasses import dataclass
from enum import StrEnum


class KeyKind(StrEnum):
    """State of the currently loaded key."""

    UNSET = "unset"
    PUBLIC = "public"
    PRIVATE_LOCKED = "private_locked"
    PRIVATE_UNLOCKED = "private_unlocked"
    INVALID = "invalid"

    @property
    def is_private(self) -> bool:
        return self in (KeyKind.PRIVATE_LOCKED, KeyKind.PRIVATE_UNLOCKED)

    @property
    def is_usable(self) -> bool:
        return self is KeyKind.PUBLIC or self.is_private


@dataclass(frozen=True, kw_only=True)
class KeySummary:
    """
    Read-only view of a key session for the presentation layer.

    Attributes:
        kind: Current key kind.
        display_identity: User IDs of the parsed key.
        fingerprint: Fingerprint of the parsed key, if any.
        invalid_reason: Parse failure message when kind is INVALID.
        unlock_error: Message of the last honored unlock failure.
        loading: A parse is in flight.
        unlocking: An unlock is in flight.
    """

    kind: KeyKind = KeyKind.UNSET
    display_identity: tuple[str, ...] = ()
    fingerprint: str | None = None
    invalid_reason: str | None = None
    unlock_error: str | None = None
    loading: bool = False
    unlocking: bool = False

    @property
    def is_locked(self) -> bool:
        return self.kind is KeyKind.PRIVATE_LOCKED
