"""
Mode resolution.

Maps the current key state and message armor class to the one operation the
workflow should run. Pure and history independent: re-evaluated from current
values whenever either input changes.
"""

from pgp_workflow.models.armor import ArmorClass
from pgp_workflow.models.key import KeyKind
from pgp_workflow.models.operation import Mode

_PUBLIC_MODES = frozenset({Mode.IDLE, Mode.ENCRYPT, Mode.VERIFY})
_PRIVATE_MODES = frozenset(Mode)
_NO_KEY_MODES = frozenset({Mode.IDLE})


def resolve(key_kind: KeyKind, message_class: ArmorClass) -> Mode:
    """
    Resolve the operating mode.

    With a public key, pasted ciphertext is encrypted again as opaque plaintext
    since nothing can decrypt it. Key blocks pasted as the message are treated
    like plain text.

    Args:
        key_kind: Kind of the loaded key.
        message_class: Armor class of the message text.

    Returns:
        The mode to run.
    """
    if not key_kind.is_usable:
        return Mode.IDLE

    if message_class is ArmorClass.SIGNED_MESSAGE:
        return Mode.VERIFY

    if key_kind is KeyKind.PUBLIC:
        return Mode.ENCRYPT

    if message_class is ArmorClass.ENCRYPTED_MESSAGE:
        return Mode.DECRYPT
    return Mode.SIGN


def allowed_modes(key_kind: KeyKind) -> frozenset[Mode]:
    """
    Modes a manual override may select for a key.

    A private key also carries its public half, so it can encrypt and verify.
    """
    if key_kind.is_private:
        return _PRIVATE_MODES
    if key_kind is KeyKind.PUBLIC:
        return _PUBLIC_MODES
    return _NO_KEY_MODES
