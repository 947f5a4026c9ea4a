"""
Armor classification of pasted text.

Runs on every keystroke, so only boundary lines are inspected; the armored
payload itself is never decoded here. A marker counts only when it stands on a
line of its own, so dash-escaped blocks quoted inside a cleartext-signed
message (`- -----BEGIN PGP MESSAGE-----`) are not mistaken for real ones.
"""

import re

from pgp_workflow.models.armor import ArmorClass

# Checked in order; the first complete block wins.
_PRIORITY = (
    ArmorClass.ENCRYPTED_MESSAGE,
    ArmorClass.SIGNED_MESSAGE,
    ArmorClass.PUBLIC_KEY,
    ArmorClass.PRIVATE_KEY,
)


def _line_pattern(marker: str) -> re.Pattern[str]:
    return re.compile(rf"^[ \t]*{re.escape(marker)}[ \t]*\r?$", re.MULTILINE)


_BOUNDARIES = {
    armor_class: (_line_pattern(armor_class.header), _line_pattern(armor_class.footer))
    for armor_class in _PRIORITY
}


def classify(text: str) -> ArmorClass:
    """
    Classify text by the OpenPGP armor block it contains.

    A block only counts once its footer line follows its header line, so
    truncated armor is NONE until the paste is complete.

    Args:
        text: Raw pasted text.

    Returns:
        The highest-priority complete block found, or ArmorClass.NONE.
    """
    if not text or text.isspace():
        return ArmorClass.NONE
    for armor_class in _PRIORITY:
        if _has_complete_block(text, armor_class):
            return armor_class
    return ArmorClass.NONE


def _has_complete_block(text: str, armor_class: ArmorClass) -> bool:
    header, footer = _BOUNDARIES[armor_class]
    start = header.search(text)
    if start is None:
        return False
    return footer.search(text, start.end()) is not None
