"""
PGP workflow configuration.
"""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class WorkflowConfig:
    """
    Attributes:
        debounce_seconds: Idle window that coalesces message edits into one crypto call.
        key_parse_delay_seconds: Delay before parsing edited key text. Zero parses immediately.
    """

    debounce_seconds: float = 0.2
    key_parse_delay_seconds: float = 0.0

    def __post_init__(self) -> None:
        if self.debounce_seconds < 0:
            msg = "debounce_seconds must be non-negative"
            raise ValueError(msg)
        if self.key_parse_delay_seconds < 0:
            msg = "key_parse_delay_seconds must be non-negative"
            raise ValueError(msg)
