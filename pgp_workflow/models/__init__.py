"""
Domain models for the PGP workflow.

These are immutable (frozen) dataclasses and enums representing the core domain concepts.
"""

from pgp_workflow.models.armor import ArmorClass
from pgp_workflow.models.key import KeyKind, KeySummary
from pgp_workflow.models.operation import (
    DecryptFailure,
    ErrorKind,
    Mode,
    Operation,
    OperationStatus,
    VerificationResult,
)
from pgp_workflow.models.state import WorkflowState

__all__ = [
    # Armor
    "ArmorClass",
    # Key
    "KeyKind",
    "KeySummary",
    # Operation
    "Mode",
    "OperationStatus",
    "ErrorKind",
    "DecryptFailure",
    "Operation",
    "VerificationResult",
    # State
    "WorkflowState",
]
