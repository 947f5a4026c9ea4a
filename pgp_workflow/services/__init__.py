"""
Workflow services: armor classification, key session, mode resolution and orchestration.
"""

from pgp_workflow.services.armor_classifier import classify
from pgp_workflow.services.key_session import KeySession
from pgp_workflow.services.mode_resolver import allowed_modes, resolve
from pgp_workflow.services.orchestrator import OperationOrchestrator

__all__ = [
    "classify",
    "resolve",
    "allowed_modes",
    "KeySession",
    "OperationOrchestrator",
]
