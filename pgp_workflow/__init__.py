"""
PGP workflow.

Paste an OpenPGP key and a message; the workflow decides whether to encrypt,
decrypt, sign or verify, and publishes only the result of the latest input.

Example:
    ```python
    from pgp_workflow import PGPWorkflow

    async with PGPWorkflow() as workflow:
        workflow.set_key_text(armored_public_key)
        workflow.set_message_text("Hello World")
        await workflow.wait_idle()

        print(workflow.state.mode)    # Mode.ENCRYPT
        print(workflow.state.output)  # -----BEGIN PGP MESSAGE-----...
    ```
"""

from pgp_workflow.config import WorkflowConfig
from pgp_workflow.exceptions import (
    CryptoError,
    DecryptError,
    EncryptError,
    KeyParseError,
    PGPWorkflowError,
    SignError,
    UnlockError,
    VerifyError,
)
from pgp_workflow.models import (
    ArmorClass,
    DecryptFailure,
    ErrorKind,
    KeyKind,
    KeySummary,
    Mode,
    Operation,
    OperationStatus,
    VerificationResult,
    WorkflowState,
)
from pgp_workflow.workflow import PGPWorkflow

__version__ = "0.1.0"

__all__ = [
    # Main facade
    "PGPWorkflow",
    "WorkflowConfig",
    # Models
    "ArmorClass",
    "KeyKind",
    "KeySummary",
    "Mode",
    "Operation",
    "OperationStatus",
    "ErrorKind",
    "DecryptFailure",
    "VerificationResult",
    "WorkflowState",
    # Exceptions
    "PGPWorkflowError",
    "CryptoError",
    "KeyParseError",
    "UnlockError",
    "EncryptError",
    "DecryptError",
    "SignError",
    "VerifyError",
]
