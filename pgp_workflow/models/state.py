"""
Observable workflow state.
"""

from dataclasses import dataclass, field

from pgp_workflow.models.armor import ArmorClass
from pgp_workflow.models.key import KeySummary
from pgp_workflow.models.operation import Mode, Operation, OperationStatus


@dataclass(frozen=True, kw_only=True)
class WorkflowState:
    """
    Snapshot of everything the presentation layer renders.

    Attributes:
        mode: Effective mode (manual override, else resolved).
        message_class: Armor class of the current message text.
        manual_mode: Active manual override, if any.
        key: Summary of the current key session.
        operation: Latest published operation, None when there is nothing to show.
    """

    mode: Mode = Mode.IDLE
    message_class: ArmorClass = ArmorClass.NONE
    manual_mode: Mode | None = None
    key: KeySummary = field(default_factory=KeySummary)
    operation: Operation | None = None

    @property
    def output(self) -> str:
        if self.operation is None or self.operation.status is not OperationStatus.SUCCEEDED:
            return ""
        return self.operation.output

    @property
    def error(self) -> str | None:
        if self.operation is None or self.operation.status is not OperationStatus.FAILED:
            return None
        return self.operation.error_message

    @property
    def unlock_required(self) -> bool:
        """The mode needs secret material and the private key is still locked."""
        if self.operation is not None and self.operation.status is OperationStatus.AWAITING_UNLOCK:
            return True
        return self.key.is_locked and self.mode.requires_secret
