"""
State machine for the material request approval lifecycle

Encodes valid status transitions and the in-order approval guard.
Keeps "what is allowed" separate from "how persistence occurs".
"""

from typing import Dict, Optional, Set

from material_policy.buisness.materials.errors import InvalidState, OutOfOrderApproval, ValidationError
from material_policy.data.materials.material_master import APPROVAL_LEVELS


class ApprovalStateMachine:
    """
    State machine for MaterialMasterRecord.status.

    PendingApproval -> Approved | Rejected. Both outcomes are terminal.
    Approval levels inside PendingApproval are granted strictly in order.
    """

    PENDING = 'PendingApproval'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'

    TERMINAL_STATES = {APPROVED, REJECTED}

    TRANSITIONS: Dict[str, Set[str]] = {
        PENDING: {APPROVED, REJECTED},
        # APPROVED and REJECTED are terminal
    }

    FINAL_LEVEL = APPROVAL_LEVELS[-1]

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        if from_status in cls.TERMINAL_STATES:
            return False
        return to_status in cls.TRANSITIONS.get(from_status, set())

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """
        Raises:
            InvalidState: If the record cannot move from from_status to to_status
        """
        if not cls.can_transition(from_status, to_status):
            raise InvalidState(f"Invalid status transition: {from_status} -> {to_status}")

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in cls.TERMINAL_STATES

    @classmethod
    def validate_approval(cls, record, level) -> None:
        """
        Check that `level` may be granted on `record` right now.

        Raises:
            ValidationError: If level is not one of 1, 2, 3
            InvalidState: If the record is no longer pending
            OutOfOrderApproval: If a lower level is still open, or the level was already granted
        """
        if isinstance(level, bool) or level not in APPROVAL_LEVELS:
            raise ValidationError(f"Approval level must be one of {list(APPROVAL_LEVELS)}, got {level!r}")

        if record.status != cls.PENDING:
            raise InvalidState(f"Material request {record.id} is {record.status}; approvals are closed")

        expected = record.next_pending_level
        if expected != level:
            raise OutOfOrderApproval(
                f"Material request {record.id} expects approval level {expected}, not level {level}"
            )

    @classmethod
    def allowed_level(cls, record) -> Optional[int]:
        """The single level that can be granted next, or None for terminal records"""
        if record.status != cls.PENDING:
            return None
        return record.next_pending_level

    @classmethod
    def completes_approval(cls, record, level) -> bool:
        """True when granting `level` leaves every slot approved"""
        return level == cls.FINAL_LEVEL and all(
            slot.approved for slot in record.approvals if slot.level != level
        )
