"""
Tests for approval status transitions
"""
from types import SimpleNamespace

import pytest

from material_policy.buisness.materials.errors import InvalidState, OutOfOrderApproval
from material_policy.buisness.materials.state_machine import ApprovalStateMachine
from material_policy.data.materials.material_master import MaterialMasterRecord

PENDING = ApprovalStateMachine.PENDING
APPROVED = ApprovalStateMachine.APPROVED
REJECTED = ApprovalStateMachine.REJECTED


def record(status=PENDING, granted=0):
    """Unsaved request with the first `granted` levels approved"""
    rec = MaterialMasterRecord(id=1, name='Seal', status=status, approver1=False, approver2=False, approver3=False)
    for level in range(1, granted + 1):
        rec.grant_slot(level, f'approver{level}', None)
    return rec


@pytest.mark.parametrize('from_status, to_status, allowed', [
    (PENDING, APPROVED, True),
    (PENDING, REJECTED, True),
    (APPROVED, REJECTED, False),
    (REJECTED, APPROVED, False),
    (APPROVED, APPROVED, False),
    (PENDING, PENDING, False),
])
def test_transitions(from_status, to_status, allowed):
    assert ApprovalStateMachine.can_transition(from_status, to_status) is allowed


def test_terminal_states():
    assert ApprovalStateMachine.is_terminal(APPROVED)
    assert ApprovalStateMachine.is_terminal(REJECTED)
    assert not ApprovalStateMachine.is_terminal(PENDING)

    with pytest.raises(InvalidState):
        ApprovalStateMachine.validate_transition(REJECTED, APPROVED)


def test_only_the_next_level_is_allowed():
    assert ApprovalStateMachine.allowed_level(record(granted=0)) == 1
    assert ApprovalStateMachine.allowed_level(record(granted=2)) == 3
    assert ApprovalStateMachine.allowed_level(record(status=APPROVED, granted=3)) is None

    with pytest.raises(OutOfOrderApproval):
        ApprovalStateMachine.validate_approval(record(granted=1), 3)
    ApprovalStateMachine.validate_approval(record(granted=1), 2)


def test_final_level_completes_approval():
    assert ApprovalStateMachine.completes_approval(record(granted=2), 3)
    assert not ApprovalStateMachine.completes_approval(record(granted=1), 2)


def test_closed_request_rejects_any_level():
    closed = SimpleNamespace(id=7, status=REJECTED, next_pending_level=2)

    with pytest.raises(InvalidState):
        ApprovalStateMachine.validate_approval(closed, 2)
