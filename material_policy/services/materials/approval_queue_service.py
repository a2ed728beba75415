"""
Approval Queue Service
Presentation service for pending material requests, per approval level.
"""

from typing import Callable, List, Optional

from sqlalchemy import select

from material_policy import db
from material_policy.buisness.materials.state_machine import ApprovalStateMachine
from material_policy.data.materials.material_master import MaterialMasterRecord
from material_policy.services.materials.live_query import LiveQueryRegistry


def _level_filter(statement, level: Optional[int]):
    """Requests whose next grantable level is `level`"""
    if level == 1:
        return statement.where(MaterialMasterRecord.approver1.is_(False))
    if level == 2:
        return statement.where(
            MaterialMasterRecord.approver1.is_(True),
            MaterialMasterRecord.approver2.is_(False),
        )
    if level == 3:
        return statement.where(
            MaterialMasterRecord.approver1.is_(True),
            MaterialMasterRecord.approver2.is_(True),
            MaterialMasterRecord.approver3.is_(False),
        )
    return statement


class ApprovalQueueService:
    """
    Service for approval queue data.

    Provides methods for:
    - Listing pending requests, optionally only those waiting on one level
    - Listing decided requests by status
    - Subscribing to a live pending queue
    """

    @staticmethod
    def pending_statement(level: Optional[int] = None, request_type: Optional[str] = None):
        statement = select(MaterialMasterRecord).where(
            MaterialMasterRecord.status == ApprovalStateMachine.PENDING
        )
        statement = _level_filter(statement, level)
        if request_type:
            statement = statement.where(MaterialMasterRecord.request_type == request_type)
        return statement.order_by(MaterialMasterRecord.created_at, MaterialMasterRecord.id)

    @classmethod
    def pending(cls, level: Optional[int] = None, request_type: Optional[str] = None) -> List[MaterialMasterRecord]:
        return list(db.session.scalars(cls.pending_statement(level, request_type)))

    @staticmethod
    def decided(status: str, limit: int = 100) -> List[MaterialMasterRecord]:
        """Approved or Rejected requests, newest first"""
        return (
            MaterialMasterRecord.query
            .filter(MaterialMasterRecord.status == status)
            .order_by(MaterialMasterRecord.updated_at.desc(), MaterialMasterRecord.id.desc())
            .limit(limit)
            .all()
        )

    @classmethod
    def subscribe_pending(cls, callback: Callable, level: Optional[int] = None):
        """Live pending queue; callback receives the list of request dicts on each change"""
        statement = cls.pending_statement(level)
        return LiveQueryRegistry.subscribe(
            lambda session: session.scalars(statement).all(),
            callback,
            name=f"pending-approvals-level-{level or 'any'}",
        )
