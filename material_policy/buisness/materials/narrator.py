"""
MaterialNarrator - Audit text composer for material lifecycle and policy events

Ensures every transition and policy write produces a consistent machine-generated
audit detail line. Separates audit narrative formatting from transition logic.
"""

from typing import Optional


class MaterialNarrator:
    """
    Composes audit details for material lifecycle events.

    All methods return text stored in AuditLogEntry.details.
    """

    @staticmethod
    def request_submitted(record) -> str:
        return f"{record.request_type} request submitted for '{record.name}' (ID: {record.id})"

    @staticmethod
    def slot_granted(record, level: int, approver: str) -> str:
        return f"Approval level {level} granted by {approver} on {record.request_type} request {record.id}"

    @staticmethod
    def request_approved(record, outcome: str) -> str:
        """Comment for the final approval, including what materialization did"""
        return f"{record.request_type} request {record.id} approved | {outcome}"

    @staticmethod
    def request_rejected(record, reason: str, approved_levels: int) -> str:
        return (
            f"{record.request_type} request {record.id} rejected after {approved_levels} approval(s) "
            f"| Reason: {reason}"
        )

    @staticmethod
    def code_issued(material_code: str, warehouse_id: Optional[str]) -> str:
        if warehouse_id:
            return f"Material code {material_code} issued; stock record created at {warehouse_id}"
        return f"Material code {material_code} issued; no warehouse requested"

    @staticmethod
    def extended(material_code: Optional[str], warehouse_id: str) -> str:
        return f"Material {material_code or '(no code)'} extended to {warehouse_id}"

    @staticmethod
    def removed(material_code: Optional[str], warehouse_id: str, existed: bool) -> str:
        if existed:
            return f"Material {material_code or '(no code)'} removed from {warehouse_id}"
        return f"Material {material_code or '(no code)'} already absent from {warehouse_id}; nothing removed"

    @staticmethod
    def classification_applied(score: float, criticality_class: str, cost_class: int, target: float) -> str:
        return (
            f"Criticality recalculated: score {score}, class {criticality_class}, "
            f"cost class {cost_class}, target service level {target}%"
        )

    @staticmethod
    def levels_changed(old: dict, new: dict, source: str) -> str:
        """Comment for min/max/ROP/safety stock changes, listing only the fields that moved"""
        changes = []
        for key in ('min_stock_level', 'max_stock_level', 'reorder_point_qty', 'safety_stock_qty'):
            if old.get(key) != new.get(key):
                changes.append(f"{key}: {old.get(key)} -> {new.get(key)}")
        detail = ", ".join(changes) if changes else "no level changed"
        return f"{source} stocking levels applied | {detail}"
