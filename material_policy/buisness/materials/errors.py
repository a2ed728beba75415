"""
Domain exceptions for material lifecycle and stocking policy logic

These exceptions represent business rule violations and store failures.
They are raised by the business layer and mapped to responses by the
presentation layer. A policy that cannot be computed is NOT an error; see
PolicyUnavailable in buisness/policy/replenishment.py.
"""


class MaterialDomainError(Exception):
    """Base exception for all material domain errors"""
    code = "material_error"


class ValidationError(MaterialDomainError):
    """Raised when input is missing, malformed or out of range. Nothing is persisted."""
    code = "validation_error"


class RecordNotFound(MaterialDomainError):
    """Raised when a referenced record does not exist"""
    code = "not_found"


class StateConflict(MaterialDomainError):
    """Raised when an action is not allowed in the record's current state"""
    code = "state_conflict"


class OutOfOrderApproval(StateConflict):
    """Raised when an approval level is granted before the levels below it"""
    code = "out_of_order_approval"


class InvalidState(StateConflict):
    """Raised when acting on a record that is already Approved or Rejected"""
    code = "invalid_state"


class TransientStoreConflict(MaterialDomainError):
    """
    Raised when concurrent writes kept colliding and the retry budget ran out.
    The caller may resubmit the same action.
    """
    code = "transient_conflict"
    retryable = True


class DataIntegrityFault(MaterialDomainError):
    """
    Raised when stored data is missing or malformed in a way only an operator
    can repair (missing counter, vanished master record). Never auto-retried.
    """
    code = "data_integrity_fault"
