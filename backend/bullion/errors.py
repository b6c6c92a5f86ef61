# Overview: Domain error taxonomy shared by services and routes.

"""
Every failure a caller can act on is raised as a BullionError subclass.

Each error carries:
- kind: machine-readable name returned to clients ("InvalidStateTransition", ...)
- status_code: HTTP status used by routes
- details: extra fields merged into the JSON error body

ValidationError and InvalidStateTransition are never downgraded or swallowed;
routes always surface them. AuditWriteFailure is the one error that is only
ever logged (see audit_service.record).
"""
from __future__ import annotations

from typing import Any


class BullionError(Exception):
    """Base class for domain errors."""

    kind = "Error"
    status_code = 500

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = {k: v for k, v in details.items() if v is not None}

    def to_dict(self) -> dict:
        return {"error": self.message, "kind": self.kind, **self.details}


class ValidationError(BullionError, ValueError):
    """400-level input problem. `field` names the offending input."""

    kind = "ValidationError"
    status_code = 400

    def __init__(self, message: str, field: str | None = None, **details: Any):
        super().__init__(message, field=field, **details)
        self.field = field


class PermissionDeniedError(BullionError):
    """Raised when the caller's role lacks a required capability."""

    kind = "PermissionDenied"
    status_code = 403

    def __init__(self, message: str, required_permission: str | None = None):
        super().__init__(message, required_permission=required_permission)
        self.required_permission = required_permission


class NotFoundError(BullionError):
    """
    Referenced entity does not exist in the caller's tenant.

    Cross-tenant existence is reported exactly like nonexistence.
    """

    kind = "NotFound"
    status_code = 404

    def __init__(self, resource: str, key: Any):
        super().__init__(f"{resource} {key} not found", resource=resource)
        self.resource = resource
        self.key = key


class InvalidStateTransition(BullionError):
    """Lot is not in the source state a transition requires."""

    kind = "InvalidStateTransition"
    status_code = 409

    def __init__(
        self,
        *,
        lot_no: str,
        transition: str,
        current_state: str,
        required_state: str,
        current_phase: str | None = None,
        required_phase: str | None = None,
    ):
        super().__init__(
            f"Cannot {transition} lot {lot_no}: status is {current_state}, requires {required_state}",
            lot_no=lot_no,
            transition=transition,
            current_state=current_state,
            required_state=required_state,
            current_phase=current_phase,
            required_phase=required_phase,
        )
        self.lot_no = lot_no
        self.transition = transition
        self.current_state = current_state
        self.required_state = required_state
        self.current_phase = current_phase
        self.required_phase = required_phase


class PersistenceFailure(BullionError):
    """Store unavailable or transaction aborted mid-write. Nothing was applied."""

    kind = "PersistenceFailure"
    status_code = 503


class AuditWriteFailure(BullionError):
    """Audit entry could not be written. Logged, never propagated."""

    kind = "AuditWriteFailure"
    status_code = 500
