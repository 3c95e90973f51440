"""Lifecycle error taxonomy.

Every failed shift transition raises exactly one of these. All of them leave the
store untouched, so the caller can refetch and retry (or give up) safely.
"""
from __future__ import annotations
from typing import Optional


class ShiftError(Exception):
    code = "shift_error"
    status_code = 400
    message = "Shift operation failed"

    def __init__(self, message: Optional[str] = None, *, shift_id: Optional[int] = None):
        super().__init__(message or self.message)
        self.shift_id = shift_id

    def to_detail(self) -> dict:
        return {"code": self.code, "message": str(self)}


class NotFound(ShiftError):
    code = "not_found"
    status_code = 404
    message = "Shift not found"


class VersionConflict(ShiftError):
    code = "version_conflict"
    status_code = 409
    message = "This shift was changed by someone else. Please refresh."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        shift_id: Optional[int] = None,
        expected_version: Optional[int] = None,
        current_version: Optional[int] = None,
    ):
        super().__init__(message, shift_id=shift_id)
        self.expected_version = expected_version
        self.current_version = current_version

    def to_detail(self) -> dict:
        detail = super().to_detail()
        detail["current_version"] = self.current_version
        return detail


class AlreadyClaimed(VersionConflict):
    code = "already_claimed"
    message = "This shift has already been claimed by someone else"


class SelfClaimForbidden(ShiftError):
    code = "self_claim_forbidden"
    status_code = 400
    message = "You can't claim your own shift"


class Forbidden(ShiftError):
    code = "forbidden"
    status_code = 403
    message = "You are not allowed to do that"


class InvalidTransition(ShiftError):
    code = "invalid_transition"
    status_code = 409
    message = "That action is not possible from the shift's current status"


class TransientStoreError(ShiftError):
    """The store could not commit; retrying with the same arguments is safe."""
    code = "transient_store_error"
    status_code = 503
    message = "The shift store is temporarily unavailable. Please retry."
