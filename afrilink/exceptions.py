"""
AfriLink Exceptions.

Every exception follows the same shape:
- code: machine-readable error code (e.g. "invalid_transition", "not_owner")
- message: human-readable message
- context: extra data about the failure
"""

from __future__ import annotations


class AfrilinkError(Exception):
    """
    Base class for all AfriLink exceptions.

    Attributes:
        code: Machine-readable error code
        message: Human-readable message
        context: Extra data about the error
    """

    def __init__(self, code: str = "error", message: str = "", context: dict | None = None):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ValidationError(AfrilinkError):
    """
    Input rejected before touching the store.

    Codes: "missing_title", "invalid_category", "invalid_price", "invalid_commission",
    "invalid_images", "invalid_filter", "unknown_action", "invalid_role", "already_pending",
    "invalid_phone", "invalid_photo"
    """


class InvalidTransition(AfrilinkError):
    """
    Status transition not allowed from the current status.

    Raised when the stored status does not match the "from" status of the
    requested action, or when the status changed between read and write.

    Codes: "invalid_transition", "stale_status", "invalid_initial_status", "already_verified"
    """


class Unauthorized(AfrilinkError):
    """
    Actor is not allowed to perform the operation.

    Codes: "role_mismatch", "not_owner", "no_role"
    """


class NotFound(AfrilinkError):
    """
    Identifier does not resolve to an existing record.

    Codes: "product_not_found", "notification_not_found", "application_not_found",
    "profile_not_found"
    """


class StoreUnavailable(AfrilinkError):
    """
    Database/transport failure. The only transient error kind: callers may retry
    the identical request.

    Codes: "store_unavailable"
    """
