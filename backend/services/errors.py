"""
OwlDoor CRM - Domain exceptions

Every failure is scoped to the single user action that raised it.
Routes translate these into HTTP responses (see server.py handlers).
"""


class CRMError(Exception):
    """Base class; `message` is the user-facing notification text"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputValidationError(CRMError):
    """Missing/blank required input, raised before any store or network call"""

    status_code = 400


class RecordStoreError(CRMError):
    """Record store operation failed (original error is logged, not exposed)"""

    status_code = 500


class RecordNotFound(RecordStoreError):
    status_code = 404


class InsufficientCredits(CRMError):
    status_code = 409


class RemoteCallFailed(CRMError):
    """A named remote procedure answered with an error (or an unusable body)"""

    def __init__(self, message: str, error_kind: str = "upstream", status_code: int = 502):
        super().__init__(message)
        self.error_kind = error_kind
        self.status_code = status_code


class Unauthorized(CRMError):
    """Missing or unknown credential on an externally called route"""

    status_code = 401
    error_kind = "unauthorized"
