"""
Error taxonomy for Ledger.

Every error raised towards the transport layer is a LedgerError carrying an
HTTP-style status and the list of field errors. Validation-class errors are
raised before any I/O; storage failures are wrapped, never interpreted.
"""

from typing import Iterable, NoReturn, Optional

from ledger.config import get_settings
from ledger.models.record import FieldError


class LedgerError(Exception):
    """Base error with an HTTP-style status and field-level details."""
    
    status: int = 500
    
    def __init__(
        self,
        message: str = "An error occurred",
        status: Optional[int] = None,
        errors: Optional[Iterable[FieldError]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.errors: list[FieldError] = list(errors or [])
    
    def to_envelope(self) -> dict:
        """Error envelope consumed by the transport layer."""
        return {
            "message": self.message,
            "status": self.status,
            "data": [error.to_dict() for error in self.errors],
        }


class ValidationFailed(LedgerError):
    """One or more structural/ordering violations, always reported in full."""
    status = 422
    
    def __init__(self, errors: Iterable[FieldError], message: str = "Invalid Input"):
        super().__init__(message, errors=errors)


class NoValidTags(LedgerError):
    """Supplied tags resolved to nothing."""
    status = 422
    
    def __init__(self, field: str = "tags"):
        super().__init__(
            "Invalid Input",
            errors=[FieldError(message="No valid tags given", field=field)],
        )


class NoCriteria(LedgerError):
    """No usable predicate and no description."""
    status = 422
    
    def __init__(self):
        super().__init__(
            "Invalid Input",
            errors=[FieldError(message="No criteria given to filter records")],
        )


class Unauthorized(LedgerError):
    status = 401


class NotFound(LedgerError):
    status = 404


class StoreFailure(LedgerError):
    """Opaque failure from the persistence collaborator."""
    status = 500


def _internal_details(err: Exception) -> list[FieldError]:
    """The internal message, only when debug_mode is on."""
    if get_settings().app.debug_mode:
        return [FieldError(message=str(err))]
    return []


def store_failure(err: Exception, message: str) -> StoreFailure:
    return StoreFailure(message, errors=_internal_details(err))


def common_error_handler(err: Exception, message: str) -> NoReturn:
    """Re-raise LedgerError unchanged, wrap anything else in a 500 LedgerError."""
    if isinstance(err, LedgerError):
        raise err
    raise LedgerError(message, 500, _internal_details(err)) from err
