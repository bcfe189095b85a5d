from fastapi import HTTPException

from agenda.services.exceptions import (
    ConfirmationError,
    NotFoundError,
    SchedulingError,
    ServiceError,
)


def to_http_exception(exc: ServiceError) -> HTTPException:
    """Map a service failure onto the HTTP status the API reports."""
    if isinstance(exc, SchedulingError):
        status_code = 409 if exc.is_conflict else 400
        return HTTPException(status_code=status_code, detail=exc.to_detail())
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConfirmationError):
        return HTTPException(status_code=410, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
