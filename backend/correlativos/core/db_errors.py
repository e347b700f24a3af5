"""Translation of service error kinds into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException, status

from correlativos.services.results import CorrelativeErrorKind, Result

ERROR_STATUS = {
    CorrelativeErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    CorrelativeErrorKind.INVALID_CONFIGURATION: status.HTTP_400_BAD_REQUEST,
    CorrelativeErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    CorrelativeErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    CorrelativeErrorKind.TRANSIENT_STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_for_result(result: Result) -> None:
    """Raise the HTTP error matching a failed service result; no-op on success."""

    if result.ok:
        return
    headers = {"Retry-After": "1"} if result.error is CorrelativeErrorKind.CONFLICT else None
    raise HTTPException(
        status_code=ERROR_STATUS[result.error],
        detail=result.message or "Error interno del servidor",
        headers=headers,
    )
