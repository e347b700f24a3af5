from typing import Optional

from fastapi import HTTPException, Request, status

from correlativos.core.clock import local_now
from correlativos.core.config import settings


def get_current_year() -> int:
    """Calendar year that new correlatives are issued under."""

    return local_now().year


def get_idempotency_key(request: Request) -> Optional[str]:
    """Extract the optional Idempotency-Key header."""

    key = request.headers.get("Idempotency-Key", "").strip()
    if not key:
        return None
    if len(key) > settings.IDEMPOTENCY_KEY_MAX_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                "Idempotency-Key debe tener como máximo "
                f"{settings.IDEMPOTENCY_KEY_MAX_LENGTH} caracteres."
            ),
        )
    return key
