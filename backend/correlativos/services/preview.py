"""Read-only preview of the next correlative for an activity type."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from correlativos.models.correlative_counter import CorrelativeCounter
from correlativos.services.catalog import resolve_numbered_activity_type
from correlativos.services.code_formatter import format_code
from correlativos.services.results import CorrelativeErrorKind, Result


@dataclass(slots=True)
class CorrelativePreview:
    current_number: int
    next_number: int
    sigla: str
    code: str
    year: int


async def _read_preview(
    session: AsyncSession, activity_type_id: int, year: int, width: int | None
) -> Result[CorrelativePreview]:
    lookup = await resolve_numbered_activity_type(session, activity_type_id)
    if not lookup.ok:
        return Result.failure(lookup.error, lookup.message)
    activity_type = lookup.value

    counter = await session.scalar(
        select(CorrelativeCounter)
        .where(
            CorrelativeCounter.activity_type_id == activity_type_id,
            CorrelativeCounter.year == year,
        )
        .execution_options(populate_existing=True)
    )
    current = int(counter.last_number) if counter else 0
    sigla = counter.sigla if counter else activity_type.sigla_informe.strip()
    next_number = current + 1
    return Result.success(
        CorrelativePreview(
            current_number=current,
            next_number=next_number,
            sigla=sigla,
            code=format_code(sigla, next_number, width),
            year=year,
        )
    )


async def preview_correlative(
    session: AsyncSession,
    activity_type_id: int,
    year: int,
    *,
    width: int | None = None,
) -> Result[CorrelativePreview]:
    """
    Report the code the next allocation would receive without reserving it.

    Only the exact ``(activity_type_id, year)`` counter is consulted. A missing
    row means the year has not issued anything yet, so the answer is 1; the
    previous year's count is never carried over. The preview takes no locks, so
    it can be stale by the time the client allocates.
    """

    try:
        return await _read_preview(session, activity_type_id, year, width)
    except SQLAlchemyError as exc:
        logger.bind(activity_type_id=activity_type_id, year=year, error=str(exc)).error(
            "correlative_preview_storage_error"
        )
        return Result.failure(CorrelativeErrorKind.TRANSIENT_STORAGE, "Error interno del servidor")
