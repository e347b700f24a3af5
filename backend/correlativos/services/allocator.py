"""Allocation of correlative numbers.

A number is consumed by one transaction that increments the
``(activity_type_id, year)`` counter and appends the matching issuance record.
The increment is a single ``UPDATE ... SET last_number = last_number + 1``,
so the store's row lock orders concurrent callers across every server
process; nothing here relies on in-process locking.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from correlativos.core.db_retry import SequenceContention, is_retriable_error, with_db_retry
from correlativos.models.correlative_counter import CorrelativeCounter
from correlativos.models.issuance_record import IssuanceRecord
from correlativos.services.catalog import resolve_numbered_activity_type
from correlativos.services.code_formatter import format_code
from correlativos.services.issuance_log import append_issuance, find_by_idempotency_key
from correlativos.services.results import CorrelativeErrorKind, Result

MAX_YEAR = 9999


async def _increment_counter(
    session: AsyncSession, activity_type_id: int, year: int, sigla: str
) -> CorrelativeCounter:
    """Bump the counter for the key and return it, creating it at 1 if missing.

    Must run inside the allocation transaction; the row stays locked until
    commit.
    """

    key = (
        CorrelativeCounter.activity_type_id == activity_type_id,
        CorrelativeCounter.year == year,
    )
    result = await session.execute(
        update(CorrelativeCounter)
        .where(*key)
        .values(last_number=CorrelativeCounter.last_number + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        session.add(
            CorrelativeCounter(
                activity_type_id=activity_type_id, year=year, last_number=1, sigla=sigla
            )
        )
        # A concurrent first allocation for the same key fails here on the primary key.
        await session.flush()

    counter = await session.scalar(
        select(CorrelativeCounter)
        .where(*key)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if counter is None:
        raise SequenceContention(f"counter {activity_type_id}/{year} vanished mid-transaction")
    return counter


async def allocate_correlative(
    session: AsyncSession,
    activity_type_id: int,
    year: int,
    issued_by: Optional[int],
    *,
    idempotency_key: Optional[str] = None,
    width: Optional[int] = None,
) -> Result[IssuanceRecord]:
    """Consume the next number for ``(activity_type_id, year)`` on behalf of ``issued_by``.

    Deadlocks, lock timeouts and key races retry the whole transaction a
    bounded number of times and then come back as ``CONFLICT``; any other
    storage failure is returned as ``TRANSIENT_STORAGE``. With an
    ``idempotency_key`` a repeated call returns the record issued by the first
    one instead of consuming another number.
    """

    if issued_by is None or issued_by <= 0:
        return Result.failure(CorrelativeErrorKind.VALIDATION, "usuarioId es requerido")
    if not 1 <= year <= MAX_YEAR:
        return Result.failure(CorrelativeErrorKind.VALIDATION, f"Año fuera de rango: {year}")

    try:
        lookup = await resolve_numbered_activity_type(session, activity_type_id)
    except SQLAlchemyError as exc:
        logger.bind(activity_type_id=activity_type_id, error=str(exc)).error(
            "correlative_catalog_unavailable"
        )
        return Result.failure(
            CorrelativeErrorKind.TRANSIENT_STORAGE, "Error interno del servidor"
        )
    if not lookup.ok:
        return Result.failure(lookup.error, lookup.message)
    catalog_sigla = lookup.value.sigla_informe.strip()

    if session.in_transaction():
        await session.rollback()

    async def _attempt() -> Result[IssuanceRecord]:
        try:
            async with session.begin():
                if idempotency_key:
                    existing = await find_by_idempotency_key(session, idempotency_key)
                    if existing is not None:
                        if (existing.activity_type_id, existing.year) != (activity_type_id, year):
                            return Result.failure(
                                CorrelativeErrorKind.CONFLICT,
                                "Idempotency-Key ya utilizada para otro tipo de actividad o año",
                            )
                        return Result.success(existing, replayed=True)

                counter = await _increment_counter(session, activity_type_id, year, catalog_sigla)
                record = await append_issuance(
                    session,
                    activity_type_id=activity_type_id,
                    year=year,
                    number=counter.last_number,
                    sigla=counter.sigla,
                    code=format_code(counter.sigla, counter.last_number, width),
                    issued_by=issued_by,
                    idempotency_key=idempotency_key,
                )
        except IntegrityError as exc:
            raise SequenceContention(str(exc.orig)) from exc
        return Result.success(record)

    try:
        result = await with_db_retry(session, _attempt)
    except (SQLAlchemyError, SequenceContention) as exc:
        if is_retriable_error(exc):
            logger.bind(
                activity_type_id=activity_type_id, year=year, error=str(exc)
            ).warning("correlative_allocation_contention_exhausted")
            return Result.failure(
                CorrelativeErrorKind.CONFLICT,
                "No fue posible generar el correlativo por alta concurrencia. Intente nuevamente.",
            )
        logger.bind(activity_type_id=activity_type_id, year=year, error=str(exc)).error(
            "correlative_allocation_storage_error"
        )
        return Result.failure(CorrelativeErrorKind.TRANSIENT_STORAGE, "Error interno del servidor")

    if result.ok:
        record = result.value
        logger.bind(
            activity_type_id=activity_type_id,
            year=year,
            number=record.number,
            code=record.code,
            issued_by=record.issued_by,
            replayed=result.replayed,
        ).info("correlative_allocated")
    return result
