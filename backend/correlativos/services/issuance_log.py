"""Append and query helpers for the issued-correlative audit trail.

Records are only ever inserted, by the allocator, inside the transaction that
increments the matching counter. Nothing here updates or deletes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from correlativos.core.clock import local_now
from correlativos.models.activity_type import ActivityType
from correlativos.models.correlative_counter import CorrelativeCounter
from correlativos.models.issuance_record import IssuanceRecord


@dataclass(slots=True)
class CounterDiscrepancy:
    """A counter whose records are not exactly ``1..last_number``."""

    activity_type_id: int
    year: int
    last_number: int
    record_count: int
    distinct_numbers: int
    max_number: int


async def append_issuance(
    session: AsyncSession,
    *,
    activity_type_id: int,
    year: int,
    number: int,
    sigla: str,
    code: str,
    issued_by: int,
    idempotency_key: Optional[str] = None,
) -> IssuanceRecord:
    record = IssuanceRecord(
        activity_type_id=activity_type_id,
        year=year,
        number=number,
        sigla=sigla,
        code=code,
        issued_by=issued_by,
        issued_at=local_now(),
        idempotency_key=idempotency_key,
    )
    session.add(record)
    await session.flush()
    return record


async def find_by_idempotency_key(session: AsyncSession, key: str) -> IssuanceRecord | None:
    return await session.scalar(
        select(IssuanceRecord).where(IssuanceRecord.idempotency_key == key)
    )


async def count_issuances(session: AsyncSession, activity_type_id: int, year: int) -> int:
    stmt = select(func.count()).select_from(IssuanceRecord).where(
        IssuanceRecord.activity_type_id == activity_type_id,
        IssuanceRecord.year == year,
    )
    return int((await session.execute(stmt)).scalar_one())


async def list_issuances(
    session: AsyncSession,
    *,
    year: int,
    activity_type_id: Optional[int] = None,
    limit: int = 10,
    offset: int = 0,
) -> tuple[Sequence[tuple[IssuanceRecord, Optional[str], Optional[str]]], int]:
    """Page through issued codes of one year, newest first.

    Returns ``(rows, total)`` where each row is the record followed by the
    current catalog name and report sigla of its activity type, both ``None``
    when the type is no longer in the catalog.
    """

    conds = [IssuanceRecord.year == year]
    if activity_type_id is not None:
        conds.append(IssuanceRecord.activity_type_id == activity_type_id)

    count_stmt = select(func.count()).select_from(IssuanceRecord).where(*conds)
    total = int((await session.execute(count_stmt)).scalar_one())

    stmt = (
        select(IssuanceRecord, ActivityType.nombre, ActivityType.sigla_informe)
        .outerjoin(ActivityType, ActivityType.id == IssuanceRecord.activity_type_id)
        .where(*conds)
        .order_by(IssuanceRecord.issued_at.desc(), IssuanceRecord.number.desc())
        .limit(limit)
        .offset(offset)
    )
    rows = (await session.execute(stmt)).all()
    return rows, total


async def verify_counter_integrity(
    session: AsyncSession,
    *,
    activity_type_id: Optional[int] = None,
    year: Optional[int] = None,
) -> list[CounterDiscrepancy]:
    """Compare every counter with its records and return the ones that disagree."""

    stats = (
        select(
            IssuanceRecord.activity_type_id,
            IssuanceRecord.year,
            func.count().label("record_count"),
            func.count(IssuanceRecord.number.distinct()).label("distinct_numbers"),
            func.max(IssuanceRecord.number).label("max_number"),
        )
        .group_by(IssuanceRecord.activity_type_id, IssuanceRecord.year)
        .subquery()
    )
    stmt = select(
        CorrelativeCounter.activity_type_id,
        CorrelativeCounter.year,
        CorrelativeCounter.last_number,
        func.coalesce(stats.c.record_count, 0),
        func.coalesce(stats.c.distinct_numbers, 0),
        func.coalesce(stats.c.max_number, 0),
    ).outerjoin(
        stats,
        (stats.c.activity_type_id == CorrelativeCounter.activity_type_id)
        & (stats.c.year == CorrelativeCounter.year),
    )
    if activity_type_id is not None:
        stmt = stmt.where(CorrelativeCounter.activity_type_id == activity_type_id)
    if year is not None:
        stmt = stmt.where(CorrelativeCounter.year == year)

    discrepancies: list[CounterDiscrepancy] = []
    rows = await session.execute(stmt)
    for type_id, counter_year, last_number, count, distinct, max_number in rows:
        last_number, count, distinct, max_number = map(int, (last_number, count, distinct, max_number))
        if count == distinct == max_number == last_number:
            continue
        discrepancies.append(
            CounterDiscrepancy(
                activity_type_id=type_id,
                year=counter_year,
                last_number=last_number,
                record_count=count,
                distinct_numbers=distinct,
                max_number=max_number,
            )
        )
    return discrepancies
