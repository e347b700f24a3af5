"""Lookups against the activity type catalog."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from correlativos.models.activity_type import ActivityType
from correlativos.services.results import CorrelativeErrorKind, Result


async def get_activity_type(session: AsyncSession, activity_type_id: int) -> ActivityType | None:
    return await session.get(ActivityType, activity_type_id)


async def resolve_numbered_activity_type(
    session: AsyncSession, activity_type_id: int
) -> Result[ActivityType]:
    """Load an activity type that can carry correlatives (it has a sigla)."""

    activity_type = await get_activity_type(session, activity_type_id)
    if activity_type is None:
        return Result.failure(
            CorrelativeErrorKind.NOT_FOUND, "Tipo de actividad no encontrado"
        )
    if not (activity_type.sigla_informe or "").strip():
        return Result.failure(
            CorrelativeErrorKind.INVALID_CONFIGURATION,
            "El tipo de actividad no tiene sigla de informe configurada",
        )
    return Result.success(activity_type)


async def list_report_activity_types(session: AsyncSession) -> Sequence[ActivityType]:
    stmt = (
        select(ActivityType)
        .where(ActivityType.requiere_informe.is_(True))
        .order_by(ActivityType.nombre)
    )
    return (await session.scalars(stmt)).all()
