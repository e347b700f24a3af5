"""Correlative preview, allocation and history endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from correlativos.core.config import settings
from correlativos.core.db import get_session
from correlativos.core.db_errors import raise_for_result
from correlativos.core.deps import get_current_year, get_idempotency_key
from correlativos.core.logging import bind_allocation_context
from correlativos.core.rate_limit import limiter
from correlativos.schemas.correlative import (
    ActivityTypeRelationOut,
    CorrelativeAllocatePayload,
    CorrelativeHistoryItemOut,
    CorrelativeHistoryMetaOut,
    CorrelativeHistoryOut,
    CorrelativeIssuedOut,
    CorrelativePreviewOut,
    UserRelationOut,
)
from correlativos.services.allocator import allocate_correlative
from correlativos.services.issuance_log import list_issuances
from correlativos.services.preview import preview_correlative

router = APIRouter(prefix="/correlativos", tags=["correlativos"])


def _is_missing(value: Optional[int]) -> bool:
    # Ids are positive; 0 and negatives count as not sent.
    return value is None or value <= 0


@router.get("", response_model=CorrelativePreviewOut)
async def get_correlative_preview(
    tipoActividadId: Optional[int] = None,
    session: AsyncSession = Depends(get_session),
    year: int = Depends(get_current_year),
) -> CorrelativePreviewOut:
    """Show the code the next allocation would get; reserves nothing."""

    if _is_missing(tipoActividadId):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="tipoActividadId es requerido"
        )
    result = await preview_correlative(session, tipoActividadId, year)
    raise_for_result(result)
    preview = result.value
    return CorrelativePreviewOut(
        numeroActual=preview.current_number,
        siguienteNumero=preview.next_number,
        sigla=preview.sigla,
        correlativoCompleto=preview.code,
        anio=preview.year,
    )


@router.post("", response_model=CorrelativeIssuedOut)
@limiter.limit(settings.CORRELATIVE_ALLOCATE_RATE)
async def create_correlative(
    payload: CorrelativeAllocatePayload,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_session),
    year: int = Depends(get_current_year),
    idempotency_key: Optional[str] = Depends(get_idempotency_key),
) -> CorrelativeIssuedOut:
    """Consume the next correlative of the current year for the activity type."""

    if _is_missing(payload.tipoActividadId) or _is_missing(payload.usuarioId):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="tipoActividadId y usuarioId son requeridos",
        )
    request.state.user_id = payload.usuarioId
    bind_allocation_context(
        user_id=payload.usuarioId, activity_type_id=payload.tipoActividadId
    )

    result = await allocate_correlative(
        session,
        payload.tipoActividadId,
        year,
        payload.usuarioId,
        idempotency_key=idempotency_key,
    )
    raise_for_result(result)
    record = result.value
    if result.replayed:
        response.headers["X-Idempotent-Replay"] = "true"
    return CorrelativeIssuedOut(
        id=record.id,
        numero=record.number,
        sigla=record.sigla,
        correlativoCompleto=record.code,
        anio=record.year,
        fechaGeneracion=record.issued_at,
    )


@router.get("/historial", response_model=CorrelativeHistoryOut)
async def list_correlative_history(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=settings.HISTORY_MAX_PAGE_SIZE),
    tipoActividadId: Optional[int] = None,
    anio: Optional[int] = Query(default=None, alias="año", ge=1),
    session: AsyncSession = Depends(get_session),
    current_year: int = Depends(get_current_year),
) -> CorrelativeHistoryOut:
    """Issued correlatives of one year (current by default), newest first."""

    target_year = anio or current_year
    try:
        rows, total = await list_issuances(
            session,
            year=target_year,
            activity_type_id=tipoActividadId,
            limit=limit,
            offset=(page - 1) * limit,
        )
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error interno del servidor",
        )

    items = [
        CorrelativeHistoryItemOut(
            id=record.id,
            numero=record.number,
            sigla=record.sigla,
            correlativoCompleto=record.code,
            tipoActividadId=record.activity_type_id,
            tipoActividadRelation=ActivityTypeRelationOut(
                nombre=nombre,
                siglainf=(catalog_sigla or "").strip() or record.sigla,
            ),
            usuarioId=record.issued_by,
            usuarioRelation=UserRelationOut(id=record.issued_by),
            anio=record.year,
            createdAt=record.issued_at,
        )
        for record, nombre, catalog_sigla in rows
    ]
    return CorrelativeHistoryOut(
        data=items,
        metadata=CorrelativeHistoryMetaOut(
            total=total,
            page=page,
            limit=limit,
            hasMore=page * limit < total,
            anio=target_year,
        ),
    )
