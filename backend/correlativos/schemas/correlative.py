from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CorrelativePreviewOut(BaseModel):
    """Next code an activity type would receive, without reserving it."""

    model_config = ConfigDict(populate_by_name=True)

    numeroActual: int
    siguienteNumero: int
    sigla: str
    correlativoCompleto: str
    anio: int = Field(alias="año")


class CorrelativeAllocatePayload(BaseModel):
    # Both are checked in the route so a missing value answers 400 like any
    # other validation failure.
    tipoActividadId: Optional[int] = None
    usuarioId: Optional[int] = None


class CorrelativeIssuedOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    numero: int
    sigla: str
    correlativoCompleto: str
    anio: int = Field(alias="año")
    fechaGeneracion: datetime
    mensaje: str = "Correlativo generado exitosamente"


class ActivityTypeRelationOut(BaseModel):
    nombre: Optional[str] = None
    siglainf: str


class UserRelationOut(BaseModel):
    # Accounts live in the auth service; only the id is known here.
    id: int
    email: Optional[str] = None
    nombre: Optional[str] = None


class CorrelativeHistoryItemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    numero: int
    sigla: str
    correlativoCompleto: str
    tipoActividadId: int
    tipoActividadRelation: ActivityTypeRelationOut
    usuarioId: int
    usuarioRelation: UserRelationOut
    anio: int = Field(alias="año")
    createdAt: datetime


class CorrelativeHistoryMetaOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int
    hasMore: bool
    anio: int = Field(alias="año")


class CorrelativeHistoryOut(BaseModel):
    data: List[CorrelativeHistoryItemOut]
    metadata: CorrelativeHistoryMetaOut
