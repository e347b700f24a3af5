"""Activity type catalog owned by the case dashboard; read-only here."""

from typing import Optional

from sqlalchemy import Boolean, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from correlativos.models.base import Base


class ActivityType(Base):
    __tablename__ = "tipo_actividad"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nombre: Mapped[str] = mapped_column(String(150), nullable=False)
    sigla_informe: Mapped[Optional[str]] = mapped_column(String(16))
    requiere_informe: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=false()
    )
