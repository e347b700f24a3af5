"""Last issued correlative number per activity type and calendar year."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from correlativos.core.clock import local_now
from correlativos.models.base import Base


class CorrelativeCounter(Base):
    """One row per ``(activity_type_id, year)``; ``last_number`` only ever grows."""

    __tablename__ = "correlativo_contador"
    __table_args__ = (
        CheckConstraint("last_number >= 0", name="last_number_non_negative"),
    )

    activity_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tipo_actividad.id"), primary_key=True
    )
    year: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    last_number: Mapped[int] = mapped_column(BigInteger, nullable=False, server_default=text("0"))
    # Prefix copied at first issuance so a later catalog edit does not change
    # the prefix mid-year.
    sigla: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=local_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=local_now, onupdate=local_now
    )
