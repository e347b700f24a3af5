"""Append-only audit trail of issued correlative codes."""

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from correlativos.core.clock import local_now
from correlativos.models.base import Base


class IssuanceRecord(Base):
    __tablename__ = "correlativo_emision"
    __table_args__ = (
        UniqueConstraint("activity_type_id", "year", "number"),
        UniqueConstraint("idempotency_key"),
        Index("ix_correlativo_emision_year_issued_at", "year", "issued_at"),
    )

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    activity_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tipo_actividad.id"), nullable=False
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    number: Mapped[int] = mapped_column(BigInteger, nullable=False)
    sigla: Mapped[str] = mapped_column(String(16), nullable=False)
    code: Mapped[str] = mapped_column(String(40), nullable=False)
    issued_by: Mapped[int] = mapped_column(Integer, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=local_now
    )
    idempotency_key: Mapped[Optional[str]] = mapped_column(String(128))
