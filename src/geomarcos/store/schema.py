"""SQLAlchemy tables backing :class:`~geomarcos.store.repository.MarkerStore`."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .records import MarkerStatus, MarkerType

__all__ = ["Base", "CorrectionRow", "MarkerRow"]


def _enum_values(enum_cls: type) -> list[str]:
    return [member.value for member in enum_cls]


class Base(DeclarativeBase):
    pass


class MarkerRow(Base):
    __tablename__ = "marcos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column("codigo", String(64), nullable=False)
    type: Mapped[MarkerType] = mapped_column(
        "tipo",
        Enum(MarkerType, native_enum=False, values_callable=_enum_values, length=1),
        nullable=False,
        default=MarkerType.VERTEX,
    )
    coordinate_e: Mapped[Optional[float]] = mapped_column("coordenada_e", Float, nullable=True)
    coordinate_n: Mapped[Optional[float]] = mapped_column("coordenada_n", Float, nullable=True)
    validated: Mapped[Optional[bool]] = mapped_column("coordenadas_validadas", Boolean, nullable=True)
    validation_error: Mapped[Optional[str]] = mapped_column("erro_validacao", Text, nullable=True)
    validated_at: Mapped[Optional[datetime]] = mapped_column("data_validacao", DateTime(timezone=True), nullable=True)
    status: Mapped[MarkerStatus] = mapped_column(
        "status_campo",
        Enum(MarkerStatus, native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
        default=MarkerStatus.SURVEYED,
    )
    active: Mapped[bool] = mapped_column("ativo", Boolean, nullable=False, default=True)
    lat_original: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    lon_original: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    __table_args__ = (
        Index("idx_marcos_validadas", "coordenadas_validadas"),
        Index("idx_marcos_status", "status_campo"),
    )


class CorrectionRow(Base):
    __tablename__ = "log_correcoes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    marker_id: Mapped[int] = mapped_column("marco_id", Integer, ForeignKey("marcos.id"), nullable=False)
    old_e: Mapped[Optional[float]] = mapped_column("coordenada_e_antiga", Float, nullable=True)
    old_n: Mapped[Optional[float]] = mapped_column("coordenada_n_antiga", Float, nullable=True)
    new_e: Mapped[float] = mapped_column("coordenada_e_nova", Float, nullable=False)
    new_n: Mapped[float] = mapped_column("coordenada_n_nova", Float, nullable=False)
    reason: Mapped[str] = mapped_column("motivo", Text, nullable=False)
    operator: Mapped[str] = mapped_column("usuario", String(128), nullable=False)
    timestamp: Mapped[datetime] = mapped_column("data_correcao", DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_log_marco", "marco_id"),)
