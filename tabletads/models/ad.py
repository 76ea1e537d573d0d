"""
Campaign and impression tables.

Campaign rows are owned by the dashboards; this service only reads them
through the playlist RPC and bumps ``orcamento_utilizado`` through the
increment RPC. Impression rows are written here, once per reported view.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Float, ForeignKey, Index, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from tabletads.models.base import Base, TextArray, UuidStr, new_uuid


class Campanha(Base):
    """Advertiser campaign (creative, budget and category)."""

    __tablename__ = "campanhas"

    id: Mapped[str] = mapped_column(UuidStr, primary_key=True, default=new_uuid)
    titulo: Mapped[str] = mapped_column(String(255), nullable=False)
    categoria: Mapped[str | None] = mapped_column(String(100), nullable=True)
    orcamento: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    orcamento_utilizado: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), nullable=False
    )
    qr_code_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    midias_urls: Mapped[list[str] | None] = mapped_column(TextArray, nullable=True)


class Impressao(Base):
    """One view of a campaign on a tablet, with its billed cost."""

    __tablename__ = "impressoes"

    id: Mapped[str] = mapped_column(UuidStr, primary_key=True, default=new_uuid)
    campanha_id: Mapped[str] = mapped_column(
        UuidStr, ForeignKey("campanhas.id"), nullable=False
    )
    device_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    custo: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)

    __table_args__ = (
        Index("idx_impressoes_campanha_created", "campanha_id", "created_at"),
    )
