"""Client profile model module."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from webmarcas.models.base import AuditMixin, Base, enum_column
from webmarcas.models.enums import ClientOrigin, ClientPriority


class Profile(Base, AuditMixin):
    """Client account record, 1:1 with a ``User``."""

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(40))
    cpf_cnpj: Mapped[str | None] = mapped_column(String(20))
    company_name: Mapped[str | None] = mapped_column(String(255))
    address: Mapped[str | None] = mapped_column(String(255))
    neighborhood: Mapped[str | None] = mapped_column(String(120))
    city: Mapped[str | None] = mapped_column(String(120))
    state: Mapped[str | None] = mapped_column(String(2))
    zip_code: Mapped[str | None] = mapped_column(String(12))
    origin: Mapped[ClientOrigin] = mapped_column(enum_column(ClientOrigin), default=ClientOrigin.SITE, nullable=False)
    priority: Mapped[ClientPriority] = mapped_column(enum_column(ClientPriority), default=ClientPriority.MEDIUM, nullable=False)
    contract_value: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    client_funnel_type: Mapped[str | None] = mapped_column(String(40))
    assigned_to: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))

    user = relationship("User", back_populates="profile", foreign_keys=[user_id])
