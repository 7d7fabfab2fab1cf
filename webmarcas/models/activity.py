"""Append-only audit and activity records."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from webmarcas.models.base import AppendOnlyMixin, Base, enum_column
from webmarcas.models.enums import PromotionRunStatus


class Notification(Base, AppendOnlyMixin):
    __tablename__ = "notifications"
    __table_args__ = (Index("idx_notifications_user", "user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(40), default="info", nullable=False)
    event_type: Mapped[str | None] = mapped_column(String(80))


class ClientActivity(Base, AppendOnlyMixin):
    __tablename__ = "client_activities"
    __table_args__ = (Index("idx_client_activities_user", "user_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    activity_type: Mapped[str] = mapped_column(String(80), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_json: Mapped[str | None] = mapped_column(Text)


class SignatureAuditLog(Base, AppendOnlyMixin):
    __tablename__ = "signature_audit_logs"
    __table_args__ = (Index("idx_signature_audit_contract", "contract_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False)
    event_type: Mapped[str] = mapped_column(String(80), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(String(500))
    details: Mapped[str | None] = mapped_column(Text)


class PromotionExpirationLog(Base, AppendOnlyMixin):
    __tablename__ = "promotion_expiration_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    status: Mapped[PromotionRunStatus] = mapped_column(enum_column(PromotionRunStatus), nullable=False)
    contracts_found: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    contracts_updated: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    errors: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    test_mode: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    details: Mapped[str | None] = mapped_column(Text)
