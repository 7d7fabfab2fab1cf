"""Invoice model module."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from webmarcas.models.base import AuditMixin, Base, enum_column
from webmarcas.models.enums import BillingType, InvoiceStatus, PaymentMethod


class Invoice(Base, AuditMixin):
    __tablename__ = "invoices"
    __table_args__ = (
        Index("idx_invoices_user_status", "user_id", "status"),
        Index("idx_invoices_contract", "contract_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    contract_id: Mapped[int | None] = mapped_column(ForeignKey("contracts.id", ondelete="SET NULL"))
    brand_process_id: Mapped[int | None] = mapped_column(ForeignKey("brand_processes.id", ondelete="SET NULL"))
    description: Mapped[str | None] = mapped_column(String(500))
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    installment_count: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    installment_value: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    payment_method: Mapped[PaymentMethod | None] = mapped_column(enum_column(PaymentMethod))
    billing_type: Mapped[BillingType | None] = mapped_column(enum_column(BillingType))
    due_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[InvoiceStatus] = mapped_column(enum_column(InvoiceStatus), default=InvoiceStatus.PENDING, nullable=False)
    asaas_invoice_id: Mapped[str | None] = mapped_column(String(64), unique=True)
    invoice_url: Mapped[str | None] = mapped_column(String(1000))
    bank_slip_url: Mapped[str | None] = mapped_column(String(1000))
    pix_payload: Mapped[str | None] = mapped_column(Text)
    pix_qr_code: Mapped[str | None] = mapped_column(Text)
    payment_date: Mapped[date | None] = mapped_column(Date)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    contract = relationship("Contract")
