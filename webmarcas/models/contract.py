"""Contract model module."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from webmarcas.models.base import AuditMixin, Base, enum_column
from webmarcas.models.enums import DocumentType, PaymentMethod, SignatureStatus


class Contract(Base, AuditMixin):
    __tablename__ = "contracts"
    __table_args__ = (
        Index("idx_contracts_signature_status", "signature_status"),
        Index("idx_contracts_blockchain_hash", "blockchain_hash"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lead_id: Mapped[int | None] = mapped_column(ForeignKey("leads.id", ondelete="SET NULL"))
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    # Soft reference; brand_processes.contract_id is the owning side.
    brand_process_id: Mapped[int | None] = mapped_column(Integer, index=True)
    document_type: Mapped[DocumentType] = mapped_column(enum_column(DocumentType), default=DocumentType.CONTRATO, nullable=False)
    subject: Mapped[str | None] = mapped_column(String(500))
    contract_html: Mapped[str | None] = mapped_column(Text)
    contract_value: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    payment_method: Mapped[PaymentMethod | None] = mapped_column(enum_column(PaymentMethod))
    signature_status: Mapped[SignatureStatus] = mapped_column(
        enum_column(SignatureStatus), default=SignatureStatus.NOT_SIGNED, nullable=False
    )
    signature_token: Mapped[str | None] = mapped_column(String(64), unique=True)
    signature_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    signed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    signature_ip: Mapped[str | None] = mapped_column(String(64))
    signature_user_agent: Mapped[str | None] = mapped_column(String(500))
    device_info: Mapped[str | None] = mapped_column(Text)
    client_signature_image: Mapped[str | None] = mapped_column(Text)
    blockchain_hash: Mapped[str | None] = mapped_column(String(64))
    blockchain_timestamp: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    blockchain_tx_id: Mapped[str | None] = mapped_column(String(80))
    blockchain_network: Mapped[str | None] = mapped_column(String(120))
    blockchain_proof: Mapped[str | None] = mapped_column(Text)
    ots_file_url: Mapped[str | None] = mapped_column(String(1000))
    asaas_payment_id: Mapped[str | None] = mapped_column(String(64), index=True)
    confirmation_key: Mapped[str | None] = mapped_column(String(128), unique=True)

    lead = relationship("Lead")
