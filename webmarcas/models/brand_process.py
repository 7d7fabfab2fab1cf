"""Brand process (trademark application) model module."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from webmarcas.models.base import AuditMixin, Base, enum_column
from webmarcas.models.enums import PipelineStage, ProcessStatus


class BrandProcess(Base, AuditMixin):
    __tablename__ = "brand_processes"
    __table_args__ = (
        # One process per contract: repeated confirmations must not duplicate it.
        UniqueConstraint("contract_id", name="uq_brand_processes_contract"),
        Index("idx_brand_processes_user_status", "user_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    contract_id: Mapped[int | None] = mapped_column(ForeignKey("contracts.id", ondelete="SET NULL"))
    brand_name: Mapped[str] = mapped_column(String(255), nullable=False)
    business_area: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[ProcessStatus] = mapped_column(enum_column(ProcessStatus), default=ProcessStatus.EM_ANDAMENTO, nullable=False)
    pipeline_stage: Mapped[PipelineStage] = mapped_column(enum_column(PipelineStage), default=PipelineStage.PROTOCOLADO, nullable=False)
    process_number: Mapped[str | None] = mapped_column(String(40))
    notes: Mapped[str | None] = mapped_column(Text)
