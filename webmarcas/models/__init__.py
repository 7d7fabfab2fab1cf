"""SQLAlchemy model package for the WebMarcas schema."""

from webmarcas.models.activity import ClientActivity, Notification, PromotionExpirationLog, SignatureAuditLog
from webmarcas.models.base import Base
from webmarcas.models.brand_process import BrandProcess
from webmarcas.models.contract import Contract
from webmarcas.models.document import Document
from webmarcas.models.email_log import EmailLog
from webmarcas.models.enums import (
    BillingType,
    ClientOrigin,
    ClientPriority,
    DocumentType,
    InvoiceStatus,
    LeadStatus,
    PaymentMethod,
    PipelineStage,
    ProcessStatus,
    PromotionRunStatus,
    SignatureStatus,
    UserRole,
)
from webmarcas.models.invoice import Invoice
from webmarcas.models.lead import Lead
from webmarcas.models.profile import Profile
from webmarcas.models.user import User

__all__ = [
    "Base",
    "BillingType",
    "BrandProcess",
    "ClientActivity",
    "ClientOrigin",
    "ClientPriority",
    "Contract",
    "Document",
    "DocumentType",
    "EmailLog",
    "Invoice",
    "InvoiceStatus",
    "Lead",
    "LeadStatus",
    "Notification",
    "PaymentMethod",
    "PipelineStage",
    "ProcessStatus",
    "Profile",
    "PromotionExpirationLog",
    "PromotionRunStatus",
    "SignatureAuditLog",
    "SignatureStatus",
    "User",
    "UserRole",
]
