"""Canonical enum values for the WebMarcas schema."""

from __future__ import annotations

import enum


class UserRole(str, enum.Enum):
    MASTER_ADMIN = "master_admin"
    ADMIN = "admin"
    FINANCE = "finance"
    SALES = "sales"
    VIEWER = "viewer"
    CLIENT = "client"


class LeadStatus(str, enum.Enum):
    NOVO = "novo"
    CONTATADO = "contatado"
    QUALIFICADO = "qualificado"
    CONTRATO_GERADO = "contrato_gerado"
    CONTRATO_ASSINADO = "contrato_assinado"
    CONVERTIDO = "convertido"
    PERDIDO = "perdido"


class ProcessStatus(str, enum.Enum):
    EM_ANDAMENTO = "em_andamento"
    PUBLICADO_RPI = "publicado_rpi"
    EM_EXAME = "em_exame"
    EXIGENCIA = "exigencia"
    DEFERIDO = "deferido"
    CONCEDIDO = "concedido"
    INDEFERIDO = "indeferido"
    ARQUIVADO = "arquivado"


TERMINAL_PROCESS_STATUSES = frozenset(
    {ProcessStatus.CONCEDIDO, ProcessStatus.INDEFERIDO, ProcessStatus.ARQUIVADO}
)


class PipelineStage(str, enum.Enum):
    PROTOCOLADO = "protocolado"
    EXAME = "exame"
    PUBLICACAO = "publicacao"
    CERTIFICADO = "certificado"


class DocumentType(str, enum.Enum):
    CONTRATO = "contrato"
    PROCURACAO = "procuracao"
    DISTRATO_MULTA = "distrato_multa"
    DISTRATO_SEM_MULTA = "distrato_sem_multa"


class SignatureStatus(str, enum.Enum):
    NOT_SIGNED = "not_signed"
    PENDING = "pending"
    SIGNED = "signed"


class InvoiceStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    REFUNDED = "refunded"
    CANCELED = "canceled"


class PaymentMethod(str, enum.Enum):
    AVISTA = "avista"
    CARTAO_6X = "cartao6x"
    BOLETO_3X = "boleto3x"


class BillingType(str, enum.Enum):
    PIX = "PIX"
    BOLETO = "BOLETO"
    CREDIT_CARD = "CREDIT_CARD"


class ClientPriority(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ClientOrigin(str, enum.Enum):
    SITE = "site"
    WHATSAPP = "whatsapp"
    IMPORT = "import"
    ADMIN = "admin"


class PromotionRunStatus(str, enum.Enum):
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    TEST_RUN = "test_run"
