"""Contract render, signature and document upload schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from webmarcas.models.enums import DocumentType, PaymentMethod, SignatureStatus
from webmarcas.schemas.checkout import BrandData, PersonalData


class RenderContractRequest(BaseModel):
    personal_data: PersonalData
    brand_data: BrandData
    payment_method: PaymentMethod
    template: str | None = None
    today: date | None = None


class RenderContractResponse(BaseModel):
    contract_text: str
    contract_html: str


class SignContractRequest(BaseModel):
    contract_id: int | None = Field(default=None, ge=1)
    signature_token: str | None = None
    contract_html: str | None = None
    signature_image: str | None = None
    device_info: dict[str, Any] | None = None


class SignatureResult(BaseModel):
    success: bool = True
    contract_id: int
    hash: str
    timestamp: datetime
    tx_id: str
    network: str
    proof_status: str
    ots_file_url: str | None = None
    verification_url: str


class SignatureLinkRequest(BaseModel):
    contract_id: int = Field(ge=1)
    expires_in_days: int | None = Field(default=None, ge=1, le=90)
    base_url: str | None = None


class SignatureLinkResult(BaseModel):
    token: str
    url: str
    expires_at: datetime


class ContractPublicView(BaseModel):
    id: int
    subject: str | None = None
    contract_html: str | None = None
    contract_value: Decimal | None = None
    payment_method: PaymentMethod | None = None
    signature_status: SignatureStatus
    signature_token_expires_at: datetime | None = None
    signed_at: datetime | None = None
    client_name: str | None = None
    client_email: str | None = None


class HashVerificationResult(BaseModel):
    valid: bool
    contract_id: int | None = None
    signed_at: datetime | None = None
    hash: str
    tx_id: str | None = None
    network: str | None = None
    proof_status: str | None = None
    ots_file_url: str | None = None


class UploadSignedPdfRequest(BaseModel):
    contract_id: int = Field(ge=1)
    pdf_base64: str = Field(min_length=1)
    file_name: str | None = None
    user_id: int | None = Field(default=None, ge=1)
    document_type: DocumentType = DocumentType.CONTRATO


class UploadSignedPdfResult(BaseModel):
    success: bool = True
    document_id: int
    public_url: str
    file_size: int


class GenerateDocumentRequest(BaseModel):
    document_type: DocumentType
    variables: dict[str, str] = Field(default_factory=dict)
    today: date | None = None


class GenerateDocumentResponse(BaseModel):
    document_type: DocumentType
    title: str
    content: str
