"""Payment creation/confirmation request and response schemas."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from webmarcas.models.enums import BillingType, PaymentMethod
from webmarcas.schemas.checkout import BrandData, PersonalData


class PaymentCreationRequest(BaseModel):
    personal_data: PersonalData
    brand_data: BrandData
    payment_method: PaymentMethod
    payment_value: Decimal | None = Field(default=None, ge=0)
    contract_html: str | None = None
    signature_image: str | None = None
    user_id: int | None = Field(default=None, ge=1)


class PixQrCode(BaseModel):
    encoded_image: str | None = None
    payload: str | None = None
    expiration_date: str | None = None


class PaymentCreationResult(BaseModel):
    success: bool = True
    lead_id: int | None = None
    contract_id: int | None = None
    invoice_id: int | None = None
    customer_id: str | None = None
    payment_id: str | None = None
    status: str | None = None
    billing_type: BillingType | None = None
    value: Decimal | None = None
    net_value: Decimal | None = None
    installment_count: int = 1
    installment_value: Decimal | None = None
    due_date: date | None = None
    invoice_url: str | None = None
    bank_slip_url: str | None = None
    pix_qr_code: PixQrCode | None = None
    requires_credit_card_form: bool = False


class PostSignaturePaymentRequest(BaseModel):
    contract_id: int = Field(ge=1)
    payment_method: PaymentMethod
    custom_due_date: date | None = None


class ConfirmPaymentRequest(BaseModel):
    contract_id: int = Field(ge=1)
    lead_id: int | None = Field(default=None, ge=1)
    personal_data: PersonalData
    brand_data: BrandData
    payment_method: PaymentMethod
    payment_value: Decimal | None = Field(default=None, ge=0)
    idempotency_key: str | None = Field(default=None, min_length=8, max_length=128)
    client_ip: str | None = None
    user_agent: str | None = None


class ConfirmPaymentResult(BaseModel):
    success: bool = True
    user_id: int
    process_id: int
    invoice_id: int | None = None
    already_confirmed: bool = False


class AsaasWebhookPayment(BaseModel):
    id: str
    status: str
    customer: str | None = None
    value: Decimal | None = None
    billingType: str | None = None
    paymentDate: date | None = None
    confirmedDate: date | None = None
    externalReference: str | None = None


class AsaasWebhookEvent(BaseModel):
    event: str
    payment: AsaasWebhookPayment | None = None
