"""Charge creation against the billing provider and invoice bookkeeping."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from webmarcas.core.config import Config, get_config
from webmarcas.core.exceptions import DatabaseError, NotFoundError, ValidationError
from webmarcas.models import (
    BillingType,
    ClientOrigin,
    Contract,
    DocumentType,
    Invoice,
    InvoiceStatus,
    Lead,
    LeadStatus,
    PaymentMethod,
    Profile,
    SignatureStatus,
)
from webmarcas.models.base import utcnow
from webmarcas.schemas.checkout import BrandData, PersonalData
from webmarcas.schemas.payments import (
    PaymentCreationRequest,
    PaymentCreationResult,
    PixQrCode,
    PostSignaturePaymentRequest,
)
from webmarcas.services.asaas_client import AsaasClient
from webmarcas.services.base_service import BaseService
from webmarcas.services.pricing import PaymentPlan, get_payment_plan, plan_for_total
from webmarcas.utils.ids import new_external_reference
from webmarcas.utils.validators import only_digits

logger = logging.getLogger(__name__)

# Provider payment statuses mapped onto local invoice statuses.
PROVIDER_STATUS_MAP: dict[str, InvoiceStatus] = {
    "PENDING": InvoiceStatus.PENDING,
    "RECEIVED": InvoiceStatus.PAID,
    "CONFIRMED": InvoiceStatus.PAID,
    "RECEIVED_IN_CASH": InvoiceStatus.PAID,
    "DUNNING_RECEIVED": InvoiceStatus.PAID,
    "OVERDUE": InvoiceStatus.OVERDUE,
    "DUNNING_REQUESTED": InvoiceStatus.OVERDUE,
    "REFUNDED": InvoiceStatus.REFUNDED,
}


@dataclass(frozen=True)
class BillingCustomer:
    """Fields needed to look up or register a customer at the provider."""

    tax_id: str
    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    neighborhood: str | None = None
    postal_code: str | None = None


@dataclass(frozen=True)
class ProviderStatusUpdate:
    payment_id: str
    invoice_id: int | None
    contract_id: int | None
    status: InvoiceStatus
    is_paid: bool


def provider_status_to_invoice_status(provider_status: str) -> InvoiceStatus:
    return PROVIDER_STATUS_MAP.get((provider_status or "").upper(), InvoiceStatus.PENDING)


def billing_customer_from_checkout(personal: PersonalData, brand: BrandData) -> BillingCustomer:
    tax_id = only_digits(brand.cnpj) if brand.has_cnpj else only_digits(personal.cpf)
    if not tax_id:
        raise ValidationError("CPF/CNPJ is required.", field_errors={"cpf_cnpj": ["CPF/CNPJ obrigatório."]})
    return BillingCustomer(
        tax_id=tax_id,
        name=brand.company_name if brand.has_cnpj and brand.company_name else personal.full_name,
        email=personal.email,
        phone=personal.phone,
        address=personal.address,
        neighborhood=personal.neighborhood,
        postal_code=personal.cep,
    )


class PaymentService(BaseService):
    """Creates provider charges and records the resulting contract/invoice rows."""

    def __init__(self, db=None, client: AsaasClient | None = None, config: Config | None = None) -> None:
        super().__init__(db)
        self.config = config or get_config()
        self.client = client or AsaasClient(config=self.config)

    def create_payment(self, request: PaymentCreationRequest, today: date | None = None) -> PaymentCreationResult:
        """Create (or reuse) the customer, charge it, then persist contract + invoice.

        Rows are written only after every provider call succeeded, so a
        provider failure leaves the database untouched.
        """
        personal, brand = request.personal_data, request.brand_data
        customer = billing_customer_from_checkout(personal, brand)
        plan = self._resolve_plan(request.payment_method, request.payment_value)
        due_date = (today or date.today()) + timedelta(days=self.config.PAYMENT_DUE_DAYS)
        description = f"Registro de marca: {brand.brand_name}"

        customer_id = self.get_or_create_customer(customer)
        charge = self.client.create_payment(
            self._charge_payload(customer_id, plan, due_date, description, new_external_reference())
        )
        pix = self._fetch_pix(charge["id"]) if plan.billing_type == BillingType.PIX else None

        try:
            lead = self._upsert_lead(personal, brand, customer.tax_id, plan.total)
            contract = Contract(
                lead_id=lead.id,
                user_id=request.user_id,
                document_type=DocumentType.CONTRATO,
                subject=description,
                contract_html=request.contract_html,
                contract_value=plan.total,
                payment_method=plan.method,
                signature_status=SignatureStatus.NOT_SIGNED,
                asaas_payment_id=charge["id"],
            )
            self.db.add(contract)
            self.db.flush()
            invoice = self._build_invoice(contract, plan, charge, pix, description, due_date)
            invoice.user_id = request.user_id
            self.db.add(invoice)
            self.commit()
        except SQLAlchemyError as exc:
            logger.exception(
                "payment.persist.failed",
                extra={"event": "payment.persist.failed", "payment_id": charge.get("id")},
            )
            raise DatabaseError("Failed to persist contract and invoice.") from exc

        logger.info(
            "payment.created",
            extra={
                "event": "payment.created",
                "payment_id": charge["id"],
                "contract_id": contract.id,
                "invoice_id": invoice.id,
                "billing_type": plan.billing_type.value,
                "value": str(plan.total),
            },
        )
        return self._result(charge, plan, customer_id, pix, lead_id=lead.id, contract_id=contract.id, invoice_id=invoice.id)

    def create_post_signature_payment(
        self, request: PostSignaturePaymentRequest, today: date | None = None
    ) -> PaymentCreationResult:
        """Charge an already signed contract, honouring its saved value and due date."""
        contract = self.db.get(Contract, request.contract_id)
        if contract is None:
            raise NotFoundError(f"Contract {request.contract_id} not found.")

        total = contract.contract_value if contract.contract_value else None
        plan = self._resolve_plan(request.payment_method, total)
        if plan.billing_type == BillingType.CREDIT_CARD:
            return PaymentCreationResult(
                contract_id=contract.id,
                billing_type=plan.billing_type,
                value=plan.total,
                installment_count=plan.installment_count,
                installment_value=plan.installment_value,
                requires_credit_card_form=True,
            )

        customer = self._customer_for_contract(contract)
        due_date = request.custom_due_date or (today or date.today()) + timedelta(days=self.config.PAYMENT_DUE_DAYS)
        description = contract.subject or f"Contrato #{contract.id}"

        customer_id = self.get_or_create_customer(customer)
        charge = self.client.create_payment(
            self._charge_payload(customer_id, plan, due_date, description, f"contract_{contract.id}")
        )
        pix = self._fetch_pix(charge["id"]) if plan.billing_type == BillingType.PIX else None

        try:
            invoice = self._build_invoice(contract, plan, charge, pix, description, due_date)
            self.db.add(invoice)
            contract.asaas_payment_id = charge["id"]
            contract.payment_method = plan.method
            contract.contract_value = plan.total
            self.commit()
        except SQLAlchemyError as exc:
            logger.exception(
                "payment.post_signature.persist_failed",
                extra={"event": "payment.post_signature.persist_failed", "contract_id": contract.id},
            )
            raise DatabaseError("Failed to persist invoice.") from exc

        logger.info(
            "payment.post_signature.created",
            extra={"event": "payment.post_signature.created", "contract_id": contract.id, "payment_id": charge["id"]},
        )
        return self._result(charge, plan, customer_id, pix, contract_id=contract.id, invoice_id=invoice.id)

    def apply_provider_status(
        self, payment_id: str, provider_status: str, payment_date: date | None = None
    ) -> ProviderStatusUpdate:
        """Mirror a provider payment status onto the matching invoice."""
        status = provider_status_to_invoice_status(provider_status)
        invoice = self.db.query(Invoice).filter(Invoice.asaas_invoice_id == payment_id).first()
        contract_id = invoice.contract_id if invoice else None
        if contract_id is None:
            contract = self.db.query(Contract).filter(Contract.asaas_payment_id == payment_id).first()
            contract_id = contract.id if contract else None

        if invoice is not None:
            invoice.status = status
            if status == InvoiceStatus.PAID:
                invoice.payment_date = payment_date or date.today()
                invoice.paid_at = invoice.paid_at or utcnow()
            self.commit()

        logger.info(
            "payment.status.applied",
            extra={
                "event": "payment.status.applied",
                "payment_id": payment_id,
                "provider_status": provider_status,
                "invoice_status": status.value,
                "invoice_found": invoice is not None,
            },
        )
        return ProviderStatusUpdate(
            payment_id=payment_id,
            invoice_id=invoice.id if invoice else None,
            contract_id=contract_id,
            status=status,
            is_paid=status == InvoiceStatus.PAID,
        )

    def get_or_create_customer(self, customer: BillingCustomer) -> str:
        """At most one provider customer per tax id: look up before creating."""
        existing = self.client.find_customer_by_tax_id(customer.tax_id)
        if existing:
            logger.info(
                "asaas.customer.reused",
                extra={"event": "asaas.customer.reused", "customer_id": existing},
            )
            return existing

        payload: dict[str, Any] = {
            "name": customer.name,
            "cpfCnpj": customer.tax_id,
            "email": customer.email,
            "mobilePhone": only_digits(customer.phone),
            "address": customer.address,
            "province": customer.neighborhood,
            "postalCode": only_digits(customer.postal_code),
            "externalReference": new_external_reference(),
        }
        return self.client.create_customer({key: value for key, value in payload.items() if value})

    def _resolve_plan(self, method: PaymentMethod | str, value: Decimal | None) -> PaymentPlan:
        if value is None:
            return get_payment_plan(method, config=self.config)
        return plan_for_total(method, value, config=self.config)

    @staticmethod
    def _charge_payload(
        customer_id: str, plan: PaymentPlan, due_date: date, description: str, reference: str
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "customer": customer_id,
            "billingType": plan.billing_type.value,
            "value": float(plan.total),
            "dueDate": due_date.isoformat(),
            "description": description,
            "externalReference": reference,
        }
        if plan.is_installment:
            payload["installmentCount"] = plan.installment_count
            payload["installmentValue"] = float(plan.installment_value)
        return payload

    def _fetch_pix(self, payment_id: str) -> PixQrCode:
        body = self.client.get_pix_qr_code(payment_id)
        return PixQrCode(
            encoded_image=body.get("encodedImage"),
            payload=body.get("payload"),
            expiration_date=body.get("expirationDate"),
        )

    def _upsert_lead(self, personal: PersonalData, brand: BrandData, tax_id: str, total: Decimal) -> Lead:
        lead = (
            self.db.query(Lead)
            .filter(Lead.email == personal.email)
            .order_by(Lead.created_at.desc())
            .first()
        )
        if lead is None:
            lead = Lead(full_name=personal.full_name, email=personal.email, origin=ClientOrigin.SITE)
            self.db.add(lead)

        lead.full_name = personal.full_name
        lead.phone = personal.phone
        lead.cpf_cnpj = tax_id
        lead.company_name = brand.company_name or lead.company_name
        lead.address = personal.address
        lead.city = personal.city
        lead.state = personal.state
        lead.zip_code = personal.cep
        lead.estimated_value = total
        lead.notes = f"Marca: {brand.brand_name} | Ramo: {brand.business_area}"
        if lead.status not in {LeadStatus.CONTRATO_ASSINADO, LeadStatus.CONVERTIDO}:
            lead.status = LeadStatus.CONTRATO_GERADO
        self.db.flush()
        return lead

    @staticmethod
    def _build_invoice(
        contract: Contract,
        plan: PaymentPlan,
        charge: dict[str, Any],
        pix: PixQrCode | None,
        description: str,
        due_date: date,
    ) -> Invoice:
        return Invoice(
            contract_id=contract.id,
            user_id=contract.user_id,
            brand_process_id=contract.brand_process_id,
            description=description,
            amount=plan.total,
            installment_count=plan.installment_count,
            installment_value=plan.installment_value,
            payment_method=plan.method,
            billing_type=plan.billing_type,
            due_date=due_date,
            status=InvoiceStatus.PENDING,
            asaas_invoice_id=charge["id"],
            invoice_url=charge.get("invoiceUrl"),
            bank_slip_url=charge.get("bankSlipUrl"),
            pix_payload=pix.payload if pix else None,
            pix_qr_code=pix.encoded_image if pix else None,
        )

    def _customer_for_contract(self, contract: Contract) -> BillingCustomer:
        profile = None
        if contract.user_id is not None:
            profile = self.db.query(Profile).filter(Profile.user_id == contract.user_id).first()
        source: Profile | Lead | None = profile or contract.lead
        if source is None:
            raise NotFoundError(f"No client profile linked to contract {contract.id}.")

        tax_id = only_digits(source.cpf_cnpj)
        if not tax_id:
            raise ValidationError("CPF/CNPJ is required.", field_errors={"cpf_cnpj": ["CPF/CNPJ obrigatório."]})
        return BillingCustomer(
            tax_id=tax_id,
            name=source.company_name or source.full_name or source.email,
            email=source.email,
            phone=source.phone,
            address=source.address,
            neighborhood=getattr(source, "neighborhood", None),
            postal_code=source.zip_code,
        )

    @staticmethod
    def _result(
        charge: dict[str, Any],
        plan: PaymentPlan,
        customer_id: str,
        pix: PixQrCode | None,
        **ids: int | None,
    ) -> PaymentCreationResult:
        net_value = charge.get("netValue")
        due = charge.get("dueDate")
        return PaymentCreationResult(
            customer_id=customer_id,
            payment_id=charge["id"],
            status=charge.get("status"),
            billing_type=plan.billing_type,
            value=plan.total,
            net_value=Decimal(str(net_value)) if net_value is not None else None,
            installment_count=plan.installment_count,
            installment_value=plan.installment_value,
            due_date=date.fromisoformat(due) if due else None,
            invoice_url=charge.get("invoiceUrl"),
            bank_slip_url=charge.get("bankSlipUrl"),
            pix_qr_code=pix,
            **ids,
        )
