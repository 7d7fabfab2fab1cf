"""Turns a paid checkout into a client account and a running brand process.

Confirmation must be safe to replay: the provider webhook and the browser
can both report the same payment. ``brand_processes.contract_id`` is unique,
so at most one process is ever created per contract and every later call
returns the first result.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from webmarcas.core.config import Config, get_config
from webmarcas.core.exceptions import DatabaseError, NotFoundError, ValidationError
from webmarcas.core.security import random_password_hash
from webmarcas.models import (
    BrandProcess,
    ClientActivity,
    ClientOrigin,
    ClientPriority,
    Contract,
    Invoice,
    Lead,
    LeadStatus,
    Notification,
    PaymentMethod,
    PipelineStage,
    ProcessStatus,
    Profile,
    SignatureStatus,
    User,
    UserRole,
)
from webmarcas.models.base import utcnow
from webmarcas.orchestration.state_machine import SIGNATURE_TRANSITIONS
from webmarcas.schemas.payments import ConfirmPaymentRequest, ConfirmPaymentResult
from webmarcas.services.base_service import BaseService
from webmarcas.services.notification_service import NotificationRecipient, NotificationService
from webmarcas.services.signature_service import contract_verification_url
from webmarcas.utils.formatting import format_brl, format_date_br
from webmarcas.utils.validators import only_digits

logger = logging.getLogger(__name__)

WELCOME_TITLE = "Bem-vindo à WebMarcas!"


@dataclass(frozen=True)
class ConfirmationInput:
    contract_id: int
    email: str
    full_name: str
    brand_name: str
    lead_id: int | None = None
    phone: str | None = None
    cpf_cnpj: str | None = None
    company_name: str | None = None
    address: str | None = None
    neighborhood: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    business_area: str | None = None
    payment_method: PaymentMethod | None = None
    payment_value: Decimal | None = None
    idempotency_key: str | None = None
    client_ip: str | None = None
    user_agent: str | None = None


def confirmation_input_from_request(request: ConfirmPaymentRequest) -> ConfirmationInput:
    personal, brand = request.personal_data, request.brand_data
    return ConfirmationInput(
        contract_id=request.contract_id,
        lead_id=request.lead_id,
        email=personal.email,
        full_name=personal.full_name,
        phone=personal.phone,
        cpf_cnpj=only_digits(brand.cnpj) if brand.has_cnpj else only_digits(personal.cpf),
        company_name=brand.company_name if brand.has_cnpj else None,
        address=personal.address,
        neighborhood=personal.neighborhood,
        city=personal.city,
        state=personal.state,
        zip_code=personal.cep,
        brand_name=brand.brand_name,
        business_area=brand.business_area,
        payment_method=request.payment_method,
        payment_value=request.payment_value,
        idempotency_key=request.idempotency_key,
        client_ip=request.client_ip,
        user_agent=request.user_agent,
    )


class ConfirmationService(BaseService):
    def __init__(self, db=None, notifier: NotificationService | None = None, config: Config | None = None) -> None:
        super().__init__(db)
        self.config = config or get_config()
        self.notifier = notifier or NotificationService(db=self.db, config=self.config)

    def confirm_payment(self, request: ConfirmPaymentRequest) -> ConfirmPaymentResult:
        return self.confirm(confirmation_input_from_request(request))

    def confirm_from_lead(self, contract_id: int) -> ConfirmPaymentResult:
        """Confirm a contract from the lead captured at payment creation (webhook path)."""
        contract = self._get_contract(contract_id)
        existing = self._existing_result(contract.id)
        if existing is not None:
            return existing

        lead = contract.lead
        if lead is None:
            raise NotFoundError(f"No lead linked to contract {contract_id}.")
        brand_name, business_area = _brand_from_notes(lead.notes, contract.subject)
        return self.confirm(
            ConfirmationInput(
                contract_id=contract.id,
                lead_id=lead.id,
                email=lead.email,
                full_name=lead.full_name,
                phone=lead.phone,
                cpf_cnpj=lead.cpf_cnpj,
                company_name=lead.company_name,
                address=lead.address,
                city=lead.city,
                state=lead.state,
                zip_code=lead.zip_code,
                brand_name=brand_name,
                business_area=business_area,
                payment_method=contract.payment_method,
                payment_value=contract.contract_value,
                idempotency_key=f"webhook:{contract.asaas_payment_id}" if contract.asaas_payment_id else None,
            )
        )

    def confirm(self, data: ConfirmationInput) -> ConfirmPaymentResult:
        contract = self._get_contract(data.contract_id)

        if data.idempotency_key:
            keyed = self.db.query(Contract).filter(Contract.confirmation_key == data.idempotency_key).first()
            if keyed is not None and keyed.id != contract.id:
                raise ValidationError("Idempotency key was already used for a different contract.")

        existing = self._existing_result(contract.id)
        if existing is not None:
            logger.info(
                "confirmation.replayed",
                extra={"event": "confirmation.replayed", "contract_id": contract.id},
            )
            return existing

        value = data.payment_value if data.payment_value is not None else contract.contract_value
        method = data.payment_method or contract.payment_method
        try:
            user = self._get_or_create_user(data.email)
            self._upsert_profile(user, data, value)
            process = BrandProcess(
                user_id=user.id,
                contract_id=contract.id,
                brand_name=data.brand_name,
                business_area=data.business_area,
                status=ProcessStatus.EM_ANDAMENTO,
                pipeline_stage=PipelineStage.PROTOCOLADO,
                notes=(
                    f"Origem: Site | Ramo: {data.business_area or '-'} | "
                    f"Pagamento: {method.value if method else '-'} | Valor: {format_brl(value)}"
                ),
            )
            self.db.add(process)
            self.db.flush()

            self._update_contract(contract, user.id, process.id, data)
            invoice_id = self._link_invoices(contract, user.id, process.id)
            self._convert_lead(data.lead_id or contract.lead_id, user.id)

            self.db.add(
                Notification(
                    user_id=user.id,
                    title=WELCOME_TITLE,
                    message=f"Seu pagamento foi confirmado e o registro da marca {data.brand_name} foi iniciado.",
                    type="success",
                    event_type="welcome",
                )
            )
            self.db.add(
                ClientActivity(
                    user_id=user.id,
                    activity_type="payment_confirmed",
                    description=f"Pagamento confirmado para a marca {data.brand_name}",
                    metadata_json=json.dumps(
                        {
                            "contract_id": contract.id,
                            "process_id": process.id,
                            "payment_method": method.value if method else None,
                            "value": str(value) if value is not None else None,
                        }
                    ),
                )
            )
            self.db.commit()
        except IntegrityError:
            # A concurrent confirmation won the unique insert; return its result.
            self.db.rollback()
            existing = self._existing_result(data.contract_id)
            if existing is None:
                logger.exception(
                    "confirmation.integrity_failed",
                    extra={"event": "confirmation.integrity_failed", "contract_id": data.contract_id},
                )
                raise DatabaseError("Failed to confirm payment.")
            logger.info(
                "confirmation.race_resolved",
                extra={"event": "confirmation.race_resolved", "contract_id": data.contract_id},
            )
            return existing
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception(
                "confirmation.failed",
                extra={"event": "confirmation.failed", "contract_id": data.contract_id},
            )
            raise DatabaseError("Failed to confirm payment.") from exc

        logger.info(
            "confirmation.completed",
            extra={
                "event": "confirmation.completed",
                "contract_id": contract.id,
                "user_id": user.id,
                "process_id": process.id,
            },
        )
        self._send_notifications(user.id, data, contract, value)
        return ConfirmPaymentResult(user_id=user.id, process_id=process.id, invoice_id=invoice_id)

    def _get_contract(self, contract_id: int) -> Contract:
        contract = self.db.get(Contract, contract_id)
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found.")
        return contract

    def _existing_result(self, contract_id: int) -> ConfirmPaymentResult | None:
        process = self.db.query(BrandProcess).filter(BrandProcess.contract_id == contract_id).first()
        if process is None:
            return None
        invoice = (
            self.db.query(Invoice)
            .filter(Invoice.contract_id == contract_id)
            .order_by(Invoice.id.asc())
            .first()
        )
        return ConfirmPaymentResult(
            user_id=process.user_id,
            process_id=process.id,
            invoice_id=invoice.id if invoice else None,
            already_confirmed=True,
        )

    def _get_or_create_user(self, email: str) -> User:
        normalized = email.strip().lower()
        user = self.db.query(User).filter(User.email == normalized).first()
        if user is None:
            user = User(email=normalized, password_hash=random_password_hash(), role=UserRole.CLIENT)
            self.db.add(user)
            self.db.flush()
            logger.info("confirmation.user.created", extra={"event": "confirmation.user.created", "user_id": user.id})
        return user

    def _upsert_profile(self, user: User, data: ConfirmationInput, value: Decimal | None) -> Profile:
        profile = self.db.query(Profile).filter(Profile.user_id == user.id).first()
        if profile is None:
            profile = Profile(user_id=user.id, email=user.email, origin=ClientOrigin.SITE)
            self.db.add(profile)

        profile.full_name = data.full_name
        profile.phone = data.phone or profile.phone
        profile.cpf_cnpj = data.cpf_cnpj or profile.cpf_cnpj
        profile.company_name = data.company_name or profile.company_name
        profile.address = data.address or profile.address
        profile.neighborhood = data.neighborhood or profile.neighborhood
        profile.city = data.city or profile.city
        profile.state = data.state or profile.state
        profile.zip_code = data.zip_code or profile.zip_code
        profile.priority = ClientPriority.HIGH
        profile.contract_value = value
        self.db.flush()
        return profile

    def _update_contract(self, contract: Contract, user_id: int, process_id: int, data: ConfirmationInput) -> None:
        contract.user_id = user_id
        contract.brand_process_id = process_id
        if data.idempotency_key:
            contract.confirmation_key = data.idempotency_key
        if SIGNATURE_TRANSITIONS.can_transition(contract.signature_status, SignatureStatus.SIGNED):
            contract.signature_status = SignatureStatus.SIGNED
            contract.signed_at = contract.signed_at or utcnow()
            contract.signature_ip = contract.signature_ip or data.client_ip
            contract.signature_user_agent = contract.signature_user_agent or data.user_agent

    def _link_invoices(self, contract: Contract, user_id: int, process_id: int) -> int | None:
        invoices = (
            self.db.query(Invoice)
            .filter(Invoice.contract_id == contract.id)
            .order_by(Invoice.id.asc())
            .all()
        )
        for invoice in invoices:
            invoice.user_id = user_id
            invoice.brand_process_id = process_id
        return invoices[0].id if invoices else None

    def _convert_lead(self, lead_id: int | None, user_id: int) -> None:
        if lead_id is None:
            return
        lead = self.db.get(Lead, lead_id)
        if lead is None:
            return
        lead.status = LeadStatus.CONVERTIDO
        lead.converted_at = utcnow()
        lead.converted_to_user_id = user_id

    def _send_notifications(self, user_id: int, data: ConfirmationInput, contract: Contract, value: Decimal | None) -> None:
        recipient = NotificationRecipient(name=data.full_name, email=data.email, phone=data.phone, user_id=user_id)
        hash_hex = contract.blockchain_hash
        payloads = {
            "contract_signed": {
                "marca": data.brand_name,
                "data_assinatura": format_date_br(contract.signed_at),
                "hash_contrato": hash_hex[:12].upper() if hash_hex else None,
                "verification_url": contract_verification_url(hash_hex, self.config) if hash_hex else None,
            },
            "payment_received": {"marca": data.brand_name, "valor": format_brl(value)},
        }
        for event_type, payload in payloads.items():
            try:
                self.notifier.notify(event_type, recipient, payload, channels=("email",))
            except Exception:
                logger.exception(
                    "confirmation.notification.failed",
                    extra={"event": "confirmation.notification.failed", "event_type": event_type},
                )


def _brand_from_notes(notes: str | None, subject: str | None) -> tuple[str, str | None]:
    """Recover ``Marca: X | Ramo: Y`` written onto the lead at payment creation."""
    brand_name, business_area = None, None
    for part in (notes or "").split("|"):
        key, _, value = part.partition(":")
        if key.strip().lower() == "marca":
            brand_name = value.strip() or None
        elif key.strip().lower() == "ramo":
            business_area = value.strip() or None
    if brand_name is None and subject:
        brand_name = subject.split(":", 1)[-1].strip()
    if not brand_name:
        raise ValidationError("Brand name could not be determined for confirmation.")
    return brand_name, business_area
