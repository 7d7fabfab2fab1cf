"""Payment creation, confirmation and provider webhook endpoints for API v1."""

from __future__ import annotations

import hmac
import logging

from fastapi import APIRouter, Header, HTTPException, status

from webmarcas.api.v1._authz import require, to_http_error
from webmarcas.core.config import get_config
from webmarcas.core.exceptions import NotFoundError, WebMarcasError
from webmarcas.database.db import get_db_session
from webmarcas.schemas.payments import (
    AsaasWebhookEvent,
    ConfirmPaymentRequest,
    ConfirmPaymentResult,
    PaymentCreationRequest,
    PaymentCreationResult,
    PostSignaturePaymentRequest,
)
from webmarcas.services.confirmation_service import ConfirmationService
from webmarcas.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("", response_model=PaymentCreationResult, status_code=status.HTTP_201_CREATED)
def create_payment(
    payload: PaymentCreationRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> PaymentCreationResult:
    require(authorization, scopes=["payments.create"])
    try:
        with get_db_session() as db:
            return PaymentService(db=db).create_payment(payload)
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc


@router.post("/post-signature", response_model=PaymentCreationResult, status_code=status.HTTP_201_CREATED)
def create_post_signature_payment(
    payload: PostSignaturePaymentRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> PaymentCreationResult:
    require(authorization, scopes=["payments.create"])
    try:
        with get_db_session() as db:
            return PaymentService(db=db).create_post_signature_payment(payload)
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc


@router.post("/confirm", response_model=ConfirmPaymentResult)
def confirm_payment(
    payload: ConfirmPaymentRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> ConfirmPaymentResult:
    require(authorization, scopes=["payments.confirm"])
    try:
        with get_db_session() as db:
            return ConfirmationService(db=db).confirm_payment(payload)
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc


@router.post("/webhooks/asaas")
def asaas_webhook(
    payload: AsaasWebhookEvent,
    access_token: str | None = Header(default=None, alias="asaas-access-token"),
) -> dict:
    expected = get_config().ASAAS_WEBHOOK_TOKEN
    if expected and not hmac.compare_digest(access_token or "", expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook token.")

    if payload.payment is None:
        return {"received": True, "event": payload.event}

    payment = payload.payment
    try:
        with get_db_session() as db:
            update = PaymentService(db=db).apply_provider_status(
                payment.id,
                payment.status,
                payment_date=payment.paymentDate or payment.confirmedDate,
            )
            confirmation = None
            if update.is_paid and update.contract_id is not None:
                try:
                    confirmation = ConfirmationService(db=db).confirm_from_lead(update.contract_id)
                except NotFoundError:
                    logger.warning(
                        "payment.webhook.confirmation_skipped",
                        extra={"event": "payment.webhook.confirmation_skipped", "contract_id": update.contract_id},
                    )
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc

    return {
        "received": True,
        "event": payload.event,
        "invoice_status": update.status.value,
        "contract_id": update.contract_id,
        "process_id": confirmation.process_id if confirmation else None,
    }
