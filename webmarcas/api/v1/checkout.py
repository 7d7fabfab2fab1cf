"""Checkout wizard endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Header, HTTPException, status
from pydantic import BaseModel

from webmarcas.api.v1._authz import require, to_http_error
from webmarcas.core.exceptions import WebMarcasError
from webmarcas.database.db import get_db_session
from webmarcas.orchestration.checkout_wizard import CheckoutWizard
from webmarcas.schemas.checkout import AdvanceRequest, BackRequest, CheckoutState, StepResult
from webmarcas.schemas.payments import PaymentCreationResult
from webmarcas.services.payment_service import PaymentService

router = APIRouter(prefix="/checkout", tags=["checkout"])

wizard = CheckoutWizard()


class SubmitRequest(BaseModel):
    state: CheckoutState


@router.post("/start", response_model=CheckoutState)
def start() -> CheckoutState:
    return wizard.start()


@router.post("/advance", response_model=StepResult)
def advance(payload: AdvanceRequest) -> StepResult:
    return wizard.advance(payload.state, payload.payload)


@router.post("/back", response_model=CheckoutState)
def back(payload: BackRequest) -> CheckoutState:
    try:
        return wizard.back(payload.state)
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc


@router.post("/submit", response_model=PaymentCreationResult, status_code=status.HTTP_201_CREATED)
def submit(
    payload: SubmitRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> PaymentCreationResult:
    # anonymous visitors may check out; a signed-in caller needs the scope
    user_id = None
    if authorization:
        user_id = require(authorization, scopes=["checkout.submit"]).user_id

    try:
        request = wizard.submit(payload.state, user_id=user_id)
        with get_db_session() as db:
            return PaymentService(db=db).create_payment(request)
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
