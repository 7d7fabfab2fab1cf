from __future__ import annotations

import base64
import dataclasses
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from webmarcas.api.v1 import auth, checkout, clients, contracts, health, payments, promotions, viability
from webmarcas.api.v1._authz import to_http_error
from webmarcas.auth.jwt import create_access_token, decode_jwt
from webmarcas.core.config import get_config
from webmarcas.core.exceptions import ExternalProviderError, ValidationError
from webmarcas.core.security import hash_password
from webmarcas.main import create_app
from webmarcas.models import BrandProcess, Contract, Invoice, InvoiceStatus, Lead, Profile, SignatureStatus, User, UserRole
from webmarcas.schemas.auth import LoginRequest, RefreshRequest
from webmarcas.schemas.checkout import BackRequest, CheckoutState
from webmarcas.schemas.clients import ImportClientsRequest, ImportPreviewRequest
from webmarcas.schemas.contracts import SignatureLinkRequest, SignContractRequest
from webmarcas.schemas.payments import AsaasWebhookEvent, ConfirmPaymentRequest, PaymentCreationRequest
from webmarcas.schemas.promotions import PromotionRunRequest
from webmarcas.schemas.viability import ViabilityRequest
from webmarcas.services.payment_service import PaymentService


def _bearer(role: str, user_id: int = 1) -> str:
    cfg = get_config()
    token = create_access_token(user_id, role, cfg.JWT_SECRET, permissions_version=cfg.JWT_PERMISSIONS_VERSION)
    return f"Bearer {token}"


def _status_of(call) -> int:
    with pytest.raises(HTTPException) as excinfo:
        call()
    return excinfo.value.status_code


def test_health():
    body = health.health()
    assert body["status"] == "ok"
    assert body["service"] == "WebMarcas"


def test_checkout_back_from_first_step_conflicts():
    assert _status_of(lambda: checkout.back(BackRequest(state=CheckoutState()))) == 409


def test_checkout_submit_requires_review_step():
    assert _status_of(lambda: checkout.submit(checkout.SubmitRequest(state=CheckoutState()), None)) == 409
    assert _status_of(lambda: checkout.submit(checkout.SubmitRequest(state=CheckoutState()), _bearer("viewer"))) == 403


def test_payment_routes_need_scopes(personal_data, brand_data):
    request = PaymentCreationRequest(personal_data=personal_data, brand_data=brand_data, payment_method="avista")
    assert _status_of(lambda: payments.create_payment(request, None)) == 401
    assert _status_of(lambda: payments.create_payment(request, "Token abc")) == 401
    assert _status_of(lambda: payments.create_payment(request, _bearer("viewer"))) == 403

    confirm = ConfirmPaymentRequest(contract_id=1, personal_data=personal_data, brand_data=brand_data, payment_method="avista")
    assert _status_of(lambda: payments.confirm_payment(confirm, _bearer("sales"))) == 403


def test_client_import_is_master_admin_only():
    payload = ImportClientsRequest(file_name="c.csv", content_base64=base64.b64encode(b"Nome;Email").decode())
    assert _status_of(lambda: clients.import_clients(payload, _bearer("admin"))) == 403


def test_finance_exports_csv(db_session, patch_db_session):
    patch_db_session(clients)
    user = User(email="maria@example.com", password_hash="x")
    db_session.add(user)
    db_session.flush()
    db_session.add(Profile(user_id=user.id, email=user.email, full_name="Maria Souza", contract_value=Decimal("699.00")))
    db_session.commit()

    response = clients.export(fmt="csv", authorization=_bearer("finance"))

    assert response.media_type.startswith("text/csv")
    assert response.headers["content-disposition"].startswith('attachment; filename="clientes_')
    assert '"Maria Souza";"maria@example.com"' in response.body.decode("utf-8")
    assert _status_of(lambda: clients.export(fmt="csv", authorization=_bearer("viewer"))) == 403


def test_webhook_rejects_wrong_token(monkeypatch, test_config):
    monkeypatch.setattr(payments, "get_config", lambda: dataclasses.replace(test_config, ASAAS_WEBHOOK_TOKEN="hook"))
    event = AsaasWebhookEvent(event="PAYMENT_RECEIVED")
    assert _status_of(lambda: payments.asaas_webhook(event, "wrong")) == 401
    assert payments.asaas_webhook(event, "hook") == {"received": True, "event": "PAYMENT_RECEIVED"}


def test_paid_webhook_starts_the_process(
    monkeypatch, db_session, patch_db_session, fake_asaas, test_config, personal_data, brand_data
):
    patch_db_session(payments)
    monkeypatch.setattr(payments, "get_config", lambda: dataclasses.replace(test_config, ASAAS_WEBHOOK_TOKEN="hook"))
    created = PaymentService(db=db_session, client=fake_asaas, config=test_config).create_payment(
        PaymentCreationRequest(personal_data=personal_data, brand_data=brand_data, payment_method="avista"),
        today=date(2026, 10, 18),
    )

    event = AsaasWebhookEvent.model_validate(
        {"event": "PAYMENT_RECEIVED", "payment": {"id": created.payment_id, "status": "RECEIVED", "paymentDate": "2026-10-19"}}
    )
    body = payments.asaas_webhook(event, "hook")

    assert body["invoice_status"] == "paid"
    assert body["contract_id"] == created.contract_id
    process = db_session.get(BrandProcess, body["process_id"])
    assert process.brand_name == "Café Aurora"
    invoice = db_session.get(Invoice, created.invoice_id)
    assert invoice.status == InvoiceStatus.PAID
    assert invoice.payment_date == date(2026, 10, 19)

    replay = payments.asaas_webhook(event, "hook")
    assert replay["process_id"] == body["process_id"]
    assert db_session.query(BrandProcess).count() == 1


def test_viability_route():
    blocked = viability.check(ViabilityRequest(brand_name="Nike", business_area="Esportes"))
    assert blocked.level == "blocked"
    assert blocked.famous_brand_match.similarity == 100


def test_contract_verification_and_signing_auth(db_session, patch_db_session):
    patch_db_session(contracts)
    result = contracts.verify("AB" * 32)
    assert result.valid is False
    assert result.hash == "ab" * 32

    assert _status_of(lambda: contracts.sign(SignContractRequest(contract_id=1), None, None)) == 401


def test_promotion_run_in_test_mode(db_session, patch_db_session):
    patch_db_session(promotions)
    response = promotions.expire(PromotionRunRequest(test_mode=True), _bearer("admin"))
    assert response.status.value == "test_run"
    assert response.contracts_found == 0
    assert _status_of(lambda: promotions.expire(PromotionRunRequest(), _bearer("finance"))) == 403


def test_login_and_refresh(db_session, patch_db_session):
    patch_db_session(auth)
    user = User(email="admin@webmarcas.net", password_hash=hash_password("correct-horse"), role=UserRole.ADMIN)
    db_session.add(user)
    db_session.commit()

    tokens = auth.login(LoginRequest(email=" Admin@WebMarcas.net ", password="correct-horse"))
    assert tokens.token_type == "bearer"

    user.role = UserRole.FINANCE
    db_session.commit()
    refreshed = auth.refresh(RefreshRequest(refresh_token=tokens.refresh_token))
    assert decode_jwt(refreshed.access_token, get_config().JWT_SECRET)["role"] == "finance"

    assert _status_of(lambda: auth.login(LoginRequest(email="admin@webmarcas.net", password="wrong-password"))) == 401
    assert _status_of(lambda: auth.refresh(RefreshRequest(refresh_token=tokens.access_token))) == 401

    user.is_active = False
    db_session.commit()
    assert _status_of(lambda: auth.refresh(RefreshRequest(refresh_token=tokens.refresh_token))) == 401


def test_http_surface():
    client = TestClient(create_app())
    assert client.get("/api/v1/health").json()["status"] == "ok"

    response = client.post("/api/v1/viability", json={"brand_name": "Padaria Estrela", "business_area": "padaria"})
    assert response.status_code == 200
    assert response.json()["level"] == "high"

    assert client.post("/api/v1/payments", json={}).status_code == 422
    assert client.get("/api/v1/clients/export", params={"format": "json"}).status_code == 422


def test_errors_use_envelope():
    inline = to_http_error(ValidationError("bad", field_errors={"cpf": ["CPF inválido."]}))
    assert inline.status_code == 422
    assert inline.detail == {
        "status": "error",
        "error_code": "validation_error",
        "detail": "bad",
        "field_errors": {"cpf": ["CPF inválido."]},
    }

    provider = to_http_error(ExternalProviderError("Invalid value", errors=[{"code": "invalid_value"}]))
    assert provider.status_code == 502
    assert provider.detail["errors"] == [{"code": "invalid_value"}]


def test_import_preview_maps_and_flags_rows():
    csv_bytes = "Nome;E-mail;Telefone\nAna Lima;ana@example.com;11999990000\nBruno;invalido;\n".encode("utf-8")
    payload = ImportPreviewRequest(file_name="clientes.csv", content_base64=base64.b64encode(csv_bytes).decode())

    preview = clients.preview_import(payload, _bearer("master_admin"))

    assert preview.format == "csv"
    assert preview.mapping == {"Nome": "full_name", "E-mail": "email", "Telefone": "phone"}
    assert preview.total_rows == 2
    assert preview.valid_rows == 1
    assert preview.invalid_rows == 1
    assert preview.rows[0].data["full_name"] == "Ana Lima"
    assert preview.rows[1].errors
    assert _status_of(lambda: clients.preview_import(payload, _bearer("admin"))) == 403


def test_signature_link_and_public_lookup(db_session, patch_db_session):
    patch_db_session(contracts)
    lead = Lead(full_name="Ana Lima", email="ana@example.com")
    db_session.add(lead)
    db_session.flush()
    contract = Contract(lead_id=lead.id, subject="Registro de marca: Aurora", contract_html="<p>Contrato</p>")
    db_session.add(contract)
    db_session.commit()

    link = contracts.create_signature_link(
        SignatureLinkRequest(contract_id=contract.id, base_url="https://webmarcas.net"), _bearer("admin")
    )
    assert link.url == f"https://webmarcas.net/assinar/{link.token}"

    view = contracts.get_by_token(link.token)
    assert view.id == contract.id
    assert view.client_name == "Ana Lima"
    assert view.signature_status == SignatureStatus.PENDING

    assert _status_of(lambda: contracts.get_by_token("missing")) == 404
    assert _status_of(
        lambda: contracts.create_signature_link(SignatureLinkRequest(contract_id=contract.id), _bearer("viewer"))
    ) == 403


def test_client_cannot_sign_another_clients_contract(db_session, patch_db_session):
    patch_db_session(contracts)
    owner = User(email="dono@example.com", password_hash="x", role=UserRole.CLIENT)
    other = User(email="outro@example.com", password_hash="x", role=UserRole.CLIENT)
    db_session.add_all([owner, other])
    db_session.flush()
    contract = Contract(user_id=owner.id, subject="Registro de marca: Aurora", contract_html="<p>Contrato</p>")
    db_session.add(contract)
    db_session.commit()

    request = SimpleNamespace(headers={})
    status_code = _status_of(
        lambda: contracts.sign(SignContractRequest(contract_id=contract.id), request, _bearer("client", other.id))
    )

    assert status_code == 403
    db_session.refresh(contract)
    assert contract.signature_status == SignatureStatus.NOT_SIGNED
