from __future__ import annotations

from datetime import date

import pytest

from webmarcas.core.exceptions import NotFoundError, ValidationError
from webmarcas.models import (
    BrandProcess,
    ClientPriority,
    Contract,
    EmailLog,
    Invoice,
    Lead,
    LeadStatus,
    Notification,
    PipelineStage,
    Profile,
    SignatureStatus,
    User,
    UserRole,
)
from webmarcas.schemas.payments import ConfirmPaymentRequest, PaymentCreationRequest
from webmarcas.services.confirmation_service import ConfirmationService
from webmarcas.services.notification_service import NotificationService
from webmarcas.services.payment_service import PaymentService


def _paid_checkout(db_session, fake_asaas, test_config, personal_data, brand_data):
    return PaymentService(db=db_session, client=fake_asaas, config=test_config).create_payment(
        PaymentCreationRequest(
            personal_data=personal_data,
            brand_data=brand_data,
            payment_method="avista",
            contract_html="<p>Contrato</p>",
        ),
        today=date(2026, 10, 18),
    )


def _confirm_request(created, personal_data, brand_data, key=None):
    return ConfirmPaymentRequest(
        contract_id=created.contract_id,
        lead_id=created.lead_id,
        personal_data=personal_data,
        brand_data=brand_data,
        payment_method="avista",
        idempotency_key=key,
        client_ip="203.0.113.9",
    )


def test_confirmation_creates_account_and_process(db_session, fake_asaas, test_config, personal_data, brand_data, notifier):
    created = _paid_checkout(db_session, fake_asaas, test_config, personal_data, brand_data)
    service = ConfirmationService(db=db_session, notifier=notifier)

    result = service.confirm_payment(_confirm_request(created, personal_data, brand_data, key="checkout-0001"))

    assert result.already_confirmed is False
    assert result.invoice_id == created.invoice_id

    user = db_session.get(User, result.user_id)
    assert user.email == "maria@example.com"
    assert user.role == UserRole.CLIENT

    profile = db_session.query(Profile).filter(Profile.user_id == user.id).one()
    assert profile.priority == ClientPriority.HIGH
    assert profile.cpf_cnpj == "52998224725"

    process = db_session.get(BrandProcess, result.process_id)
    assert process.contract_id == created.contract_id
    assert process.brand_name == "Café Aurora"
    assert process.pipeline_stage == PipelineStage.PROTOCOLADO

    contract = db_session.get(Contract, created.contract_id)
    assert contract.user_id == user.id
    assert contract.brand_process_id == process.id
    assert contract.confirmation_key == "checkout-0001"
    assert contract.signature_status == SignatureStatus.SIGNED
    assert contract.signature_ip == "203.0.113.9"

    invoice = db_session.get(Invoice, created.invoice_id)
    assert (invoice.user_id, invoice.brand_process_id) == (user.id, process.id)

    lead = db_session.get(Lead, created.lead_id)
    assert lead.status == LeadStatus.CONVERTIDO
    assert lead.converted_to_user_id == user.id

    assert db_session.query(Notification).filter(Notification.event_type == "welcome").count() == 1
    assert [event for event, *_ in notifier.sent] == ["contract_signed", "payment_received"]
    assert notifier.sent[1][2]["valor"] == "R$ 699,00"


def test_replayed_confirmation_returns_first_result(db_session, fake_asaas, test_config, personal_data, brand_data, notifier):
    created = _paid_checkout(db_session, fake_asaas, test_config, personal_data, brand_data)
    service = ConfirmationService(db=db_session, notifier=notifier)

    first = service.confirm_payment(_confirm_request(created, personal_data, brand_data))
    second = service.confirm_payment(_confirm_request(created, personal_data, brand_data))
    from_webhook = service.confirm_from_lead(created.contract_id)

    assert second.already_confirmed is True
    assert from_webhook.already_confirmed is True
    assert second.process_id == first.process_id == from_webhook.process_id
    assert db_session.query(BrandProcess).count() == 1
    assert db_session.query(User).count() == 1
    assert len(notifier.sent) == 2


def test_idempotency_key_cannot_move_to_another_contract(
    db_session, fake_asaas, test_config, personal_data, brand_data, notifier
):
    first = _paid_checkout(db_session, fake_asaas, test_config, personal_data, brand_data)
    second = _paid_checkout(db_session, fake_asaas, test_config, personal_data, brand_data)
    service = ConfirmationService(db=db_session, notifier=notifier)
    service.confirm_payment(_confirm_request(first, personal_data, brand_data, key="checkout-0001"))

    with pytest.raises(ValidationError):
        service.confirm_payment(_confirm_request(second, personal_data, brand_data, key="checkout-0001"))


def test_concurrent_winner_is_returned_after_unique_conflict(
    db_session, fake_asaas, test_config, personal_data, brand_data, notifier, monkeypatch
):
    created = _paid_checkout(db_session, fake_asaas, test_config, personal_data, brand_data)
    winner = User(email="maria@example.com", password_hash="x", role=UserRole.CLIENT)
    db_session.add(winner)
    db_session.flush()
    db_session.add(BrandProcess(user_id=winner.id, contract_id=created.contract_id, brand_name="Café Aurora"))
    db_session.commit()

    original = ConfirmationService._existing_result
    calls = {"count": 0}

    def _stale_first_read(self, contract_id):
        # the first lookup runs before the other worker's commit is visible
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return original(self, contract_id)

    monkeypatch.setattr(ConfirmationService, "_existing_result", _stale_first_read)
    result = ConfirmationService(db=db_session, notifier=notifier).confirm_payment(
        _confirm_request(created, personal_data, brand_data)
    )

    assert result.already_confirmed is True
    assert result.user_id == winner.id
    assert db_session.query(BrandProcess).count() == 1
    assert notifier.sent == []


def test_webhook_confirmation_reads_the_lead(db_session, fake_asaas, test_config, personal_data, brand_data, notifier):
    created = _paid_checkout(db_session, fake_asaas, test_config, personal_data, brand_data)

    result = ConfirmationService(db=db_session, notifier=notifier).confirm_from_lead(created.contract_id)

    process = db_session.get(BrandProcess, result.process_id)
    assert process.brand_name == "Café Aurora"
    assert process.business_area == "Cafeteria e padaria"
    contract = db_session.get(Contract, created.contract_id)
    assert contract.confirmation_key == f"webhook:{created.payment_id}"


def test_unknown_contract_is_not_found(db_session, notifier):
    with pytest.raises(NotFoundError):
        ConfirmationService(db=db_session, notifier=notifier).confirm_from_lead(404)


def test_signed_email_links_to_hash_verification(db_session, fake_asaas, test_config, personal_data, brand_data):
    created = _paid_checkout(db_session, fake_asaas, test_config, personal_data, brand_data)
    contract = db_session.get(Contract, created.contract_id)
    contract.blockchain_hash = "ab" * 32
    db_session.commit()
    service = ConfirmationService(
        db=db_session, notifier=NotificationService(db=db_session, config=test_config), config=test_config
    )

    service.confirm_payment(_confirm_request(created, personal_data, brand_data))

    body = db_session.query(EmailLog).filter(EmailLog.event_type == "contract_signed").one().body_preview
    assert "Código de verificação: ABABABABABAB." in body
    assert f"Confira em https://webmarcas.net/verificar-contrato?hash={'ab' * 32}" in body
    assert "{{" not in body


def test_signed_email_without_hash_omits_verification(db_session, fake_asaas, test_config, personal_data, brand_data):
    created = _paid_checkout(db_session, fake_asaas, test_config, personal_data, brand_data)
    service = ConfirmationService(
        db=db_session, notifier=NotificationService(db=db_session, config=test_config), config=test_config
    )

    service.confirm_payment(_confirm_request(created, personal_data, brand_data))

    body = db_session.query(EmailLog).filter(EmailLog.event_type == "contract_signed").one().body_preview
    assert "Confira em" not in body
    assert "{{" not in body
    assert body.startswith("Parabéns Maria")
