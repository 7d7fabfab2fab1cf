from __future__ import annotations

from decimal import Decimal

import pytest

from webmarcas.core.exceptions import InvalidTransitionError, ValidationError
from webmarcas.orchestration.checkout_wizard import CheckoutWizard
from webmarcas.schemas.checkout import CheckoutStep, PaymentSelection


def _walk_to_review(wizard, personal_data, brand_data, payment=None):
    state = wizard.start()
    steps = [
        {"brand_name": brand_data.brand_name, "business_area": brand_data.business_area, "level": "high"},
        personal_data.model_dump(),
        brand_data.model_dump(),
        payment or {"payment_method": "avista"},
    ]
    for payload in steps:
        result = wizard.advance(state, payload)
        assert result.advanced, result.errors
        state = result.state
    return state


def test_start_is_viability_step():
    assert CheckoutWizard().start().step == CheckoutStep.VIABILITY


def test_valid_step_moves_forward_and_keeps_payload():
    wizard = CheckoutWizard()
    result = wizard.advance(wizard.start(), {"brand_name": "Aurora", "business_area": "Cafeteria"})
    assert result.advanced is True
    assert result.state.step == CheckoutStep.PERSONAL_DATA
    assert result.state.viability.brand_name == "Aurora"


def test_blocked_viability_cannot_advance():
    wizard = CheckoutWizard()
    state = wizard.start()
    result = wizard.advance(state, {"brand_name": "Nike", "business_area": "Roupas", "level": "blocked"})
    assert result.advanced is False
    assert result.state == state
    assert result.errors


def test_invalid_personal_data_reports_field_errors(personal_data):
    wizard = CheckoutWizard()
    state = wizard.advance(wizard.start(), {"brand_name": "Aurora", "business_area": "Cafeteria"}).state
    payload = personal_data.model_dump()
    payload.update({"cpf": "111.111.111-11", "cep": "01310100"})

    result = wizard.advance(state, payload)

    assert result.advanced is False
    assert result.state.step == CheckoutStep.PERSONAL_DATA
    assert result.errors["cpf"] == ["CPF inválido."]
    assert "cep" in result.errors


def test_company_brand_requires_valid_cnpj(personal_data):
    wizard = CheckoutWizard()
    state = wizard.advance(wizard.start(), {"brand_name": "Aurora", "business_area": "Cafeteria"}).state
    state = wizard.advance(state, personal_data.model_dump()).state

    result = wizard.advance(state, {"brand_name": "Aurora", "business_area": "Cafeteria", "has_cnpj": True, "cnpj": "123"})
    assert result.advanced is False

    result = wizard.advance(
        state,
        {
            "brand_name": "Aurora",
            "business_area": "Cafeteria",
            "has_cnpj": True,
            "cnpj": "11.222.333/0001-81",
            "company_name": "Aurora Cafés Ltda",
        },
    )
    assert result.advanced is True


def test_payment_step_fills_and_checks_value(personal_data, brand_data):
    wizard = CheckoutWizard()
    state = wizard.start()
    for payload in (
        {"brand_name": "Aurora", "business_area": "Cafeteria"},
        personal_data.model_dump(),
        brand_data.model_dump(),
    ):
        state = wizard.advance(state, payload).state

    mismatch = wizard.advance(state, {"payment_method": "cartao6x", "payment_value": "699"})
    assert mismatch.advanced is False
    assert "payment_value" in mismatch.errors

    priced = wizard.advance(state, {"payment_method": "cartao6x"})
    assert priced.state.payment.payment_value == Decimal("1194.00")
    assert priced.state.step == CheckoutStep.CONTRACT_REVIEW


def test_back_moves_one_step_and_stops_at_first(personal_data):
    wizard = CheckoutWizard()
    with pytest.raises(InvalidTransitionError):
        wizard.back(wizard.start())

    state = wizard.advance(wizard.start(), {"brand_name": "Aurora", "business_area": "Cafeteria"}).state
    previous = wizard.back(state)
    assert previous.step == CheckoutStep.VIABILITY
    assert previous.viability is not None


def test_submit_rejects_a_tampered_payment_value(personal_data, brand_data):
    wizard = CheckoutWizard()
    state = _walk_to_review(wizard, personal_data, brand_data)
    reviewed = wizard.advance(state, {"contract_html": "<p>Contrato</p>", "accepted_terms": True}).state
    forged = reviewed.model_copy(
        update={"payment": PaymentSelection(payment_method="avista", payment_value=Decimal("1.00"))}
    )

    with pytest.raises(ValidationError) as excinfo:
        wizard.submit(forged)
    assert "payment_value" in excinfo.value.field_errors

    unpriced = reviewed.model_copy(update={"payment": PaymentSelection(payment_method="boleto3x")})
    assert wizard.submit(unpriced).payment_value == Decimal("1197.00")


def test_submit_requires_review_step_and_terms(personal_data, brand_data):
    wizard = CheckoutWizard()
    with pytest.raises(InvalidTransitionError):
        wizard.submit(wizard.start())

    state = _walk_to_review(wizard, personal_data, brand_data)
    with pytest.raises(ValidationError):
        wizard.submit(state)

    refused = wizard.advance(state, {"contract_html": "<p>Contrato</p>", "accepted_terms": False})
    assert refused.advanced is False
    assert "accepted_terms" in refused.errors


def test_submit_builds_payment_request(personal_data, brand_data):
    wizard = CheckoutWizard()
    state = _walk_to_review(wizard, personal_data, brand_data)
    reviewed = wizard.advance(state, {"contract_html": "<p>Contrato</p>", "accepted_terms": True})
    assert reviewed.advanced is False
    assert reviewed.state.step == CheckoutStep.CONTRACT_REVIEW

    request = wizard.submit(reviewed.state, user_id=7)

    assert request.payment_value == Decimal("699.00")
    assert request.personal_data.email == "maria@example.com"
    assert request.contract_html == "<p>Contrato</p>"
    assert request.user_id == 7
