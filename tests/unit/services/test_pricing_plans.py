from __future__ import annotations

from decimal import Decimal

import pytest

from webmarcas.core.exceptions import ValidationError
from webmarcas.models.enums import BillingType, PaymentMethod
from webmarcas.services.pricing import (
    get_payment_plan,
    installment_value,
    payment_details_text,
    plan_for_total,
)


def test_method_table_matches_price_list():
    pix = get_payment_plan("avista")
    card = get_payment_plan(PaymentMethod.CARTAO_6X)
    boleto = get_payment_plan("boleto3x")

    assert (pix.billing_type, pix.installment_count, pix.total) == (BillingType.PIX, 1, Decimal("699.00"))
    assert (card.billing_type, card.installment_count, card.total) == (BillingType.CREDIT_CARD, 6, Decimal("1194.00"))
    assert (boleto.billing_type, boleto.installment_count, boleto.total) == (BillingType.BOLETO, 3, Decimal("1197.00"))
    assert card.installment_value == Decimal("199.00")
    assert boleto.installment_value == Decimal("399.00")
    assert pix.is_installment is False
    assert card.is_installment is True


@pytest.mark.parametrize(
    ("total", "count"),
    [(Decimal("100"), 3), (Decimal("699"), 6), (Decimal("1194"), 7), (Decimal("0.10"), 3)],
)
def test_installments_round_up_and_never_undercharge(total, count):
    value = installment_value(total, count)
    assert value * count >= total
    assert value * count - total <= Decimal("0.01") * count


def test_installment_value_rejects_bad_inputs():
    with pytest.raises(ValidationError):
        installment_value(100, 0)
    with pytest.raises(ValidationError):
        installment_value(-1, 2)


def test_unknown_method_is_a_field_error():
    with pytest.raises(ValidationError) as exc:
        get_payment_plan("crypto")
    assert "payment_method" in exc.value.field_errors


def test_plan_for_total_keeps_billing_shape():
    plan = plan_for_total("boleto3x", Decimal("699"))
    assert plan.billing_type == BillingType.BOLETO
    assert plan.installment_count == 3
    assert plan.installment_value == Decimal("233.00")


def test_payment_details_wording():
    assert payment_details_text("avista") == "• Pagamento à vista via PIX: R$ 699,00."
    assert "6x de R$ 199,00 = Total: R$ 1.194,00" in payment_details_text("cartao6x")
    assert "3x de R$ 399,00" in payment_details_text("boleto3x")
    assert payment_details_text("unknown") == "• Forma de pagamento a ser definida."
