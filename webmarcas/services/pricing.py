"""Payment method table and installment arithmetic."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal

from webmarcas.core.config import Config, get_config
from webmarcas.core.exceptions import ValidationError
from webmarcas.models.enums import BillingType, PaymentMethod
from webmarcas.utils.formatting import format_brl

CENT = Decimal("0.01")


@dataclass(frozen=True)
class PaymentPlan:
    method: PaymentMethod
    billing_type: BillingType
    installment_count: int
    total: Decimal

    @property
    def installment_value(self) -> Decimal:
        return installment_value(self.total, self.installment_count)

    @property
    def is_installment(self) -> bool:
        return self.installment_count > 1 and self.billing_type != BillingType.PIX


def installment_value(total: Decimal | float | int | str, count: int) -> Decimal:
    """Per-installment charge, rounded *up* to the cent.

    ``value * count`` is never below ``total`` and overshoots it by at most
    ``count`` cents.
    """
    if count < 1:
        raise ValidationError("Installment count must be >= 1.")
    amount = Decimal(str(total))
    if amount < 0:
        raise ValidationError("Payment total must be >= 0.")
    cents = (amount * 100 / count).to_integral_value(rounding=ROUND_CEILING)
    return (cents / 100).quantize(CENT)


def parse_payment_method(value: str | PaymentMethod) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError as exc:
        raise ValidationError(
            f"Unknown payment method: {value}",
            field_errors={"payment_method": ["Forma de pagamento inválida."]},
        ) from exc


def get_payment_plan(method: str | PaymentMethod, config: Config | None = None) -> PaymentPlan:
    cfg = config or get_config()
    resolved = parse_payment_method(method)
    if resolved == PaymentMethod.CARTAO_6X:
        return PaymentPlan(resolved, BillingType.CREDIT_CARD, cfg.CARD_INSTALLMENTS, cfg.STANDARD_PRICE)
    if resolved == PaymentMethod.BOLETO_3X:
        return PaymentPlan(resolved, BillingType.BOLETO, cfg.BOLETO_INSTALLMENTS, cfg.BOLETO_TOTAL)
    return PaymentPlan(resolved, BillingType.PIX, 1, cfg.PROMO_PRICE)


def plan_for_total(method: str | PaymentMethod, total: Decimal, config: Config | None = None) -> PaymentPlan:
    """Same billing shape as the method table, with an overridden total."""
    base = get_payment_plan(method, config=config)
    return PaymentPlan(base.method, base.billing_type, base.installment_count, Decimal(str(total)).quantize(CENT))


def payment_details_text(method: str | PaymentMethod, config: Config | None = None) -> str:
    """Clause 5.1 wording for the chosen payment option."""
    try:
        plan = get_payment_plan(method, config=config)
    except ValidationError:
        return "• Forma de pagamento a ser definida."

    if plan.method == PaymentMethod.AVISTA:
        return f"• Pagamento à vista via PIX: {format_brl(plan.total)}."
    if plan.method == PaymentMethod.CARTAO_6X:
        return (
            f"• Pagamento parcelado no Cartão de Crédito: {plan.installment_count}x de "
            f"{format_brl(plan.installment_value)} = Total: {format_brl(plan.total)} - sem juros."
        )
    return (
        f"• Pagamento parcelado via Boleto Bancário: {plan.installment_count}x de "
        f"{format_brl(plan.installment_value)} = Total: {format_brl(plan.total)}."
    )
