"""Five-step checkout wizard as a pure, serializable state machine.

Nothing here touches the network or the database. ``submit`` hands a fully
validated ``PaymentCreationRequest`` to the payment service, which is the only
place checkout data gets persisted.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from webmarcas.core.exceptions import InvalidTransitionError, ValidationError
from webmarcas.orchestration.state_machine import StateMachine
from webmarcas.schemas.checkout import (
    STEP_SCHEMAS,
    CheckoutState,
    CheckoutStep,
    PaymentSelection,
    StepResult,
)
from webmarcas.schemas.payments import PaymentCreationRequest
from webmarcas.services.pricing import get_payment_plan

logger = logging.getLogger(__name__)

STEP_ORDER: tuple[CheckoutStep, ...] = (
    CheckoutStep.VIABILITY,
    CheckoutStep.PERSONAL_DATA,
    CheckoutStep.BRAND_DATA,
    CheckoutStep.PAYMENT,
    CheckoutStep.CONTRACT_REVIEW,
)

# State attribute that stores each step's payload.
STEP_FIELDS: dict[CheckoutStep, str] = {
    CheckoutStep.VIABILITY: "viability",
    CheckoutStep.PERSONAL_DATA: "personal_data",
    CheckoutStep.BRAND_DATA: "brand_data",
    CheckoutStep.PAYMENT: "payment",
    CheckoutStep.CONTRACT_REVIEW: "review",
}


def _build_transitions() -> dict[CheckoutStep, set[CheckoutStep]]:
    transitions: dict[CheckoutStep, set[CheckoutStep]] = {step: set() for step in STEP_ORDER}
    for index, step in enumerate(STEP_ORDER):
        if index + 1 < len(STEP_ORDER):
            transitions[step].add(STEP_ORDER[index + 1])
        if index > 0:
            transitions[step].add(STEP_ORDER[index - 1])
    return transitions


def _field_errors(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        key = ".".join(str(part) for part in error.get("loc", ())) or "__root__"
        message = str(error.get("msg", "invalid"))
        # pydantic prefixes messages raised by validators.
        message = message.removeprefix("Value error, ")
        errors.setdefault(key, []).append(message)
    return errors


class CheckoutWizard:
    """Linear wizard: forward one step on valid input, back one step on request."""

    def __init__(self) -> None:
        self._machine = StateMachine(_build_transitions())

    def start(self) -> CheckoutState:
        return CheckoutState(step=CheckoutStep.VIABILITY)

    def advance(self, state: CheckoutState, payload: dict[str, Any]) -> StepResult:
        """Validate ``payload`` for the current step and move forward on success.

        Invalid input returns the unchanged state with field-level errors. The
        final step only records its payload; ``submit`` ends the flow.
        """
        schema = STEP_SCHEMAS[state.step]
        try:
            record = schema.model_validate(payload)
            if isinstance(record, PaymentSelection):
                record = self._priced_selection(record)
        except PydanticValidationError as exc:
            errors = _field_errors(exc)
            logger.info(
                "checkout.step.invalid",
                extra={"event": "checkout.step.invalid", "step": state.step.value, "fields": sorted(errors)},
            )
            return StepResult(state=state, advanced=False, errors=errors)
        except ValidationError as exc:
            return StepResult(state=state, advanced=False, errors=exc.field_errors or {"__root__": [str(exc)]})

        updates: dict[str, Any] = {STEP_FIELDS[state.step]: record}
        index = STEP_ORDER.index(state.step)
        if index + 1 < len(STEP_ORDER):
            target = STEP_ORDER[index + 1]
            self._machine.assert_transition(state.step, target)
            updates["step"] = target

        new_state = state.model_copy(update=updates)
        return StepResult(state=new_state, advanced=new_state.step != state.step)

    def back(self, state: CheckoutState) -> CheckoutState:
        index = STEP_ORDER.index(state.step)
        if index == 0:
            raise InvalidTransitionError("Transition not allowed: viability has no previous step")
        target = STEP_ORDER[index - 1]
        self._machine.assert_transition(state.step, target)
        return state.model_copy(update={"step": target})

    def submit(self, state: CheckoutState, user_id: int | None = None) -> PaymentCreationRequest:
        if state.step != CheckoutStep.CONTRACT_REVIEW:
            raise InvalidTransitionError(f"Submit is only allowed from contract_review, not {state.step.value}")
        missing = [field for field in STEP_FIELDS.values() if getattr(state, field) is None]
        if missing:
            raise ValidationError(
                "Checkout is incomplete.",
                field_errors={field: ["Etapa não concluída."] for field in missing},
            )
        # state arrives from the browser; price it again before charging
        payment = self._priced_selection(state.payment)

        return PaymentCreationRequest(
            personal_data=state.personal_data,
            brand_data=state.brand_data,
            payment_method=payment.payment_method,
            payment_value=payment.payment_value,
            contract_html=state.review.contract_html,
            signature_image=state.review.signature_image,
            user_id=user_id,
        )

    @staticmethod
    def _priced_selection(selection: PaymentSelection) -> PaymentSelection:
        plan = get_payment_plan(selection.payment_method)
        if selection.payment_value is None:
            return selection.model_copy(update={"payment_value": plan.total})
        if abs(Decimal(selection.payment_value) - plan.total) > Decimal("0.01"):
            raise ValidationError(
                "Payment value does not match the selected method.",
                field_errors={"payment_value": [f"Valor esperado: {plan.total}"]},
            )
        return selection
