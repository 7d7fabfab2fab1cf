"""Checkout wizard step payloads and serializable wizard state."""

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from webmarcas.models.enums import PaymentMethod
from webmarcas.utils.validators import (
    CEP_PATTERN,
    is_valid_cnpj,
    is_valid_cpf,
    is_valid_email,
    only_digits,
)

ViabilityLevel = Literal["high", "medium", "low", "blocked"]


class CheckoutStep(str, enum.Enum):
    VIABILITY = "viability"
    PERSONAL_DATA = "personal_data"
    BRAND_DATA = "brand_data"
    PAYMENT = "payment"
    CONTRACT_REVIEW = "contract_review"


class _StepModel(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class ViabilityData(_StepModel):
    brand_name: str = Field(min_length=1, max_length=100)
    business_area: str = Field(min_length=1, max_length=200)
    level: ViabilityLevel | None = None

    @model_validator(mode="after")
    def _not_blocked(self) -> "ViabilityData":
        if self.level == "blocked":
            raise ValueError("Marca de alto renome: não é possível prosseguir com o registro.")
        return self


class PersonalData(_StepModel):
    full_name: str = Field(min_length=3, max_length=100)
    email: str = Field(max_length=320)
    phone: str = Field(min_length=10, max_length=20)
    cpf: str
    cep: str
    address: str = Field(min_length=5, max_length=200)
    neighborhood: str = Field(min_length=2, max_length=100)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=2)

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        if not is_valid_email(value):
            raise ValueError("E-mail inválido.")
        return value.lower()

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: str) -> str:
        if len(only_digits(value)) not in (10, 11):
            raise ValueError("Telefone inválido.")
        return value

    @field_validator("cpf")
    @classmethod
    def _cpf(cls, value: str) -> str:
        if not is_valid_cpf(value):
            raise ValueError("CPF inválido.")
        return value

    @field_validator("cep")
    @classmethod
    def _cep(cls, value: str) -> str:
        if not CEP_PATTERN.match(value):
            raise ValueError("CEP inválido (formato 00000-000).")
        return value

    @field_validator("state")
    @classmethod
    def _state(cls, value: str) -> str:
        if not value.isalpha():
            raise ValueError("UF inválida.")
        return value.upper()


class BrandData(_StepModel):
    brand_name: str = Field(min_length=1, max_length=100)
    business_area: str = Field(min_length=1, max_length=200)
    has_cnpj: bool = False
    cnpj: str = ""
    company_name: str = ""

    @model_validator(mode="after")
    def _company_fields(self) -> "BrandData":
        if not self.has_cnpj:
            return self
        if not is_valid_cnpj(self.cnpj):
            raise ValueError("CNPJ inválido.")
        if len(self.company_name) < 3:
            raise ValueError("Razão social deve ter pelo menos 3 caracteres.")
        return self


class PaymentSelection(_StepModel):
    payment_method: PaymentMethod
    payment_value: Decimal | None = Field(default=None, ge=0)


class ContractReview(_StepModel):
    contract_html: str = Field(min_length=1)
    accepted_terms: bool
    signature_image: str | None = None

    @field_validator("accepted_terms")
    @classmethod
    def _accepted(cls, value: bool) -> bool:
        if not value:
            raise ValueError("É necessário aceitar os termos do contrato.")
        return value


STEP_SCHEMAS: dict[CheckoutStep, type[_StepModel]] = {
    CheckoutStep.VIABILITY: ViabilityData,
    CheckoutStep.PERSONAL_DATA: PersonalData,
    CheckoutStep.BRAND_DATA: BrandData,
    CheckoutStep.PAYMENT: PaymentSelection,
    CheckoutStep.CONTRACT_REVIEW: ContractReview,
}


class CheckoutState(BaseModel):
    """Current wizard step plus the immutable payloads collected so far."""

    model_config = ConfigDict(frozen=True)

    step: CheckoutStep = CheckoutStep.VIABILITY
    viability: ViabilityData | None = None
    personal_data: PersonalData | None = None
    brand_data: BrandData | None = None
    payment: PaymentSelection | None = None
    review: ContractReview | None = None


class StepResult(BaseModel):
    state: CheckoutState
    advanced: bool
    errors: dict[str, list[str]] = Field(default_factory=dict)


class AdvanceRequest(BaseModel):
    state: CheckoutState = Field(default_factory=CheckoutState)
    payload: dict


class BackRequest(BaseModel):
    state: CheckoutState
