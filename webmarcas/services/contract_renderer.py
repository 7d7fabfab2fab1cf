"""Pure contract and legal-document rendering."""

from __future__ import annotations

import html
from datetime import date
from typing import Any

from webmarcas.core.config import Config
from webmarcas.core.exceptions import ValidationError
from webmarcas.models.enums import DocumentType, PaymentMethod
from webmarcas.schemas.checkout import BrandData, PersonalData
from webmarcas.services.pricing import payment_details_text
from webmarcas.templates.defaults import DEFAULT_CONTRACT_TEMPLATE, DOCUMENT_TEMPLATE_REGISTRY
from webmarcas.utils.formatting import format_date_br, format_date_extended
from webmarcas.utils.templating import render_template

# Blank-safe fallbacks for optional document variables.
DOCUMENT_DEFAULTS: dict[str, str] = {
    "email": "",
    "telefone": "",
    "marca": "[Nome da Marca]",
    "numero_parcela": "1",
    "valor_multa": "0,00",
}


def contract_variables(
    personal: PersonalData,
    brand: BrandData,
    payment_method: PaymentMethod | str,
    today: date,
    config: Config | None = None,
) -> dict[str, str]:
    has_company = brand.has_cnpj and bool(brand.cnpj)
    return {
        "nome_cliente": personal.full_name,
        "cpf": personal.cpf,
        "cpf_cnpj": brand.cnpj if has_company else personal.cpf,
        "email": personal.email,
        "telefone": personal.phone,
        "marca": brand.brand_name,
        "ramo_atividade": brand.business_area,
        "endereco_completo": (
            f"{personal.address}, {personal.neighborhood}, {personal.city} - {personal.state}, CEP {personal.cep}"
        ),
        "endereco": personal.address,
        "bairro": personal.neighborhood,
        "cidade": personal.city,
        "estado": personal.state,
        "cep": personal.cep,
        "razao_social_ou_nome": brand.company_name if brand.has_cnpj and brand.company_name else personal.full_name,
        "dados_cnpj": f"inscrita no CNPJ sob nº {brand.cnpj}, " if has_company else "",
        "forma_pagamento_detalhada": payment_details_text(payment_method, config=config),
        "data_extenso": format_date_extended(today),
        "data": format_date_br(today),
    }


def render_contract(
    template: str | None,
    personal: PersonalData,
    brand: BrandData,
    payment_method: PaymentMethod | str,
    today: date,
    config: Config | None = None,
) -> str:
    """Fill the contract template. Output depends only on the arguments."""
    variables = contract_variables(personal, brand, payment_method, today, config=config)
    return render_template(template or DEFAULT_CONTRACT_TEMPLATE, variables)


def render_contract_html(text: str) -> str:
    """Escape plain contract text and wrap each paragraph for display/storage."""
    paragraphs = [block.strip() for block in (text or "").split("\n\n") if block.strip()]
    rendered = []
    for block in paragraphs:
        lines = "<br/>".join(html.escape(line) for line in block.splitlines())
        rendered.append(f"<p>{lines}</p>")
    return '<div class="contract">' + "".join(rendered) + "</div>"


def generate_document(document_type: DocumentType | str, variables: dict[str, Any], today: date) -> str:
    """Render a procuração or distrato from its template."""
    key = document_type.value if isinstance(document_type, DocumentType) else str(document_type)
    template = DOCUMENT_TEMPLATE_REGISTRY.get(key)
    if template is None:
        raise ValidationError(
            f"Unsupported document type: {key}",
            field_errors={"document_type": ["Tipo de documento inválido."]},
        )

    values: dict[str, Any] = dict(DOCUMENT_DEFAULTS)
    values.update({name: value for name, value in variables.items() if value not in (None, "")})
    values.setdefault("data_extenso", format_date_extended(today))
    values.setdefault("data_distrato", values["data_extenso"])
    return render_template(template, values)
