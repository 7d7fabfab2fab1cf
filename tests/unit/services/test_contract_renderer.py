from __future__ import annotations

from datetime import date

import pytest

from webmarcas.core.exceptions import ValidationError
from webmarcas.schemas.checkout import BrandData
from webmarcas.services.contract_renderer import generate_document, render_contract, render_contract_html

TODAY = date(2026, 10, 18)


def test_contract_is_filled_from_checkout_data(personal_data, brand_data):
    text = render_contract(None, personal_data, brand_data, "avista", TODAY)

    assert "{{" not in text
    assert "II) Maria Souza, com sede na Avenida Paulista, 1000, Bela Vista, São Paulo - SP, CEP 01310-100" in text
    assert 'registro da marca "Café Aurora"' in text
    assert "• Pagamento à vista via PIX: R$ 699,00." in text
    assert text.rstrip().endswith("CPF/CNPJ: 529.982.247-25")
    assert "São Paulo, 18 de outubro de 2026." in text
    assert render_contract(None, personal_data, brand_data, "avista", TODAY) == text


def test_company_contract_mentions_cnpj(personal_data):
    brand = BrandData(
        brand_name="Aurora",
        business_area="Cafeteria",
        has_cnpj=True,
        cnpj="11.222.333/0001-81",
        company_name="Aurora Cafés Ltda",
    )
    text = render_contract(None, personal_data, brand, "cartao6x", TODAY)
    assert "II) Aurora Cafés Ltda, inscrita no CNPJ sob nº 11.222.333/0001-81, com sede" in text
    assert "6x de R$ 199,00" in text


def test_custom_template_and_html_escaping(personal_data, brand_data):
    text = render_contract("Marca <{{marca}}> para {{nome_cliente}}\n\nsegundo {{desconhecido}}", personal_data, brand_data, "avista", TODAY)
    assert text == "Marca <Café Aurora> para Maria Souza\n\nsegundo {{desconhecido}}"

    rendered = render_contract_html(text)
    assert rendered == (
        '<div class="contract"><p>Marca &lt;Café Aurora&gt; para Maria Souza</p><p>segundo {{desconhecido}}</p></div>'
    )


def test_generate_documents():
    procuracao = generate_document(
        "procuracao",
        {"nome_empresa": "Aurora Ltda", "cnpj": "11.222.333/0001-81", "nome_representante": "Maria"},
        TODAY,
    )
    assert procuracao.startswith("OUTORGANTE:\n\nAurora Ltda")
    assert procuracao.endswith("São Paulo, 18 de outubro de 2026.")

    distrato = generate_document("distrato_multa", {"valor_multa": "398,00", "marca": ""}, TODAY)
    assert "1 parcela de R$398,00" in distrato
    assert "referente à marca [Nome da Marca]" in distrato
    assert "nesta data 18 de outubro de 2026" in distrato

    with pytest.raises(ValidationError):
        generate_document("contrato", {}, TODAY)
