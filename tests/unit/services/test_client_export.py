from __future__ import annotations

import io
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from decimal import Decimal

import pandas as pd
import pytest

from webmarcas.core.exceptions import ValidationError
from webmarcas.models import ClientOrigin, ClientPriority
from webmarcas.services.client_export import display_row, export_clients

CLIENTS = [
    {
        "full_name": "Maria Souza",
        "email": "maria@example.com",
        "phone": "11987654321",
        "company_name": "Aurora Ltda",
        "cpf_cnpj": "52998224725",
        "city": "São Paulo",
        "state": "SP",
        "origin": ClientOrigin.IMPORT,
        "priority": ClientPriority.HIGH,
        "contract_value": Decimal("1194.00"),
        "created_at": datetime(2026, 10, 18, 9, 30, tzinfo=timezone.utc),
    },
    {"full_name": "João", "email": "joao@example.com", "origin": "whatsapp", "priority": "low"},
]


def test_display_row_labels_values():
    row = display_row(CLIENTS[0])
    assert row["Prioridade"] == "Alta"
    assert row["Origem"] == "Importação"
    assert row["Valor do Contrato"] == "R$ 1.194,00"
    assert row["Data de Cadastro"] == "18/10/2026"
    assert display_row(CLIENTS[1])["Endereço"] == ""


def test_csv_export():
    content, media_type, filename = export_clients(CLIENTS, "CSV")

    text = content.decode("utf-8")
    assert text.startswith("\ufeff")
    header, first, second = text.lstrip("\ufeff").splitlines()
    assert header.startswith('"Nome";"Email";"Telefone";"Empresa"')
    assert '"Maria Souza";"maria@example.com"' in first
    assert '"Alta";"R$ 1.194,00";"18/10/2026"' in first
    assert '"WhatsApp";"Baixa"' in second
    assert media_type.startswith("text/csv")
    assert filename.startswith("clientes_") and filename.endswith(".csv")


def test_xlsx_export():
    content, _, filename = export_clients(CLIENTS, "xlsx")
    frame = pd.read_excel(io.BytesIO(content), sheet_name="Clientes", dtype=str)
    assert list(frame["Nome"]) == ["Maria Souza", "João"]
    assert filename.endswith(".xlsx")


def test_xml_export_keeps_raw_values():
    content, media_type, _ = export_clients(CLIENTS, "xml")
    root = ET.fromstring(content)
    assert root.tag == "clients"
    first = root.findall("client")[0]
    assert first.findtext("priority") == "high"
    assert first.findtext("contract_value") == "1194.00"
    assert first.findtext("created_at").startswith("2026-10-18T09:30")
    assert media_type == "application/xml"


def test_pdf_export_and_unknown_format():
    content, media_type, _ = export_clients(CLIENTS, "pdf")
    assert content.startswith(b"%PDF")
    assert media_type == "application/pdf"

    with pytest.raises(ValidationError):
        export_clients(CLIENTS, "json")
