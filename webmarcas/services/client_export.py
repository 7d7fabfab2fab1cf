"""Client list export to CSV, XLSX, XML and PDF."""

from __future__ import annotations

import csv
import html
import io
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Mapping

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from webmarcas.core.exceptions import ValidationError
from webmarcas.models.base import utcnow
from webmarcas.utils.formatting import format_brl, format_date_br

EXPORT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("full_name", "Nome"),
    ("email", "Email"),
    ("phone", "Telefone"),
    ("company_name", "Empresa"),
    ("cpf_cnpj", "CPF/CNPJ"),
    ("address", "Endereço"),
    ("city", "Cidade"),
    ("state", "Estado"),
    ("zip_code", "CEP"),
    ("origin", "Origem"),
    ("priority", "Prioridade"),
    ("contract_value", "Valor do Contrato"),
    ("created_at", "Data de Cadastro"),
)

PRIORITY_LABELS = {"high": "Alta", "medium": "Média", "low": "Baixa"}
ORIGIN_LABELS = {"site": "Site", "whatsapp": "WhatsApp", "import": "Importação", "admin": "Admin"}

MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "xml": "application/xml",
    "pdf": "application/pdf",
}


def _raw(client, key: str):
    if isinstance(client, Mapping):
        return client.get(key)
    return getattr(client, key, None)


def _enum_value(value) -> str:
    return str(getattr(value, "value", value) or "")


def display_row(client) -> dict[str, str]:
    """One client as ``{label: display text}``."""
    row: dict[str, str] = {}
    for key, label in EXPORT_COLUMNS:
        value = _raw(client, key)
        if key == "contract_value":
            text = format_brl(value) if value not in (None, "") else ""
        elif key == "created_at":
            text = format_date_br(value) if value is not None else ""
        elif key == "priority":
            raw = _enum_value(value)
            text = PRIORITY_LABELS.get(raw, raw)
        elif key == "origin":
            raw = _enum_value(value)
            text = ORIGIN_LABELS.get(raw, raw)
        else:
            text = "" if value is None else str(value)
        row[label] = text
    return row


def clients_to_frame(clients: Iterable) -> pd.DataFrame:
    labels = [label for _, label in EXPORT_COLUMNS]
    return pd.DataFrame([display_row(client) for client in clients], columns=labels)


def _to_csv(frame: pd.DataFrame) -> bytes:
    text = frame.to_csv(sep=";", index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return ("\ufeff" + text).encode("utf-8")


def _to_xlsx(frame: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    frame.to_excel(buffer, sheet_name="Clientes", index=False, engine="openpyxl")
    return buffer.getvalue()


def _to_xml(clients: list) -> bytes:
    root = ET.Element("clients")
    for client in clients:
        node = ET.SubElement(root, "client")
        for key, _label in EXPORT_COLUMNS:
            value = _raw(client, key)
            if key == "contract_value":
                text = "" if value in (None, "") else f"{value:.2f}" if not isinstance(value, str) else value
            elif key == "created_at":
                text = value.isoformat() if value is not None else ""
            else:
                text = _enum_value(value)
            ET.SubElement(node, key).text = text
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def _to_pdf(frame: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=0.4 * inch,
        leftMargin=0.4 * inch,
        topMargin=0.5 * inch,
        bottomMargin=0.5 * inch,
        title="Clientes",
    )
    styles = getSampleStyleSheet()
    cell_style = styles["BodyText"].clone("ClientCell", fontSize=6.5, leading=8)
    header = [Paragraph(f"<b>{html.escape(label)}</b>", cell_style) for label in frame.columns]
    body = [[Paragraph(html.escape(str(value)), cell_style) for value in record] for record in frame.itertuples(index=False)]

    table = Table([header] + body, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1E3A5F")),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#BDC3C7")),
                ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F4F6F7")]),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    generated = format_date_br(utcnow())
    doc.build(
        [
            Paragraph(f"Relatório de Clientes - {generated} ({len(frame)} registros)", styles["Heading2"]),
            Spacer(1, 0.15 * inch),
            table,
        ]
    )
    return buffer.getvalue()


def export_clients(clients: Iterable, fmt: str) -> tuple[bytes, str, str]:
    """Serialize clients and return ``(content, media_type, filename)``."""
    normalized = (fmt or "").strip().lower()
    if normalized not in MEDIA_TYPES:
        raise ValidationError(f"Unsupported export format: {fmt}")

    items = list(clients)
    if normalized == "xml":
        content = _to_xml(items)
    else:
        frame = clients_to_frame(items)
        if normalized == "csv":
            content = _to_csv(frame)
        elif normalized == "xlsx":
            content = _to_xlsx(frame)
        else:
            content = _to_pdf(frame)

    filename = f"clientes_{utcnow().strftime('%Y%m%d')}.{normalized}"
    return content, MEDIA_TYPES[normalized], filename
