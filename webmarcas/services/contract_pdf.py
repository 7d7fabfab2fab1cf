"""
Contract PDF rendering.

Builds the printable contract (and, once signed, its electronic signature
certificate block) with ReportLab platypus. Returns raw bytes so callers can
upload them straight to object storage.
"""

from __future__ import annotations

import base64
import binascii
import html
import io
from dataclasses import dataclass
from datetime import datetime

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from webmarcas.utils.formatting import format_date_br


@dataclass(frozen=True)
class SignatureBlock:
    signer_name: str | None
    signed_at: datetime | None
    hash: str
    tx_id: str | None
    network: str | None
    ip_address: str | None = None
    verification_url: str | None = None
    signature_image: str | None = None


def _paragraphs(text: str) -> list[str]:
    return [block.strip() for block in (text or "").split("\n\n") if block.strip()]


def _signature_image(data_url: str | None) -> Image | None:
    if not data_url:
        return None
    encoded = data_url.split(",", 1)[1] if data_url.startswith("data:") else data_url
    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None
    return Image(io.BytesIO(raw), width=2.5 * inch, height=0.9 * inch)


def build_contract_pdf(text: str, title: str, signature: SignatureBlock | None = None) -> bytes:
    """Render contract text to an A4 PDF and return its bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.8 * inch,
        leftMargin=0.8 * inch,
        topMargin=0.8 * inch,
        bottomMargin=0.8 * inch,
        title=title,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ContractTitle",
        parent=styles["Heading1"],
        fontSize=14,
        textColor=colors.HexColor("#1E3A5F"),
        alignment=TA_CENTER,
        spaceAfter=18,
    )
    body_style = ParagraphStyle(
        "ContractBody",
        parent=styles["Normal"],
        fontSize=9.5,
        leading=13,
        alignment=TA_JUSTIFY,
        spaceAfter=8,
    )

    elements = [Paragraph(html.escape(title), title_style)]
    for block in _paragraphs(text):
        lines = "<br/>".join(html.escape(line) for line in block.splitlines())
        elements.append(Paragraph(lines, body_style))

    if signature is not None:
        elements.append(Spacer(1, 0.3 * inch))
        elements.append(Paragraph("CERTIFICADO DE ASSINATURA ELETRÔNICA", styles["Heading3"]))
        image = _signature_image(signature.signature_image)
        if image is not None:
            elements.append(image)
        rows = [
            ["Signatário", signature.signer_name or "-"],
            ["Data da assinatura", format_date_br(signature.signed_at) or "-"],
            ["IP", signature.ip_address or "-"],
            ["Hash SHA-256", signature.hash],
            ["Transação", signature.tx_id or "-"],
            ["Rede", signature.network or "-"],
        ]
        if signature.verification_url:
            rows.append(["Verificação", signature.verification_url])
        table = Table(
            [[cell, Paragraph(html.escape(str(value)), styles["Normal"])] for cell, value in rows],
            colWidths=[1.6 * inch, 5.0 * inch],
        )
        table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 8),
                    ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#BDC3C7")),
                    ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#ECF0F1")),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ]
            )
        )
        elements.append(table)

    doc.build(elements)
    return buffer.getvalue()
