"""Client spreadsheet parsing, column mapping and row validation.

Parsing only produces raw ``{header: value}`` rows. Mapping those onto
system fields is a separate step so an operator can review and override the
suggested mapping before anything is imported.
"""

from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import PurePath

import pandas as pd

from webmarcas.core.exceptions import ValidationError
from webmarcas.utils.validators import EMAIL_PATTERN, only_digits, strip_accents

SUPPORTED_EXTENSIONS = {".csv", ".xlsx", ".xls", ".xml", ".pdf"}
XML_RECORD_TAGS = {"client", "contact", "customer", "lead", "cliente", "contato"}


@dataclass(frozen=True)
class SystemField:
    key: str
    label: str
    required: bool = False


SYSTEM_FIELDS: tuple[SystemField, ...] = (
    SystemField("full_name", "Nome Completo", required=True),
    SystemField("email", "E-mail", required=True),
    SystemField("phone", "Telefone"),
    SystemField("company_name", "Empresa"),
    SystemField("cpf_cnpj", "CPF/CNPJ"),
    SystemField("address", "Endereço"),
    SystemField("city", "Cidade"),
    SystemField("state", "Estado"),
    SystemField("zip_code", "CEP"),
    SystemField("origin", "Origem"),
    SystemField("priority", "Prioridade"),
    SystemField("contract_value", "Valor do Contrato"),
)
SYSTEM_FIELD_KEYS = tuple(item.key for item in SYSTEM_FIELDS)

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "full_name": ("nome", "name", "full_name", "nome completo", "cliente", "razao social", "contact_name", "firstname", "lastname"),
    "email": ("email", "e-mail", "correio", "mail", "email_address"),
    "phone": ("telefone", "phone", "tel", "celular", "mobile", "whatsapp", "fone", "phone_number"),
    "company_name": ("empresa", "company", "company_name", "organization", "organizacao", "razao_social"),
    "cpf_cnpj": ("cpf", "cnpj", "cpf_cnpj", "documento", "vat", "tax_id", "cpf/cnpj"),
    "address": ("endereco", "address", "logradouro", "rua", "street"),
    "city": ("cidade", "city", "municipio"),
    "state": ("estado", "state", "uf"),
    "zip_code": ("cep", "zip", "zip_code", "postal", "postal_code", "codigo_postal"),
    "origin": ("origem", "origin", "source", "fonte", "canal"),
    "priority": ("prioridade", "priority", "urgencia"),
    "contract_value": ("valor", "value", "contract_value", "valor_contrato", "amount", "total"),
}


@dataclass
class ParsedFile:
    format: str
    headers: list[str]
    rows: list[dict[str, str]]


@dataclass
class ClientRecord:
    row_index: int
    full_name: str = ""
    email: str = ""
    phone: str = ""
    company_name: str = ""
    cpf_cnpj: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    origin: str = ""
    priority: str = ""
    contract_value: Decimal | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class RowError:
    row_index: int
    field: str
    message: str


@dataclass
class ValidationReport:
    errors: list[RowError] = field(default_factory=list)

    def rows_with_errors(self) -> set[int]:
        return {error.row_index for error in self.errors}

    def for_row(self, row_index: int) -> list[RowError]:
        return [error for error in self.errors if error.row_index == row_index]


def normalize_header(value: str) -> str:
    lowered = strip_accents(str(value).lower().strip())
    return re.sub(r"[_\-\s]+", "_", lowered)


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def _drop_empty(rows: list[dict[str, str]]) -> list[dict[str, str]]:
    return [row for row in rows if any(value for value in row.values())]


def _parse_csv(content: bytes) -> ParsedFile:
    text = content.decode("utf-8-sig", errors="replace")
    first_line = text.splitlines()[0] if text.strip() else ""
    delimiter = ";" if first_line.count(";") > first_line.count(",") else ","
    if not first_line:
        return ParsedFile("csv", [], [])
    frame = pd.read_csv(io.StringIO(text), sep=delimiter, dtype=str, keep_default_na=False, skip_blank_lines=True)
    headers = [str(column).strip() for column in frame.columns]
    frame.columns = headers
    rows = [{header: _cell(value) for header, value in record.items()} for record in frame.to_dict(orient="records")]
    return ParsedFile("csv", headers, _drop_empty(rows))


def _parse_excel(content: bytes, extension: str) -> ParsedFile:
    try:
        frame = pd.read_excel(
            io.BytesIO(content),
            sheet_name=0,
            dtype=str,
            engine="openpyxl" if extension == ".xlsx" else None,
        )
    except ValueError as exc:
        raise ValidationError(f"Não foi possível ler a planilha: {exc}") from exc
    headers = [_cell(column) for column in frame.columns]
    frame.columns = headers
    rows = [{header: _cell(value) for header, value in record.items()} for record in frame.to_dict(orient="records")]
    return ParsedFile(extension.lstrip("."), headers, _drop_empty(rows))


def _local_tag(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_xml(content: bytes) -> ParsedFile:
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise ValidationError("Erro ao processar XML: formato inválido") from exc

    nodes = [node for node in root.iter() if _local_tag(node.tag).lower() in XML_RECORD_TAGS]
    if not nodes:
        nodes = list(root)

    headers: list[str] = []
    rows: list[dict[str, str]] = []
    for node in nodes:
        row: dict[str, str] = {}
        for child in node:
            row[_local_tag(child.tag)] = (child.text or "").strip()
        for name, value in node.attrib.items():
            row[_local_tag(name)] = value.strip()
        for key in row:
            if key not in headers:
                headers.append(key)
        rows.append(row)
    return ParsedFile("xml", headers, _drop_empty(rows))


def parse_client_file(filename: str, content: bytes) -> ParsedFile:
    extension = PurePath(filename or "").suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise ValidationError(f"Formato de arquivo não suportado: {extension or filename}")
    if extension == ".pdf":
        raise ValidationError("PDF_REQUIRES_SERVER")
    if extension == ".csv":
        return _parse_csv(content)
    if extension == ".xml":
        return _parse_xml(content)
    return _parse_excel(content, extension)


def suggest_field_mapping(headers: list[str]) -> dict[str, str | None]:
    """Map each header to at most one system field (exact aliases win over partial ones)."""
    normalized_aliases = {
        key: tuple(normalize_header(alias) for alias in aliases) for key, aliases in FIELD_ALIASES.items()
    }
    mapping: dict[str, str | None] = {header: None for header in headers}
    assigned: set[str] = set()

    for exact in (True, False):
        for header in headers:
            if mapping[header] is not None:
                continue
            normalized = normalize_header(header)
            if not normalized:
                continue
            for key in SYSTEM_FIELD_KEYS:
                if key in assigned:
                    continue
                aliases = normalized_aliases[key]
                if exact:
                    matched = normalized in aliases
                else:
                    matched = any(alias in normalized or normalized in alias for alias in aliases)
                if matched:
                    mapping[header] = key
                    assigned.add(key)
                    break
    return mapping


def parse_currency(value) -> Decimal | None:
    if value is None:
        return None
    cleaned = re.sub(r"[^\d.,]", "", str(value))
    if not cleaned:
        return None
    if "," in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".")
    elif cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")
    try:
        return Decimal(cleaned).quantize(Decimal("0.01"))
    except InvalidOperation:
        return None


def apply_field_mapping(rows: list[dict[str, str]], mapping: dict[str, str | None]) -> list[ClientRecord]:
    records: list[ClientRecord] = []
    for index, row in enumerate(rows):
        record = ClientRecord(row_index=index)
        for header, key in mapping.items():
            if not key or key not in SYSTEM_FIELD_KEYS or header not in row:
                continue
            raw = _cell(row[header])
            if key == "contract_value":
                record.contract_value = parse_currency(raw)
            elif key == "email":
                record.email = raw.lower()
            elif key == "cpf_cnpj":
                record.cpf_cnpj = only_digits(raw)
            elif key == "state":
                record.state = raw.upper()
            else:
                setattr(record, key, raw)
        records.append(record)
    return records


def validate_clients(records: list[ClientRecord]) -> ValidationReport:
    report = ValidationReport()
    seen_emails: set[str] = set()
    for record in records:
        index = record.row_index
        email = record.email.strip().lower()
        if not email:
            report.errors.append(RowError(index, "email", "E-mail é obrigatório"))
        elif not EMAIL_PATTERN.match(email):
            report.errors.append(RowError(index, "email", "E-mail inválido"))
        elif email in seen_emails:
            report.errors.append(RowError(index, "email", "E-mail duplicado no arquivo"))
        else:
            seen_emails.add(email)

        name = record.full_name.strip()
        if not name:
            report.errors.append(RowError(index, "full_name", "Nome é obrigatório"))
        elif len(name) < 2:
            report.errors.append(RowError(index, "full_name", "Nome deve ter pelo menos 2 caracteres"))

        if record.cpf_cnpj and len(only_digits(record.cpf_cnpj)) not in (11, 14):
            report.errors.append(RowError(index, "cpf_cnpj", "CPF/CNPJ inválido"))
    return report
