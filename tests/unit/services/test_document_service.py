from __future__ import annotations

import base64
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from webmarcas.core.exceptions import NotFoundError, ValidationError
from webmarcas.models import Contract, Document, Lead, SignatureStatus
from webmarcas.services.document_service import DocumentService, decode_pdf_payload, sanitize_file_name
from webmarcas.services.storage import LocalObjectStorage

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
PDF = b"%PDF-1.4 minimal"


@pytest.fixture
def storage(tmp_path):
    return LocalObjectStorage(str(tmp_path), "http://files.test")


def _contract(db_session, signed=True):
    lead = Lead(full_name="Maria Souza", email="maria@example.com")
    db_session.add(lead)
    db_session.flush()
    contract = Contract(
        lead_id=lead.id,
        subject="Registro de marca: Aurora",
        contract_html="<p>Primeiro parágrafo</p><p>Segundo &amp; último</p>",
        contract_value=Decimal("699.00"),
        signature_status=SignatureStatus.SIGNED if signed else SignatureStatus.NOT_SIGNED,
        blockchain_hash="ab" * 32 if signed else None,
        blockchain_tx_id="OTS_1_ABAB" if signed else None,
        blockchain_network="Bitcoin (OpenTimestamps - Pending)" if signed else None,
        signed_at=NOW if signed else None,
    )
    db_session.add(contract)
    db_session.commit()
    return contract


def test_helpers():
    assert sanitize_file_name("contrato final (1).pdf") == "contrato_final__1_"
    assert sanitize_file_name(".pdf") == "contrato"
    encoded = base64.b64encode(PDF).decode()
    assert decode_pdf_payload(f"data:application/pdf;base64,{encoded}") == PDF
    with pytest.raises(ValidationError):
        decode_pdf_payload("not base64!!")


def test_upload_creates_then_replaces_single_document(db_session, storage, tmp_path):
    contract = _contract(db_session)
    service = DocumentService(db=db_session, storage=storage)
    encoded = base64.b64encode(PDF).decode()

    first = service.upload_signed_pdf(contract.id, pdf_base64=encoded, file_name="assinado.pdf", now=NOW)
    second = service.upload_signed_pdf(contract.id, pdf_bytes=PDF + b"v2", now=NOW)

    stamp = int(NOW.timestamp() * 1000)
    assert first.public_url == f"http://files.test/signed-contracts/{contract.id}/{stamp}_assinado.pdf"
    assert (tmp_path / "signed-contracts" / str(contract.id) / f"{stamp}_assinado.pdf").read_bytes() == PDF
    assert second.document_id == first.document_id
    document = db_session.query(Document).one()
    assert document.file_size == len(PDF) + 2
    assert document.mime_type == "application/pdf"

    db_session.refresh(contract)
    assert contract.subject == "Contrato Assinado - Registro de marca: Aurora"


def test_upload_validation(db_session, storage):
    service = DocumentService(db=db_session, storage=storage)
    with pytest.raises(ValidationError):
        service.upload_signed_pdf(None, pdf_bytes=PDF)
    with pytest.raises(ValidationError):
        service.upload_signed_pdf(1)
    with pytest.raises(NotFoundError):
        service.upload_signed_pdf(99, pdf_bytes=PDF)


def test_render_and_upload_signed_contract(db_session, storage):
    contract = _contract(db_session)
    result = DocumentService(db=db_session, storage=storage).render_and_upload(contract.id)
    document = db_session.query(Document).one()
    assert document.file_url == result.public_url
    assert result.file_size > 0

    unsigned = _contract(db_session, signed=False)
    with pytest.raises(ValidationError):
        DocumentService(db=db_session, storage=storage).render_and_upload(unsigned.id)


def test_storage_rejects_path_escape(storage):
    with pytest.raises(ValidationError):
        storage.upload("../outside.pdf", PDF, "application/pdf")
