"""Signed contract PDF storage and document records."""

from __future__ import annotations

import base64
import binascii
import html
import logging
import re
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from webmarcas.core.config import PRODUCTION_SITE_URL, Config, get_config
from webmarcas.core.exceptions import DatabaseError, NotFoundError, ValidationError
from webmarcas.models import Contract, Document, DocumentType, Profile, SignatureStatus
from webmarcas.models.base import utcnow
from webmarcas.schemas.contracts import UploadSignedPdfResult
from webmarcas.services.base_service import BaseService
from webmarcas.services.contract_pdf import SignatureBlock, build_contract_pdf
from webmarcas.services.storage import ObjectStorage, get_storage

logger = logging.getLogger(__name__)

SIGNED_PREFIX = "Contrato Assinado - "
_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")
_TAGS = re.compile(r"<[^>]+>")


def sanitize_file_name(name: str) -> str:
    stem = name[:-4] if name.lower().endswith(".pdf") else name
    return _UNSAFE_NAME_CHARS.sub("_", stem) or "contrato"


def decode_pdf_payload(pdf_base64: str) -> bytes:
    """Decode a base64 PDF, accepting an optional ``data:...;base64,`` prefix."""
    payload = pdf_base64.strip()
    if payload.startswith("data:"):
        payload = payload.split(",", 1)[-1]
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("pdf_base64 is not valid base64.") from exc


def _plain_text(contract_html: str) -> str:
    text = re.sub(r"</p>\s*<p>", "\n\n", contract_html)
    text = re.sub(r"<br\s*/?>", "\n", text)
    return html.unescape(_TAGS.sub("", text))


class DocumentService(BaseService):
    def __init__(self, db=None, storage: ObjectStorage | None = None, config: Config | None = None) -> None:
        super().__init__(db)
        self.config = config or get_config()
        self.storage = storage or get_storage(self.config)

    def upload_signed_pdf(
        self,
        contract_id: int | None,
        pdf_base64: str | None = None,
        pdf_bytes: bytes | None = None,
        file_name: str | None = None,
        user_id: int | None = None,
        document_type: DocumentType = DocumentType.CONTRATO,
        now: datetime | None = None,
    ) -> UploadSignedPdfResult:
        if not contract_id:
            raise ValidationError("contract_id is required.", field_errors={"contract_id": ["Obrigatório."]})
        if pdf_bytes is None:
            if not pdf_base64:
                raise ValidationError("A PDF payload is required.", field_errors={"pdf_base64": ["Obrigatório."]})
            pdf_bytes = decode_pdf_payload(pdf_base64)
        if not pdf_bytes:
            raise ValidationError("A PDF payload is required.", field_errors={"pdf_base64": ["Obrigatório."]})

        contract = self.db.get(Contract, contract_id)
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found.")

        timestamp = int((now or utcnow()).timestamp() * 1000)
        safe_name = sanitize_file_name(file_name or f"contrato_{contract_id}")
        path = f"signed-contracts/{contract_id}/{timestamp}_{safe_name}.pdf"
        public_url = self.storage.upload(path, pdf_bytes, "application/pdf")

        subject = contract.subject or f"Contrato #{contract_id}"
        document_name = file_name or f"Contrato_Assinado_{safe_name}.pdf"
        try:
            document = self.db.query(Document).filter(Document.contract_id == contract_id).first()
            if document is None:
                document = Document(contract_id=contract_id)
                self.db.add(document)
            document.user_id = user_id or contract.user_id
            document.name = document_name
            document.document_type = document_type
            document.file_url = public_url
            document.file_size = len(pdf_bytes)
            document.mime_type = "application/pdf"
            document.uploaded_by = "system"

            if contract.signature_status == SignatureStatus.SIGNED and not subject.startswith(SIGNED_PREFIX):
                contract.subject = f"{SIGNED_PREFIX}{subject}"
            self.commit()
        except SQLAlchemyError as exc:
            logger.exception("document.persist.failed", extra={"event": "document.persist.failed", "contract_id": contract_id})
            raise DatabaseError("Failed to record signed document.") from exc

        logger.info(
            "document.signed_pdf.uploaded",
            extra={
                "event": "document.signed_pdf.uploaded",
                "contract_id": contract_id,
                "document_id": document.id,
                "size": len(pdf_bytes),
            },
        )
        return UploadSignedPdfResult(document_id=document.id, public_url=public_url, file_size=len(pdf_bytes))

    def render_and_upload(self, contract_id: int) -> UploadSignedPdfResult:
        """Rasterize a signed contract to PDF and store it."""
        contract = self.db.get(Contract, contract_id)
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found.")
        if contract.signature_status != SignatureStatus.SIGNED or not contract.blockchain_hash:
            raise ValidationError(f"Contract {contract_id} is not signed.")

        signer = None
        if contract.user_id is not None:
            profile = self.db.query(Profile).filter(Profile.user_id == contract.user_id).first()
            signer = profile.full_name if profile else None
        if signer is None and contract.lead is not None:
            signer = contract.lead.full_name

        base = self.config.SITE_URL or PRODUCTION_SITE_URL
        pdf = build_contract_pdf(
            _plain_text(contract.contract_html or ""),
            title=contract.subject or "Contrato de Registro de Marca",
            signature=SignatureBlock(
                signer_name=signer,
                signed_at=contract.signed_at,
                hash=contract.blockchain_hash,
                tx_id=contract.blockchain_tx_id,
                network=contract.blockchain_network,
                ip_address=contract.signature_ip,
                verification_url=f"{base}/verificar-contrato?hash={contract.blockchain_hash}",
                signature_image=contract.client_signature_image,
            ),
        )
        return self.upload_signed_pdf(contract_id, pdf_bytes=pdf, file_name=f"contrato_{contract_id}")
