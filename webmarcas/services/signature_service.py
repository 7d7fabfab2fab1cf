"""Electronic contract signature with a blockchain timestamp proof."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from webmarcas.core.config import PRODUCTION_SITE_URL, Config, get_config
from webmarcas.core.exceptions import AuthorizationError, DatabaseError, NotFoundError, ServiceError, ValidationError
from webmarcas.models import Contract, LeadStatus, Profile, SignatureAuditLog, SignatureStatus
from webmarcas.models.base import as_utc, utcnow
from webmarcas.orchestration.state_machine import SIGNATURE_TRANSITIONS
from webmarcas.schemas.contracts import HashVerificationResult, SignatureLinkResult, SignatureResult
from webmarcas.services.base_service import BaseService
from webmarcas.services.notification_service import NotificationRecipient, NotificationService
from webmarcas.services.storage import ObjectStorage, get_storage
from webmarcas.services.timestamp_client import TimestampClient, compute_contract_hash
from webmarcas.utils.formatting import format_date_br
from webmarcas.utils.ids import new_signature_token

logger = logging.getLogger(__name__)

PREVIEW_HOST_MARKERS = ("lovableproject.com", "lovable.app", "localhost")
IP_HEADERS = ("x-real-ip", "cf-connecting-ip")


def resolve_client_ip(headers: Mapping[str, str]) -> str:
    """First hop of ``x-forwarded-for``, then ``x-real-ip``, then ``cf-connecting-ip``."""
    lowered = {key.lower(): value for key, value in headers.items()}
    forwarded = (lowered.get("x-forwarded-for") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    for header in IP_HEADERS:
        value = (lowered.get(header) or "").strip()
        if value:
            return value
    return "unknown"


def resolve_base_url(base_url: str | None, config: Config) -> str:
    if config.SITE_URL:
        return config.SITE_URL.rstrip("/")
    if base_url and not any(marker in base_url for marker in PREVIEW_HOST_MARKERS):
        return base_url.rstrip("/")
    return PRODUCTION_SITE_URL


def contract_verification_url(hash_hex: str, config: Config) -> str:
    return f"{config.SITE_URL or PRODUCTION_SITE_URL}/verificar-contrato?hash={hash_hex}"


def _enqueue_pdf_render(contract_id: int) -> None:
    from webmarcas.tasks.contract_tasks import render_and_upload_signed_pdf

    render_and_upload_signed_pdf.delay(contract_id)


class SignatureService(BaseService):
    def __init__(
        self,
        db=None,
        timestamp_client: TimestampClient | None = None,
        storage: ObjectStorage | None = None,
        notifier: NotificationService | None = None,
        pdf_dispatcher: Callable[[int], Any] | None = None,
        config: Config | None = None,
    ) -> None:
        super().__init__(db)
        self.config = config or get_config()
        self.timestamp_client = timestamp_client or TimestampClient(config=self.config)
        self.storage = storage or get_storage(self.config)
        self.notifier = notifier or NotificationService(db=self.db, config=self.config)
        self.pdf_dispatcher = pdf_dispatcher or _enqueue_pdf_render

    def verification_url(self, hash_hex: str) -> str:
        return contract_verification_url(hash_hex, self.config)

    def get_contract_by_token(self, token: str, now: datetime | None = None) -> Contract:
        if not token:
            raise ValidationError("Signature token is required.")
        contract = self.db.query(Contract).filter(Contract.signature_token == token).first()
        if contract is None:
            raise NotFoundError("Contract not found for this signature link.")
        expires_at = as_utc(contract.signature_token_expires_at)
        if expires_at is not None and expires_at < (now or utcnow()):
            raise ValidationError("Signature link has expired.")
        return contract

    def sign_contract(
        self,
        contract_id: int | None = None,
        token: str | None = None,
        contract_html: str | None = None,
        signature_image: str | None = None,
        client_ip: str | None = None,
        user_agent: str | None = None,
        device_info: dict[str, Any] | None = None,
        now: datetime | None = None,
        signer_user_id: int | None = None,
    ) -> SignatureResult:
        """Sign by token or by id. With ``signer_user_id`` the contract must belong to that user."""
        if token:
            contract = self.get_contract_by_token(token, now=now)
        elif contract_id is not None:
            contract = self.db.get(Contract, contract_id)
            if contract is None:
                raise NotFoundError(f"Contract {contract_id} not found.")
            if signer_user_id is not None and contract.user_id != signer_user_id:
                raise AuthorizationError("Contract belongs to another client.")
        else:
            raise ValidationError("contract_id or signature token is required.")

        SIGNATURE_TRANSITIONS.assert_transition(contract.signature_status, SignatureStatus.SIGNED)

        html = contract_html or contract.contract_html
        if not html:
            raise ValidationError("Contract content is required to sign.")

        hash_hex = compute_contract_hash(html, signature_image)
        proof = self.timestamp_client.stamp(hash_hex, now=now)
        ots_file_url = self._store_proof(contract.id, proof.proof_bytes, proof.timestamp)

        try:
            contract.signature_status = SignatureStatus.SIGNED
            contract.signed_at = proof.timestamp
            contract.signature_ip = client_ip or "unknown"
            contract.signature_user_agent = user_agent
            contract.device_info = json.dumps(device_info) if device_info else None
            contract.client_signature_image = signature_image
            contract.blockchain_hash = hash_hex
            contract.blockchain_timestamp = proof.timestamp
            contract.blockchain_tx_id = proof.tx_id
            contract.blockchain_network = proof.network
            contract.blockchain_proof = proof.proof
            contract.ots_file_url = ots_file_url
            if not contract.contract_html:
                contract.contract_html = html

            lead = contract.lead
            if lead is not None and lead.status != LeadStatus.CONVERTIDO:
                lead.status = LeadStatus.CONTRATO_ASSINADO

            self.db.add(
                SignatureAuditLog(
                    contract_id=contract.id,
                    event_type="contract_signed",
                    ip_address=client_ip,
                    user_agent=user_agent,
                    details=json.dumps(
                        {
                            "hash": hash_hex,
                            "tx_id": proof.tx_id,
                            "network": proof.network,
                            "pending": proof.pending,
                            "via_token": bool(token),
                        }
                    ),
                )
            )
            self.commit()
        except SQLAlchemyError as exc:
            logger.exception("signature.persist.failed", extra={"event": "signature.persist.failed", "contract_id": contract.id})
            raise DatabaseError("Failed to persist contract signature.") from exc

        logger.info(
            "signature.completed",
            extra={
                "event": "signature.completed",
                "contract_id": contract.id,
                "hash": hash_hex,
                "pending": proof.pending,
            },
        )
        self._dispatch_pdf(contract.id)
        return SignatureResult(
            contract_id=contract.id,
            hash=hash_hex,
            timestamp=proof.timestamp,
            tx_id=proof.tx_id,
            network=proof.network,
            proof_status="pending" if proof.pending else "confirmed",
            ots_file_url=ots_file_url,
            verification_url=self.verification_url(hash_hex),
        )

    def verify_hash(self, hash_hex: str) -> HashVerificationResult:
        normalized = (hash_hex or "").strip().lower()
        if not normalized:
            raise ValidationError("Hash is required.")
        contract = (
            self.db.query(Contract)
            .filter(Contract.blockchain_hash == normalized)
            .filter(Contract.signature_status == SignatureStatus.SIGNED)
            .first()
        )
        if contract is None:
            return HashVerificationResult(valid=False, hash=normalized)
        proof = contract.blockchain_proof or ""
        return HashVerificationResult(
            valid=True,
            contract_id=contract.id,
            signed_at=as_utc(contract.signed_at),
            hash=normalized,
            tx_id=contract.blockchain_tx_id,
            network=contract.blockchain_network,
            proof_status="pending" if proof.startswith("PENDING_") else "confirmed",
            ots_file_url=contract.ots_file_url,
        )

    def generate_signature_link(
        self,
        contract_id: int,
        expires_in_days: int | None = None,
        base_url: str | None = None,
        now: datetime | None = None,
    ) -> SignatureLinkResult:
        contract = self.db.get(Contract, contract_id)
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found.")
        if contract.signature_status == SignatureStatus.SIGNED:
            raise ValidationError("Contract is already signed.")

        days = expires_in_days or self.config.SIGNATURE_LINK_EXPIRY_DAYS
        if days < 1:
            raise ValidationError("Link expiry must be at least one day.")
        token = new_signature_token()
        expires_at = (now or utcnow()) + timedelta(days=days)
        url = f"{resolve_base_url(base_url, self.config)}/assinar/{token}"

        try:
            contract.signature_token = token
            contract.signature_token_expires_at = expires_at
            if SIGNATURE_TRANSITIONS.can_transition(contract.signature_status, SignatureStatus.PENDING):
                contract.signature_status = SignatureStatus.PENDING
            self.db.add(
                SignatureAuditLog(
                    contract_id=contract.id,
                    event_type="link_generated",
                    details=json.dumps({"expires_at": expires_at.isoformat(), "expires_in_days": days}),
                )
            )
            self.commit()
        except SQLAlchemyError as exc:
            logger.exception("signature.link.failed", extra={"event": "signature.link.failed", "contract_id": contract.id})
            raise DatabaseError("Failed to generate signature link.") from exc

        logger.info(
            "signature.link.generated",
            extra={"event": "signature.link.generated", "contract_id": contract.id, "expires_in_days": days},
        )
        self._notify_link(contract, url, expires_at)
        return SignatureLinkResult(token=token, url=url, expires_at=expires_at)

    def _store_proof(self, contract_id: int, proof_bytes: bytes | None, stamped_at: datetime) -> str | None:
        if not proof_bytes:
            return None
        path = f"ots-proofs/{contract_id}_{int(stamped_at.timestamp() * 1000)}.ots"
        try:
            return self.storage.upload(path, proof_bytes, "application/octet-stream")
        except ServiceError:
            logger.warning(
                "signature.proof.upload_failed",
                extra={"event": "signature.proof.upload_failed", "contract_id": contract_id},
            )
            return None

    def _dispatch_pdf(self, contract_id: int) -> None:
        try:
            self.pdf_dispatcher(contract_id)
        except Exception:
            logger.exception(
                "signature.pdf.enqueue_failed",
                extra={"event": "signature.pdf.enqueue_failed", "contract_id": contract_id},
            )

    def _notify_link(self, contract: Contract, url: str, expires_at: datetime) -> None:
        lead = contract.lead
        profile = None
        if contract.user_id is not None:
            profile = self.db.query(Profile).filter(Profile.user_id == contract.user_id).first()
        source = profile or lead
        if source is None:
            return
        recipient = NotificationRecipient(
            name=source.full_name,
            email=source.email,
            phone=source.phone,
            user_id=contract.user_id,
        )
        brand = (contract.subject or "").split(":", 1)[-1].strip() or None
        self.notifier.notify(
            "link_assinatura_gerado",
            recipient,
            {"link_assinatura": url, "data_expiracao": format_date_br(expires_at), "marca": brand},
            channels=("email", "whatsapp", "crm"),
        )
