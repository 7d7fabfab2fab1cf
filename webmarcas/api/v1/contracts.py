"""Contract render, signature and signed-document endpoints for API v1."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Header, Request, status

from webmarcas.api.v1._authz import require, to_http_error
from webmarcas.auth.rbac import has_scopes
from webmarcas.core.exceptions import WebMarcasError
from webmarcas.database.db import get_db_session
from webmarcas.models import Profile
from webmarcas.schemas.contracts import (
    ContractPublicView,
    HashVerificationResult,
    RenderContractRequest,
    RenderContractResponse,
    SignatureLinkRequest,
    SignatureLinkResult,
    SignatureResult,
    SignContractRequest,
    UploadSignedPdfRequest,
    UploadSignedPdfResult,
)
from webmarcas.services.contract_renderer import render_contract, render_contract_html
from webmarcas.services.document_service import DocumentService
from webmarcas.services.signature_service import SignatureService, resolve_client_ip

router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.post("/render", response_model=RenderContractResponse)
def render(payload: RenderContractRequest) -> RenderContractResponse:
    try:
        text = render_contract(
            payload.template,
            payload.personal_data,
            payload.brand_data,
            payload.payment_method,
            payload.today or date.today(),
        )
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc
    return RenderContractResponse(contract_text=text, contract_html=render_contract_html(text))


@router.post("/signature-link", response_model=SignatureLinkResult, status_code=status.HTTP_201_CREATED)
def create_signature_link(
    payload: SignatureLinkRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> SignatureLinkResult:
    require(authorization, scopes=["contracts.manage"])
    try:
        with get_db_session() as db:
            return SignatureService(db=db).generate_signature_link(
                payload.contract_id,
                expires_in_days=payload.expires_in_days,
                base_url=payload.base_url,
            )
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc


@router.get("/by-token/{token}", response_model=ContractPublicView)
def get_by_token(token: str) -> ContractPublicView:
    try:
        with get_db_session() as db:
            contract = SignatureService(db=db).get_contract_by_token(token)
            source = None
            if contract.user_id is not None:
                source = db.query(Profile).filter(Profile.user_id == contract.user_id).first()
            source = source or contract.lead
            return ContractPublicView(
                id=contract.id,
                subject=contract.subject,
                contract_html=contract.contract_html,
                contract_value=contract.contract_value,
                payment_method=contract.payment_method,
                signature_status=contract.signature_status,
                signature_token_expires_at=contract.signature_token_expires_at,
                signed_at=contract.signed_at,
                client_name=source.full_name if source else None,
                client_email=source.email if source else None,
            )
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc


@router.post("/sign", response_model=SignatureResult)
def sign(
    payload: SignContractRequest,
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> SignatureResult:
    # a valid signature token is the credential for public signing links
    signer_user_id = None
    if not payload.signature_token:
        current = require(authorization, scopes=["contracts.sign"])
        if not has_scopes(current.role, ["contracts.manage"]):
            signer_user_id = current.user_id

    try:
        with get_db_session() as db:
            return SignatureService(db=db).sign_contract(
                contract_id=payload.contract_id,
                token=payload.signature_token,
                contract_html=payload.contract_html,
                signature_image=payload.signature_image,
                client_ip=resolve_client_ip(request.headers),
                user_agent=request.headers.get("user-agent"),
                device_info=payload.device_info,
                signer_user_id=signer_user_id,
            )
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc


@router.get("/verify/{hash_hex}", response_model=HashVerificationResult)
def verify(hash_hex: str) -> HashVerificationResult:
    try:
        with get_db_session() as db:
            return SignatureService(db=db).verify_hash(hash_hex)
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc


@router.post("/signed-pdf", response_model=UploadSignedPdfResult, status_code=status.HTTP_201_CREATED)
def upload_signed_pdf(
    payload: UploadSignedPdfRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> UploadSignedPdfResult:
    require(authorization, scopes=["contracts.manage"])
    try:
        with get_db_session() as db:
            return DocumentService(db=db).upload_signed_pdf(
                payload.contract_id,
                pdf_base64=payload.pdf_base64,
                file_name=payload.file_name,
                user_id=payload.user_id,
                document_type=payload.document_type,
            )
    except WebMarcasError as exc:
        raise to_http_error(exc) from exc
