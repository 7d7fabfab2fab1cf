"""Pydantic schema package for API contracts."""

from webmarcas.schemas.auth import LoginRequest, RefreshRequest, TokenResponse
from webmarcas.schemas.checkout import (
    AdvanceRequest,
    BackRequest,
    BrandData,
    CheckoutState,
    CheckoutStep,
    ContractReview,
    PaymentSelection,
    PersonalData,
    StepResult,
    ViabilityData,
)
from webmarcas.schemas.clients import ImportClientsRequest, ImportPreviewRequest, ImportPreviewResponse, ImportSummaryResponse
from webmarcas.schemas.common import ErrorEnvelope
from webmarcas.schemas.contracts import (
    GenerateDocumentRequest,
    GenerateDocumentResponse,
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
from webmarcas.schemas.payments import (
    AsaasWebhookEvent,
    ConfirmPaymentRequest,
    ConfirmPaymentResult,
    PaymentCreationRequest,
    PaymentCreationResult,
    PostSignaturePaymentRequest,
)
from webmarcas.schemas.promotions import PromotionRunRequest, PromotionRunResponse
from webmarcas.schemas.viability import ViabilityRequest, ViabilityResponse

__all__ = [
    "AdvanceRequest",
    "AsaasWebhookEvent",
    "BackRequest",
    "BrandData",
    "CheckoutState",
    "CheckoutStep",
    "ConfirmPaymentRequest",
    "ConfirmPaymentResult",
    "ContractReview",
    "ErrorEnvelope",
    "GenerateDocumentRequest",
    "GenerateDocumentResponse",
    "HashVerificationResult",
    "ImportClientsRequest",
    "ImportPreviewRequest",
    "ImportPreviewResponse",
    "ImportSummaryResponse",
    "LoginRequest",
    "PaymentCreationRequest",
    "PaymentCreationResult",
    "PaymentSelection",
    "PersonalData",
    "PostSignaturePaymentRequest",
    "PromotionRunRequest",
    "PromotionRunResponse",
    "RefreshRequest",
    "RenderContractRequest",
    "RenderContractResponse",
    "SignContractRequest",
    "SignatureLinkRequest",
    "SignatureLinkResult",
    "SignatureResult",
    "StepResult",
    "TokenResponse",
    "UploadSignedPdfRequest",
    "UploadSignedPdfResult",
    "ViabilityData",
    "ViabilityRequest",
    "ViabilityResponse",
]
