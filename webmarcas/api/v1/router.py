"""Root API router for v1 endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from webmarcas.api.v1 import auth, checkout, clients, contracts, documents, health, payments, promotions, viability
from webmarcas.core.config import get_config

api_router = APIRouter(prefix=get_config().API_PREFIX)
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(checkout.router)
api_router.include_router(payments.router)
api_router.include_router(contracts.router)
api_router.include_router(clients.router)
api_router.include_router(documents.router)
api_router.include_router(viability.router)
api_router.include_router(promotions.router)


def get_api_router() -> APIRouter:
    return api_router
