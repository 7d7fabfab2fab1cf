"""Thin HTTP client for the Asaas billing API.

Calls are made once: network failures and provider validation errors are
reported to the caller, never retried here.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from webmarcas.core.config import Config, get_config
from webmarcas.core.exceptions import ConfigurationError, ExternalProviderError

logger = logging.getLogger(__name__)

GENERIC_PROVIDER_MESSAGE = "Não foi possível comunicar com o provedor de pagamentos. Tente novamente."


class AsaasClient:
    def __init__(self, config: Config | None = None, session: requests.Session | None = None) -> None:
        self.config = config or get_config()
        self.base_url = self.config.ASAAS_API_URL
        self.session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        if not self.config.ASAAS_API_KEY:
            raise ConfigurationError("ASAAS_API_KEY is not configured.")
        return {
            "Content-Type": "application/json",
            "access_token": self.config.ASAAS_API_KEY,
        }

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method,
                url,
                headers=self._headers(),
                timeout=(2, self.config.ASAAS_TIMEOUT_SECONDS),
                **kwargs,
            )
        except requests.exceptions.RequestException as exc:
            logger.warning(
                "asaas.request.failed",
                extra={"event": "asaas.request.failed", "method": method, "path": path, "error": str(exc)},
            )
            raise ExternalProviderError(GENERIC_PROVIDER_MESSAGE) from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        errors = body.get("errors") or []
        if errors or not response.ok:
            logger.warning(
                "asaas.request.rejected",
                extra={
                    "event": "asaas.request.rejected",
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "errors": errors,
                },
            )
            message = errors[0].get("description") if errors and isinstance(errors[0], dict) else None
            raise ExternalProviderError(
                message or GENERIC_PROVIDER_MESSAGE,
                errors=errors,
                status_code=response.status_code,
            )
        return body

    def find_customer_by_tax_id(self, cpf_cnpj: str) -> str | None:
        body = self._request("GET", "/customers", params={"cpfCnpj": cpf_cnpj})
        data = body.get("data") or []
        if data:
            return data[0].get("id")
        return None

    def create_customer(self, payload: dict[str, Any]) -> str:
        body = self._request("POST", "/customers", json=payload)
        logger.info(
            "asaas.customer.created",
            extra={"event": "asaas.customer.created", "customer_id": body.get("id")},
        )
        return body["id"]

    def create_payment(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/payments", json=payload)

    def get_pix_qr_code(self, payment_id: str) -> dict[str, Any]:
        return self._request("GET", f"/payments/{payment_id}/pixQrCode")
