from __future__ import annotations

import dataclasses
from contextlib import contextmanager
from datetime import datetime, timezone

import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from webmarcas.core.config import get_config
from webmarcas.core.exceptions import ExternalProviderError
from webmarcas.models import Base
from webmarcas.schemas.checkout import BrandData, PersonalData

VALID_CPF = "529.982.247-25"
VALID_CNPJ = "11.222.333/0001-81"
FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def build_session_factory(url: str = "sqlite:///:memory:"):
    engine = create_engine(url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    session = build_session_factory()()
    yield session
    session.close()


@pytest.fixture
def patch_db_session(monkeypatch, db_session):
    """Point route modules at the test session."""

    @contextmanager
    def _get_db_session():
        yield db_session

    def _apply(*modules):
        for module in modules:
            monkeypatch.setattr(module, "get_db_session", _get_db_session)

    return _apply


@pytest.fixture
def test_config():
    return dataclasses.replace(
        get_config(),
        ASAAS_API_KEY="test-key",
        SITE_URL="https://webmarcas.net",
        SMTP_SANDBOX_MODE=True,
        WHATSAPP_API_URL=None,
        OTS_CALENDAR_SERVERS=("https://calendar.test",),
    )


@pytest.fixture
def personal_data():
    return PersonalData(
        full_name="Maria Souza",
        email="Maria@Example.com",
        phone="(11) 98765-4321",
        cpf=VALID_CPF,
        cep="01310-100",
        address="Avenida Paulista, 1000",
        neighborhood="Bela Vista",
        city="São Paulo",
        state="sp",
    )


@pytest.fixture
def brand_data():
    return BrandData(brand_name="Café Aurora", business_area="Cafeteria e padaria")


class FakeAsaasClient:
    """Records provider calls; behaves like a healthy sandbox account."""

    def __init__(self, existing_customer: str | None = None, fail_on: str | None = None) -> None:
        self.existing_customer = existing_customer
        self.fail_on = fail_on
        self.calls: list[tuple[str, dict]] = []
        self._payments = 0

    def _maybe_fail(self, name: str) -> None:
        if self.fail_on == name:
            raise ExternalProviderError(
                "Invalid value",
                errors=[{"code": "invalid_value", "description": "Invalid value"}],
                status_code=400,
            )

    def find_customer_by_tax_id(self, cpf_cnpj: str) -> str | None:
        self.calls.append(("find_customer", {"cpfCnpj": cpf_cnpj}))
        self._maybe_fail("find_customer")
        return self.existing_customer

    def create_customer(self, payload: dict) -> str:
        self.calls.append(("create_customer", payload))
        self._maybe_fail("create_customer")
        return "cus_000001"

    def create_payment(self, payload: dict) -> dict:
        self.calls.append(("create_payment", payload))
        self._maybe_fail("create_payment")
        self._payments += 1
        return {
            "id": f"pay_{self._payments:06d}",
            "status": "PENDING",
            "dueDate": payload["dueDate"],
            "netValue": payload["value"] - 1.99,
            "invoiceUrl": f"https://sandbox.asaas.com/i/{self._payments}",
            "bankSlipUrl": "https://sandbox.asaas.com/b/1" if payload["billingType"] == "BOLETO" else None,
        }

    def get_pix_qr_code(self, payment_id: str) -> dict:
        self.calls.append(("pix_qr_code", {"id": payment_id}))
        self._maybe_fail("pix_qr_code")
        return {
            "encodedImage": "iVBORw0KGgo=",
            "payload": "00020126580014br.gov.bcb.pix",
            "expirationDate": "2026-10-21 23:59:59",
        }

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def fake_asaas():
    return FakeAsaasClient()


class UnreachableSession:
    """requests.Session stand-in whose every call fails at the network layer."""

    def __init__(self) -> None:
        self.urls: list[str] = []

    def post(self, url, **kwargs):
        self.urls.append(url)
        raise requests.exceptions.ConnectionError("calendar unreachable")

    request = post


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, object, dict, tuple]] = []

    def notify(self, event_type, recipient, data=None, channels=("email", "crm")):
        self.sent.append((event_type, recipient, dict(data or {}), tuple(channels)))
        return None


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def asaas_factory():
    return FakeAsaasClient


@pytest.fixture
def unreachable_http():
    return UnreachableSession()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def file_session_factory(tmp_path):
    """File-backed database so worker threads see each other's commits."""
    return build_session_factory(f"sqlite:///{tmp_path / 'webmarcas_test.db'}")
