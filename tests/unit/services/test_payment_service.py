from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from webmarcas.core.exceptions import ExternalProviderError, NotFoundError
from webmarcas.models import (
    BillingType,
    Contract,
    Invoice,
    InvoiceStatus,
    Lead,
    LeadStatus,
    PaymentMethod,
    SignatureStatus,
)
from webmarcas.schemas.payments import PaymentCreationRequest, PostSignaturePaymentRequest
from webmarcas.services.payment_service import PaymentService, provider_status_to_invoice_status

TODAY = date(2026, 10, 18)


def _request(personal_data, brand_data, method="avista", **extra):
    return PaymentCreationRequest(
        personal_data=personal_data,
        brand_data=brand_data,
        payment_method=method,
        contract_html="<p>Contrato</p>",
        **extra,
    )


def test_pix_payment_persists_contract_invoice_and_lead(db_session, fake_asaas, test_config, personal_data, brand_data):
    service = PaymentService(db=db_session, client=fake_asaas, config=test_config)

    result = service.create_payment(_request(personal_data, brand_data), today=TODAY)

    assert fake_asaas.call_names() == ["find_customer", "create_customer", "create_payment", "pix_qr_code"]
    charge = fake_asaas.calls[2][1]
    assert charge["billingType"] == "PIX"
    assert charge["value"] == 699.0
    assert charge["dueDate"] == "2026-10-21"
    assert "installmentCount" not in charge

    assert result.billing_type == BillingType.PIX
    assert result.value == Decimal("699.00")
    assert result.pix_qr_code.payload.startswith("000201")

    contract = db_session.get(Contract, result.contract_id)
    assert contract.signature_status == SignatureStatus.NOT_SIGNED
    assert contract.payment_method == PaymentMethod.AVISTA
    assert contract.asaas_payment_id == result.payment_id
    assert contract.contract_html == "<p>Contrato</p>"

    invoices = db_session.query(Invoice).all()
    assert len(invoices) == 1
    assert invoices[0].status == InvoiceStatus.PENDING
    assert invoices[0].pix_payload.startswith("000201")
    assert invoices[0].asaas_invoice_id == result.payment_id

    lead = db_session.get(Lead, result.lead_id)
    assert lead.status == LeadStatus.CONTRATO_GERADO
    assert lead.cpf_cnpj == "52998224725"
    assert lead.notes == "Marca: Café Aurora | Ramo: Cafeteria e padaria"


def test_card_payment_sends_installments_and_skips_pix(db_session, asaas_factory, test_config, personal_data, brand_data):
    client = asaas_factory(existing_customer="cus_existing")
    service = PaymentService(db=db_session, client=client, config=test_config)

    result = service.create_payment(_request(personal_data, brand_data, method="cartao6x"), today=TODAY)

    assert client.call_names() == ["find_customer", "create_payment"]
    charge = client.calls[1][1]
    assert charge["customer"] == "cus_existing"
    assert charge["installmentCount"] == 6
    assert charge["installmentValue"] == 199.0
    assert result.customer_id == "cus_existing"
    assert result.pix_qr_code is None


def test_company_checkout_bills_the_cnpj(db_session, fake_asaas, test_config, personal_data):
    from webmarcas.schemas.checkout import BrandData

    brand = BrandData(
        brand_name="Aurora",
        business_area="Cafeteria",
        has_cnpj=True,
        cnpj="11.222.333/0001-81",
        company_name="Aurora Cafés Ltda",
    )
    PaymentService(db=db_session, client=fake_asaas, config=test_config).create_payment(
        _request(personal_data, brand), today=TODAY
    )
    customer = fake_asaas.calls[1][1]
    assert customer["cpfCnpj"] == "11222333000181"
    assert customer["name"] == "Aurora Cafés Ltda"


@pytest.mark.parametrize("failing_call", ["create_customer", "create_payment", "pix_qr_code"])
def test_provider_failure_writes_nothing(db_session, asaas_factory, test_config, personal_data, brand_data, failing_call):
    client = asaas_factory(fail_on=failing_call)
    service = PaymentService(db=db_session, client=client, config=test_config)

    with pytest.raises(ExternalProviderError) as exc:
        service.create_payment(_request(personal_data, brand_data), today=TODAY)

    assert exc.value.errors[0]["code"] == "invalid_value"
    assert db_session.query(Contract).count() == 0
    assert db_session.query(Invoice).count() == 0
    assert db_session.query(Lead).count() == 0


def test_repeat_checkout_reuses_lead(db_session, fake_asaas, test_config, personal_data, brand_data):
    service = PaymentService(db=db_session, client=fake_asaas, config=test_config)
    first = service.create_payment(_request(personal_data, brand_data), today=TODAY)
    second = service.create_payment(_request(personal_data, brand_data, method="boleto3x"), today=TODAY)

    assert first.lead_id == second.lead_id
    assert db_session.query(Contract).count() == 2
    assert second.installment_value == Decimal("399.00")


def test_provider_status_mapping_and_apply(db_session, fake_asaas, test_config, personal_data, brand_data):
    assert provider_status_to_invoice_status("CONFIRMED") == InvoiceStatus.PAID
    assert provider_status_to_invoice_status("overdue") == InvoiceStatus.OVERDUE
    assert provider_status_to_invoice_status("SOMETHING_NEW") == InvoiceStatus.PENDING

    service = PaymentService(db=db_session, client=fake_asaas, config=test_config)
    created = service.create_payment(_request(personal_data, brand_data), today=TODAY)

    update = service.apply_provider_status(created.payment_id, "RECEIVED", payment_date=TODAY)

    assert update.is_paid is True
    assert update.contract_id == created.contract_id
    invoice = db_session.get(Invoice, created.invoice_id)
    assert invoice.status == InvoiceStatus.PAID
    assert invoice.payment_date == TODAY
    assert invoice.paid_at is not None

    unknown = service.apply_provider_status("pay_missing", "RECEIVED")
    assert unknown.invoice_id is None
    assert unknown.contract_id is None


def _signed_contract(db_session, value="699.00"):
    lead = Lead(
        full_name="João Lima",
        email="joao@example.com",
        cpf_cnpj="52998224725",
        phone="11987654321",
        zip_code="01310-100",
    )
    db_session.add(lead)
    db_session.flush()
    contract = Contract(
        lead_id=lead.id,
        subject="Registro de marca: Lima",
        contract_value=Decimal(value),
        payment_method=PaymentMethod.AVISTA,
        signature_status=SignatureStatus.SIGNED,
    )
    db_session.add(contract)
    db_session.commit()
    return contract


def test_post_signature_boleto_uses_saved_value(db_session, fake_asaas, test_config):
    contract = _signed_contract(db_session)
    service = PaymentService(db=db_session, client=fake_asaas, config=test_config)

    result = service.create_post_signature_payment(
        PostSignaturePaymentRequest(contract_id=contract.id, payment_method="boleto3x", custom_due_date=date(2026, 11, 2)),
        today=TODAY,
    )

    charge = fake_asaas.calls[-1][1]
    assert charge["externalReference"] == f"contract_{contract.id}"
    assert charge["dueDate"] == "2026-11-02"
    assert charge["installmentValue"] == 233.0
    assert result.value == Decimal("699.00")
    db_session.refresh(contract)
    assert contract.payment_method == PaymentMethod.BOLETO_3X
    assert contract.asaas_payment_id == result.payment_id
    assert db_session.query(Invoice).filter(Invoice.contract_id == contract.id).count() == 1


def test_post_signature_card_defers_to_card_form(db_session, fake_asaas, test_config):
    contract = _signed_contract(db_session, value="1194.00")
    result = PaymentService(db=db_session, client=fake_asaas, config=test_config).create_post_signature_payment(
        PostSignaturePaymentRequest(contract_id=contract.id, payment_method="cartao6x")
    )
    assert result.requires_credit_card_form is True
    assert result.installment_value == Decimal("199.00")
    assert fake_asaas.calls == []


def test_post_signature_unknown_contract(db_session, fake_asaas, test_config):
    with pytest.raises(NotFoundError):
        PaymentService(db=db_session, client=fake_asaas, config=test_config).create_post_signature_payment(
            PostSignaturePaymentRequest(contract_id=999, payment_method="avista")
        )
