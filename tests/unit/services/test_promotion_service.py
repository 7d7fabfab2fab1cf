from __future__ import annotations

import json
from datetime import timedelta
from decimal import Decimal

from webmarcas.models import Contract, PaymentMethod, PromotionExpirationLog, PromotionRunStatus, SignatureStatus
from webmarcas.services.promotion_service import PromotionService, rewrite_price_clause
from webmarcas.templates.defaults import STANDARD_PRICE_CLAUSE_51

PROMO_HTML = (
    "5. CLÁUSULA QUINTA\n\n"
    "5.1 Os pagamentos à CONTRATADA serão efetuados conforme a opção escolhida:\n"
    "• Pagamento à vista via PIX: R$ 699,00.\n"
    "5.2 Taxas do INPI: responsabilidade do CONTRATANTE."
)


def _seed(db_session, now):
    def _add(hours_old, **overrides):
        values = {
            "contract_html": PROMO_HTML,
            "contract_value": Decimal("699.00"),
            "payment_method": PaymentMethod.AVISTA,
            "signature_status": SignatureStatus.NOT_SIGNED,
            "created_at": now - timedelta(hours=hours_old),
        }
        values.update(overrides)
        contract = Contract(**values)
        db_session.add(contract)
        return contract

    contracts = {
        "expired": _add(30),
        "recent": _add(2),
        "signed": _add(30, signature_status=SignatureStatus.SIGNED),
        "charged": _add(30, asaas_payment_id="pay_123"),
        "card": _add(30, payment_method=PaymentMethod.CARTAO_6X, contract_value=Decimal("1194.00")),
    }
    db_session.commit()
    return contracts


def test_rewrite_price_clause_replaces_only_clause_51():
    rewritten = rewrite_price_clause(PROMO_HTML)
    assert STANDARD_PRICE_CLAUSE_51 in rewritten
    assert "R$ 699,00" not in rewritten
    assert rewritten.startswith("5. CLÁUSULA QUINTA")
    assert rewritten.endswith("5.2 Taxas do INPI: responsabilidade do CONTRATANTE.")
    assert rewrite_price_clause(None) is None
    assert rewrite_price_clause("sem cláusula") == "sem cláusula"


def test_only_stale_unpaid_promotions_are_found(db_session, fixed_now):
    contracts = _seed(db_session, fixed_now)
    found = PromotionService(db=db_session).find_expired(now=fixed_now)
    assert [contract.id for contract in found] == [contracts["expired"].id]


def test_expiry_moves_contract_to_standard_price(db_session, fixed_now):
    contracts = _seed(db_session, fixed_now)

    result = PromotionService(db=db_session).expire_promotions(now=fixed_now)

    assert result.status == PromotionRunStatus.SUCCESS
    assert (result.contracts_found, result.contracts_updated) == (1, 1)
    expired = db_session.get(Contract, contracts["expired"].id)
    assert expired.contract_value == Decimal("1194.00")
    assert expired.payment_method == PaymentMethod.BOLETO_3X
    assert STANDARD_PRICE_CLAUSE_51 in expired.contract_html

    untouched = db_session.get(Contract, contracts["recent"].id)
    assert untouched.contract_value == Decimal("699.00")

    log = db_session.query(PromotionExpirationLog).one()
    assert log.status == PromotionRunStatus.SUCCESS
    assert log.test_mode is False
    assert json.loads(log.details)["contract_ids"] == [contracts["expired"].id]

    again = PromotionService(db=db_session).expire_promotions(now=fixed_now)
    assert again.contracts_found == 0


def test_test_mode_reports_without_writing(db_session, fixed_now):
    contracts = _seed(db_session, fixed_now)

    result = PromotionService(db=db_session).expire_promotions(test_mode=True, now=fixed_now)

    assert result.status == PromotionRunStatus.TEST_RUN
    assert result.contracts_found == 1
    assert result.contracts_updated == 0
    assert db_session.get(Contract, contracts["expired"].id).contract_value == Decimal("699.00")
    log = db_session.query(PromotionExpirationLog).one()
    assert log.test_mode is True


def test_contract_signed_after_selection_keeps_its_price(file_session_factory, fixed_now):
    db = file_session_factory()
    other = file_session_factory()
    try:
        contract_id = _seed(db, fixed_now)["expired"].id
        service = PromotionService(db=db)
        select_candidates = service.find_expired

        def find_then_sign(now=None):
            candidates = select_candidates(now=now)
            signed = other.get(Contract, contract_id)
            signed.signature_status = SignatureStatus.SIGNED
            signed.signed_at = fixed_now
            other.commit()
            return candidates

        service.find_expired = find_then_sign
        result = service.expire_promotions(now=fixed_now)

        assert (result.contracts_found, result.contracts_updated) == (1, 0)
        db.expire_all()
        contract = db.get(Contract, contract_id)
        assert contract.signature_status == SignatureStatus.SIGNED
        assert contract.contract_value == Decimal("699.00")
        assert contract.payment_method == PaymentMethod.AVISTA
    finally:
        other.close()
        db.close()
