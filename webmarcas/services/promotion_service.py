"""Scheduled expiry of unpaid promotional-price contracts."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from webmarcas.core.config import Config, get_config
from webmarcas.core.exceptions import DatabaseError
from webmarcas.models import Contract, PaymentMethod, PromotionExpirationLog, PromotionRunStatus, SignatureStatus
from webmarcas.models.base import utcnow
from webmarcas.services.base_service import BaseService
from webmarcas.templates.defaults import STANDARD_PRICE_CLAUSE_51

logger = logging.getLogger(__name__)

PROMO_CLAUSE_PATTERN = re.compile(r"5\.1 Os pagamentos à CONTRATADA[\s\S]*?(?=5\.2 Taxas do INPI)")


@dataclass
class PromotionRunResult:
    status: PromotionRunStatus
    test_mode: bool
    contracts_found: int = 0
    contracts_updated: int = 0
    contract_ids: list[int] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)


def rewrite_price_clause(contract_html: str | None) -> str | None:
    if not contract_html:
        return contract_html
    return PROMO_CLAUSE_PATTERN.sub(lambda _match: STANDARD_PRICE_CLAUSE_51, contract_html, count=1)


class PromotionService(BaseService):
    def __init__(self, db=None, config: Config | None = None) -> None:
        super().__init__(db)
        self.config = config or get_config()

    def find_expired(self, now: datetime | None = None) -> list[Contract]:
        cutoff = (now or utcnow()) - timedelta(hours=self.config.PROMO_EXPIRY_HOURS)
        return (
            self.db.query(Contract)
            .filter(Contract.contract_value == self.config.PROMO_PRICE)
            .filter(Contract.payment_method == PaymentMethod.AVISTA)
            .filter(Contract.signature_status == SignatureStatus.NOT_SIGNED)
            .filter(Contract.signed_at.is_(None))
            .filter(Contract.asaas_payment_id.is_(None))
            .filter(Contract.created_at < cutoff)
            .order_by(Contract.id)
            .all()
        )

    def expire_promotions(self, test_mode: bool = False, now: datetime | None = None) -> PromotionRunResult:
        candidates = self.find_expired(now=now)
        result = PromotionRunResult(
            status=PromotionRunStatus.TEST_RUN if test_mode else PromotionRunStatus.SUCCESS,
            test_mode=test_mode,
            contracts_found=len(candidates),
            contract_ids=[contract.id for contract in candidates],
        )

        if not test_mode:
            snapshots = [(contract.id, contract.contract_html) for contract in candidates]
            for contract_id, contract_html in snapshots:
                try:
                    if self._reprice(contract_id, contract_html):
                        result.contracts_updated += 1
                    else:
                        logger.info(
                            "promotion.contract.skipped",
                            extra={"event": "promotion.contract.skipped", "contract_id": contract_id},
                        )
                except SQLAlchemyError as exc:
                    self.rollback()
                    logger.warning(
                        "promotion.contract.failed",
                        extra={"event": "promotion.contract.failed", "contract_id": contract_id, "error": str(exc)},
                    )
                    result.errors.append({"contract_id": contract_id, "error": str(exc)})
            if result.errors:
                result.status = PromotionRunStatus.PARTIAL_SUCCESS

        self._write_log(result)
        logger.info(
            "promotion.expiry.completed",
            extra={
                "event": "promotion.expiry.completed",
                "status": result.status.value,
                "found": result.contracts_found,
                "updated": result.contracts_updated,
                "errors": len(result.errors),
            },
        )
        return result

    def _reprice(self, contract_id: int, contract_html: str | None) -> bool:
        """Move one contract to the standard price if it is still an unsigned promotion."""
        # repeats the selection filters; a contract signed since then matches no row
        statement = (
            update(Contract)
            .where(Contract.id == contract_id)
            .where(Contract.contract_value == self.config.PROMO_PRICE)
            .where(Contract.payment_method == PaymentMethod.AVISTA)
            .where(Contract.signature_status == SignatureStatus.NOT_SIGNED)
            .where(Contract.signed_at.is_(None))
            .values(
                contract_value=self.config.STANDARD_PRICE,
                payment_method=PaymentMethod.BOLETO_3X,
                contract_html=rewrite_price_clause(contract_html),
            )
            .execution_options(synchronize_session=False)
        )
        outcome = self.db.execute(statement)
        self.commit()
        return outcome.rowcount == 1

    def _write_log(self, result: PromotionRunResult) -> None:
        try:
            self.db.add(
                PromotionExpirationLog(
                    status=result.status,
                    contracts_found=result.contracts_found,
                    contracts_updated=result.contracts_updated,
                    errors=len(result.errors),
                    test_mode=result.test_mode,
                    details=json.dumps({"contract_ids": result.contract_ids, "errors": result.errors}),
                )
            )
            self.commit()
        except SQLAlchemyError as exc:
            logger.exception("promotion.log.failed", extra={"event": "promotion.log.failed"})
            raise DatabaseError("Failed to record promotion expiry run.") from exc
