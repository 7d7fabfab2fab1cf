"""Bulk client import.

Rows are fanned out in fixed-size batches to a thread pool. Each row runs in
its own session and transaction, so one failing row never rolls back its
siblings.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webmarcas.core.config import Config, get_config
from webmarcas.core.exceptions import ValidationError
from webmarcas.core.security import random_password_hash
from webmarcas.database.db import get_session_factory
from webmarcas.models import (
    BrandProcess,
    ClientOrigin,
    ClientPriority,
    PipelineStage,
    ProcessStatus,
    Profile,
    User,
    UserRole,
)
from webmarcas.services.client_parser import (
    ClientRecord,
    apply_field_mapping,
    parse_client_file,
    suggest_field_mapping,
    validate_clients,
)
from webmarcas.utils.validators import strip_accents

logger = logging.getLogger(__name__)

DEFAULT_FUNNEL = "juridico"

ORIGIN_ALIASES = {
    "site": ClientOrigin.SITE,
    "website": ClientOrigin.SITE,
    "whatsapp": ClientOrigin.WHATSAPP,
    "import": ClientOrigin.IMPORT,
    "importacao": ClientOrigin.IMPORT,
    "admin": ClientOrigin.ADMIN,
}
PRIORITY_ALIASES = {
    "high": ClientPriority.HIGH,
    "alta": ClientPriority.HIGH,
    "medium": ClientPriority.MEDIUM,
    "media": ClientPriority.MEDIUM,
    "low": ClientPriority.LOW,
    "baixa": ClientPriority.LOW,
}


@dataclass
class ImportSummary:
    total: int = 0
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    error_details: list[dict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        return self.imported + self.updated + self.skipped + self.errors == self.total


@dataclass(frozen=True)
class RowOutcome:
    status: str
    row_index: int
    email: str
    error: str | None = None
    warning: str | None = None


def _lookup(value: str, aliases: dict, default):
    key = strip_accents((value or "").strip().lower())
    return aliases.get(key, default)


class ClientImportService:
    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        config: Config | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.config = config or get_config()
        self.session_factory = session_factory or get_session_factory()
        self.batch_size = self.config.IMPORT_BATCH_SIZE
        self.max_workers = max_workers or self.batch_size

    def import_file(
        self,
        filename: str,
        content: bytes,
        mapping: dict[str, str | None] | None = None,
        update_existing: bool = False,
    ) -> ImportSummary:
        parsed = parse_client_file(filename, content)
        resolved_mapping = mapping or suggest_field_mapping(parsed.headers)
        mapped_fields = {value for value in resolved_mapping.values() if value}
        missing = {"full_name", "email"} - mapped_fields
        if missing:
            raise ValidationError(
                "Required fields are not mapped.",
                field_errors={key: ["Campo obrigatório sem coluna mapeada."] for key in sorted(missing)},
            )

        records = apply_field_mapping(parsed.rows, resolved_mapping)
        report = validate_clients(records)
        invalid_rows = report.rows_with_errors()

        rejected = [
            {
                "row": record.row_index + 1,
                "email": record.email,
                "error": "; ".join(error.message for error in report.for_row(record.row_index)),
            }
            for record in records
            if record.row_index in invalid_rows
        ]
        valid = [record for record in records if record.row_index not in invalid_rows]

        summary = self.import_clients(valid, update_existing=update_existing)
        summary.total = len(records)
        summary.errors += len(rejected)
        summary.error_details = rejected + summary.error_details
        return summary

    def import_clients(self, records: list[ClientRecord], update_existing: bool = False) -> ImportSummary:
        """Persist already-validated records, one session per row."""
        summary = ImportSummary(total=len(records))
        self._run(records, update_existing, summary)
        return summary

    def _run(self, records: list[ClientRecord], update_existing: bool, summary: ImportSummary) -> None:
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="client-import") as executor:
            for start in range(0, len(records), self.batch_size):
                batch = records[start : start + self.batch_size]
                futures = [executor.submit(self._import_row, record, update_existing) for record in batch]
                for record, future in zip(batch, futures):
                    try:
                        outcome = future.result()
                    except Exception as exc:
                        logger.exception(
                            "import.row.crashed",
                            extra={"event": "import.row.crashed", "row": record.row_index + 1},
                        )
                        outcome = RowOutcome("error", record.row_index, record.email, error=str(exc))
                    self._tally(summary, outcome)

        logger.info(
            "import.completed",
            extra={
                "event": "import.completed",
                "total": summary.total,
                "imported": summary.imported,
                "updated": summary.updated,
                "skipped": summary.skipped,
                "errors": summary.errors,
            },
        )

    @staticmethod
    def _tally(summary: ImportSummary, outcome: RowOutcome) -> None:
        if outcome.status == "imported":
            summary.imported += 1
        elif outcome.status == "updated":
            summary.updated += 1
        elif outcome.status == "skipped":
            summary.skipped += 1
        else:
            summary.errors += 1
            summary.error_details.append(
                {"row": outcome.row_index + 1, "email": outcome.email, "error": outcome.error}
            )
        if outcome.warning:
            summary.warnings.append(outcome.warning)

    def _import_row(self, record: ClientRecord, update_existing: bool) -> RowOutcome:
        email = record.email.strip().lower()
        if not email:
            return RowOutcome("skipped", record.row_index, email)

        session = self.session_factory()
        try:
            profile = session.query(Profile).filter(Profile.email == email).first()
            if profile is not None:
                if not update_existing:
                    return RowOutcome("skipped", record.row_index, email)
                self._apply_updates(profile, record)
                session.commit()
                return RowOutcome("updated", record.row_index, email)

            user = session.query(User).filter(User.email == email).first()
            if user is None:
                user = User(email=email, password_hash=random_password_hash(), role=UserRole.CLIENT)
                session.add(user)
                session.flush()
            session.add(
                Profile(
                    user_id=user.id,
                    email=email,
                    full_name=record.full_name or None,
                    phone=record.phone or None,
                    company_name=record.company_name or None,
                    cpf_cnpj=record.cpf_cnpj or None,
                    address=record.address or None,
                    city=record.city or None,
                    state=record.state[:2] or None,
                    zip_code=record.zip_code or None,
                    origin=_lookup(record.origin, ORIGIN_ALIASES, ClientOrigin.IMPORT),
                    priority=_lookup(record.priority, PRIORITY_ALIASES, ClientPriority.MEDIUM),
                    contract_value=record.contract_value,
                    client_funnel_type=DEFAULT_FUNNEL,
                )
            )
            session.commit()
            warning = self._create_process(session, user.id, record, email)
            return RowOutcome("imported", record.row_index, email, warning=warning)
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning(
                "import.row.failed",
                extra={"event": "import.row.failed", "row": record.row_index + 1, "error": str(exc)},
            )
            return RowOutcome("error", record.row_index, email, error=str(exc.__cause__ or exc))
        finally:
            session.close()

    @staticmethod
    def _apply_updates(profile: Profile, record: ClientRecord) -> None:
        for key in ("full_name", "phone", "company_name", "cpf_cnpj", "address", "city", "zip_code"):
            value = getattr(record, key)
            if value:
                setattr(profile, key, value)
        if record.state:
            profile.state = record.state[:2]
        if record.origin:
            profile.origin = _lookup(record.origin, ORIGIN_ALIASES, profile.origin)
        if record.priority:
            profile.priority = _lookup(record.priority, PRIORITY_ALIASES, profile.priority)
        if record.contract_value is not None:
            profile.contract_value = record.contract_value

    @staticmethod
    def _create_process(session: Session, user_id: int, record: ClientRecord, email: str) -> str | None:
        try:
            session.add(
                BrandProcess(
                    user_id=user_id,
                    brand_name=record.company_name or record.full_name or email,
                    status=ProcessStatus.EM_ANDAMENTO,
                    pipeline_stage=PipelineStage.PROTOCOLADO,
                    notes="Importado via planilha",
                )
            )
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.warning(
                "import.process.failed",
                extra={"event": "import.process.failed", "row": record.row_index + 1, "error": str(exc)},
            )
            return f"Linha {record.row_index + 1}: processo não criado ({exc.__class__.__name__})"
        return None
