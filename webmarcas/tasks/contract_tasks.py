"""Background jobs: signed PDF rendering, promotion expiry and notifications."""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from typing import Any

from webmarcas.database.db import get_db_session
from webmarcas.services.document_service import DocumentService
from webmarcas.services.notification_service import NotificationRecipient, NotificationService
from webmarcas.services.promotion_service import PromotionService
from webmarcas.tasks.celery_app import celery_app
from webmarcas.tasks.hooks import after_task, before_task

logger = logging.getLogger(__name__)


def _trace(task_name: str, **context: Any) -> dict[str, Any]:
    context["trace_id"] = uuid.uuid4().hex
    logger.info("task.start", extra=before_task(task_name=task_name, context=context))
    return context


@celery_app.task(name="contracts.render_signed_pdf")
def render_and_upload_signed_pdf(contract_id: int) -> dict[str, Any]:
    context = _trace("contracts.render_signed_pdf", contract_id=contract_id)
    try:
        with get_db_session() as session:
            result = DocumentService(db=session).render_and_upload(contract_id)
    except Exception:
        logger.exception(
            "contract_task.failed",
            extra={"event": "contract_task.failed", "contract_id": contract_id},
        )
        logger.info("task.finish", extra=after_task("contracts.render_signed_pdf", context, status="failed"))
        raise
    logger.info("task.finish", extra=after_task("contracts.render_signed_pdf", context, status="succeeded"))
    return result.model_dump()


@celery_app.task(name="promotions.expire")
def expire_promotions(test_mode: bool = False) -> dict[str, Any]:
    context = _trace("promotions.expire")
    with get_db_session() as session:
        result = PromotionService(db=session).expire_promotions(test_mode=test_mode)
    logger.info("task.finish", extra=after_task("promotions.expire", context, status=result.status.value))
    payload = asdict(result)
    payload["status"] = result.status.value
    return payload


@celery_app.task(name="notifications.send")
def send_notification(
    event_type: str,
    recipient: dict[str, Any],
    data: dict[str, Any] | None = None,
    channels: list[str] | None = None,
) -> dict[str, Any]:
    context = _trace("notifications.send", user_id=recipient.get("user_id"))
    with get_db_session() as session:
        outcome = NotificationService(db=session).notify(
            event_type,
            NotificationRecipient(**recipient),
            data or {},
            channels=tuple(channels or ("email", "crm")),
        )
    status = "succeeded" if outcome.success else "failed"
    logger.info("task.finish", extra=after_task("notifications.send", context, status=status))
    return {
        "event_type": event_type,
        "success": outcome.success,
        "results": {channel: asdict(result) for channel, result in outcome.results.items()},
    }
