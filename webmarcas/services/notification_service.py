"""Client notifications over email, WhatsApp and the in-app CRM feed."""

from __future__ import annotations

import html
import logging
import smtplib
from dataclasses import dataclass, field
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any, Iterable

import requests
from sqlalchemy.exc import SQLAlchemyError

from webmarcas.core.config import Config, get_config
from webmarcas.models import EmailLog, Notification
from webmarcas.services.base_service import BaseService
from webmarcas.utils.templating import render_template
from webmarcas.utils.validators import only_digits, sanitize_text

logger = logging.getLogger(__name__)

SUPPORTED_CHANNELS = frozenset({"email", "whatsapp", "crm"})


@dataclass(frozen=True)
class EventTemplate:
    title: str
    subject: str
    body: str
    notification_type: str = "info"


EVENT_TEMPLATES: dict[str, EventTemplate] = {
    "formulario_preenchido": EventTemplate(
        title="Formulário recebido",
        subject="Recebemos seu pedido de registro da marca {{marca}}",
        body="Olá {{nome}}, recebemos seu formulário para o registro de {{marca}}. Em breve entraremos em contato!",
    ),
    "link_assinatura_gerado": EventTemplate(
        title="Contrato pronto para assinatura",
        subject="Seu contrato da marca {{marca}} está pronto para assinatura",
        body=(
            "Olá {{nome}}, seu contrato para {{marca}} está pronto para assinatura. "
            "Acesse: {{link_assinatura}} (válido até {{data_expiracao}})."
        ),
        notification_type="contract",
    ),
    "contract_signed": EventTemplate(
        title="Contrato assinado",
        subject="Contrato da marca {{marca}} assinado com sucesso",
        body=(
            "Parabéns {{nome}}! Seu contrato para {{marca}} foi assinado em {{data_assinatura}}.{{verificacao}}"
        ),
        notification_type="success",
    ),
    "payment_received": EventTemplate(
        title="Pagamento confirmado",
        subject="Pagamento confirmado: {{marca}}",
        body="Olá {{nome}}, confirmamos o recebimento do pagamento de {{valor}} para {{marca}}. Obrigado!",
        notification_type="payment",
    ),
    "cobranca_gerada": EventTemplate(
        title="Nova cobrança",
        subject="Nova cobrança gerada para {{marca}}",
        body="Olá {{nome}}, uma nova cobrança de {{valor}} foi gerada para {{marca}}. Acesse: {{link}}",
        notification_type="payment",
    ),
    "fatura_vencida": EventTemplate(
        title="Fatura vencida",
        subject="Sua fatura de {{valor}} está vencida",
        body="Atenção {{nome}}! Sua fatura de {{valor}} para {{marca}} está vencida. Regularize em: {{app_url}}",
        notification_type="warning",
    ),
    "welcome": EventTemplate(
        title="Bem-vindo à WebMarcas!",
        subject="Bem-vindo à WebMarcas!",
        body=(
            "Olá {{nome}}, seu pagamento foi confirmado e o processo de registro da marca {{marca}} "
            "já foi iniciado. Acompanhe tudo em {{app_url}}."
        ),
        notification_type="success",
    ),
}

FALLBACK_TEMPLATE = EventTemplate(
    title="Nova notificação",
    subject="WebMarcas: nova notificação",
    body="Olá {{nome}}, você tem uma nova notificação.",
)


def normalize_whatsapp_number(phone: str | None) -> str:
    digits = only_digits(phone).lstrip("0")
    if not digits:
        return ""
    return digits if digits.startswith("55") else f"55{digits}"


@dataclass(frozen=True)
class NotificationRecipient:
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    user_id: int | None = None


@dataclass
class ChannelResult:
    success: bool
    status: str
    error: str | None = None


@dataclass
class NotificationOutcome:
    event_type: str
    results: dict[str, ChannelResult] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return bool(self.results) and all(result.success for result in self.results.values())


class NotificationService(BaseService):
    """Dispatches event messages; channel failures are reported, never raised."""

    def __init__(self, db=None, config: Config | None = None, http: requests.Session | None = None) -> None:
        super().__init__(db)
        self.config = config or get_config()
        self.http = http or requests.Session()

    def build_variables(self, recipient: NotificationRecipient, data: dict[str, Any] | None) -> dict[str, Any]:
        variables: dict[str, Any] = {
            "nome": recipient.name or "Cliente",
            "nome_cliente": recipient.name or "Cliente",
            "email": recipient.email,
            "app_url": self.config.SITE_URL,
        }
        variables.update({key: value for key, value in (data or {}).items() if value is not None})
        if "marca" in variables and "nome_marca" not in variables:
            variables["nome_marca"] = variables["marca"]
        if "nome_marca" in variables and "marca" not in variables:
            variables["marca"] = variables["nome_marca"]
        if "link" in variables and "link_assinatura" not in variables:
            variables["link_assinatura"] = variables["link"]
        if "link_assinatura" in variables and "link" not in variables:
            variables["link"] = variables["link_assinatura"]
        if variables.get("verification_url"):
            code = variables.get("hash_contrato")
            prefix = f" Código de verificação: {code}." if code else ""
            variables.setdefault("verificacao", f"{prefix} Confira em {variables['verification_url']}")
        variables.setdefault("verificacao", "")
        variables.setdefault("marca", "sua marca")
        return variables

    def notify(
        self,
        event_type: str,
        recipient: NotificationRecipient,
        data: dict[str, Any] | None = None,
        channels: Iterable[str] = ("email", "crm"),
    ) -> NotificationOutcome:
        template = EVENT_TEMPLATES.get(event_type, FALLBACK_TEMPLATE)
        variables = self.build_variables(recipient, data)
        subject = render_template(template.subject, variables)
        body = render_template(template.body, variables)
        outcome = NotificationOutcome(event_type=event_type)

        for channel in channels:
            if channel not in SUPPORTED_CHANNELS:
                outcome.results[channel] = ChannelResult(False, "unsupported", f"Unsupported channel: {channel}")
                continue
            if channel == "email":
                outcome.results[channel] = self.send_email(event_type, recipient, subject, body)
            elif channel == "whatsapp":
                outcome.results[channel] = self.send_whatsapp(recipient.phone, f"WebMarcas: {body}")
            else:
                title = render_template(template.title, variables)
                outcome.results[channel] = self.create_crm_notification(
                    recipient.user_id, title, body, template.notification_type, event_type
                )

        logger.info(
            "notification.dispatched",
            extra={
                "event": "notification.dispatched",
                "event_type": event_type,
                "results": {name: result.status for name, result in outcome.results.items()},
            },
        )
        return outcome

    def send_email(self, event_type: str, recipient: NotificationRecipient, subject: str, body: str) -> ChannelResult:
        if not recipient.email:
            return ChannelResult(False, "skipped", "Recipient email missing")

        if self.config.SMTP_SANDBOX_MODE:
            logger.info("email.sandbox.sent", extra={"event": "email.sandbox.sent", "to_email": recipient.email})
            result = ChannelResult(True, "sandbox_sent")
        elif not (self.config.SMTP_SERVER and self.config.SMTP_USERNAME and self.config.SMTP_PASSWORD):
            logger.warning("email.smtp_not_configured", extra={"event": "email.smtp_not_configured"})
            result = ChannelResult(False, "failed", "SMTP credentials missing")
        else:
            try:
                message = MIMEMultipart("alternative")
                message["Subject"] = subject
                message["From"] = self.config.SMTP_FROM_EMAIL
                message["To"] = recipient.email
                message.attach(MIMEText(body, "plain"))
                message.attach(MIMEText(f"<p>{html.escape(body)}</p>", "html"))

                with smtplib.SMTP(self.config.SMTP_SERVER, self.config.SMTP_PORT, timeout=30) as server:
                    server.starttls()
                    server.login(self.config.SMTP_USERNAME, self.config.SMTP_PASSWORD)
                    server.sendmail(self.config.SMTP_FROM_EMAIL, [recipient.email], message.as_string())
                result = ChannelResult(True, "sent")
            except (smtplib.SMTPException, OSError) as exc:
                logger.exception("email.send.failed", extra={"event": "email.send.failed", "to_email": recipient.email})
                result = ChannelResult(False, "failed", str(exc))

        self._log_email(event_type, recipient, subject, body, result)
        return result

    def send_whatsapp(self, phone: str | None, text: str) -> ChannelResult:
        if not (self.config.WHATSAPP_API_URL and self.config.WHATSAPP_API_KEY and self.config.WHATSAPP_INSTANCE):
            return ChannelResult(False, "skipped", "WhatsApp channel not configured")
        number = normalize_whatsapp_number(phone)
        if not number:
            return ChannelResult(False, "skipped", "Recipient phone missing")

        url = f"{self.config.WHATSAPP_API_URL}/message/sendText/{self.config.WHATSAPP_INSTANCE}"
        try:
            response = self.http.post(
                url,
                json={"number": number, "text": text},
                headers={"Content-Type": "application/json", "apikey": self.config.WHATSAPP_API_KEY},
                timeout=(2, 15),
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("whatsapp.send.failed", extra={"event": "whatsapp.send.failed", "error": str(exc)})
            return ChannelResult(False, "failed", str(exc))

        if not response.ok:
            logger.warning(
                "whatsapp.send.rejected",
                extra={"event": "whatsapp.send.rejected", "status_code": response.status_code},
            )
            return ChannelResult(False, "failed", f"HTTP {response.status_code}: {response.text[:300]}")
        return ChannelResult(True, "sent")

    def create_crm_notification(
        self, user_id: int | None, title: str, message: str, notification_type: str, event_type: str
    ) -> ChannelResult:
        if user_id is None:
            return ChannelResult(False, "skipped", "Recipient user missing")
        try:
            self.db.add(
                Notification(
                    user_id=user_id,
                    title=sanitize_text(title, 255),
                    message=sanitize_text(message, 4000),
                    type=notification_type,
                    event_type=event_type,
                )
            )
            self.commit()
        except SQLAlchemyError as exc:
            logger.exception("notification.crm.failed", extra={"event": "notification.crm.failed", "user_id": user_id})
            return ChannelResult(False, "failed", str(exc))
        return ChannelResult(True, "sent")

    def _log_email(
        self, event_type: str, recipient: NotificationRecipient, subject: str, body: str, result: ChannelResult
    ) -> None:
        try:
            self.db.add(
                EmailLog(
                    user_id=recipient.user_id,
                    event_type=event_type,
                    recipient=sanitize_text(recipient.email, 320),
                    subject=sanitize_text(subject, 500),
                    body_preview=sanitize_text(body, 1000),
                    send_status=result.status,
                    error_message=sanitize_text(result.error, 2000) or None,
                )
            )
            self.commit()
        except SQLAlchemyError:
            logger.exception("email.log.failed", extra={"event": "email.log.failed"})
