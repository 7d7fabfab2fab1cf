from __future__ import annotations

import dataclasses

from webmarcas.models import EmailLog, Notification, User
from webmarcas.services.notification_service import (
    NotificationRecipient,
    NotificationService,
    normalize_whatsapp_number,
)


class _WhatsAppResponse:
    def __init__(self, status_code=200, text="ok"):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400


class _WhatsAppSession:
    def __init__(self, response):
        self.response = response
        self.posts: list[tuple[str, dict]] = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.posts.append((url, json))
        return self.response


def test_whatsapp_numbers_get_country_code():
    assert normalize_whatsapp_number("(11) 98765-4321") == "5511987654321"
    assert normalize_whatsapp_number("55 11 98765-4321") == "5511987654321"
    assert normalize_whatsapp_number("011987654321") == "5511987654321"
    assert normalize_whatsapp_number(None) == ""


def test_variables_fill_aliases(db_session, test_config):
    service = NotificationService(db=db_session, config=test_config)
    variables = service.build_variables(
        NotificationRecipient(name="Ana", email="ana@example.com"),
        {"nome_marca": "Aurora", "link": "https://x/assinar/1", "valor": None},
    )
    assert variables["marca"] == "Aurora"
    assert variables["link_assinatura"] == "https://x/assinar/1"
    assert variables["app_url"] == "https://webmarcas.net"
    assert "valor" not in variables

    anonymous = service.build_variables(NotificationRecipient(), None)
    assert anonymous["nome"] == "Cliente"
    assert anonymous["marca"] == "sua marca"


def test_sandbox_email_and_crm_are_recorded(db_session, test_config):
    service = NotificationService(db=db_session, config=test_config)
    recipient = NotificationRecipient(name="Ana", email="ana@example.com", user_id=None)

    outcome = service.notify("payment_received", recipient, {"marca": "Aurora", "valor": "R$ 699,00"})

    assert outcome.results["email"].status == "sandbox_sent"
    assert outcome.results["crm"].status == "skipped"
    assert outcome.success is False
    log = db_session.query(EmailLog).one()
    assert log.subject == "Pagamento confirmado: Aurora"
    assert "R$ 699,00" in log.body_preview
    assert log.send_status == "sandbox_sent"


def test_crm_notification_for_known_user(db_session, test_config):
    user = User(email="ana@example.com", password_hash="x")
    db_session.add(user)
    db_session.commit()
    service = NotificationService(db=db_session, config=test_config)

    outcome = service.notify(
        "contract_signed",
        NotificationRecipient(name="Ana", user_id=user.id),
        {"marca": "Aurora", "data_assinatura": "18/10/2026", "hash_contrato": "ABC"},
        channels=("crm",),
    )

    assert outcome.success is True
    notification = db_session.query(Notification).one()
    assert notification.title == "Contrato assinado"
    assert notification.type == "success"
    assert "18/10/2026" in notification.message


def test_unconfigured_and_unknown_channels_do_not_raise(db_session, test_config):
    service = NotificationService(db=db_session, config=test_config)
    outcome = service.notify("unknown_event", NotificationRecipient(phone="11987654321"), channels=("whatsapp", "fax"))
    assert outcome.results["whatsapp"].status == "skipped"
    assert outcome.results["fax"].status == "unsupported"


def test_whatsapp_delivery(db_session, test_config):
    config = dataclasses.replace(
        test_config,
        WHATSAPP_API_URL="https://evolution.test",
        WHATSAPP_API_KEY="key",
        WHATSAPP_INSTANCE="webmarcas",
    )
    http = _WhatsAppSession(_WhatsAppResponse())
    service = NotificationService(db=db_session, config=config, http=http)

    outcome = service.notify(
        "welcome", NotificationRecipient(name="Ana", phone="(11) 98765-4321"), {"marca": "Aurora"}, channels=("whatsapp",)
    )

    assert outcome.success is True
    url, body = http.posts[0]
    assert url == "https://evolution.test/message/sendText/webmarcas"
    assert body["number"] == "5511987654321"
    assert body["text"].startswith("WebMarcas: Olá Ana")

    failing = NotificationService(db=db_session, config=config, http=_WhatsAppSession(_WhatsAppResponse(500, "boom")))
    result = failing.send_whatsapp("11987654321", "oi")
    assert result.success is False
    assert result.error.startswith("HTTP 500")


def test_smtp_without_credentials_fails_softly(db_session, test_config):
    config = dataclasses.replace(test_config, SMTP_SANDBOX_MODE=False, SMTP_SERVER=None)
    service = NotificationService(db=db_session, config=config)
    result = service.send_email("welcome", NotificationRecipient(email="ana@example.com"), "s", "b")
    assert result.success is False
    assert db_session.query(EmailLog).one().send_status == "failed"
