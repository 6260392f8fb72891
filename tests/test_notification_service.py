from timecapsule.extensions import mail
from timecapsule.services.email_service import render_email, send_mail
from timecapsule.services.notification_service import NotificationDispatcher, DispatchResult

from conftest import add_user, add_capsule, FakeTransport


def test_delivered_payload(ctx):
    user = add_user()
    capsule = add_capsule(user.id, title="Class of 2030")
    transport = FakeTransport()
    dispatcher = NotificationDispatcher(send=transport, frontend_url="https://capsule.test/")

    assert dispatcher.dispatch(user, capsule) is DispatchResult.DELIVERED
    assert len(transport.calls) == 1
    call = transport.calls[0]
    link = f"https://capsule.test/capsule/{capsule.id}"
    assert call["to"] == "ada@example.com"
    assert call["subject"] == 'Your Time Capsule "Class of 2030" is Now Available!'
    assert link in call["body"]
    assert "Ada Lovelace" in call["body"]
    assert link in call["html"]


def test_opted_out_user_is_skipped_without_sending(ctx):
    user = add_user(email_notifications=False)
    capsule = add_capsule(user.id)
    transport = FakeTransport()

    result = NotificationDispatcher(send=transport).dispatch(user, capsule)

    assert result is DispatchResult.SKIPPED_BY_PREFERENCE
    assert result.marks_notified
    assert transport.calls == []


def test_transport_false_is_delivery_failed(ctx):
    user = add_user()
    capsule = add_capsule(user.id)

    result = NotificationDispatcher(send=FakeTransport(ok=False)).dispatch(user, capsule)

    assert result is DispatchResult.DELIVERY_FAILED
    assert not result.marks_notified


def test_transport_exception_does_not_escape(ctx):
    user = add_user()
    capsule = add_capsule(user.id)
    transport = FakeTransport(exc=ConnectionRefusedError("smtp down"))

    result = NotificationDispatcher(send=transport).dispatch(user, capsule)

    assert result is DispatchResult.DELIVERY_FAILED


def test_missing_template_is_delivery_failed(ctx):
    user = add_user()
    capsule = add_capsule(user.id)
    transport = FakeTransport()
    dispatcher = NotificationDispatcher(send=transport)
    dispatcher.template = "no_such_template"

    assert dispatcher.dispatch(user, capsule) is DispatchResult.DELIVERY_FAILED
    assert transport.calls == []


def test_render_email_builds_text_and_html(ctx):
    user = add_user()
    capsule = add_capsule(user.id, title="Summer 2024")

    body, html = render_email("capsule_unlocked", user=user, capsule=capsule, link="https://capsule.test/capsule/1")

    assert "https://capsule.test/capsule/1" in body
    assert "Summer 2024" in html


def test_send_mail_hands_message_to_flask_mail(ctx):
    ctx.config["MAIL_SUPPRESS_SEND"] = False

    with mail.record_messages() as outbox:
        ok = send_mail("ada@example.com", "Ready", "plain body", html="<p>html body</p>")

    assert ok
    assert len(outbox) == 1
    msg = outbox[0]
    assert msg.recipients == ["ada@example.com"]
    assert msg.subject == "Ready"
    assert msg.body == "plain body"
    assert msg.html == "<p>html body</p>"


def test_send_mail_failure_returns_false(ctx, monkeypatch):
    ctx.config["MAIL_SUPPRESS_SEND"] = False

    def refuse(msg):
        raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr(mail, "send", refuse)

    assert send_mail("ada@example.com", "Ready", "body") is False


def test_send_mail_suppressed_returns_true(ctx):
    assert send_mail("ada@example.com", "s", "body") is True


def test_send_mail_without_recipient_fails(ctx):
    assert send_mail(None, "s", "body") is False
