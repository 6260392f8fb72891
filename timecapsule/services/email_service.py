# timecapsule/services/email_service.py
"""
Mail transport for notifications.

render_email() turns ``email/<name>.txt`` (and ``.html`` when present) into a
message body; send_mail() hands one message to Flask-Mail. Neither keeps
state between calls, so any callable with send_mail's signature can stand in
for the transport.
"""
import logging
from flask import current_app, render_template
from jinja2 import TemplateNotFound
from flask_mail import Message
from ..extensions import mail

log = logging.getLogger(__name__)


def render_email(name: str, **ctx) -> tuple[str, str | None]:
    """Returns (body, html); the plain-text part is required, the HTML part is optional."""
    body = render_template(f"email/{name}.txt", **ctx)
    try:
        html = render_template(f"email/{name}.html", **ctx)
    except TemplateNotFound:
        html = None
    return body, html


def send_mail(to: str, subject: str, body: str, html: str | None = None) -> bool:
    if not to:
        log.warning("send_mail: missing recipient")
        return False

    sender = current_app.config.get("MAIL_DEFAULT_SENDER") or current_app.config.get("MAIL_USERNAME")
    if not sender:
        log.error("send_mail: no sender configured")
        return False

    msg = Message(subject=subject, recipients=[to], sender=sender, body=body, html=html)

    if current_app.config.get("MAIL_SUPPRESS_SEND"):
        log.info("[MAIL_SUPPRESS_SEND=1] would send: %s | %s", to, subject)
        return True

    try:
        mail.send(msg)
    except Exception as e:
        # SMTP refusals, socket errors and bad addresses all surface here
        log.exception("send_mail to %s failed: %s", to, e)
        return False

    log.info("Email sent to %s | subject=%s", to, subject)
    return True
