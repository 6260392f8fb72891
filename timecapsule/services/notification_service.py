# timecapsule/services/notification_service.py
import enum
import logging
from .email_service import render_email, send_mail

log = logging.getLogger(__name__)


class DispatchResult(enum.Enum):
    DELIVERED = "delivered"
    SKIPPED_BY_PREFERENCE = "skipped_by_preference"
    DELIVERY_FAILED = "delivery_failed"

    @property
    def marks_notified(self) -> bool:
        # Opted-out users are "processed" so they aren't retried every sweep
        return self is not DispatchResult.DELIVERY_FAILED


class NotificationDispatcher:
    """
    Sends the "capsule unlocked" email for one (user, capsule) pair.

    ``send`` is the mail transport: ``send(to, subject, body, html=None)``
    returning a bool. dispatch() never raises; rendering and transport errors
    come back as DELIVERY_FAILED so the capsule stays unmarked and the next
    sweep retries it.
    """

    template = "capsule_unlocked"

    def __init__(self, send=send_mail, frontend_url: str = "http://localhost:3000"):
        self.send = send
        self.frontend_url = (frontend_url or "").rstrip("/")

    def capsule_link(self, capsule) -> str:
        return f"{self.frontend_url}/capsule/{capsule.id}"

    def subject_for(self, capsule) -> str:
        return f'Your Time Capsule "{capsule.title}" is Now Available!'

    def dispatch(self, user, capsule) -> DispatchResult:
        if not user.notification_preferences.get("email", True):
            log.info("User %s has disabled email notifications (capsule %s)", user.id, capsule.id)
            return DispatchResult.SKIPPED_BY_PREFERENCE

        try:
            body, html = render_email(
                self.template, user=user, capsule=capsule, link=self.capsule_link(capsule)
            )
            sent = self.send(to=user.email, subject=self.subject_for(capsule), body=body, html=html)
        except Exception as e:
            log.exception("Email notification error for capsule %s: %s", capsule.id, e)
            return DispatchResult.DELIVERY_FAILED

        if not sent:
            log.warning("Notification not delivered for capsule %s to %s", capsule.id, user.email)
            return DispatchResult.DELIVERY_FAILED

        log.info("Notification sent for capsule %s to user %s", capsule.id, user.email)
        return DispatchResult.DELIVERED
