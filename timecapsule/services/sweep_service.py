# timecapsule/services/sweep_service.py
import logging
import threading
from collections import Counter
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from ..extensions import db
from ..lifecycle import utcnow, should_notify
from ..models.capsule import Capsule
from ..models.user import User
from .notification_service import NotificationDispatcher

log = logging.getLogger(__name__)


class SweepRunner:
    """
    One notification sweep: find capsules that are openable but not yet
    notified, dispatch each, and record the outcome per capsule.

    Ticks are single-flight. A tick that starts while another is running is
    skipped and run() returns None. Errors never leave run(); a failing
    candidate is logged and the rest of the batch continues.
    """

    def __init__(self, dispatcher: NotificationDispatcher):
        self.dispatcher = dispatcher
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def run(self, now: datetime | None = None) -> int | None:
        if not self._lock.acquire(blocking=False):
            log.warning("Notification sweep already in progress; skipping tick")
            return None
        try:
            return self._sweep(now or utcnow())
        finally:
            self._lock.release()

    def _sweep(self, now: datetime) -> int:
        try:
            candidates = Capsule.due_for_notification(now)
        except SQLAlchemyError as e:
            log.error("Notification sweep query failed: %s", e)
            db.session.rollback()
            return 0

        log.info("Found %d capsules ready for notifications", len(candidates))

        stats = Counter()
        for capsule_id, capsule in [(c.id, c) for c in candidates]:
            try:
                outcome = self._process(capsule_id, capsule, now)
            except Exception as e:
                log.exception("Notification sweep failed for capsule %s: %s", capsule_id, e)
                db.session.rollback()
                outcome = "error"
            stats[outcome] += 1

        log.info(
            "Processed %d notifications (%s)",
            len(candidates),
            ", ".join(f"{k}={v}" for k, v in sorted(stats.items())) or "none",
        )
        return len(candidates)

    def _process(self, capsule_id: int, capsule: Capsule, now: datetime) -> str:
        user = db.session.get(User, capsule.owner_id)
        if user is None:
            log.warning("User not found for capsule %s", capsule_id)
            return "missing_user"

        # Another tick may have marked it since the query ran
        if not should_notify(capsule, now):
            return "not_eligible"

        result = self.dispatcher.dispatch(user, capsule)
        if result.marks_notified:
            if not Capsule.mark_notified(capsule_id):
                log.info("Capsule %s was already marked notified", capsule_id)
        return result.value
