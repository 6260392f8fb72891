# timecapsule/models/capsule.py
from datetime import datetime
from ..extensions import db
from ..lifecycle import utcnow, is_openable


class Capsule(db.Model):
    __tablename__ = "capsule"

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)

    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False, default="")
    open_date = db.Column(db.DateTime, nullable=False, index=True)

    # Snapshot of the upload set taken at creation; never recomputed
    has_images = db.Column(db.Boolean, nullable=False, default=False)
    has_videos = db.Column(db.Boolean, nullable=False, default=False)
    has_message = db.Column(db.Boolean, nullable=False, default=False)

    # false -> true only, via mark_notified()
    notification_sent = db.Column(db.Boolean, nullable=False, default=False, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    owner = db.relationship("User", back_populates="capsules")

    media = db.relationship(
        "Media",
        back_populates="capsule",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    # --- Queries ---
    @classmethod
    def for_owner(cls, owner_id: int):
        return cls.query.filter_by(owner_id=owner_id)

    @classmethod
    def due_for_notification(cls, now: datetime) -> list["Capsule"]:
        return (
            cls.query
            .filter(cls.open_date <= now, cls.notification_sent.is_(False))
            .all()
        )

    @classmethod
    def mark_notified(cls, capsule_id: int) -> bool:
        """
        Conditional write: flips notification_sent only if it is still false.
        Commits immediately and returns True when this call made the change.
        """
        changed = (
            cls.query
            .filter_by(id=capsule_id, notification_sent=False)
            .update({"notification_sent": True, "updated_at": utcnow()}, synchronize_session=False)
        )
        db.session.commit()
        return changed == 1

    # --- Views ---
    def is_openable(self, now: datetime) -> bool:
        return is_openable(self, now)

    def to_dict(self, now: datetime) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message or "",
            "open_date": self.open_date.isoformat(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "has_images": self.has_images,
            "has_videos": self.has_videos,
            "has_message": self.has_message,
            "notification_sent": self.notification_sent,
            "is_openable": self.is_openable(now),
        }

    def __repr__(self):
        return f"<Capsule {self.id} open_date={self.open_date:%Y-%m-%d %H:%M}>"
