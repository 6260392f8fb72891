# timecapsule/models/user.py
from flask_login import UserMixin
from ..extensions import db
from ..lifecycle import utcnow


class User(UserMixin, db.Model):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    # Opt-out of "capsule unlocked" emails
    email_notifications = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    capsules = db.relationship(
        "Capsule",
        back_populates="owner",
        lazy="dynamic",
    )

    @property
    def notification_preferences(self) -> dict:
        return {"email": bool(self.email_notifications)}

    def __repr__(self):
        return f"<User {self.id} {self.email}>"
