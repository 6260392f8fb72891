# timecapsule/models/media.py
from ..extensions import db
from ..lifecycle import utcnow


class Media(db.Model):
    __tablename__ = "media"

    id = db.Column(db.Integer, primary_key=True)
    capsule_id = db.Column(db.Integer, db.ForeignKey("capsule.id"), nullable=False, index=True)

    # copy of capsule.owner_id so ownership checks don't need a join
    owner_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False, index=True)

    original_name = db.Column(db.String(255), nullable=False)
    stored_name = db.Column(db.String(255), nullable=False, unique=True)
    file_type = db.Column(db.String(10), nullable=False)  # image|video
    mime = db.Column(db.String(120))
    size_bytes = db.Column(db.Integer)
    storage_path = db.Column(db.String(512), nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)

    capsule = db.relationship("Capsule", back_populates="media")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "capsule_id": self.capsule_id,
            "original_name": self.original_name,
            "stored_name": self.stored_name,
            "file_type": self.file_type,
            "storage_path": self.storage_path,
            "size_bytes": self.size_bytes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
