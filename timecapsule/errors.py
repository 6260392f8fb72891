# timecapsule/errors.py
from datetime import datetime


class CapsuleError(Exception):
    """Base for errors surfaced to API callers as structured responses."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(CapsuleError):
    status_code = 400


class NotFoundError(CapsuleError):
    # Also used when the record belongs to another user
    status_code = 404


class ForbiddenError(CapsuleError):
    status_code = 403

    def __init__(self, message: str, open_date: datetime | None = None):
        super().__init__(message)
        self.open_date = open_date

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.open_date is not None:
            data["open_date"] = self.open_date.isoformat()
        return data
