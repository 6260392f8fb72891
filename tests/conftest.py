import io
from datetime import timedelta
from pathlib import Path

import pytest
from werkzeug.datastructures import FileStorage

from timecapsule import create_app
from timecapsule.auth import issue_api_token
from timecapsule.config import Config
from timecapsule.extensions import db
from timecapsule.lifecycle import utcnow
from timecapsule.models import User, Capsule


@pytest.fixture
def app(tmp_path):
    class TestConfig(Config):
        TESTING = True
        SECRET_KEY = "test-secret"
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'test.db'}"
        AUTO_CREATE_DB = True
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        LOG_DIR = ""
        MAIL_SUPPRESS_SEND = True
        MAIL_DEFAULT_SENDER = "TimeCapsule <noreply@timecapsule.test>"
        SCHEDULER_ENABLED = False
        FRONTEND_URL = "https://capsule.test/"

    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """App context for tests that call services and models directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def upload_dir(app):
    return Path(app.config["UPLOAD_FOLDER"])


@pytest.fixture
def make_user(app):
    """Creates a user in its own app context; returns (user_id, bearer headers)."""
    def _make(name="Ada Lovelace", email="ada@example.com", email_notifications=True):
        with app.app_context():
            user = User(name=name, email=email, email_notifications=email_notifications)
            db.session.add(user)
            db.session.commit()
            return user.id, {"Authorization": f"Bearer {issue_api_token(user)}"}
    return _make


def add_user(name="Ada Lovelace", email="ada@example.com", email_notifications=True) -> User:
    user = User(name=name, email=email, email_notifications=email_notifications)
    db.session.add(user)
    db.session.commit()
    return user


def add_capsule(owner_id, open_date=None, title="Letter to future me", **kw) -> Capsule:
    capsule = Capsule(
        owner_id=owner_id,
        title=title,
        message=kw.pop("message", ""),
        open_date=open_date or (utcnow() + timedelta(days=30)),
        **kw,
    )
    db.session.add(capsule)
    db.session.commit()
    return capsule


def file_storage(name="photo.png", data=b"\x89PNG fake", content_type="image/png") -> FileStorage:
    return FileStorage(stream=io.BytesIO(data), filename=name, content_type=content_type)


def upload(name="photo.png", data=b"\x89PNG fake", content_type="image/png"):
    """A file tuple for the Flask test client's multipart encoder."""
    return (io.BytesIO(data), name, content_type)


class FakeTransport:
    """Stands in for email_service.send_mail and records each call."""

    def __init__(self, ok=True, exc=None):
        self.ok = ok
        self.exc = exc
        self.calls = []

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc:
            raise self.exc
        return self.ok
