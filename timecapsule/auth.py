# timecapsule/auth.py
"""
Bearer-token identity for the JSON API.

Tokens are itsdangerous-signed ``{"uid": <id>}`` payloads. How users obtain
them (login, registration) lives outside this service; create.py issues one
for local use.
"""
from typing import Optional

from flask import current_app, jsonify
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from .extensions import db, login_manager
from .models.user import User


def _ts() -> URLSafeTimedSerializer:
    secret_key = current_app.config.get("SECRET_KEY")
    salt = current_app.config.get("API_TOKEN_SALT", "api-token")
    return URLSafeTimedSerializer(secret_key=secret_key, salt=salt)


def issue_api_token(user: User) -> str:
    return _ts().dumps({"uid": user.id})


def verify_api_token(token: str) -> Optional[int]:
    max_age = current_app.config.get("API_TOKEN_MAX_AGE")
    try:
        data = _ts().loads(token, max_age=max_age)
        return int(data.get("uid"))
    except (BadSignature, SignatureExpired, ValueError, TypeError, AttributeError):
        return None


@login_manager.request_loader
def load_user_from_request(request):
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    user_id = verify_api_token(token.strip())
    if user_id is None:
        return None
    return db.session.get(User, user_id)


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"message": "Authentication required"}), 401
