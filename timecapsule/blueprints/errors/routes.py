import logging
from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from ...extensions import db
from ...errors import CapsuleError
from . import errors_bp

log = logging.getLogger(__name__)


def _rollback():
    # if a DB action caused this, rollback so the session isn't stuck in a bad transaction
    try:
        db.session.rollback()
    except SQLAlchemyError as e:
        log.warning("rollback failed: %s", e)


# Validation / not found / forbidden raised by the capsule services
@errors_bp.app_errorhandler(CapsuleError)
def err_capsule(e: CapsuleError):
    return jsonify(e.to_dict()), e.status_code

# 404 – Not Found (unknown route)
@errors_bp.app_errorhandler(404)
def err_404(e):
    return jsonify({"message": "Not found", "path": request.path}), 404

# 413 – Payload Too Large (MAX_CONTENT_LENGTH exceeded by an upload)
@errors_bp.app_errorhandler(413)
def err_413(e):
    return jsonify({"message": "Upload too large"}), 413

# Store unreachable / failed statement
@errors_bp.app_errorhandler(SQLAlchemyError)
def err_db(e):
    _rollback()
    log.exception("Database error on %s %s: %s", request.method, request.path, e)
    return jsonify({"message": "Database error"}), 500

# Fallback for uncaught HTTPException
@errors_bp.app_errorhandler(HTTPException)
def err_http(e: HTTPException):
    return jsonify({"message": e.description, "error": e.name}), e.code

# Last-resort: any other Exception
@errors_bp.app_errorhandler(Exception)
def err_unexpected(e):
    _rollback()
    log.exception("Unhandled error on %s %s: %s", request.method, request.path, e)
    # Don’t leak internals
    return jsonify({"message": "Something went wrong!"}), 500
