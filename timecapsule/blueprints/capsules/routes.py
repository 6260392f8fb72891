# timecapsule/blueprints/capsules/routes.py
from datetime import datetime
from typing import Optional

from flask import request, jsonify, send_file
from flask_login import login_required, current_user

from . import capsules_bp
from ...errors import ValidationError, NotFoundError
from ...lifecycle import utcnow, to_naive_utc
from ...services import capsule_service, storage_service


# -----------------
# Helpers
# -----------------

def _parse_dt(val: str) -> Optional[datetime]:
    if not val:
        return None
    try:
        # Accept both YYYY-MM-DD and full ISO strings (with or without offset / "Z")
        raw = val.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        return to_naive_utc(datetime.fromisoformat(raw))
    except ValueError:
        return None


# -----------------
# Read
# -----------------

@capsules_bp.get("")
@login_required
def capsule_list():
    now = utcnow()
    capsules = capsule_service.list_capsules(current_user.id)
    return jsonify([c.to_dict(now) for c in capsules])


@capsules_bp.get("/<int:capsule_id>")
@login_required
def capsule_view(capsule_id):
    now = utcnow()
    capsule = capsule_service.get_capsule(current_user.id, capsule_id)
    return jsonify(capsule.to_dict(now))


@capsules_bp.get("/<int:capsule_id>/media")
@login_required
def capsule_media(capsule_id):
    now = utcnow()
    media = capsule_service.list_media(current_user.id, capsule_id, now)
    return jsonify([m.to_dict() for m in media])


@capsules_bp.get("/<int:capsule_id>/media/<int:media_id>/file")
@login_required
def capsule_media_file(capsule_id, media_id):
    now = utcnow()
    media = capsule_service.get_media(current_user.id, capsule_id, media_id, now)
    try:
        path = storage_service.resolve_path(media.storage_path)
    except ValueError:
        raise NotFoundError("Media not found")
    if not path.exists():
        raise NotFoundError("Media file missing")

    resp = send_file(
        path,
        mimetype=media.mime or None,
        as_attachment=False,
        download_name=media.original_name,
        conditional=True,
        max_age=3600,
    )
    resp.headers["Cache-Control"] = "private, max-age=3600"
    return resp


# -----------------
# Create / Delete
# -----------------

@capsules_bp.post("")
@login_required
def capsule_create():
    now = utcnow()
    title = (request.form.get("title") or "").strip()
    message = request.form.get("message") or ""
    raw_open = request.form.get("open_date") or request.form.get("openDate")

    if not title:
        raise ValidationError("Title is required")
    if not raw_open:
        raise ValidationError("Open date is required")
    open_date = _parse_dt(raw_open)
    if open_date is None:
        raise ValidationError("Invalid open date. Use ISO 8601, e.g. 2030-01-01T09:00:00Z")
    if open_date <= now:
        raise ValidationError("Open date must be in the future")

    capsule = capsule_service.create_capsule(
        current_user,
        title=title,
        message=message,
        open_date=open_date,
        files=request.files.getlist("files"),
    )
    return jsonify({
        "message": "Capsule created successfully",
        "capsule": capsule.to_dict(now),
    }), 201


@capsules_bp.delete("/<int:capsule_id>")
@login_required
def capsule_delete(capsule_id):
    capsule_service.delete_capsule(current_user.id, capsule_id)
    return jsonify({"message": "Capsule deleted successfully"})
