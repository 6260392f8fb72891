# timecapsule/services/capsule_service.py
"""
Owner-scoped capsule operations used by the API blueprint.

Every lookup filters on the caller's id, so a capsule that exists but belongs
to someone else is reported exactly like a missing one. Media (listing and
bytes) is only disclosed once the capsule is openable, for owners too.
"""
import logging
from datetime import datetime
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from ..extensions import db
from ..errors import ValidationError, NotFoundError, ForbiddenError
from ..lifecycle import should_disclose_media
from ..models.capsule import Capsule
from ..models.media import Media
from . import storage_service

log = logging.getLogger(__name__)


def list_capsules(owner_id: int) -> list[Capsule]:
    return Capsule.for_owner(owner_id).order_by(Capsule.open_date.asc()).all()


def get_capsule(owner_id: int, capsule_id: int) -> Capsule:
    capsule = Capsule.for_owner(owner_id).filter_by(id=capsule_id).first()
    if capsule is None:
        raise NotFoundError("Capsule not found")
    return capsule


def _ensure_disclosable(capsule: Capsule, now: datetime):
    if not should_disclose_media(capsule, now):
        raise ForbiddenError(
            f"This capsule will be available for viewing on {capsule.open_date.isoformat()}",
            open_date=capsule.open_date,
        )


def list_media(owner_id: int, capsule_id: int, now: datetime) -> list[Media]:
    capsule = get_capsule(owner_id, capsule_id)
    _ensure_disclosable(capsule, now)
    return (
        Media.query
        .filter_by(capsule_id=capsule.id, owner_id=owner_id)
        .order_by(Media.id.asc())
        .all()
    )


def get_media(owner_id: int, capsule_id: int, media_id: int, now: datetime) -> Media:
    capsule = get_capsule(owner_id, capsule_id)
    _ensure_disclosable(capsule, now)
    media = Media.query.filter_by(id=media_id, capsule_id=capsule.id, owner_id=owner_id).first()
    if media is None:
        raise NotFoundError("Media not found")
    return media


def _validate_uploads(files) -> list[tuple]:
    """Returns [(file_storage, kind, size)] or raises ValidationError before anything is written."""
    max_files = current_app.config.get("MAX_FILES_PER_CAPSULE", 10)
    max_size = current_app.config.get("MAX_FILE_SIZE", 20 * 1024 * 1024)

    files = [f for f in (files or []) if f and f.filename]
    if len(files) > max_files:
        raise ValidationError(f"Too many files (max {max_files})")

    checked = []
    for f in files:
        kind = storage_service.media_kind(f.filename, f.mimetype)
        if not storage_service.allowed_ext(f.filename) or kind is None:
            raise ValidationError(f"Invalid file type: {f.filename}")
        size = storage_service.upload_size(f)
        if size > max_size:
            raise ValidationError(f"File too large: {f.filename}")
        checked.append((f, kind, size))
    return checked


def create_capsule(owner, *, title: str, message: str | None, open_date: datetime, files=None) -> Capsule:
    """
    Creates a capsule and its media batch, all-or-nothing.

    Files are written first, then the capsule and media rows go in a single
    commit. If anything fails the transaction is rolled back and the files
    already written are deleted again.
    """
    title = (title or "").strip()
    message = message or ""
    if not title:
        raise ValidationError("Title is required")
    if open_date is None:
        raise ValidationError("Open date is required")

    uploads = _validate_uploads(files)
    written = []
    try:
        stored = []
        for f, kind, size in uploads:
            stored_name, storage_path = storage_service.save_upload(f)
            written.append(storage_path)
            stored.append((f, kind, size, stored_name, storage_path))

        capsule = Capsule(
            owner_id=owner.id,
            title=title,
            message=message,
            open_date=open_date,
            has_message=bool(message.strip()),
            has_images=any(kind == "image" for _, kind, _ in uploads),
            has_videos=any(kind == "video" for _, kind, _ in uploads),
        )
        db.session.add(capsule)
        db.session.flush()  # ensures capsule.id is available

        for f, kind, size, stored_name, storage_path in stored:
            db.session.add(Media(
                capsule_id=capsule.id,
                owner_id=owner.id,
                original_name=f.filename[:255],
                stored_name=stored_name,
                file_type=kind,
                mime=f.mimetype,
                size_bytes=size,
                storage_path=storage_path,
            ))

        db.session.commit()
    except Exception:
        db.session.rollback()
        if written:
            failed = storage_service.delete_uploads(written)
            log.error("Create capsule failed; purged %d of %d uploaded files", len(written) - len(failed), len(written))
        raise

    log.info("Capsule %s created by user %s with %d file(s)", capsule.id, owner.id, len(uploads))
    return capsule


def delete_capsule(owner_id: int, capsule_id: int) -> list[str]:
    """
    Cascade delete: files (parallel, best-effort), then media rows, then the
    capsule. Forward-only; files that could not be removed are logged and
    returned, they do not fail the delete.
    """
    capsule = get_capsule(owner_id, capsule_id)
    media = Media.query.filter_by(capsule_id=capsule.id, owner_id=owner_id).all()

    failed = storage_service.delete_uploads([m.storage_path for m in media])
    for path in failed:
        log.warning("Partial cleanup: could not delete %s for capsule %s", path, capsule.id)

    try:
        Media.query.filter_by(capsule_id=capsule.id).delete(synchronize_session=False)
        db.session.expire(capsule)
        db.session.delete(capsule)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    log.info("Capsule %s deleted (%d media, %d file(s) left behind)", capsule_id, len(media), len(failed))
    return failed
