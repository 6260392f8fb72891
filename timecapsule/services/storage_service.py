# timecapsule/services/storage_service.py
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from werkzeug.utils import secure_filename
from flask import current_app

log = logging.getLogger(__name__)

_IMAGE_EXTS = {"jpg", "jpeg", "png", "gif"}
_VIDEO_EXTS = {"mp4", "avi"}


def _ensure_base() -> Path:
    base = current_app.config.get("UPLOAD_FOLDER")
    if not base:
        base = Path(current_app.instance_path) / "uploads"
    else:
        base = Path(base)
    base.mkdir(parents=True, exist_ok=True)
    return base


def _suffix(filename: str) -> str:
    return Path(filename or "").suffix.lower().lstrip(".")


def allowed_ext(filename: str) -> bool:
    exts = current_app.config.get("ALLOWED_EXTENSIONS") or (_IMAGE_EXTS | _VIDEO_EXTS)
    suffix = _suffix(filename)
    return bool(suffix) and suffix in exts


def media_kind(filename: str, mimetype: str | None = None) -> str | None:
    """'image' or 'video' from the declared mimetype, falling back to the extension."""
    mt = (mimetype or "").lower()
    if mt.startswith("image/"):
        return "image"
    if mt.startswith("video/"):
        return "video"
    suffix = _suffix(filename)
    if suffix in _IMAGE_EXTS:
        return "image"
    if suffix in _VIDEO_EXTS:
        return "video"
    return None


def upload_size(file_storage) -> int:
    stream = file_storage.stream
    pos = stream.tell()
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(pos)
    return size


def save_upload(file_storage) -> tuple[str, str]:
    """
    Saves file to UPLOAD_FOLDER/<uuid>.<ext> and returns (stored_name, storage_path),
    where storage_path is "<uploads root name>/<stored_name>".
    """
    base = _ensure_base()
    if not secure_filename(file_storage.filename or ""):
        raise ValueError("Empty filename")

    # secure_filename drops non-ASCII names along with their dot; take the
    # extension from the original name, which allowed_ext already checked.
    suffix = _suffix(file_storage.filename)
    stored_name = f"{uuid.uuid4().hex}.{suffix}" if suffix else uuid.uuid4().hex
    dest = base / stored_name
    file_storage.save(dest)

    return stored_name, f"{base.name}/{stored_name}"


def resolve_path(storage_path: str) -> Path:
    base = _ensure_base().resolve()
    abs_path = (base.parent / (storage_path or "")).resolve()
    if abs_path == base or base not in abs_path.parents:
        raise ValueError(f"Path escapes upload folder: {storage_path}")
    return abs_path


def _unlink(path: Path) -> bool:
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        log.warning("File already gone: %s", path)
        return True
    except OSError as e:
        log.warning("Error deleting file %s: %s", path, e)
        return False


def delete_upload(storage_path: str) -> bool:
    try:
        path = resolve_path(storage_path)
    except ValueError as e:
        log.warning("Refusing to delete %s: %s", storage_path, e)
        return False
    return _unlink(path)


def delete_uploads(storage_paths, max_workers: int = 4) -> list[str]:
    """Deletes files in parallel. Returns the storage paths that could not be removed."""
    failed = []
    resolved = []
    for sp in storage_paths:
        try:
            resolved.append((sp, resolve_path(sp)))
        except ValueError as e:
            log.warning("Refusing to delete %s: %s", sp, e)
            failed.append(sp)

    if not resolved:
        return failed

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = pool.map(_unlink, [p for _, p in resolved])
        for (sp, _), ok in zip(resolved, results):
            if not ok:
                failed.append(sp)
    return failed
