"""
mokawalat/storage.py

Local file storage for uploads (resumes, certificates, photos, logos, contracts).

Layout:
    <UPLOAD_FOLDER>/<area>/<owner-id>/<secure filename>

Files are served back through the /uploads/<path> route registered in create_app().

SECURITY:
- Filenames go through werkzeug.secure_filename.
- Every resolved path must stay inside UPLOAD_FOLDER.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import NamedTuple

from flask import current_app, url_for
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


def _root() -> Path:
    root = Path(current_app.config["UPLOAD_FOLDER"]).resolve()
    root.mkdir(parents=True, exist_ok=True)
    return root


def _full_path(relative_path: str) -> Path:
    """Resolve under the upload root. Raises ValueError on traversal."""
    root = _root()
    full = (root / relative_path).resolve()
    full.relative_to(root)
    return full


def file_size(upload: FileStorage) -> int:
    """Size of an incoming upload in bytes (stream position is restored to 0)."""
    stream = upload.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def file_too_large(upload: FileStorage | None) -> bool:
    if not upload:
        return False
    return file_size(upload) > current_app.config["MAX_UPLOAD_BYTES"]


def save_upload(upload: FileStorage, area: str, owner_id: int | str) -> tuple[str, str]:
    """
    Store an upload and return (relative_path, public_url).

    A second upload with the same name for the same owner overwrites the first.
    """
    filename = secure_filename(upload.filename or "") or "upload.bin"
    relative_path = f"{area}/{owner_id}/{filename}"

    target = _full_path(relative_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    upload.save(str(target))

    logger.info("Stored upload %s", relative_path)
    return relative_path, url_for("uploaded_file", path=relative_path)


def delete_upload(relative_path: str | None) -> None:
    """Remove a stored file; missing files are ignored."""
    if not relative_path:
        return
    target = _full_path(relative_path)
    if target.exists():
        target.unlink()
        logger.info("Deleted upload %s", relative_path)


def upload_root() -> str:
    return str(_root())


class StagedUpload(NamedTuple):
    """A file written for a row whose change is not committed yet."""

    stored: str
    replaced: str | None


def attach_upload(record, upload: FileStorage | None, area: str, attr: str) -> StagedUpload | None:
    """
    Store upload for record (record.id must be set) and update record.<attr>_url / <attr>_path.

    Nothing is deleted here. After the commit pass the result to finish_upload()
    so the replaced file is removed; after a rollback pass it to discard_upload()
    so the new file is removed. Returns None when no file was sent.
    """
    if not upload:
        return None

    previous = getattr(record, f"{attr}_path")
    relative_path, public_url = save_upload(upload, area, record.id)

    setattr(record, f"{attr}_path", relative_path)
    setattr(record, f"{attr}_url", public_url)
    return StagedUpload(relative_path, previous)


def finish_upload(staged: StagedUpload | None) -> None:
    if staged and staged.replaced and staged.replaced != staged.stored:
        delete_upload(staged.replaced)


def discard_upload(staged: StagedUpload | None) -> None:
    # Same path means the old file was overwritten in place; keep what is there.
    if staged and staged.stored != staged.replaced:
        delete_upload(staged.stored)
