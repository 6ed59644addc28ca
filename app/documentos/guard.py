"""Upload guard for case-file documents.

Everything a client sends is checked here before a byte reaches disk:
the owning case-file id must be a positive base-10 integer, the destination
must stay below the upload root and the file must look like a PDF or an
image.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Mapping

from werkzeug.utils import secure_filename

from app.core.errors import InvalidOwnerId, MissingField, PathEscape, StoredFileConflict

OWNER_FIELD = "propiedadId"
LEGACY_OWNER_FIELD = "expedienteId"
STORAGE_SUBDIR = "propiedades"
MAX_NAME_ATTEMPTS = 100

ALLOWED_MIMETYPES = frozenset({"application/pdf", "image/jpeg", "image/jpg", "image/png"})
GENERIC_BINARY_MIMETYPE = "application/octet-stream"
ALLOWED_EXTENSIONS = frozenset({".pdf", ".jpg", ".jpeg", ".png"})


def normalize_owner_field(form: Mapping[str, str]) -> str | None:
    # propiedadId wins over the legacy expedienteId when both are sent.
    for field_name in (OWNER_FIELD, LEGACY_OWNER_FIELD):
        value = form.get(field_name)
        if value is not None and str(value).strip():
            return str(value)
    return None


def parse_owner_id(raw: str | None) -> int:
    if raw is None or not str(raw).strip():
        raise MissingField(OWNER_FIELD, "El campo propiedadId o expedienteId es obligatorio")
    value = str(raw).strip()
    # Only ASCII digits: no sign, separators, dots or path characters.
    if not value.isascii() or not value.isdigit():
        raise InvalidOwnerId()
    owner_id = int(value, 10)
    if owner_id <= 0:
        raise InvalidOwnerId()
    return owner_id


def _within(root: Path, candidate: Path) -> bool:
    try:
        candidate.relative_to(root)
    except ValueError:
        return False
    return True


def destination_for(root: Path | str, owner_id: int) -> Path:
    base = Path(root).resolve()
    destination = (base / STORAGE_SUBDIR / str(owner_id)).resolve()
    if destination == base or not _within(base, destination):
        raise PathEscape()
    return destination


def ensure_destination(root: Path | str, owner_id: int) -> Path:
    destination = destination_for(root, owner_id)
    destination.mkdir(parents=True, exist_ok=True)
    return destination


def resolve_stored_path(root: Path | str, relative: str) -> Path:
    base = Path(root).resolve()
    candidate = (base / relative).resolve()
    if not _within(base, candidate):
        raise PathEscape()
    return candidate


def file_extension(original_name: str | None) -> str:
    cleaned = secure_filename(original_name or "")
    return Path(cleaned).suffix


def build_filename(
    owner_id: int,
    original_name: str | None,
    now: datetime | None = None,
    sequence: int = 0,
) -> str:
    moment = now or datetime.now(timezone.utc)
    timestamp = moment.strftime("%Y-%m-%dT%H-%M-%S")
    suffix = f"-{sequence}" if sequence else ""
    return f"propiedad-{owner_id}-{timestamp}{suffix}{file_extension(original_name)}"


def open_new_file(
    destination: Path,
    owner_id: int,
    original_name: str | None,
    now: datetime | None = None,
) -> tuple[Path, BinaryIO]:
    """Create the stored file exclusively, never reusing an existing name.

    Uploads landing in the same second get ``-1``, ``-2``... after the
    timestamp.
    """
    moment = now or datetime.now(timezone.utc)
    for sequence in range(MAX_NAME_ATTEMPTS):
        candidate = destination / build_filename(owner_id, original_name, moment, sequence)
        try:
            return candidate, candidate.open("xb")
        except FileExistsError:
            continue
    raise StoredFileConflict()


def is_allowed_file(mimetype: str | None, filename: str | None) -> bool:
    mime = (mimetype or "").split(";")[0].strip().lower()
    extension = Path(filename or "").suffix.lower()
    if mime in ALLOWED_MIMETYPES:
        return True
    if mime == GENERIC_BINARY_MIMETYPE and extension in ALLOWED_EXTENSIONS:
        return True
    # Some clients send a wrong MIME type; the extension alone decides then.
    return extension in ALLOWED_EXTENSIONS
