"""Local file storage for clinician-uploaded documents.

Files live under ``<file_storage_dir>/user-documents/<user_id>/`` and are
addressed by a storage key relative to the storage root, which is what the
``user_documents.file_path`` column holds.

Tags:
    notebridge, core, storage, files

Doc-Types:
    api-reference
"""

from __future__ import annotations

import base64
import binascii
import re
import time
from pathlib import Path

from notebridge.core.errors import InvalidInputError, NotFoundError
from notebridge.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_file_name(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with ``_``."""
    return _UNSAFE_CHARS.sub("_", name)


def decode_file_data(file_data: str) -> bytes:
    """Decode plain base64 or a ``data:<mime>;base64,<payload>`` URI."""
    payload = file_data.split(",", 1)[1] if file_data.startswith("data:") and "," in file_data else file_data
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInputError("file_data is not valid base64", cause=exc) from exc


class FileStorage:
    """Filesystem-backed store rooted at a single directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def user_key(self, user_id: str, file_name: str, *, now_ms: int | None = None) -> str:
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        return f"user-documents/{user_id}/{stamp}_{sanitize_file_name(file_name)}"

    def _resolve(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise InvalidInputError("Storage path escapes the storage root")
        return path

    def write(self, key: str, data: bytes) -> Path:
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("file_stored", key=key, size=len(data))
        return path

    def read(self, key: str) -> bytes:
        path = self._resolve(key)
        if not path.is_file():
            raise NotFoundError("Stored file not found")
        return path.read_bytes()

    def delete(self, key: str) -> bool:
        """Remove the file; returns ``False`` when it was already gone."""
        path = self._resolve(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("file_missing_on_delete", key=key)
            return False
        logger.info("file_deleted", key=key)
        return True
