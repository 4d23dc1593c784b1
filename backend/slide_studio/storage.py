from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Protocol
from uuid import uuid4

from sqlalchemy.orm import Session

from slide_studio.config import settings
from slide_studio.models import KeyValueEntry


logger = logging.getLogger("slide_studio.storage")

SCHEMA_VERSION = 1
_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]+")


def make_file_path(kind: str, extension: str, stem: str | None = None) -> Path:
    folder = settings.storage_root / kind
    folder.mkdir(parents=True, exist_ok=True)
    safe_stem = stem or str(uuid4())
    return folder / f"{safe_stem}.{extension.lstrip('.')}"


def write_json(path: Path, payload: dict | list) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def read_json(path: Path) -> dict | list:
    return json.loads(path.read_text(encoding="utf-8"))


def wrap_payload(data: Any) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def migrate_payload(blob: Any) -> Any:
    """Return the data stored in ``blob``, upgrading older layouts.

    Blobs written before versioning was introduced are the bare data with no
    envelope; they are treated as version 0.
    """
    if not isinstance(blob, dict) or "schema_version" not in blob:
        return blob

    version = int(blob.get("schema_version") or 0)
    if version > SCHEMA_VERSION:
        raise ValueError(f"Stored payload has unsupported schema_version={version}")
    return blob.get("data")


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    def __init__(self):
        self._rows: dict[str, str] = {}

    def get(self, key: str) -> Any | None:
        raw = self._rows.get(key)
        if raw is None:
            return None
        return migrate_payload(json.loads(raw))

    def set(self, key: str, value: Any) -> None:
        self._rows[key] = json.dumps(wrap_payload(value))

    def delete(self, key: str) -> None:
        self._rows.pop(key, None)

    def put_raw(self, key: str, blob: Any) -> None:
        self._rows[key] = json.dumps(blob)


class JsonFileStore:
    def __init__(self, root: Path | None = None):
        self.root = root or settings.storage_root / "state"
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        return migrate_payload(read_json(path))

    def set(self, key: str, value: Any) -> None:
        write_json(self._path(key), wrap_payload(value))

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


class SqlKeyValueStore:
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str) -> Any | None:
        db = self._session_factory()
        try:
            row = db.get(KeyValueEntry, key)
            if not row:
                return None
            return migrate_payload(json.loads(row.value_json))
        finally:
            db.close()

    def set(self, key: str, value: Any) -> None:
        db = self._session_factory()
        try:
            row = db.get(KeyValueEntry, key)
            raw = json.dumps(wrap_payload(value), ensure_ascii=False)
            if row:
                row.value_json = raw
                row.updated_at = datetime.utcnow()
            else:
                row = KeyValueEntry(key=key, value_json=raw)
            db.add(row)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("kv_store_write_failed key=%s", key)
            raise
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self._session_factory()
        try:
            row = db.get(KeyValueEntry, key)
            if row:
                db.delete(row)
                db.commit()
        finally:
            db.close()
