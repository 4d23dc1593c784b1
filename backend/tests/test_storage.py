import pytest

from slide_studio.db import SessionLocal
from slide_studio.storage import (
    SCHEMA_VERSION,
    JsonFileStore,
    MemoryStore,
    SqlKeyValueStore,
    migrate_payload,
    wrap_payload,
)


def test_envelope_carries_schema_version():
    blob = wrap_payload({"currentIndex": 2})
    assert blob["schema_version"] == SCHEMA_VERSION
    assert blob["data"] == {"currentIndex": 2}
    assert migrate_payload(blob) == {"currentIndex": 2}


def test_unversioned_blob_is_read_as_legacy():
    kv = MemoryStore()
    kv.put_raw("slideSettings", {"includeImages": False})
    assert kv.get("slideSettings") == {"includeImages": False}


def test_newer_schema_is_refused():
    with pytest.raises(ValueError):
        migrate_payload({"schema_version": SCHEMA_VERSION + 1, "data": {}})


def test_json_file_store(tmp_path):
    kv = JsonFileStore(tmp_path)
    assert kv.get("presentation:abc") is None

    kv.set("presentation:abc", {"content": "# A"})
    assert kv.get("presentation:abc") == {"content": "# A"}
    assert list(tmp_path.glob("*.json"))

    kv.delete("presentation:abc")
    assert kv.get("presentation:abc") is None


def test_sql_store_overwrites_and_deletes(db_tables):
    kv = SqlKeyValueStore(SessionLocal)
    kv.set("prefs", {"simpleLanguage": True})
    kv.set("prefs", {"simpleLanguage": False})
    assert kv.get("prefs") == {"simpleLanguage": False}

    kv.delete("prefs")
    assert kv.get("prefs") is None
