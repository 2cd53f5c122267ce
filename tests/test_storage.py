"""Tests for the draft stores."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from formflow.core.exceptions import StorageError
from formflow.core.storage import DraftStore, JsonFileDraftStore, KeyValueDraftStore, draft_key


def _make_file_store(tmp_path: Path) -> JsonFileDraftStore:
    return JsonFileDraftStore(tmp_path / "drafts")


class TestDraftKey:
    def test_format(self):
        assert draft_key("contact") == "form-draft-contact"


class TestProtocol:
    def test_shipped_stores_satisfy_protocol(self, tmp_path):
        assert isinstance(KeyValueDraftStore(), DraftStore)
        assert isinstance(_make_file_store(tmp_path), DraftStore)

    def test_plain_object_is_not_a_store(self):
        assert not isinstance(object(), DraftStore)


class TestKeyValueDraftStore:
    def test_round_trip(self):
        store = KeyValueDraftStore()
        store.set_draft("contact", {"name": "Ada", "tags": ["a", "b"], "age": 36})
        assert store.get_draft("contact") == {"name": "Ada", "tags": ["a", "b"], "age": 36}

    def test_missing_draft(self):
        assert KeyValueDraftStore().get_draft("contact") is None

    def test_payload_shape(self):
        backend: dict[str, str] = {}
        KeyValueDraftStore(backend).set_draft("contact", {"name": "Ada"})

        payload = json.loads(backend["form-draft-contact"])
        assert payload["formId"] == "contact"
        assert payload["status"] == "draft"
        assert payload["data"] == {"name": "Ada"}
        assert "timestamp" in payload

    def test_overwrites_single_key(self):
        backend: dict[str, str] = {}
        store = KeyValueDraftStore(backend)
        store.set_draft("contact", {"name": "Ada"})
        store.set_draft("contact", {"name": "Grace"})
        assert len(backend) == 1
        assert store.get_draft("contact") == {"name": "Grace"}

    def test_clear(self):
        store = KeyValueDraftStore()
        store.set_draft("contact", {"name": "Ada"})
        store.clear_draft("contact")
        store.clear_draft("contact")
        assert store.get_draft("contact") is None

    def test_malformed_payload(self):
        store = KeyValueDraftStore({"form-draft-contact": json.dumps({"status": "draft"})})
        with pytest.raises(StorageError, match="malformed"):
            store.get_draft("contact")

    def test_invalid_json(self):
        store = KeyValueDraftStore({"form-draft-contact": "{not json"})
        with pytest.raises(StorageError, match="Failed to read draft"):
            store.get_draft("contact")

    def test_backend_failure(self):
        backend = MagicMock()
        backend.__setitem__.side_effect = OSError("quota exceeded")
        store = KeyValueDraftStore(backend)
        with pytest.raises(StorageError, match="quota exceeded") as exc_info:
            store.set_draft("contact", {"name": "Ada"})
        assert exc_info.value.form_id == "contact"

    def test_non_json_values_stringified(self):
        store = KeyValueDraftStore()
        store.set_draft("contact", {"path": Path("a/b")})
        assert store.get_draft("contact") == {"path": str(Path("a/b"))}


class TestJsonFileDraftStore:
    def test_round_trip(self, tmp_path):
        store = _make_file_store(tmp_path)
        store.set_draft("contact", {"name": "Ada"})
        assert store.get_draft("contact") == {"name": "Ada"}
        assert (tmp_path / "drafts" / "form-draft-contact.json").exists()

    def test_no_temp_file_left(self, tmp_path):
        store = _make_file_store(tmp_path)
        store.set_draft("contact", {"name": "Ada"})
        assert list((tmp_path / "drafts").glob("*.tmp")) == []

    def test_unsafe_ids_sanitised(self, tmp_path):
        store = _make_file_store(tmp_path)
        store.set_draft("../etc/passwd", {"x": 1})
        files = [p.name for p in (tmp_path / "drafts").iterdir()]
        assert files == ["form-draft-___etc_passwd.json"]
        assert store.get_draft("../etc/passwd") == {"x": 1}

    def test_missing_draft(self, tmp_path):
        assert _make_file_store(tmp_path).get_draft("contact") is None

    def test_clear(self, tmp_path):
        store = _make_file_store(tmp_path)
        store.set_draft("contact", {"name": "Ada"})
        store.clear_draft("contact")
        store.clear_draft("contact")
        assert store.get_draft("contact") is None

    def test_corrupt_file(self, tmp_path):
        store = _make_file_store(tmp_path)
        (tmp_path / "drafts").mkdir()
        (tmp_path / "drafts" / "form-draft-contact.json").write_text("{oops", encoding="utf-8")
        with pytest.raises(StorageError, match="Failed to load draft"):
            store.get_draft("contact")

    def test_list_drafts(self, tmp_path):
        store = _make_file_store(tmp_path)
        assert store.list_drafts() == []
        store.set_draft("b-form", {})
        store.set_draft("a-form", {"x": 1})
        (tmp_path / "drafts" / "form-draft-broken.json").write_text("{", encoding="utf-8")
        assert store.list_drafts() == ["a-form", "b-form"]
