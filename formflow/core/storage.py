"""Draft storage for in-progress form fills.

The runtime only needs the three-call ``DraftStore`` contract; the backend is
the embedding application's choice.  Two reference stores are provided:

- ``KeyValueDraftStore``: JSON strings in any ``MutableMapping`` (in-memory
  dict by default; pass a shelve/redis-like mapping for persistence).
- ``JsonFileDraftStore``: one JSON file per draft key in a directory.

Both hold a single logical key per schema, ``form-draft-<formId>``, so saving
twice overwrites the same draft.  Failures raise :class:`StorageError`.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, MutableMapping, Optional, Protocol, runtime_checkable

from ..utils.logger import get_logger
from .exceptions import StorageError

logger = get_logger(__name__)

DRAFT_KEY_PREFIX = "form-draft-"


def draft_key(form_id: str) -> str:
    """The single storage key holding the draft for *form_id*."""
    return f"{DRAFT_KEY_PREFIX}{form_id}"


@runtime_checkable
class DraftStore(Protocol):
    """Protocol all draft stores must satisfy.

    Implementations can be plain classes; no inheritance required.
    ``get_draft`` returns None when no draft exists.
    """

    def get_draft(self, form_id: str) -> Optional[dict[str, Any]]: ...

    def set_draft(self, form_id: str, answers: dict[str, Any]) -> None: ...

    def clear_draft(self, form_id: str) -> None: ...


def _encode(form_id: str, answers: dict[str, Any]) -> str:
    payload = {
        "formId": form_id,
        "status": "draft",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "data": answers,
    }
    return json.dumps(payload, default=str)


def _decode(raw: str, form_id: str) -> dict[str, Any]:
    payload = json.loads(raw)
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise StorageError("Draft payload is malformed", form_id=form_id)
    return payload["data"]


class KeyValueDraftStore:
    """Draft store over a string key-value mapping.

    Args:
        backend: Mapping of storage key -> JSON string.  Defaults to a
            private in-memory dict.
    """

    def __init__(self, backend: Optional[MutableMapping[str, str]] = None) -> None:
        self._backend: MutableMapping[str, str] = backend if backend is not None else {}

    def get_draft(self, form_id: str) -> Optional[dict[str, Any]]:
        try:
            raw = self._backend.get(draft_key(form_id))
            if raw is None:
                return None
            return _decode(raw, form_id)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read draft: {e}", form_id=form_id) from e

    def set_draft(self, form_id: str, answers: dict[str, Any]) -> None:
        try:
            self._backend[draft_key(form_id)] = _encode(form_id, answers)
        except Exception as e:
            raise StorageError(f"Failed to write draft: {e}", form_id=form_id) from e

    def clear_draft(self, form_id: str) -> None:
        try:
            self._backend.pop(draft_key(form_id), None)
        except Exception as e:
            raise StorageError(f"Failed to clear draft: {e}", form_id=form_id) from e


class JsonFileDraftStore:
    """Draft store writing one ``form-draft-<formId>.json`` file per schema.

    Args:
        draft_dir: Directory for draft files.  Created on first write.
    """

    def __init__(self, draft_dir: str | Path) -> None:
        self._draft_dir = Path(draft_dir)

    # -- path helpers ----------------------------------------------------

    def _get_path(self, form_id: str) -> Path:
        safe_id = "".join(c if c.isalnum() or c in ("-", "_") else "_" for c in draft_key(form_id))
        return self._draft_dir / f"{safe_id}.json"

    # -- public API ------------------------------------------------------

    def get_draft(self, form_id: str) -> Optional[dict[str, Any]]:
        path = self._get_path(form_id)
        if not path.exists():
            return None
        try:
            answers = _decode(path.read_text(encoding="utf-8"), form_id)
        except StorageError:
            raise
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to load draft {path}: {e}", form_id=form_id) from e
        logger.debug("Draft loaded from %s (%d answers)", path, len(answers))
        return answers

    def set_draft(self, form_id: str, answers: dict[str, Any]) -> None:
        path = self._get_path(form_id)
        try:
            self._draft_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(_encode(form_id, answers), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise StorageError(f"Failed to save draft {path}: {e}", form_id=form_id) from e
        logger.debug("Draft saved to %s", path)

    def clear_draft(self, form_id: str) -> None:
        path = self._get_path(form_id)
        try:
            if path.exists():
                path.unlink()
                logger.debug("Removed draft file: %s", path)
        except OSError as e:
            raise StorageError(f"Failed to clear draft {path}: {e}", form_id=form_id) from e

    def list_drafts(self) -> list[str]:
        """Form ids that currently have a draft file."""
        if not self._draft_dir.exists():
            return []
        form_ids: list[str] = []
        for draft_file in sorted(self._draft_dir.glob(f"{DRAFT_KEY_PREFIX}*.json")):
            try:
                payload = json.loads(draft_file.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Failed to read draft %s: %s", draft_file, e)
                continue
            if isinstance(payload, dict) and payload.get("formId"):
                form_ids.append(payload["formId"])
        return form_ids
