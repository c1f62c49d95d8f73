# colaboradores/draft_storage.py
from __future__ import annotations
import json
import logging
from typing import Any
from collections.abc import MutableMapping

from .utils import DRAFT_STORAGE_KEY

logger = logging.getLogger(__name__)

class DraftCorruptedError(ValueError):
    """Raised when the saved draft cannot be turned back into form data."""

class DraftStorage:
    """
    A single durable slot holding the create-form draft as a JSON string.

    The backing mapping is NiceGUI's `app.storage.user` in the running app,
    which survives reloads per browser. Any dict works in tests.
    """

    def __init__(self, storage: MutableMapping[str, Any], key: str = DRAFT_STORAGE_KEY) -> None:
        self._storage = storage
        self.key = key

    def load(self) -> dict[str, Any] | None:
        """Returns the saved draft, None when the slot is empty."""
        raw = self._storage.get(self.key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            raise DraftCorruptedError(f"Saved draft under '{self.key}' is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise DraftCorruptedError(f"Saved draft under '{self.key}' is not a JSON object.")
        return data

    def save(self, form_data: dict[str, Any]) -> None:
        self._storage[self.key] = json.dumps(form_data)

    def clear(self) -> None:
        if self._storage.pop(self.key, None) is not None:
            logger.info(f"Cleared saved draft '{self.key}'.")
