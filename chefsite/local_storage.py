"""In-process stand-in for the browser's ``localStorage``.

The admin UI used to keep its data in ``localStorage``. An export of it (a
JSON object mapping keys to JSON-encoded strings) is loaded into a
:class:`LocalStorage` and read by the migration and the local settings store.
"""

import json
from typing import Any

from .logs import get_logger

logger = get_logger(__name__)


class LocalStorage:
    """Key/value store of strings with JSON helpers."""

    def __init__(self, items: dict[str, str] | None = None):
        self.store: dict[str, str] = dict(items or {})

    @classmethod
    def from_export(cls, data: dict[str, Any]) -> "LocalStorage":
        """
        Build a store from an export.

        Values that are not strings are JSON-encoded, so an export holding
        already-decoded arrays works too.
        """
        return cls(
            {
                key: value if isinstance(value, str) else json.dumps(value)
                for key, value in data.items()
            }
        )

    def get_item(self, key: str) -> str | None:
        return self.store.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.store[key] = value

    def get_json(self, key: str, default: Any) -> Any:
        """
        Decode the JSON value stored under ``key``.

        Args:
            key (str): Storage key.
            default (Any): Returned when the key is absent or unparseable.

        Returns:
            Any: Decoded value or ``default``.
        """
        raw = self.get_item(key)
        if not raw:
            return default
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.warning("local_storage_unparseable", key=key, error=str(exc))
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value))
