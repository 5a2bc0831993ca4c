"""Shape Store.

Counts occurrences of response shapes by fingerprint and persists them
as JSON so observations accumulate across runs. Used as a development
aid to spot fields the typed models do not map.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Mapping, Optional, TextIO, Union

from src.shape_store.shape import Occurrence, Shape

logger = logging.getLogger(__name__)


class Store:
    """Fingerprint -> Occurrence map, safe for concurrent callers.

    Example:
        store = Store.load_file("store.json")
        store.add_shape("/accounts", [{"id": "a", "balance": "1.0"}])
        store.write_file("store.json")
    """

    def __init__(self, shapes: Optional[dict[str, Occurrence]] = None):
        self._shapes: dict[str, Occurrence] = shapes or {}
        # Identity ignores the name, so one fingerprint can be seen under several
        self._names: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._shapes)

    def get(self, shape_id: str) -> Optional[Occurrence]:
        return self._shapes.get(shape_id)

    def occurrences(self) -> dict[str, Occurrence]:
        """Snapshot of the current fingerprint -> Occurrence map."""
        with self._lock:
            return dict(self._shapes)

    # ── Observation ──────────────────────────────────────────────────

    def add(self, shape: Shape) -> Occurrence:
        shape_id = shape.id
        with self._lock:
            occurrence = self._shapes.get(shape_id)
            if occurrence is None:
                occurrence = Occurrence(shape=shape, count=1)
                self._shapes[shape_id] = occurrence
            else:
                occurrence.count += 1
            self._names.setdefault(shape.name, set()).add(shape_id)
        return occurrence

    def add_shape(self, name: str, value: Any) -> None:
        """Record the shape(s) of a decoded JSON value.

        A list contributes one observation per element under the same
        name. Scalars at the top level are logged and skipped.
        """
        if isinstance(value, list):
            for item in value:
                self.add_shape(name, item)
        elif isinstance(value, dict):
            occurrence = self.add(Shape.of(name, value))
            logger.debug(
                "observed shape %s for %s (%d)", occurrence.shape.id[:12], name,
                occurrence.count, extra={"shape_id": occurrence.shape.id},
            )
        else:
            logger.error("unhandled type %s for %s", type(value).__name__, name)

    def unmapped_keys(self, wire_name: str, typed_name: str) -> set[str]:
        """Keys seen on the wire under ``wire_name`` but never under ``typed_name``."""
        with self._lock:
            wire = self._keys_under(wire_name)
            typed = self._keys_under(typed_name)
        return wire - typed

    def _keys_under(self, name: str) -> set[str]:
        ids = set(self._names.get(name, ()))
        ids.update(i for i, o in self._shapes.items() if o.shape.name == name)
        keys: set[str] = set()
        for shape_id in ids:
            keys.update(self._shapes[shape_id].shape.keys)
        return keys

    def dump(self) -> str:
        with self._lock:
            items = sorted(self._shapes.items())
        return "\n".join(
            f"{occurrence.count} shape {shape_id} {occurrence.shape}"
            for shape_id, occurrence in items
        )

    # ── Persistence ──────────────────────────────────────────────────

    def load(self, shapes: Mapping[str, Union[Occurrence, dict]]) -> None:
        """Replace the in-memory map wholesale."""
        loaded = {
            shape_id: value if isinstance(value, Occurrence) else Occurrence.from_json(value)
            for shape_id, value in shapes.items()
        }
        with self._lock:
            self._shapes = loaded
            self._names = {}
        logger.debug("loaded %d shapes", len(loaded))

    def write(self, sink: TextIO) -> None:
        with self._lock:
            payload = {k: v.to_json() for k, v in sorted(self._shapes.items())}
        json.dump(payload, sink)
        sink.write("\n")

    @classmethod
    def load_file(cls, path: Union[str, Path]) -> "Store":
        """Load a store from ``path``; a missing or empty file is an empty store."""
        store = cls()
        path = Path(path)
        if not path.exists():
            return store
        text = path.read_text(encoding="utf-8")
        if text.strip():
            store.load(json.loads(text))
        return store

    def write_file(self, path: Union[str, Path]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            self.write(f)
