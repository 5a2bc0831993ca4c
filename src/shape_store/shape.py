"""Response shapes.

A shape is the set of dotted key paths present in a decoded JSON object,
independent of the values. Two payloads with the same paths share a
fingerprint whatever their key order or content.
"""

import hashlib
from dataclasses import dataclass
from typing import Any, Iterable


def flatten(value: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested objects into a single level of dotted paths.

    Arrays, scalars and empty objects are leaves at the path they occur.

    Example:
        flatten({"a": {"b": 1, "c": [1, 2]}, "d": None})
        # {"a.b": 1, "a.c": [1, 2], "d": None}
    """
    flat: dict[str, Any] = {}
    for key, item in value.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(item, dict) and item:
            flat.update(flatten(item, path))
        else:
            flat[path] = item
    return flat


def fingerprint(keys: Iterable[str]) -> str:
    """SHA-256 hex digest of the sorted, comma-joined key set."""
    joined = ",".join(sorted(set(keys)))
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Shape:
    """Named key set observed in a payload."""
    name: str
    keys: frozenset[str]

    @property
    def id(self) -> str:
        return fingerprint(self.keys)

    @classmethod
    def of(cls, name: str, value: dict[str, Any]) -> "Shape":
        return cls(name=name, keys=frozenset(flatten(value)))

    def to_json(self) -> dict:
        return {"Name": self.name, "Keys": sorted(self.keys)}

    @classmethod
    def from_json(cls, data: dict) -> "Shape":
        # Keys may be a list, or an object whose keys are the set members
        keys = data.get("Keys") or []
        return cls(name=data.get("Name", ""), keys=frozenset(keys))

    def __str__(self) -> str:
        return f"{self.name} [{', '.join(sorted(self.keys))}]"


@dataclass
class Occurrence:
    """A shape and the number of times it has been observed."""
    shape: Shape
    count: int = 1

    def to_json(self) -> dict:
        return {"Shape": self.shape.to_json(), "Count": self.count}

    @classmethod
    def from_json(cls, data: dict) -> "Occurrence":
        return cls(
            shape=Shape.from_json(data.get("Shape", {})),
            count=int(data.get("Count", 0)),
        )
