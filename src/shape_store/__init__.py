"""Response Shape Store.

Fingerprints the flattened key set of JSON payloads and counts how often
each shape is seen, so API drift and unmapped fields show up without
keeping raw payloads.

Example:
    from src.shape_store import Store

    store = Store.load_file("store.json")
    store.add_shape("/products", payload)
    print(store.dump())
"""

from src.shape_store.shape import Occurrence, Shape, fingerprint, flatten
from src.shape_store.store import Store

__all__ = [
    "Occurrence",
    "Shape",
    "Store",
    "fingerprint",
    "flatten",
]
