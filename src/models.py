"""
Value types shared across the monitor.

Catalog keeps products in first-seen fetch order and indexes them for
membership tests, so anything iterating a catalog (the diff, the snapshot
file, notification truncation) sees a reproducible order.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple


class Catalog:
    """Ordered, duplicate-free collection of product URLs."""

    def __init__(self, products: Optional[Iterable[str]] = None):
        self._order: List[str] = []
        self._members = set()
        for product in products or []:
            if product not in self._members:
                self._members.add(product)
                self._order.append(product)

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, product: object) -> bool:
        return product in self._members

    def __eq__(self, other: object) -> bool:
        # Sequence equality: same members in the same order.
        if isinstance(other, Catalog):
            return self._order == other._order
        if isinstance(other, (list, tuple)):
            return self._order == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"Catalog({self._order!r})"

    def to_list(self) -> List[str]:
        return list(self._order)


@dataclass(frozen=True)
class CatalogDiff:
    """Products added and removed between two catalogs, in input order."""
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed)


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single fetch attempt."""
    ok: bool
    catalog: Optional[Catalog] = None
    error: Optional[str] = None
    attempt: int = 1


def _field(data: Dict[str, Any], name: str) -> Any:
    """Case-insensitive key lookup for records written by other tools."""
    if name in data:
        return data[name]
    wanted = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == wanted:
            return value
    return None


@dataclass(frozen=True)
class ChangeRecord:
    """One cycle's detected additions and removals."""
    id: uuid.UUID
    timestamp: datetime
    added: Tuple[str, ...] = field(default_factory=tuple)
    removed: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Id": str(self.id),
            "Timestamp": self.timestamp.isoformat(),
            "Added": list(self.added),
            "Removed": list(self.removed),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChangeRecord":
        """
        Build a record from its JSON form, matching field names
        case-insensitively. Raises ValueError on a missing or bad Id/Timestamp,
        or when Added/Removed is present but not a list.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Change record must be an object, got {type(data).__name__}")

        raw_id = _field(data, "Id")
        raw_ts = _field(data, "Timestamp")
        if raw_id is None or raw_ts is None:
            raise ValueError("Change record is missing Id or Timestamp")

        products = {}
        for name in ("Added", "Removed"):
            value = _field(data, name)
            if value is None:
                value = []
            if not isinstance(value, list):
                raise ValueError(f"Change record '{name}' must be a list, got {type(value).__name__}")
            products[name] = tuple(value)

        return cls(
            id=uuid.UUID(str(raw_id)),
            timestamp=datetime.fromisoformat(str(raw_ts)),
            added=products["Added"],
            removed=products["Removed"],
        )
