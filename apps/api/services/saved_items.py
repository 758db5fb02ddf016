"""Per-user saved animations, posts and templates."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Literal, Optional, Protocol, Tuple

from analysis.models import utcnow

SavedItemType = Literal["animation", "post", "template"]
SAVED_ITEM_TYPES: Tuple[str, ...] = ("animation", "post", "template")
DEDUPE_KEYS = ("url", "name")


class SavedItemNotFoundError(LookupError):
    """Raised when a user or item is missing from the store."""


def collection_name(item_type: str) -> str:
    return f"{item_type}s"


def _empty_collections() -> Dict[str, List[Dict[str, Any]]]:
    return {collection_name(item_type): [] for item_type in SAVED_ITEM_TYPES}


def _is_duplicate(existing: Dict[str, Any], item: Dict[str, Any]) -> bool:
    if existing.get("id") == item["id"]:
        return True
    return any(existing.get(key) and existing.get(key) == item.get(key) for key in DEDUPE_KEYS)


def _saved_at(item: Dict[str, Any]) -> Optional[datetime]:
    value = item.get("savedAt")
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


class SavedItemStore(Protocol):
    def list_items(self, user_id: str) -> Dict[str, List[Dict[str, Any]]]:
        ...

    def save(self, user_id: str, item_type: str, data: Dict[str, Any]) -> Tuple[Dict[str, Any], int]:
        ...

    def delete(self, user_id: str, item_type: str, item_id: str) -> int:
        ...

    def evict_expired(self, now: datetime) -> int:
        ...


class InMemorySavedItemStore:
    """
    Process-local store. Collections are newest first and capped per type.

    Items older than ``ttl`` are dropped by ``evict_expired``, which every
    read and write also runs first.
    """

    def __init__(
        self,
        ttl: timedelta = timedelta(days=7),
        max_per_type: int = 100,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.ttl = ttl
        self.max_per_type = max_per_type
        self._now = now or utcnow
        self._users: Dict[str, Dict[str, List[Dict[str, Any]]]] = {}

    def evict_expired(self, now: datetime) -> int:
        """Drop expired items and empty users; returns how many items were removed."""
        cutoff = now - self.ttl
        removed = 0
        for user_id in list(self._users):
            collections = self._users[user_id]
            for name, items in collections.items():
                kept = [item for item in items if (_saved_at(item) or now) > cutoff]
                removed += len(items) - len(kept)
                collections[name] = kept
            if not any(collections.values()):
                del self._users[user_id]
        return removed

    def list_items(self, user_id: str) -> Dict[str, List[Dict[str, Any]]]:
        self.evict_expired(self._now())
        collections = self._users.get(user_id) or _empty_collections()
        return {name: [dict(item) for item in items] for name, items in collections.items()}

    def save(self, user_id: str, item_type: str, data: Dict[str, Any]) -> Tuple[Dict[str, Any], int]:
        """
        Insert or replace an item. Returns the stored item and the collection size.

        An item replaces an existing one with the same id, url or name in place.
        """
        if item_type not in SAVED_ITEM_TYPES:
            raise ValueError(f"Invalid type. Must be one of: {', '.join(SAVED_ITEM_TYPES)}")
        now = self._now()
        self.evict_expired(now)

        item = {
            **data,
            "id": str(data.get("id") or f"{item_type}-{int(now.timestamp() * 1000)}-{secrets.token_hex(5)}"),
            "savedAt": now.isoformat(),
            "type": item_type,
        }
        collections = self._users.setdefault(user_id, _empty_collections())
        items = collections[collection_name(item_type)]

        for index, existing in enumerate(items):
            if _is_duplicate(existing, item):
                items[index] = item
                break
        else:
            items.insert(0, item)
            del items[self.max_per_type:]

        return dict(item), len(items)

    def delete(self, user_id: str, item_type: str, item_id: str) -> int:
        """
        Remove one item by id. Returns the remaining collection size.

        Raises:
            SavedItemNotFoundError: the user has nothing saved or the id is unknown.
        """
        self.evict_expired(self._now())
        collections = self._users.get(user_id)
        if collections is None:
            raise SavedItemNotFoundError("No saved data found")
        name = collection_name(item_type)
        items = collections.get(name, [])
        kept = [item for item in items if item.get("id") != item_id]
        if len(kept) == len(items):
            raise SavedItemNotFoundError("Item not found")
        collections[name] = kept
        return len(kept)
