"""In-memory cache of enriched audio items keyed by file identifier."""

from collections import OrderedDict
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from autovoice.podcast.models import EnrichedItem

logger = structlog.get_logger(__name__)


class AudioItemCache:
    """Maps file identifiers to the enriched items that produced them.

    Bounded LRU when max_items is positive, unbounded when it is 0. Writers
    always store whole records under a key derived from the record itself,
    so no locking is needed under a single event loop.
    """

    def __init__(self, max_items: int = 1000) -> None:
        self.max_items = max_items
        self._items: OrderedDict[str, "EnrichedItem"] = OrderedDict()
        self.logger = logger.bind(component="audio_item_cache")

    def put(self, item: "EnrichedItem | None") -> str | None:
        """Store an item under its file identifier.

        Args:
            item: Item to cache; incomplete records are not cached.

        Returns:
            The file identifier, or None if nothing was stored.
        """
        if item is None or not item.file_id:
            return None

        file_id = item.file_id
        self._items[file_id] = item
        self._items.move_to_end(file_id)

        if self.max_items and len(self._items) > self.max_items:
            evicted, _ = self._items.popitem(last=False)
            self.logger.debug("Evicted cached item", file_id=evicted)

        return file_id

    def get(self, file_id: str | None) -> "EnrichedItem | None":
        """Look up the item cached for a file identifier."""
        if not file_id:
            return None

        item = self._items.get(file_id)
        if item is not None:
            self._items.move_to_end(file_id)
        return item

    def file_ids(self) -> list[str]:
        """Cached file identifiers, least recently used first."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._items
