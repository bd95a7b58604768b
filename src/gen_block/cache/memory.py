import logging
from collections.abc import Iterator

from gen_block.models import TransformCacheEntry

logger = logging.getLogger(__name__)


class InMemoryTransformCache:
    """Dict-backed transform cache keyed by file identity.

    Implements the ``TransformCache`` protocol. Writes are not synchronized;
    callers sharing one instance across threads serialize stores themselves.
    """

    def __init__(self) -> None:
        self.entries: dict[str, TransformCacheEntry] = {}

    def get(self, key: str) -> TransformCacheEntry | None:
        return self.entries.get(key)

    def put(self, key: str, entry: TransformCacheEntry) -> None:
        if key in self.entries:
            logger.debug("Replacing cached transformation for %s", key)
        self.entries[key] = entry

    def delete(self, key: str) -> None:
        if self.entries.pop(key, None) is not None:
            logger.debug("Evicted cached transformation for %s", key)

    def clear(self) -> None:
        logger.debug("Clearing %d cached transformation(s)", len(self.entries))
        self.entries.clear()

    def contains(self, key: str) -> bool:
        return key in self.entries

    def keys(self) -> Iterator[str]:
        return iter(list(self.entries))

    def __len__(self) -> int:
        return len(self.entries)
