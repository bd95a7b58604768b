from collections.abc import Iterator
from typing import Protocol

from gen_block.models import TransformCacheEntry


class TransformCache(Protocol):
    def get(self, key: str) -> TransformCacheEntry | None: ...

    def put(self, key: str, entry: TransformCacheEntry) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...

    def contains(self, key: str) -> bool: ...

    def keys(self) -> Iterator[str]: ...
