from gen_block.cache.memory import InMemoryTransformCache
from gen_block.core.ports.cache import TransformCache

_default_cache: InMemoryTransformCache | None = None


def get_default_cache() -> TransformCache:
    """Return the process-wide cache, creating it lazily on first call."""
    global _default_cache  # noqa: PLW0603
    if _default_cache is None:
        _default_cache = InMemoryTransformCache()
    return _default_cache


def reset_default_cache() -> None:
    global _default_cache  # noqa: PLW0603
    _default_cache = None


__all__ = [
    "InMemoryTransformCache",
    "TransformCache",
    "get_default_cache",
    "reset_default_cache",
]
