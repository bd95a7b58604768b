from __future__ import annotations

from collections.abc import Iterable

from gen_block.cache import get_default_cache
from gen_block.core.mapper import PositionMapper
from gen_block.core.ports.cache import TransformCache
from gen_block.core.sourcemap import decode_mappings
from gen_block.models import Diagnostic, SourceMapData, TextSpan, TransformCacheEntry


def _resolve(cache: TransformCache | None) -> TransformCache:
    return cache if cache is not None else get_default_cache()


def _mapper_for(entry: TransformCacheEntry) -> PositionMapper:
    return PositionMapper(entry.decoded_mappings, entry.original_text, entry.transformed_text)


def cache_transformation(
    file_key: str,
    original_text: str,
    transformed_text: str,
    source_map: SourceMapData,
    cache: TransformCache | None = None,
) -> PositionMapper:
    """Store a transformation, replacing any previous one under ``file_key``."""
    entry = TransformCacheEntry(
        original_text=original_text,
        transformed_text=transformed_text,
        raw_map=source_map,
        decoded_mappings=tuple(decode_mappings(source_map.mappings)),
        file_key=file_key,
    )
    _resolve(cache).put(file_key, entry)
    return _mapper_for(entry)


def get_cached_transformation(file_key: str, cache: TransformCache | None = None) -> TransformCacheEntry | None:
    return _resolve(cache).get(file_key)


def get_position_mapper(file_key: str, cache: TransformCache | None = None) -> PositionMapper | None:
    """Build a fresh mapper over the entry currently stored for ``file_key``."""
    entry = _resolve(cache).get(file_key)
    if entry is None:
        return None
    return _mapper_for(entry)


def is_transformed_file(file_key: str, cache: TransformCache | None = None) -> bool:
    return _resolve(cache).contains(file_key)


def get_original_source(file_key: str, cache: TransformCache | None = None) -> str | None:
    entry = _resolve(cache).get(file_key)
    return entry.original_text if entry is not None else None


def get_transformed_source(file_key: str, cache: TransformCache | None = None) -> str | None:
    entry = _resolve(cache).get(file_key)
    return entry.transformed_text if entry is not None else None


def clear_cached_transformation(file_key: str, cache: TransformCache | None = None) -> None:
    _resolve(cache).delete(file_key)


def clear_all_cached_transformations(cache: TransformCache | None = None) -> None:
    _resolve(cache).clear()


def map_transformed_to_original(file_key: str, offset: int, cache: TransformCache | None = None) -> int:
    mapper = get_position_mapper(file_key, cache)
    return mapper.to_original(offset) if mapper is not None else offset


def map_original_to_transformed(file_key: str, offset: int, cache: TransformCache | None = None) -> int:
    mapper = get_position_mapper(file_key, cache)
    return mapper.to_transformed(offset) if mapper is not None else offset


def map_text_span(file_key: str, span: TextSpan, cache: TransformCache | None = None) -> TextSpan:
    """Map a span reported against the transformed text back to the original text."""
    mapper = get_position_mapper(file_key, cache)
    return mapper.map_span_to_original(span) if mapper is not None else span


def map_text_span_to_transformed(file_key: str, span: TextSpan, cache: TransformCache | None = None) -> TextSpan:
    mapper = get_position_mapper(file_key, cache)
    return mapper.map_span_to_transformed(span) if mapper is not None else span


def map_diagnostic_positions(
    diagnostics: Iterable[Diagnostic], cache: TransformCache | None = None
) -> list[Diagnostic]:
    """Return copies of ``diagnostics`` positioned against the original text of their files."""
    mapped: list[Diagnostic] = []
    for diagnostic in diagnostics:
        if diagnostic.file is None or diagnostic.start is None:
            mapped.append(diagnostic)
            continue
        mapper = get_position_mapper(diagnostic.file.file_name, cache)
        if mapper is None:
            mapped.append(diagnostic)
            continue

        start = mapper.to_original(diagnostic.start)
        length = diagnostic.length
        if length is not None:
            length = max(0, mapper.to_original(diagnostic.start + length) - start)
        mapped.append(diagnostic.model_copy(update={"start": start, "length": length}))
    return mapped
