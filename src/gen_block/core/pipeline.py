import logging
from dataclasses import dataclass

from gen_block.cache import get_default_cache
from gen_block.config import TransformOptions
from gen_block.core.blocks import find_gen_blocks, has_gen_blocks
from gen_block.core.editor import TextEditor, source_name_for
from gen_block.core.lookup import cache_transformation
from gen_block.core.ports.cache import TransformCache
from gen_block.core.transform import bind_line_edits
from gen_block.models import GenBlock, Keyword, SourceMapData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformResult:
    file_key: str
    original_text: str
    transformed_text: str
    source_map: SourceMapData | None
    blocks: tuple[GenBlock, ...]

    @property
    def changed(self) -> bool:
        return self.source_map is not None


def build_editor(source: str, blocks: list[GenBlock], options: TransformOptions) -> TextEditor:
    """Queue the wrapping and bind-line edits for every block of ``source``."""
    editor = TextEditor(source)
    for block in blocks:
        if options.wrap_blocks:
            editor.overwrite(block.start, block.start + len(Keyword.GEN), options.wrap_prefix)
        for edit in bind_line_edits(block.content, block.content_start):
            editor.apply(edit)
        if options.wrap_blocks:
            editor.insert_before(block.end, options.wrap_suffix)
    return editor


def transform_source(
    source: str,
    file_key: str,
    options: TransformOptions | None = None,
    cache: TransformCache | None = None,
) -> TransformResult:
    """Rewrite every gen block of a file and cache the result for position mapping.

    Files without gen blocks come back unchanged, and any stale cache entry
    for ``file_key`` is dropped.
    """
    options = options or TransformOptions()
    cache = cache if cache is not None else get_default_cache()

    blocks = find_gen_blocks(source) if has_gen_blocks(source) else []
    if not blocks:
        cache.delete(file_key)
        return TransformResult(file_key, source, source, None, ())

    editor = build_editor(source, blocks, options)
    transformed = editor.to_string()
    source_map = editor.generate_map(
        source=options.source_name or source_name_for(file_key),
        file=options.file,
        include_content=options.include_content,
    )
    cache_transformation(file_key, source, transformed, source_map, cache)
    logger.debug("Transformed %d gen block(s) in %s", len(blocks), file_key)
    return TransformResult(file_key, source, transformed, source_map, tuple(blocks))
