"""End-to-end tests: transform a file, then map positions through the cache."""

import pytest

from gen_block.cache import InMemoryTransformCache, get_default_cache
from gen_block.config import TransformOptions
from gen_block.core import lookup
from gen_block.core.pipeline import transform_source
from gen_block.core.sourcemap import decode_mappings
from gen_block.models import Diagnostic, SourceFileRef

FILE_KEY = "/project/src/program.ts"

EXPECTED_PROGRAM = """\
import { Effect } from "effect"

const program = Effect.gen(function* () {
  const user = yield* getUser(id)
  const [posts, likes] = yield* Effect.all([getPosts(user), getLikes(user)]);
  const label = `${user.name} {${posts.length}}`
  if (user.admin) {
    const audit = yield* logAccess(user)
  }
  posts.forEach((post) => {
    seen <- markSeen(post)
  })
  return { user, posts, likes, label }
})
"""


def test_transforms_program(program_source: str, cache: InMemoryTransformCache) -> None:
    result = transform_source(program_source, FILE_KEY, cache=cache)

    assert result.changed
    assert result.transformed_text == EXPECTED_PROGRAM
    assert len(result.blocks) == 1
    assert result.source_map is not None
    assert result.source_map.sources == ["program.ts"]


def test_simple_block() -> None:
    source = "const program = gen {\n  user <- getUser(id)\n  return user.name\n}\n"
    result = transform_source(source, "simple.ts")
    assert result.transformed_text == (
        "const program = Effect.gen(function* () {\n  const user = yield* getUser(id)\n  return user.name\n})\n"
    )


def test_adjacent_blocks_map_to_their_own_prefix(cache: InMemoryTransformCache) -> None:
    source = "a = [gen{x <- f()}gen{y <- g()}]"
    result = transform_source(source, FILE_KEY, cache=cache)
    assert result.transformed_text == (
        "a = [Effect.gen(function* (){const x = yield* f()})Effect.gen(function* (){const y = yield* g()})]"
    )

    second_gen = source.rindex("gen{")
    second_prefix = result.transformed_text.rindex("Effect.gen")
    assert lookup.map_original_to_transformed(FILE_KEY, second_gen, cache) == second_prefix
    assert lookup.map_transformed_to_original(FILE_KEY, second_prefix, cache) == second_gen


@pytest.mark.parametrize("needle",["getUser", "Effect.all", "logAccess", "markSeen", "label }", "return"])
def test_expressions_map_both_ways(program_source: str, cache: InMemoryTransformCache, needle: str) -> None:
    result = transform_source(program_source, FILE_KEY, cache=cache)
    original = program_source.index(needle)
    transformed = result.transformed_text.index(needle)

    assert lookup.map_original_to_transformed(FILE_KEY, original, cache) == transformed
    assert lookup.map_transformed_to_original(FILE_KEY, transformed, cache) == original


def test_original_offsets_map_monotonically_and_back(program_source: str, cache: InMemoryTransformCache) -> None:
    transform_source(program_source, FILE_KEY, cache=cache)
    mapper = lookup.get_position_mapper(FILE_KEY, cache)
    assert mapper is not None

    forward = [mapper.to_transformed(offset) for offset in range(len(program_source) + 1)]
    assert forward == sorted(forward)
    for offset, mapped in enumerate(forward):
        assert mapper.to_original(mapped) == offset


def test_text_before_first_block_is_unchanged(program_source: str, cache: InMemoryTransformCache) -> None:
    transform_source(program_source, FILE_KEY, cache=cache)
    for offset in range(program_source.index("gen {") + 1):
        assert lookup.map_original_to_transformed(FILE_KEY, offset, cache) == offset


def test_diagnostic_is_reported_against_original(program_source: str, cache: InMemoryTransformCache) -> None:
    result = transform_source(program_source, FILE_KEY, cache=cache)
    start = result.transformed_text.index("logAccess")
    diagnostic = Diagnostic(file=SourceFileRef(file_name=FILE_KEY), start=start, length=len("logAccess"))

    [mapped] = lookup.map_diagnostic_positions([diagnostic], cache)

    assert mapped.start == program_source.index("logAccess")
    assert mapped.length == len("logAccess")


def test_mappings_cover_every_generated_line(program_source: str, cache: InMemoryTransformCache) -> None:
    result = transform_source(program_source, FILE_KEY, cache=cache)
    assert result.source_map is not None
    lines = {m.generated_line for m in decode_mappings(result.source_map.mappings)}
    assert lines == set(range(1, result.transformed_text.count("\n") + 2))


class TestCacheLifecycle:
    def test_result_is_cached(self, program_source: str, cache: InMemoryTransformCache) -> None:
        result = transform_source(program_source, FILE_KEY, cache=cache)
        assert lookup.is_transformed_file(FILE_KEY, cache)
        assert lookup.get_original_source(FILE_KEY, cache) == program_source
        assert lookup.get_transformed_source(FILE_KEY, cache) == result.transformed_text

    def test_default_cache_is_used(self, program_source: str) -> None:
        transform_source(program_source, FILE_KEY)
        assert get_default_cache().contains(FILE_KEY)

    def test_file_without_blocks_drops_stale_entry(self, program_source: str, cache: InMemoryTransformCache) -> None:
        transform_source(program_source, FILE_KEY, cache=cache)
        result = transform_source("const x = 1\n", FILE_KEY, cache=cache)

        assert not result.changed
        assert result.transformed_text == "const x = 1\n"
        assert result.source_map is None
        assert result.blocks == ()
        assert not lookup.is_transformed_file(FILE_KEY, cache)
        assert lookup.map_original_to_transformed(FILE_KEY, 5, cache) == 5

    def test_retransform_replaces_entry(self, cache: InMemoryTransformCache) -> None:
        transform_source("a = gen { x <- f() }", FILE_KEY, cache=cache)
        transform_source("b = gen { y <- g() }", FILE_KEY, cache=cache)
        assert lookup.get_original_source(FILE_KEY, cache) == "b = gen { y <- g() }"
        assert len(cache) == 1


class TestOptions:
    def test_without_wrapping_only_binds_change(self, cache: InMemoryTransformCache) -> None:
        source = "p = gen {\n  x <- f()\n}"
        result = transform_source(source, FILE_KEY, TransformOptions(wrap_blocks=False), cache)
        assert result.transformed_text == "p = gen {\n  const x = yield* f()\n}"

    def test_custom_wrapping(self, cache: InMemoryTransformCache) -> None:
        source = "p = gen { x <- f() }"
        options = TransformOptions(wrap_prefix="run(", wrap_suffix=")")
        result = transform_source(source, FILE_KEY, options, cache)
        assert result.transformed_text == "p = run( { const x = yield* f() })"

    def test_map_labels(self, cache: InMemoryTransformCache) -> None:
        options = TransformOptions(source_name="in.ts", file="out.js", include_content=True)
        result = transform_source("p = gen { }", FILE_KEY, options, cache)
        assert result.source_map is not None
        assert result.source_map.sources == ["in.ts"]
        assert result.source_map.file == "out.js"
        assert result.source_map.sources_content == ["p = gen { }"]

    def test_gen_without_brace_is_untouched(self, cache: InMemoryTransformCache) -> None:
        result = transform_source("const g = gen(1)\n", FILE_KEY, cache=cache)
        assert not result.changed
        assert len(cache) == 0
