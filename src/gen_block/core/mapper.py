from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Callable, Iterable, Sequence

from gen_block.core.sourcemap import decode_mappings
from gen_block.models import DecodedMapping, SourceMapData, TextSpan


class LineIndex:
    """Offset ↔ (1-based line, 0-based column) conversion for one text."""

    def __init__(self, text: str) -> None:
        self._length = len(text)
        self._starts = [0]
        index = text.find("\n")
        while index != -1:
            self._starts.append(index + 1)
            index = text.find("\n", index + 1)

    def to_line_column(self, offset: int) -> tuple[int, int]:
        offset = max(0, min(offset, self._length))
        line_index = bisect_right(self._starts, offset) - 1
        return line_index + 1, offset - self._starts[line_index]

    def to_offset(self, line: int, column: int) -> int:
        if line < 1:
            return column
        if line <= len(self._starts):
            return self._starts[line - 1] + column
        # past the last line: every line plus its terminator, like a walk over all lines
        return self._length + 1 + column


def offset_to_line_column(text: str, offset: int) -> tuple[int, int]:
    return LineIndex(text).to_line_column(offset)


def line_column_to_offset(text: str, line: int, column: int) -> int:
    return LineIndex(text).to_offset(line, column)


class _LineLookup:
    """Mappings grouped by one side's line, in table order."""

    def __init__(
        self,
        mappings: Iterable[DecodedMapping],
        line_of: Callable[[DecodedMapping], int],
        column_of: Callable[[DecodedMapping], int],
    ) -> None:
        self._column_of = column_of
        self._by_line: dict[int, list[DecodedMapping]] = {}
        for mapping in mappings:
            self._by_line.setdefault(line_of(mapping), []).append(mapping)
        self._lines = sorted(self._by_line)

    def find(self, line: int, column: int) -> DecodedMapping | None:
        line_mappings = self._by_line.get(line)
        if line_mappings is None:
            earlier = bisect_left(self._lines, line)
            if earlier == 0:
                return None
            return self._by_line[self._lines[earlier - 1]][-1]

        best: DecodedMapping | None = None
        for mapping in line_mappings:
            candidate = self._column_of(mapping)
            if candidate <= column and (best is None or candidate >= self._column_of(best)):
                best = mapping
        return best if best is not None else line_mappings[0]


class PositionMapper:
    """Translate offsets and spans between the original and transformed text of one file."""

    def __init__(
        self,
        decoded_mappings: Sequence[DecodedMapping],
        original_text: str,
        transformed_text: str,
    ) -> None:
        self._mappings = tuple(decoded_mappings)
        self._original_text = original_text
        self._transformed_text = transformed_text
        self._original_index = LineIndex(original_text)
        self._transformed_index = LineIndex(transformed_text)
        self._by_original = _LineLookup(self._mappings, lambda m: m.original_line, lambda m: m.original_column)
        self._by_generated = _LineLookup(self._mappings, lambda m: m.generated_line, lambda m: m.generated_column)

    @classmethod
    def from_source_map(cls, source_map: SourceMapData, original_text: str, transformed_text: str) -> PositionMapper:
        return cls(decode_mappings(source_map.mappings), original_text, transformed_text)

    @property
    def original_text(self) -> str:
        return self._original_text

    @property
    def transformed_text(self) -> str:
        return self._transformed_text

    @property
    def mappings(self) -> tuple[DecodedMapping, ...]:
        return self._mappings

    def to_transformed(self, offset: int) -> int:
        """Map an offset in the original text to the transformed text; identity when unmapped."""
        line, column = self._original_index.to_line_column(offset)
        mapping = self._by_original.find(line, column)
        if mapping is None:
            return offset
        target_column = max(0, mapping.generated_column + (column - mapping.original_column))
        return self._transformed_index.to_offset(mapping.generated_line, target_column)

    def to_original(self, offset: int) -> int:
        """Map an offset in the transformed text back to the original text; identity when unmapped."""
        line, column = self._transformed_index.to_line_column(offset)
        mapping = self._by_generated.find(line, column)
        if mapping is None:
            return offset
        target_column = max(0, mapping.original_column + (column - mapping.generated_column))
        return self._original_index.to_offset(mapping.original_line, target_column)

    def map_span_to_original(self, span: TextSpan) -> TextSpan:
        start = self.to_original(span.start)
        end = self.to_original(span.start + span.length)
        return TextSpan(start=start, length=max(0, end - start))

    def map_span_to_transformed(self, span: TextSpan) -> TextSpan:
        start = self.to_transformed(span.start)
        end = self.to_transformed(span.start + span.length)
        return TextSpan(start=start, length=max(0, end - start))
