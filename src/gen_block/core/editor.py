from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from pathlib import PurePath

from gen_block.core.sourcemap import encode_mappings
from gen_block.models import Edit, EditKind, Mapping, SourceMapData

DEFAULT_SOURCE_NAME = "source.ts"

# processing order at equal positions; processing runs back to front
_SAME_POSITION_RANK = {
    EditKind.OVERWRITE: 0,
    EditKind.INSERT_AFTER: 1,
    EditKind.INSERT_BEFORE: 2,
}


@dataclass(frozen=True)
class _EditRange:
    start: int
    end: int
    replacement: str

    @property
    def delta(self) -> int:
        return len(self.replacement) - (self.end - self.start)


def _line_starts(text: str) -> list[int]:
    starts = [0]
    index = text.find("\n")
    while index != -1:
        starts.append(index + 1)
        index = text.find("\n", index + 1)
    return starts


class TextEditor:
    def __init__(self, original: str) -> None:
        self._original = original
        self._edits: list[Edit] = []

    @property
    def original(self) -> str:
        return self._original

    @property
    def edits(self) -> tuple[Edit, ...]:
        return tuple(self._edits)

    def _check_position(self, pos: int) -> None:
        if pos < 0 or pos > len(self._original):
            raise ValueError(f"Position {pos} is outside the original text (length {len(self._original)})")

    def overwrite(self, start: int, end: int, text: str) -> TextEditor:
        """Replace ``[start, end)`` of the original text."""
        self._check_position(start)
        self._check_position(end)
        if end < start:
            raise ValueError(f"Overwrite end {end} precedes start {start}")
        self._edits.append(Edit(kind=EditKind.OVERWRITE, pos=start, end=end, text=text))
        return self

    def insert_before(self, pos: int, text: str) -> TextEditor:
        self._check_position(pos)
        self._edits.append(Edit(kind=EditKind.INSERT_BEFORE, pos=pos, text=text))
        return self

    def insert_after(self, pos: int, text: str) -> TextEditor:
        self._check_position(pos)
        self._edits.append(Edit(kind=EditKind.INSERT_AFTER, pos=pos, text=text))
        return self

    def apply(self, edit: Edit) -> TextEditor:
        if edit.kind is EditKind.OVERWRITE:
            return self.overwrite(edit.pos, edit.range_end, edit.text)
        if edit.kind is EditKind.INSERT_BEFORE:
            return self.insert_before(edit.pos, edit.text)
        return self.insert_after(edit.pos, edit.text)

    def _sorted_edits(self) -> list[Edit]:
        """Edits from the end of the text towards the start."""
        ordered = sorted(self._edits, key=lambda e: _SAME_POSITION_RANK[e.kind])
        return sorted(ordered, key=lambda e: e.pos, reverse=True)

    def to_string(self) -> str:
        result = self._original
        for edit in self._sorted_edits():
            result = result[: edit.pos] + edit.text + result[edit.range_end :]
        return result

    def __str__(self) -> str:
        return self.to_string()

    def _edit_ranges(self) -> list[_EditRange]:
        ranges = [_EditRange(e.pos, e.range_end, e.text) for e in self._sorted_edits()]
        # inserts at an overwrite's start land in front of its replacement
        ranges.sort(key=lambda r: (r.start, r.end > r.start))
        return ranges

    @staticmethod
    def _resolve(offset: int, ranges: list[_EditRange]) -> int:
        """Translate an original offset into the materialized text."""
        adjustment = 0
        for edit_range in ranges:
            if edit_range.start > offset:
                break
            if edit_range.end <= offset:
                adjustment += edit_range.delta
            else:
                return edit_range.start + adjustment
        return offset + adjustment

    def generate_mappings(self) -> list[Mapping]:
        """Build the per-character correspondence table, line starts first within each line."""
        result = self.to_string()
        generated_starts = _line_starts(result)
        ranges = self._edit_ranges()

        def generated_position(offset: int) -> tuple[int, int]:
            target = self._resolve(offset, ranges)
            line_index = bisect_right(generated_starts, target) - 1
            return line_index + 1, target - generated_starts[line_index]

        mappings: list[Mapping] = []
        line_offset = 0
        for line_number, line in enumerate(self._original.split("\n"), start=1):
            gen_line, gen_column = generated_position(line_offset)
            mappings.append(Mapping(line_number, 0, gen_line, gen_column))
            for column in range(len(line)):
                gen_line, gen_column = generated_position(line_offset + column)
                mappings.append(Mapping(line_number, column, gen_line, gen_column))
            line_offset += len(line) + 1
        return mappings

    def generate_map(
        self,
        source: str | None = None,
        file: str | None = None,
        include_content: bool = False,
    ) -> SourceMapData:
        return SourceMapData(
            file=file,
            sources=[source or DEFAULT_SOURCE_NAME],
            sources_content=[self._original] if include_content else None,
            names=[],
            mappings=encode_mappings(self.generate_mappings()),
        )


def source_name_for(file_key: str) -> str:
    """Derive a map ``sources`` entry from an opaque file key."""
    return PurePath(file_key).name or DEFAULT_SOURCE_NAME
