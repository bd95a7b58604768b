from __future__ import annotations

from collections.abc import Iterable

from gen_block.models import DecodedMapping, Mapping

BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_VALUES = {char: index for index, char in enumerate(BASE64_CHARS)}

_VLQ_SHIFT = 5
_VLQ_CONTINUATION = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_CONTINUATION - 1


def encode_vlq(value: int) -> str:
    """Encode one signed integer; the sign travels in the low bit of the first digit."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    digits = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        digits.append(BASE64_CHARS[digit])
        if not vlq:
            return "".join(digits)


def decode_vlq(encoded: str) -> list[int]:
    """Decode every complete VLQ value in ``encoded``, ignoring invalid characters."""
    values: list[int] = []
    shift = 0
    accumulator = 0
    for char in encoded:
        digit = _BASE64_VALUES.get(char)
        if digit is None:
            continue
        accumulator += (digit & _VLQ_MASK) << shift
        if digit & _VLQ_CONTINUATION:
            shift += _VLQ_SHIFT
            continue
        magnitude = accumulator >> 1
        values.append(-magnitude if accumulator & 1 else magnitude)
        accumulator = 0
        shift = 0
    return values


def _unique_by_generated(mappings: Iterable[Mapping]) -> list[Mapping]:
    ordered = sorted(mappings, key=lambda m: (m.generated_line, m.generated_column))
    unique: list[Mapping] = []
    for mapping in ordered:
        if unique and (unique[-1].generated_line, unique[-1].generated_column) == (
            mapping.generated_line,
            mapping.generated_column,
        ):
            continue
        unique.append(mapping)
    return unique


def encode_mappings(mappings: Iterable[Mapping]) -> str:
    """Encode a correspondence table into a ``mappings`` string.

    Duplicate generated positions keep their first entry (in table order).
    """
    lines: list[list[Mapping]] = []
    for mapping in _unique_by_generated(mappings):
        if mapping.generated_line < 1:
            continue
        while len(lines) < mapping.generated_line:
            lines.append([])
        lines[mapping.generated_line - 1].append(mapping)

    previous_original_line = 0
    previous_original_column = 0
    encoded_lines: list[str] = []
    for line in lines:
        previous_generated_column = 0
        segments: list[str] = []
        for mapping in line:
            original_line = mapping.original_line - 1
            segments.append(
                encode_vlq(mapping.generated_column - previous_generated_column)
                + encode_vlq(0)
                + encode_vlq(original_line - previous_original_line)
                + encode_vlq(mapping.original_column - previous_original_column)
            )
            previous_generated_column = mapping.generated_column
            previous_original_line = original_line
            previous_original_column = mapping.original_column
        encoded_lines.append(",".join(segments))
    return ";".join(encoded_lines)


def decode_mappings(mappings: str) -> list[DecodedMapping]:
    """Decode a ``mappings`` string, skipping empty or malformed segments."""
    decoded: list[DecodedMapping] = []
    source_index = 0
    original_line = 0
    original_column = 0
    name_index = 0

    for line_index, line in enumerate(mappings.split(";")):
        if not line:
            continue
        generated_column = 0
        for segment in line.split(","):
            values = decode_vlq(segment)
            if not values:
                continue
            generated_column += values[0]
            if len(values) < 4:
                continue
            source_index += values[1]
            original_line += values[2]
            original_column += values[3]
            mapping_name: int | None = None
            if len(values) >= 5:
                name_index += values[4]
                mapping_name = name_index
            decoded.append(
                DecodedMapping(
                    generated_line=line_index + 1,
                    generated_column=generated_column,
                    source_index=source_index,
                    original_line=original_line + 1,
                    original_column=original_column,
                    name_index=mapping_name,
                )
            )
    return decoded
