"""Tests for the gen-block CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from gen_block.cli.app import app
from gen_block.core.pipeline import transform_source

runner = CliRunner()


@pytest.mark.parametrize(
    "args",
    [
        [],
        ["transform"],
        ["blocks"],
        ["map"],
    ],
    ids=["root", "transform", "blocks", "map"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_transform_prints_rewritten_text(program_file: Path, program_source: str) -> None:
    result = runner.invoke(app, ["transform", str(program_file)])

    assert result.exit_code == 0
    expected = transform_source(program_source, str(program_file)).transformed_text
    assert result.output == expected
    assert "Effect.gen(function* () {" in result.output


def test_transform_with_map_prints_json(program_file: Path) -> None:
    result = runner.invoke(app, ["transform", str(program_file), "--map", "--include-content"])

    assert result.exit_code == 0
    map_line = result.output.strip().splitlines()[-1]
    source_map = json.loads(map_line)
    assert source_map["version"] == 3
    assert source_map["sources"] == ["program.ts"]
    assert source_map["names"] == []
    assert source_map["sourcesContent"] == [program_file.read_text(encoding="utf-8")]
    assert "file" not in source_map


def test_transform_writes_output_file(program_file: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.ts"
    result = runner.invoke(app, ["transform", str(program_file), "--output", str(output)])

    assert result.exit_code == 0
    assert "Wrote" in result.output
    assert output.read_text(encoding="utf-8").startswith('import { Effect } from "effect"')


def test_transform_without_blocks_notes_missing_map(tmp_path: Path) -> None:
    path = tmp_path / "plain.ts"
    path.write_text("const x = 1\n", encoding="utf-8")
    result = runner.invoke(app, ["transform", str(path), "--map"])

    assert result.exit_code == 0
    assert result.output.startswith("const x = 1\n")
    assert "No gen blocks found" in result.output


def test_missing_file_exits_with_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["transform", str(tmp_path / "missing.ts")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_blocks_lists_each_block(program_file: Path) -> None:
    result = runner.invoke(app, ["blocks", str(program_file)])

    assert result.exit_code == 0
    assert "(1 blocks)" in result.output
    assert "start" in result.output


def test_map_translates_offsets_both_ways(program_file: Path, program_source: str) -> None:
    transformed = transform_source(program_source, str(program_file)).transformed_text
    original_offset = program_source.index("getUser")
    transformed_offset = transformed.index("getUser")

    forward = runner.invoke(app, ["map", str(program_file), str(original_offset)])
    backward = runner.invoke(app, ["map", str(program_file), str(transformed_offset), "--to-original"])

    assert forward.exit_code == 0
    assert forward.output.strip() == str(transformed_offset)
    assert backward.output.strip() == str(original_offset)


def test_map_without_blocks_echoes_offset(tmp_path: Path) -> None:
    path = tmp_path / "plain.ts"
    path.write_text("const x = 1\n", encoding="utf-8")
    result = runner.invoke(app, ["map", str(path), "4"])

    assert result.exit_code == 0
    assert result.output.strip() == "4"
