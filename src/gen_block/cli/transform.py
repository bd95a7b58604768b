from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from gen_block.cache import InMemoryTransformCache
from gen_block.config import load_options
from gen_block.core.blocks import find_gen_blocks
from gen_block.core.lookup import get_position_mapper
from gen_block.core.pipeline import TransformResult, transform_source

console = Console()


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1) from None


def _transform(path: Path, include_content: bool | None = None) -> tuple[TransformResult, InMemoryTransformCache]:
    cache = InMemoryTransformCache()
    options = load_options(include_content=include_content)
    result = transform_source(_read_source(path), str(path), options, cache)
    return result, cache


def transform(
    path: Annotated[Path, typer.Argument(help="Source file containing gen blocks.")],
    show_map: Annotated[bool, typer.Option("--map/--no-map", help="Print the source map after the text.")] = False,
    include_content: Annotated[
        bool, typer.Option("--include-content", help="Embed the original text in the source map.")
    ] = False,
    output: Annotated[Path | None, typer.Option(help="Write the transformed text to this file.")] = None,
) -> None:
    """Rewrite the gen blocks of a file."""
    result, _ = _transform(path, include_content or None)

    if output is not None:
        output.write_text(result.transformed_text, encoding="utf-8")
        console.print(f"[green]Wrote[/green] {output} ({len(result.blocks)} block(s))")
    else:
        typer.echo(result.transformed_text, nl=False)

    if show_map:
        if result.source_map is None:
            console.print("[yellow]No gen blocks found; no source map.[/yellow]")
        else:
            typer.echo(result.source_map.to_json())


def blocks(
    path: Annotated[Path, typer.Argument(help="Source file containing gen blocks.")],
) -> None:
    """List the gen blocks found in a file."""
    source = _read_source(path)
    found = find_gen_blocks(source)

    table = Table(show_lines=False)
    for header in ("start", "brace", "end", "lines"):
        table.add_column(header)
    for block in found:
        table.add_row(str(block.start), str(block.brace_start), str(block.end), str(block.content.count("\n") + 1))
    console.print(table)
    console.print(f"({len(found)} blocks)")


def map_offset(
    path: Annotated[Path, typer.Argument(help="Source file containing gen blocks.")],
    offset: Annotated[int, typer.Argument(help="Offset to translate.")],
    to_original: Annotated[
        bool, typer.Option("--to-original", help="Treat OFFSET as a transformed-text offset.")
    ] = False,
) -> None:
    """Translate an offset between the original and transformed text of a file."""
    _, cache = _transform(path)
    mapper = get_position_mapper(str(path), cache)
    if mapper is None:
        typer.echo(str(offset))
        return
    typer.echo(str(mapper.to_original(offset) if to_original else mapper.to_transformed(offset)))
