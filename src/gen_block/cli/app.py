import logging
from typing import Annotated

import typer

from gen_block.cli.transform import blocks, map_offset, transform

app = typer.Typer(
    name="gen-block",
    help="gen-block CLI: rewrite gen blocks and map positions.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def root(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


app.command("transform")(transform)
app.command("blocks")(blocks)
app.command("map")(map_offset)


def main() -> None:
    app()
