from __future__ import annotations

import pathlib
import sys

import click

from . import _highlight, decode
from .config import DEFAULT_CONFIG, Config
from .dump import sdump


def _output_path(src: pathlib.Path) -> pathlib.Path:
    return src.with_suffix(".py")


@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path),
)
@click.option(
    "-p",
    "--package",
    default="fixtures",
    show_default=True,
    help="Package named in the header of the generated files.",
)
@click.option(
    "--indent",
    default=DEFAULT_CONFIG.indent,
    show_default=True,
    help="String used for each level of indentation.",
)
@click.option(
    "--sort-keys/--no-sort-keys",
    default=True,
    show_default=True,
    help="Sort the keys of dictionaries.",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Maximum nesting depth (0 means no limit).",
)
@click.option(
    "--stringers/--no-stringers",
    default=False,
    help="Render values through their own __str__ method.",
)
@click.option(
    "--decoder",
    metavar="DOTTED.PATH",
    default=None,
    help="Callable applied to every document before it is dumped.",
)
@click.option(
    "--stdout",
    "to_stdout",
    is_flag=True,
    help="Print the code instead of writing FILE.py next to each FILE.",
)
@click.option(
    "--color/--no-color",
    default=None,
    help="Highlight the code printed with --stdout (default: if a tty).",
)
def cli(
    files: tuple[pathlib.Path, ...],
    package: str,
    indent: str,
    sort_keys: bool,
    max_depth: int,
    stringers: bool,
    decoder: str | None,
    to_stdout: bool,
    color: bool | None,
) -> None:
    """Turn the documents in FILES (json, jsonl or msgpack) into python code."""
    config = Config(
        indent=indent,
        sort_keys=sort_keys,
        max_depth=max_depth,
        invoke_stringers=stringers,
        package=package or None,
    )
    try:
        decode_fn = None
        if decoder is not None:
            decode_fn = decode.resolve_decoder(decoder)
        for src in files:
            docs = list(decode.load_documents(src, decoder=decode_fn))
            code = sdump(*docs, config=config)
            if to_stdout:
                if color is None:
                    color = sys.stdout.isatty()
                if color:
                    code = _highlight.highlight(code)
                click.echo(code, nl=False)
            else:
                dst = _output_path(src)
                click.echo(f"writing to {dst}", err=True)
                dst.write_text(code)
    except decode.DecodeError as e:
        raise click.ClickException(str(e)) from e


def main() -> None:  # pragma: no cover
    cli()
