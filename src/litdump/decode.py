"""
``litdump.decode``: Read the documents to dump
==============================================

Supported formats, picked by file extension:

+ ``.json``: a single document
+ ``.jsonl``: one document per line
+ ``.msgpack``, ``.mpk``: a stream of msgpack objects

A *decoder* (any callable taking a raw document) can turn the plain values
into richer objects before they get dumped.

"""
from __future__ import annotations

import json
import pathlib
from typing import Any, Callable, Iterator

import msgpack

from . import utils

__all__ = ("DecodeError", "load_documents", "resolve_decoder")

Decoder = Callable[[Any], Any]

MSGPACK_SUFFIXES = frozenset((".msgpack", ".mpk"))


class DecodeError(ValueError):
    """An input document could not be read."""


def _read_json(path: pathlib.Path) -> Iterator[Any]:
    try:
        yield json.loads(path.read_text())
    except json.JSONDecodeError as e:
        raise DecodeError(f"{path}: {e}") from e


def _read_json_lines(path: pathlib.Path) -> Iterator[Any]:
    with path.open() as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                raise DecodeError(f"{path}:{lineno}: {e}") from e


def _read_msgpack(path: pathlib.Path) -> Iterator[Any]:
    with path.open("rb") as f:
        unpacker = msgpack.Unpacker(f, raw=False, strict_map_key=False)
        try:
            yield from unpacker
        except (msgpack.UnpackException, ValueError) as e:
            raise DecodeError(f"{path}: {e}") from e


def resolve_decoder(name: str) -> Decoder:
    """Find the decoder called *name* (e.g.: ``mypkg.models.from_dict``)."""
    decoder = utils.locate(name)
    if decoder is None:
        raise DecodeError(f"Decoder not found: {name!r}")
    if not callable(decoder):
        raise DecodeError(f"Decoder {name!r} is not callable")
    return decoder  # type: ignore[no-any-return]


def load_documents(
    path: str | pathlib.Path, decoder: Decoder | None = None
) -> Iterator[Any]:
    """Iterate over the documents stored in *path*.

    Raises:
      DecodeError: if the file is malformed or the *decoder* rejects a
        document.
    """
    path = pathlib.Path(path)
    suffix = path.suffix.lower()
    if suffix in MSGPACK_SUFFIXES:
        docs = _read_msgpack(path)
    elif suffix == ".jsonl":
        docs = _read_json_lines(path)
    else:
        docs = _read_json(path)
    for doc in docs:
        if decoder is None:
            yield doc
            continue
        try:
            yield decoder(doc)
        except (TypeError, ValueError, KeyError) as e:
            raise DecodeError(f"{path}: {type(e).__name__} {e}") from e
