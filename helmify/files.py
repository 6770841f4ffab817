"""Reading manifest files from files and directories."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from typing import TextIO

logger = logging.getLogger(__name__)


def _sorted_entries(directory: str) -> list[os.DirEntry]:
    with os.scandir(directory) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def _walk_tree(root: str) -> Iterator[tuple[str, TextIO]]:
    for entry in _sorted_entries(root):
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_tree(entry.path)
        else:
            with open(entry.path, encoding="utf-8") as stream:
                yield entry.name, stream


def _walk_flat(directory: str) -> Iterator[tuple[str, TextIO]]:
    try:
        entries = _sorted_entries(directory)
    except OSError as exc:
        logger.warning("unable to read directory %r: %s", directory, exc)
        return
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            continue
        try:
            stream = open(entry.path, encoding="utf-8")
        except OSError as exc:
            logger.warning("unable to open file %r: %s", entry.path, exc)
            continue
        with stream:
            yield entry.name, stream


def walk(paths: Iterable[str], recursively: bool = False) -> Iterator[tuple[str, TextIO]]:
    """Yield (file name, open stream) for every file in the given files and directories.

    Each stream is closed once the caller moves on to the next item.
    """
    for path in paths:
        try:
            is_dir = os.path.isdir(path) if os.path.exists(path) else None
            if is_dir is None:
                os.stat(path)
        except OSError as exc:
            logger.warning("no such file or directory %r: %s", path, exc)
            continue
        if not is_dir:
            try:
                stream = open(path, encoding="utf-8")
            except OSError as exc:
                logger.warning("unable to open file %r: %s", path, exc)
                continue
            with stream:
                yield os.path.basename(path), stream
            continue
        if not recursively:
            yield from _walk_flat(path)
            continue
        try:
            yield from _walk_tree(path)
        except OSError as exc:
            logger.warning("unable to open %r: %s", os.path.basename(path), exc)