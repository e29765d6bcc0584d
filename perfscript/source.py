"""Line supply: text lines of a dump file, read lazily."""

import logging
import os
import sys
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Union

from .config import ParserConfig

logger = logging.getLogger(__name__)

STDIN = '-'


def strip_terminator(line: str) -> str:
    if line.endswith('\n'):
        line = line[:-1]
        if line.endswith('\r'):
            line = line[:-1]
    return line


def iter_lines(lines: Iterable[str]) -> Iterator[str]:
    """Lines of any iterable of strings, without their terminators."""
    for line in lines:
        yield strip_terminator(line)


def read_lines(path: Union[str, Path], config: ParserConfig = None,
               progress: Optional[Callable[[float], None]] = None) -> Iterator[str]:
    """
    Yield the lines of `path` (or stdin for '-') one at a time.

    `progress` gets the fraction of bytes read every `config.progress_every` lines
    and once more at the end; it is never called for stdin.
    """
    config = config or ParserConfig()
    if str(path) == STDIN:
        yield from _decode(sys.stdin.buffer, config, None, None)
        return

    with open(path, 'rb') as f:
        size = os.fstat(f.fileno()).st_size
        logger.debug('Reading %s (%d bytes)', path, size)
        yield from _decode(f, config, size, progress)


def _decode(stream, config: ParserConfig, size, progress):
    done = 0
    for lineno, raw in enumerate(stream, start=1):
        done += len(raw)
        yield strip_terminator(raw.decode(config.encoding, config.errors))
        if progress is not None and size and lineno % config.progress_every == 0:
            progress(done / size)
    if progress is not None and size:
        progress(1.0)
