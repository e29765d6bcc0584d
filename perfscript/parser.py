"""
Parser for the output of `perf script -i perf.data`.

To produce a dump of a JVM:

    # start java with -XX:+PreserveFramePointer -XX:+UnlockDiagnosticVMOptions -XX:+DebugNonSafepoints

    # sample at 500 Hz for 60 seconds
    sudo perf record -F 500 -p $PID [-t $TID] -g -o perf.data -- sleep 60

    # write the JIT address map *before* the process exits (or run it with -XX:+DumpPerfMapAtExit)
    jcmd $PID Compiler.perfmap

    perf script -i perf.data > perf.script

Each sample is a header line, its frames leaf first, then an empty line.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from .calltree import CallTreeBuilder, CallTreeSink
from .config import ParserConfig
from .frames import FrameParser
from .headers import BadLine, ThreadHeaderParser
from .interner import Interner
from .model import Sample
from .source import iter_lines, read_lines
from .stats import SampleTimeline

logger = logging.getLogger(__name__)


@dataclass
class Success:
    tree: CallTreeSink
    bad_lines: int = 0


@dataclass
class Failure:
    message: str
    bad_lines: int = 0


ParseOutcome = Union[Success, Failure]


class PerfScriptParser:
    """
    Single-use parser: identities of frames and threads are only meaningful
    within one dump, so every parse needs a new instance.
    """

    def __init__(self, config: ParserConfig = None, tree: CallTreeSink = None,
                 timeline: SampleTimeline = None):
        self.config = config or ParserConfig()
        self.tree = tree if tree is not None else CallTreeBuilder()
        self.timeline = timeline if timeline is not None else SampleTimeline()
        self.strings = Interner()
        self.headers = ThreadHeaderParser(self.strings)
        self.frames = FrameParser(self.strings, self.config)

        self.bad_lines = 0
        self.lines = 0
        self.samples = 0
        self._current: Optional[Sample] = None
        self._used = False

    @property
    def in_sample(self) -> bool:
        return self._current is not None

    def consume_line(self, line: str):
        self.lines += 1
        if not line:
            self._commit()
            return

        if self._current is None:
            self._start_sample(line)
            return

        self._current.frames.append(self.frames.parse(line))

    def _start_sample(self, line: str):
        result = self.headers.parse(line)
        if isinstance(result, BadLine):
            self._bad_line(result)
            return
        self._current = Sample(result.thread, result.timestamp_micros)

    def _commit(self):
        sample = self._current
        if sample is None:
            return
        self.tree.add_stack(sample.thread, sample.root_first(), 1)
        self.timeline.record(sample.thread, sample.timestamp_micros)
        self.samples += 1
        self._current = None

    def _bad_line(self, bad: BadLine):
        logger.debug('Skipping line (%s): %r', bad.reason, bad.line)
        self.bad_lines += 1

    def parse_lines(self, lines: Iterable[str],
                    cancelled: Optional[Callable[[], bool]] = None) -> ParseOutcome:
        """Consume `lines` until exhausted or cancelled; failing to read or decode them is fatal."""
        if self._used:
            raise RuntimeError('PerfScriptParser instances can only parse once')
        self._used = True

        try:
            for line in lines:
                if cancelled is not None and cancelled():
                    logger.info('Parse cancelled after %d lines', self.lines)
                    break
                self.consume_line(line)
        except (OSError, UnicodeError, LookupError) as e:
            logger.error('Unable to read perf script dump: %s', e)
            return Failure(f'Unable to read perf script dump: {e}', self.bad_lines)

        if self._current is not None:
            logger.debug('Dropping unterminated sample of %s', self._current.thread.display_name)
            self._current = None

        logger.info(
            'Parsed %d lines: samples=%d threads=%d frames=%d bad_lines=%d',
            self.lines, self.samples, len(self.headers.threads), len(self.frames), self.bad_lines,
        )
        return Success(self.tree, self.bad_lines)

    def parse_file(self, path: Union[str, Path], cancelled: Optional[Callable[[], bool]] = None,
                   progress: Optional[Callable[[float], None]] = None) -> ParseOutcome:
        return self.parse_lines(read_lines(path, self.config, progress), cancelled)


def parse(source, config: ParserConfig = None, cancelled=None, progress=None) -> ParseOutcome:
    """Parse a dump file path, or an iterable of lines, with a fresh parser."""
    parser = PerfScriptParser(config)
    if isinstance(source, (str, Path)):
        return parser.parse_file(source, cancelled, progress)
    return parser.parse_lines(iter_lines(source), cancelled)
