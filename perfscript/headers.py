"""
Sample header lines of `perf script` output.

Accepted shapes:

    Indexing   88428/88707   14182.263881:         16 cycles:P:
    Indexing   88707   14182.263881:         16 cycles:P:
"""

import math
import re
from dataclasses import dataclass
from typing import Union

from .interner import Cache, Interner
from .model import ThreadIdentity

_INTEGER = re.compile(r'[+-]?\d+')
_DECIMAL = re.compile(r'[+-]?(?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?')

# timestamps are signed 64-bit microseconds
INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class ThreadHeader:
    thread: ThreadIdentity
    timestamp_micros: int


@dataclass(frozen=True)
class BadLine:
    reason: str
    line: str


def parse_timestamp(token: str):
    """Header time token to microseconds, or None when it is not a number.

    Tokens with a dot are seconds, anything else is taken as microseconds already.
    """
    token = token.rstrip(':')
    if '.' in token:
        if not _DECIMAL.fullmatch(token):
            return None
        seconds = float(token)
        if not math.isfinite(seconds):
            return None
        micros = round(seconds * 1_000_000)
    elif _INTEGER.fullmatch(token):
        micros = int(token)
    else:
        return None
    if not INT64_MIN <= micros <= INT64_MAX:
        return None
    return micros


class ThreadHeaderParser:
    def __init__(self, strings: Interner):
        self._strings = strings
        self._threads: Cache[str, ThreadIdentity] = Cache()

    @property
    def threads(self):
        return list(self._threads.values())

    def parse(self, line: str) -> Union[ThreadHeader, BadLine]:
        if line.startswith('\t'):
            # frame line of a stack whose header was rejected
            return BadLine('starts with tab', line)
        chunks = line.split()
        if len(chunks) < 3:
            return BadLine('fewer than 3 fields', line)

        thread_name, pid_tid, time_token = chunks[:3]
        tid = pid_tid.split('/')[1] if '/' in pid_tid else pid_tid

        timestamp = parse_timestamp(time_token)
        if timestamp is None:
            return BadLine('unparseable timestamp', line)

        thread = self._threads.get(tid, lambda key: ThreadIdentity(
            self._strings.intern(key), self._strings.intern(f'{thread_name}-{key}')))
        return ThreadHeader(thread, timestamp)
