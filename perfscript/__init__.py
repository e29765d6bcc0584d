"""Aggregate `perf script` dumps of JVM processes into call trees."""

from .calltree import CallTreeBuilder, CallTreeNode, CallTreeSink
from .config import ParserConfig
from .errors import PerfScriptError
from .frames import FrameParser
from .headers import BadLine, ThreadHeader, ThreadHeaderParser
from .interner import Interner
from .model import Sample, StackFrame, ThreadIdentity
from .parser import Failure, ParseOutcome, PerfScriptParser, Success, parse
from .stats import SampleTimeline, hot_frames, interval_stats

__all__ = [
    'BadLine',
    'CallTreeBuilder',
    'CallTreeNode',
    'CallTreeSink',
    'Failure',
    'FrameParser',
    'Interner',
    'ParseOutcome',
    'ParserConfig',
    'PerfScriptError',
    'PerfScriptParser',
    'Sample',
    'SampleTimeline',
    'StackFrame',
    'Success',
    'ThreadHeader',
    'ThreadHeaderParser',
    'ThreadIdentity',
    'hot_frames',
    'interval_stats',
    'parse',
]
