"""
Stack frame lines of `perf script` output.

    f1918c0ec04 void com.intellij.util.indexing.FileBasedIndexImpl$$Lambda$4423/0x0000000801d35368.run()+0xc4 (/tmp/perf-88428.map)
"""

import re

from .config import ParserConfig
from .interner import Cache, Interner
from .model import StackFrame

# offset, symbol text and origin file
STACK_LINE = re.compile(r'^\s+(\S+)\s+(.+)\s+\(([^)]+)\)$')

# Owner.method out of a Java signature:
#   com.intellij.psi.tree.IElementType org.jetbrains.plugins.ruby.ruby.lang.parser.parsing.controlStructures.Case.parse(org.jetbrains.plugins.ruby.ruby.lang.parser.parsingUtils.RBuilder)+0x202c
JAVA_FRAME = re.compile(r'^(?:[^.]+\.)*([^.]+\.[^.]+)\(')


class FrameParser:
    def __init__(self, strings: Interner, config: ParserConfig = None):
        self._strings = strings
        self._config = config or ParserConfig()
        self._frames: Cache[str, StackFrame] = Cache()

    def __len__(self):
        return len(self._frames)

    def parse(self, line: str) -> StackFrame:
        """Frame for `line`, the same instance for every identical line."""
        return self._frames.get(line, self.compute)

    def compute(self, line: str) -> StackFrame:
        intern = self._strings.intern
        match = STACK_LINE.fullmatch(line)
        if match is None:
            return StackFrame('', intern(line.strip()), '')
        offset, symbol, file = match.groups()

        if symbol.startswith(self._config.unknown_frame_prefix):
            # interpreter frames all look alike, the address tells them apart
            name = f'{symbol} {offset}'
        else:
            java = JAVA_FRAME.match(symbol)
            name = java.group(1) if java else symbol
            if file.endswith(self._config.address_map_suffix):
                file = ''

        return StackFrame(intern(offset), intern(name), intern(file))
