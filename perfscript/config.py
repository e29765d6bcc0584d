import os
from dataclasses import dataclass

# Frames the JVM has no perf-map entry for (interpreted code).
UNKNOWN_FRAME_PREFIX = 'Interpreter+0x'
# Suffix of the perf-<pid>.map files written by the JVM for JIT code.
ADDRESS_MAP_SUFFIX = '.map'


@dataclass
class ParserConfig:
    unknown_frame_prefix: str = UNKNOWN_FRAME_PREFIX
    address_map_suffix: str = ADDRESS_MAP_SUFFIX
    encoding: str = 'utf-8'
    errors: str = 'replace'
    progress_every: int = 10000

    @classmethod
    def from_env(cls) -> 'ParserConfig':
        """Defaults overridable through PERFSCRIPT_* environment variables."""
        return cls(
            unknown_frame_prefix=os.getenv('PERFSCRIPT_UNKNOWN_FRAME_PREFIX', UNKNOWN_FRAME_PREFIX),
            address_map_suffix=os.getenv('PERFSCRIPT_MAP_SUFFIX', ADDRESS_MAP_SUFFIX),
            encoding=os.getenv('PERFSCRIPT_ENCODING', 'utf-8'),
        )
