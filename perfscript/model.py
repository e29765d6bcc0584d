from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True, eq=False)
class ThreadIdentity:
    id: str
    display_name: str

    def __repr__(self):
        return f'ThreadIdentity({self.display_name!r})'


@dataclass(frozen=True, eq=False)
class StackFrame:
    """One frame of a sample. `file` is empty when unknown."""

    offset: str
    name: str
    file: str

    @property
    def full_name(self) -> str:
        if not self.file:
            return self.name
        return f'{self.name} ({self.file})'

    def __repr__(self):
        return f'StackFrame({self.full_name!r})'


@dataclass
class Sample:
    """A stack being collected between its header and the blank line closing it.

    Frames are kept in file order, leaf first.
    """

    thread: ThreadIdentity
    timestamp_micros: int
    frames: List[StackFrame] = field(default_factory=list)

    def root_first(self) -> List[StackFrame]:
        return self.frames[::-1]
