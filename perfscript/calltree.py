"""Aggregated call tree built from committed samples."""

from typing import Dict, Iterator, List, Optional, Protocol, Sequence, Tuple

import pandas as pd

from .model import StackFrame, ThreadIdentity

EMPTY_STACK = '[empty]'


class CallTreeSink(Protocol):
    def add_stack(self, thread: ThreadIdentity, frames: Sequence[StackFrame], weight: int) -> None:
        ...


class CallTreeNode:
    def __init__(self, label: str, frame: Optional[StackFrame] = None):
        self.label = label
        self.frame = frame
        self.children: Dict[Tuple[str, str], 'CallTreeNode'] = {}
        self.self_value = 0
        self.total_value = 0

    def child(self, frame: StackFrame) -> 'CallTreeNode':
        # offsets differ per call site, the same method must still merge
        key = (frame.name, frame.file)
        node = self.children.get(key)
        if node is None:
            node = self.children[key] = CallTreeNode(frame.full_name, frame)
        return node

    def sorted_children(self) -> List['CallTreeNode']:
        return sorted(self.children.values(), key=lambda n: n.total_value, reverse=True)

    def __repr__(self):
        return f'CallTreeNode({self.label!r}, total={self.total_value}, self={self.self_value})'


class CallTreeBuilder:
    """Per-thread tries of root-first stacks, counting samples on every node."""

    def __init__(self):
        self._threads: Dict[str, ThreadIdentity] = {}
        self._roots: Dict[str, CallTreeNode] = {}

    def add_stack(self, thread: ThreadIdentity, frames: Sequence[StackFrame], weight: int = 1) -> None:
        node = self._roots.get(thread.id)
        if node is None:
            self._threads[thread.id] = thread
            node = self._roots[thread.id] = CallTreeNode(thread.display_name)
        node.total_value += weight
        for frame in frames:
            node = node.child(frame)
            node.total_value += weight
        node.self_value += weight

    def threads(self) -> List[ThreadIdentity]:
        return list(self._threads.values())

    def root(self, thread: ThreadIdentity) -> CallTreeNode:
        return self._roots[thread.id]

    @property
    def total_samples(self) -> int:
        return sum(root.total_value for root in self._roots.values())

    def __len__(self):
        return len(self._roots)

    def merge(self, other: 'CallTreeBuilder') -> 'CallTreeBuilder':
        """Add every count of `other` into this tree."""
        for thread_id, other_root in other._roots.items():
            if thread_id not in self._roots:
                self._threads[thread_id] = other._threads[thread_id]
                self._roots[thread_id] = CallTreeNode(other_root.label)
            _merge_node(self._roots[thread_id], other_root)
        return self

    def folded(self, include_thread: bool = True) -> Iterator[Tuple[str, int]]:
        """Stacks in folded format, `thread;root;...;leaf` with their self count.

        Without the thread prefix, samples that had no frames are reported as `[empty]`.
        """
        for root in self._roots.values():
            prefix = [_escape(root.label)] if include_thread else []
            yield from _fold(root, prefix)

    def nested_set(self) -> List[dict]:
        """Depth-first rows of level/label/value/self under a synthetic `total` node."""
        rows = [{'level': 0, 'label': 'total', 'value': self.total_samples, 'self': 0}]
        roots = sorted(self._roots.values(), key=lambda n: n.total_value, reverse=True)
        for root in roots:
            _nested_set(root, 1, rows)
        return rows

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(self.nested_set(), columns=['level', 'label', 'value', 'self'])


def _escape(label: str) -> str:
    return label.replace(';', ':').replace('\n', '_')


# Stacks can be deeper than the recursion limit, so walks use an explicit stack.

def _fold(root: CallTreeNode, prefix: List[str]) -> Iterator[Tuple[str, int]]:
    pending = [(child, prefix + [_escape(child.label)]) for child in reversed(list(root.children.values()))]
    if root.self_value:
        yield ';'.join(prefix or [EMPTY_STACK]), root.self_value
    while pending:
        node, path = pending.pop()
        if node.self_value:
            yield ';'.join(path), node.self_value
        for child in reversed(list(node.children.values())):
            pending.append((child, path + [_escape(child.label)]))


def _nested_set(root: CallTreeNode, level: int, rows: List[dict]):
    pending = [(root, level)]
    while pending:
        node, depth = pending.pop()
        rows.append({'level': depth, 'label': node.label, 'value': node.total_value, 'self': node.self_value})
        for child in reversed(node.sorted_children()):
            pending.append((child, depth + 1))


def _merge_node(target: CallTreeNode, source: CallTreeNode):
    pending = [(target, source)]
    while pending:
        into, node = pending.pop()
        into.total_value += node.total_value
        into.self_value += node.self_value
        for key, child in node.children.items():
            if key not in into.children:
                into.children[key] = CallTreeNode(child.label, child.frame)
            pending.append((into.children[key], child))
