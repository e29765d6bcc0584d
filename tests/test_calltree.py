import pytest
from inline_snapshot import snapshot

from perfscript.calltree import CallTreeBuilder
from perfscript.model import StackFrame, ThreadIdentity

T1 = ThreadIdentity('1', 'main-1')
T2 = ThreadIdentity('2', 'worker-2')


def frame(name, file='', offset='0'):
    return StackFrame(offset, name, file)


A, B, C, D = frame('a'), frame('b'), frame('c', 'libc.so'), frame('d')


@pytest.fixture
def tree():
    tree = CallTreeBuilder()
    tree.add_stack(T1, [A, B], 1)
    tree.add_stack(T1, [A, B], 1)
    tree.add_stack(T1, [A, C], 1)
    tree.add_stack(T2, [D], 1)
    return tree


def test_counts_along_path(tree):
    root = tree.root(T1)
    assert root.total_value == 3
    a = root.children[('a', '')]
    assert (a.total_value, a.self_value) == (3, 0)
    b = a.children[('b', '')]
    assert (b.total_value, b.self_value) == (2, 2)
    assert tree.total_samples == 4
    assert tree.threads() == [T1, T2]


def test_weight(tree):
    tree.add_stack(T2, [D], 5)
    assert tree.root(T2).children[('d', '')].self_value == 6


def test_frames_differing_only_by_offset_merge():
    tree = CallTreeBuilder()
    tree.add_stack(T1, [frame('a', offset='1')], 1)
    tree.add_stack(T1, [frame('a', offset='2')], 1)
    assert len(tree.root(T1).children) == 1


def test_folded(tree):
    assert dict(tree.folded()) == snapshot({
        'main-1;a;b': 2,
        'main-1;a;c (libc.so)': 1,
        'worker-2;d': 1,
    })
    assert dict(tree.folded(include_thread=False)) == snapshot({'a;b': 2, 'a;c (libc.so)': 1, 'd': 1})


def test_folded_escapes_separator():
    tree = CallTreeBuilder()
    tree.add_stack(T1, [frame('x;y')], 1)
    assert list(tree.folded()) == [('main-1;x:y', 1)]


def test_empty_stack_counts_on_thread():
    tree = CallTreeBuilder()
    tree.add_stack(T1, [], 1)
    assert list(tree.folded()) == [('main-1', 1)]
    assert list(tree.folded(include_thread=False)) == [('[empty]', 1)]


def test_folded_counts_add_up_without_thread(tree):
    tree.add_stack(T2, [], 2)
    assert sum(count for _, count in tree.folded(include_thread=False)) == tree.total_samples


def test_nested_set(tree):
    assert tree.nested_set() == snapshot([
        {'level': 0, 'label': 'total', 'value': 4, 'self': 0},
        {'level': 1, 'label': 'main-1', 'value': 3, 'self': 0},
        {'level': 2, 'label': 'a', 'value': 3, 'self': 0},
        {'level': 3, 'label': 'b', 'value': 2, 'self': 2},
        {'level': 3, 'label': 'c (libc.so)', 'value': 1, 'self': 1},
        {'level': 1, 'label': 'worker-2', 'value': 1, 'self': 0},
        {'level': 2, 'label': 'd', 'value': 1, 'self': 1},
    ])


def test_to_dataframe(tree):
    df = tree.to_dataframe()
    assert list(df.columns) == ['level', 'label', 'value', 'self']
    assert len(df) == 7
    assert df['self'].sum() == 4


def test_merge(tree):
    other = CallTreeBuilder()
    other.add_stack(ThreadIdentity('1', 'main-1'), [frame('a', offset='9'), frame('b')], 1)
    other.add_stack(ThreadIdentity('3', 'gc-3'), [frame('e')], 2)
    tree.merge(other)
    assert dict(tree.folded()) == snapshot({
        'main-1;a;b': 3,
        'main-1;a;c (libc.so)': 1,
        'worker-2;d': 1,
        'gc-3;e': 2,
    })
    assert tree.total_samples == 7


def test_deep_stack():
    frames = [frame(f'f{i}') for i in range(5000)]
    tree = CallTreeBuilder()
    tree.add_stack(T1, frames, 1)
    [(stack, count)] = list(tree.folded())
    assert stack.count(';') == 5000
    assert len(tree.nested_set()) == 5002
