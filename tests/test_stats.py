import pytest
from inline_snapshot import snapshot

from perfscript.calltree import CallTreeBuilder
from perfscript.model import StackFrame, ThreadIdentity
from perfscript.stats import SampleTimeline, hot_frames, interval_stats

T1 = ThreadIdentity('1', 'main-1')
T2 = ThreadIdentity('2', 'worker-2')


def test_interval_stats():
    timeline = SampleTimeline()
    for t in [3000, 0, 1000]:
        timeline.record(T1, t)
    timeline.record(T2, 50)
    stats = interval_stats(timeline)
    assert stats['main-1'] == pytest.approx({'samples': 3, 'median_us': 1500.0, 'p90_us': 1900.0, 'p99_us': 1990.0})
    assert stats['worker-2'] == snapshot({'samples': 1, 'median_us': 0.0, 'p90_us': 0.0, 'p99_us': 0.0})
    assert len(timeline) == 4


def test_hot_frames():
    a, b, c, d = (StackFrame('0', name, '') for name in 'abcd')
    tree = CallTreeBuilder()
    tree.add_stack(T1, [a, b], 1)
    tree.add_stack(T1, [a, b], 1)
    tree.add_stack(T1, [a, c], 1)
    tree.add_stack(T2, [d], 1)

    df = hot_frames(tree)
    assert df['frame'].tolist() == ['b', 'c', 'd', 'a']
    assert df['self'].tolist() == [2, 1, 1, 0]
    assert df['total'].tolist() == [2, 1, 1, 3]
    assert df['self_pct'].tolist() == [50.0, 25.0, 25.0, 0.0]
    assert hot_frames(tree, top=2)['frame'].tolist() == ['b', 'c']


def test_hot_frames_empty_tree():
    df = hot_frames(CallTreeBuilder())
    assert df.empty
    assert list(df.columns) == ['frame', 'self', 'total', 'self_pct']


def test_hot_frames_recursive_frame_counts_each_sample_once():
    a, b = StackFrame('0', 'a', ''), StackFrame('0', 'b', '')
    tree = CallTreeBuilder()
    tree.add_stack(T1, [a, b, a], 1)
    tree.add_stack(T1, [a, b, a], 1)
    tree.add_stack(T1, [b], 1)

    df = hot_frames(tree).set_index('frame')
    assert df.loc['a', 'total'] == 2
    assert df.loc['b', 'total'] == 3
    assert (df['total'] <= tree.total_samples).all()
