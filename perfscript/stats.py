"""Summaries of a parsed dump: sampling intervals and hot frames."""

from collections import Counter
from typing import Dict, List

import numpy as np
import pandas as pd

from .calltree import CallTreeBuilder
from .model import ThreadIdentity


class SampleTimeline:
    """Timestamps of committed samples, per thread."""

    def __init__(self):
        self._threads: Dict[str, ThreadIdentity] = {}
        self._times: Dict[str, List[int]] = {}

    def record(self, thread: ThreadIdentity, timestamp_micros: int):
        times = self._times.get(thread.id)
        if times is None:
            self._threads[thread.id] = thread
            times = self._times[thread.id] = []
        times.append(timestamp_micros)

    def timestamps(self, thread: ThreadIdentity) -> List[int]:
        return self._times.get(thread.id, [])

    def threads(self) -> List[ThreadIdentity]:
        return list(self._threads.values())

    def __len__(self):
        return sum(len(times) for times in self._times.values())


def interval_stats(timeline: SampleTimeline) -> Dict[str, dict]:
    """Median/p90/p99 gap in microseconds between consecutive samples of each thread."""
    results = {}
    for thread in timeline.threads():
        times = np.sort(np.asarray(timeline.timestamps(thread), dtype=np.int64))
        gaps = np.diff(times)
        results[thread.display_name] = {
            'samples': int(times.size),
            'median_us': float(np.median(gaps)) if gaps.size else 0.0,
            'p90_us': float(np.percentile(gaps, 90)) if gaps.size else 0.0,
            'p99_us': float(np.percentile(gaps, 99)) if gaps.size else 0.0,
        }
    return results


def hot_frames(tree: CallTreeBuilder, top: int = 20) -> pd.DataFrame:
    """Frames ranked by the samples they were the leaf of.

    `total` is the number of samples with the frame anywhere on their stack.
    """
    rows = []
    on_path = Counter()
    for thread in tree.threads():
        pending = [(child, False) for child in tree.root(thread).children.values()]
        while pending:
            node, leaving = pending.pop()
            if leaving:
                on_path[node.label] -= 1
                continue
            # an ancestor with the same label already counted these samples
            total = 0 if on_path[node.label] else node.total_value
            rows.append({'frame': node.label, 'self': node.self_value, 'total': total})
            on_path[node.label] += 1
            pending.append((node, True))
            pending.extend((child, False) for child in node.children.values())

    columns = ['frame', 'self', 'total', 'self_pct']
    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows).groupby('frame', as_index=False).agg({'self': 'sum', 'total': 'sum'})
    total = tree.total_samples or 1
    df['self_pct'] = df['self'] * 100.0 / total
    df = df.sort_values(['self', 'total', 'frame'], ascending=[False, False, True]).head(top)
    return df.reset_index(drop=True)[columns]
