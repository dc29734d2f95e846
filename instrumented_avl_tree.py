import time
from collections import deque
from collections.abc import Iterable
from typing import Optional

from avl_tree import AvlTree, AvlTreeNode

INSERT = 'insert'
DELETE = 'delete'
FIND = 'find'


class OperationStats:
    """Samples of (duration in nanoseconds, nodes visited) for one kind of operation. With a maxlen only the most
    recent samples are kept, otherwise every call is kept.
    """
    __slots__ = ('samples',)

    def __init__(self, maxlen: Optional[int] = None):
        self.samples: deque[tuple[int, int]] = deque(maxlen=maxlen)

    def __str__(self):
        return f'{self.__class__.__name__}(count={self.count}, avg_time={self.avg_time():.1f}ns, ' \
            f'avg_visits={self.avg_visits():.2f})'

    def __repr__(self):
        return str(self)

    @property
    def count(self) -> int:
        return len(self.samples)

    def record(self, duration_ns: int, visits: int):
        self.samples.append((duration_ns, visits))

    def avg_time(self) -> float:
        """Mean duration in nanoseconds; 0.0 when nothing has been recorded."""
        if not self.samples:
            return 0.0
        return sum(s[0] for s in self.samples) / len(self.samples)

    def avg_visits(self) -> float:
        """Mean number of nodes visited; 0.0 when nothing has been recorded."""
        if not self.samples:
            return 0.0
        return sum(s[1] for s in self.samples) / len(self.samples)

    def reset(self):
        self.samples.clear()


class InstrumentedAvlTree(AvlTree):
    """Avl tree that records how long every insert, delete and find takes and how many nodes each one stepped through.

    The balancing code is untouched: timing wraps the public calls and visits are counted through the _visit hook.
    """
    __slots__ = ('stats', '_visits')

    def __init__(self, init: Optional[Iterable[int]] = None, maxlen: Optional[int] = None):
        """maxlen bounds the number of samples kept per operation kind (None keeps them all)."""
        self.stats: dict[str, OperationStats] = {kind: OperationStats(maxlen) for kind in (INSERT, DELETE, FIND)}
        self._visits = 0
        super().__init__(init)

    def _visit(self, node: AvlTreeNode):
        self._visits += 1

    def _measure(self, kind: str, op, *args, **kwargs):
        self._visits = 0
        start = time.perf_counter_ns()
        result = op(*args, **kwargs)
        elapsed = time.perf_counter_ns() - start
        self.stats[kind].record(elapsed, self._visits)
        return result

    def insert(self, key: int, strict: bool = False) -> bool:
        return self._measure(INSERT, super().insert, key, strict)

    def delete(self, key: int) -> bool:
        return self._measure(DELETE, super().delete, key)

    def find(self, key: int) -> 'None | AvlTreeNode':
        return self._measure(FIND, super().find, key)

    def reset_stats(self):
        for stats in self.stats.values():
            stats.reset()

    def avg_insert_time(self) -> float:
        return self.stats[INSERT].avg_time()

    def avg_insert_visits(self) -> float:
        return self.stats[INSERT].avg_visits()

    def avg_delete_time(self) -> float:
        return self.stats[DELETE].avg_time()

    def avg_delete_visits(self) -> float:
        return self.stats[DELETE].avg_visits()

    def avg_find_time(self) -> float:
        return self.stats[FIND].avg_time()

    def avg_find_visits(self) -> float:
        return self.stats[FIND].avg_visits()
