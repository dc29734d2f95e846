"""Benchmark workloads for the instrumented avl tree.

Generates (or loads) an array of integer keys, bulk inserts it, looks up and deletes uniformly sampled keys, and
reports the mean time and number of nodes visited per operation.
"""
import argparse
import logging
import random
import re
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from instrumented_avl_tree import InstrumentedAvlTree

logger = logging.getLogger(__name__)

DEFAULT_KEY_COUNT = 10000
DEFAULT_LOW = 1
DEFAULT_HIGH = 10000
DEFAULT_SEARCH_COUNT = 100
DEFAULT_DELETE_COUNT = 1000

_KEY_LINE = re.compile(r'-?[0-9]+')


class WorkloadError(Exception):
    """A key file could not be read or written."""


def generate_keys(n: int = DEFAULT_KEY_COUNT, low: int = DEFAULT_LOW, high: int = DEFAULT_HIGH,
                  rng: Optional[random.Random] = None) -> list[int]:
    """n uniformly random integers in [low, high]. Duplicates are expected when the range is not much wider than n."""
    if n < 0:
        raise ValueError(f'key count must not be negative, got {n}')
    if low > high:
        raise ValueError(f'empty key range [{low}, {high}]')
    rng = rng or random.Random()
    return [rng.randint(low, high) for _ in range(n)]


def save_keys(path: 'str | Path', keys: Iterable[int]):
    """Write keys to a text file, one integer per line."""
    path = Path(path)
    try:
        with path.open('w', encoding='utf-8') as f:
            for key in keys:
                f.write(f'{int(key)}\n')
    except OSError as e:
        raise WorkloadError(f'could not write keys to {path}: {e}') from e
    logger.debug('Saved keys to %s', path)


def load_keys(path: 'str | Path') -> list[int]:
    """Read keys written by save_keys: one optionally negative decimal integer per line. Blank lines are ignored;
    anything else, including text that is not UTF-8, is an error.
    """
    path = Path(path)
    keys: list[int] = []
    try:
        with path.open(encoding='utf-8') as f:
            for lineno, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                if _KEY_LINE.fullmatch(line) is None:
                    raise WorkloadError(f'{path}:{lineno}: not an integer: {line!r}')
                keys.append(int(line))
    except (OSError, UnicodeDecodeError) as e:
        raise WorkloadError(f'could not read keys from {path}: {e}') from e
    logger.debug('Loaded %d keys from %s', len(keys), path)
    return keys


def sample_keys(keys: Sequence[int], count: int, rng: Optional[random.Random] = None) -> list[int]:
    """count keys picked uniformly (with replacement) from keys."""
    if count <= 0 or not keys:
        return []
    rng = rng or random.Random()
    return rng.choices(keys, k=count)


@dataclass
class BenchmarkReport:
    inserted: int
    size_after_insert: int
    size_after_delete: int
    avg_insert_time: float
    avg_insert_visits: float
    avg_find_time: float
    avg_find_visits: float
    avg_delete_time: float
    avg_delete_visits: float

    def format(self) -> str:
        return '\n'.join([
            'Inserting',
            f'Avg inserting time {self.avg_insert_time:.1f}ns',
            f'Avg inserting iteration {self.avg_insert_visits:.2f}',
            f'Tree size {self.size_after_insert} ({self.inserted} unique keys inserted)',
            '',
            'Searching',
            f'Avg searching time {self.avg_find_time:.1f}ns',
            f'Avg searching iteration {self.avg_find_visits:.2f}',
            '',
            'Deleting',
            f'Avg deleting time {self.avg_delete_time:.1f}ns',
            f'Avg deleting iteration {self.avg_delete_visits:.2f}',
            f'Tree size {self.size_after_delete}',
        ])


def run_benchmark(keys: Sequence[int], search_count: int = DEFAULT_SEARCH_COUNT,
                  delete_count: int = DEFAULT_DELETE_COUNT, rng: Optional[random.Random] = None,
                  sample_capacity: Optional[int] = None) -> BenchmarkReport:
    """Insert every key, then find search_count and delete delete_count keys sampled from keys."""
    rng = rng or random.Random()
    tree = InstrumentedAvlTree(maxlen=sample_capacity)

    logger.info('Inserting %d keys', len(keys))
    inserted = tree.extend(keys)
    size_after_insert = len(tree)

    to_find = sample_keys(keys, search_count, rng)
    logger.info('Searching %d sampled keys', len(to_find))
    for key in to_find:
        tree.find(key)

    to_delete = sample_keys(keys, delete_count, rng)
    logger.info('Deleting %d sampled keys', len(to_delete))
    for key in to_delete:
        tree.delete(key)

    return BenchmarkReport(
        inserted=inserted,
        size_after_insert=size_after_insert,
        size_after_delete=len(tree),
        avg_insert_time=tree.avg_insert_time(),
        avg_insert_visits=tree.avg_insert_visits(),
        avg_find_time=tree.avg_find_time(),
        avg_find_visits=tree.avg_find_visits(),
        avg_delete_time=tree.avg_delete_time(),
        avg_delete_visits=tree.avg_delete_visits(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Time inserts, lookups and deletes on an avl tree.')
    source = parser.add_mutually_exclusive_group()
    source.add_argument('--input', type=Path, help='read keys from this file (one integer per line)')
    source.add_argument('--generate', type=int, default=DEFAULT_KEY_COUNT, metavar='N',
                        help=f'generate N random keys in [{DEFAULT_LOW}, {DEFAULT_HIGH}] (default %(default)s)')
    parser.add_argument('--save', type=Path, help='also write the keys used to this file')
    parser.add_argument('--search-count', type=int, default=DEFAULT_SEARCH_COUNT)
    parser.add_argument('--delete-count', type=int, default=DEFAULT_DELETE_COUNT)
    parser.add_argument('--seed', type=int, help='seed for key generation and sampling')
    parser.add_argument('-v', '--verbose', action='store_true', help='log progress and file access')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    rng = random.Random(args.seed)
    try:
        if args.input is not None:
            keys = load_keys(args.input)
        else:
            keys = generate_keys(args.generate, rng=rng)
        if args.save is not None:
            save_keys(args.save, keys)
    except (WorkloadError, ValueError) as e:
        logger.error('%s', e)
        return 1
    report = run_benchmark(keys, args.search_count, args.delete_count, rng)
    print(report.format())
    return 0


if __name__ == '__main__':
    sys.exit(main())
