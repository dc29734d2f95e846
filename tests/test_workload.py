import io
import random
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from workload import (BenchmarkReport, WorkloadError, generate_keys, load_keys, main, run_benchmark, sample_keys,
                      save_keys)


class TestKeys(unittest.TestCase):
    def setUp(self):
        self._dir = tempfile.TemporaryDirectory()
        self.dir = Path(self._dir.name)

    def tearDown(self):
        self._dir.cleanup()

    def test_generate_keys_in_range(self):
        keys = generate_keys(500, low=1, high=50, rng=random.Random(1))
        self.assertEqual(len(keys), 500)
        self.assertTrue(all(1 <= k <= 50 for k in keys))
        # a narrow range forces duplicates
        self.assertLess(len(set(keys)), 500)

    def test_generate_keys_rejects_bad_arguments(self):
        with self.assertRaises(ValueError):
            generate_keys(-1)
        with self.assertRaises(ValueError):
            generate_keys(10, low=5, high=4)

    def test_save_then_load(self):
        path = self.dir / 'array.txt'
        keys = [5, -3, 5, 10000]
        save_keys(path, keys)
        self.assertEqual(load_keys(path), keys)

    def test_load_skips_blank_lines(self):
        path = self.dir / 'array.txt'
        path.write_text('1\n\n 2 \n3\n', encoding='utf-8')
        self.assertEqual(load_keys(path), [1, 2, 3])

    def test_load_malformed_file(self):
        path = self.dir / 'array.txt'
        path.write_text('1\ntwo\n3\n', encoding='utf-8')
        with self.assertRaisesRegex(WorkloadError, ':2: not an integer'):
            load_keys(path)

    def test_load_rejects_non_decimal_forms(self):
        for text in ('1_000\n', '+5\n', '0x10\n', '1.0\n'):
            path = self.dir / 'array.txt'
            path.write_text(text, encoding='utf-8')
            with self.assertRaisesRegex(WorkloadError, ':1: not an integer'):
                load_keys(path)

    def test_load_binary_file(self):
        # a java serialized int[] rather than a text key file
        path = self.dir / 'array.txt'
        path.write_bytes(b'\xac\xed\x00\x05ur\x00\x02[IM\xba`&v\xea\xb2\xa5\x02\x00\x00xp\x00\x00\x00\x02')
        with self.assertRaises(WorkloadError) as cm:
            load_keys(path)
        self.assertIsInstance(cm.exception.__cause__, UnicodeDecodeError)

    def test_load_missing_file(self):
        with self.assertRaises(WorkloadError) as cm:
            load_keys(self.dir / 'missing.txt')
        self.assertIsInstance(cm.exception.__cause__, OSError)

    def test_save_to_missing_directory(self):
        with self.assertRaises(WorkloadError):
            save_keys(self.dir / 'no' / 'such' / 'array.txt', [1])

    def test_sample_keys(self):
        keys = [1, 2, 3]
        sample = sample_keys(keys, 50, random.Random(3))
        self.assertEqual(len(sample), 50)
        self.assertTrue(set(sample) <= set(keys))
        self.assertEqual(sample_keys(keys, 0), [])
        self.assertEqual(sample_keys([], 10), [])


class TestBenchmark(unittest.TestCase):
    def test_run_benchmark(self):
        rng = random.Random(42)
        keys = generate_keys(2000, rng=rng)
        report = run_benchmark(keys, search_count=100, delete_count=300, rng=rng)
        self.assertIsInstance(report, BenchmarkReport)
        self.assertEqual(report.inserted, len(set(keys)))
        self.assertEqual(report.size_after_insert, len(set(keys)))
        self.assertLessEqual(report.size_after_delete, report.size_after_insert)
        self.assertGreaterEqual(report.size_after_delete, report.size_after_insert - 300)
        # every sampled key is present, so a lookup visits at least the root
        self.assertGreaterEqual(report.avg_find_visits, 1.0)
        self.assertGreater(report.avg_insert_visits, 0.0)
        self.assertGreater(report.avg_delete_visits, 0.0)
        self.assertGreaterEqual(report.avg_find_time, 0.0)

    def test_run_benchmark_on_no_keys(self):
        report = run_benchmark([])
        self.assertEqual(report.size_after_insert, 0)
        self.assertEqual(report.avg_find_visits, 0.0)
        self.assertEqual(report.avg_delete_visits, 0.0)

    def test_format(self):
        report = BenchmarkReport(3, 3, 2, 10.0, 1.0, 20.0, 2.0, 30.0, 1.5)
        text = report.format()
        self.assertIn('Avg inserting time 10.0ns', text)
        self.assertIn('Avg searching iteration 2.00', text)
        self.assertIn('Avg deleting iteration 1.50', text)
        self.assertTrue(text.startswith('Inserting'))


class TestMain(unittest.TestCase):
    def test_main_generates_and_saves(self):
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / 'array.txt'
            out = io.StringIO()
            with redirect_stdout(out):
                code = main(['--generate', '500', '--save', str(path), '--seed', '1',
                             '--search-count', '10', '--delete-count', '20'])
            self.assertEqual(code, 0)
            self.assertEqual(len(load_keys(path)), 500)
            self.assertIn('Avg searching time', out.getvalue())

            out = io.StringIO()
            with redirect_stdout(out):
                self.assertEqual(main(['--input', str(path)]), 0)
            self.assertIn('Deleting', out.getvalue())

    def test_main_bad_input(self):
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / 'array.txt'
            path.write_text('not a number\n', encoding='utf-8')
            with self.assertLogs('workload', level='ERROR'):
                self.assertEqual(main(['--input', str(path)]), 1)

    def test_main_binary_input(self):
        with tempfile.TemporaryDirectory() as d:
            path = Path(d) / 'array.txt'
            path.write_bytes(b'\xac\xed\x00\x05')
            with self.assertLogs('workload', level='ERROR') as logs:
                self.assertEqual(main(['--input', str(path)]), 1)
            self.assertIn('could not read keys', logs.output[0])


if __name__ == '__main__':
    unittest.main()
