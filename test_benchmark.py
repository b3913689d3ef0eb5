"""
Tests for the benchmark harness statistics.
"""

import pytest

from benchmark import BenchmarkResult, benchmark


class TestBenchmarkResult:
    """Test timing statistics and formatting."""

    def test_statistics(self):
        result = BenchmarkResult("sample", [0.003, 0.001, 0.002])
        assert result.median == pytest.approx(0.002)
        assert result.mean == pytest.approx(0.002)
        assert result.min == pytest.approx(0.001)
        assert result.max == pytest.approx(0.003)

    def test_single_run_has_zero_stdev(self):
        assert BenchmarkResult("once", [0.5]).stdev == 0

    def test_per_item_only_for_batches(self):
        single = str(BenchmarkResult("single", [0.002]))
        batch = str(BenchmarkResult("batch", [0.002], items=1000))
        assert "Per item" not in single
        assert "Per item:     2.00us" in batch

    def test_benchmark_passes_items_through(self):
        calls = []
        result = benchmark(calls.append, 1, iterations=3, items=10)
        # one warm-up call plus three timed calls
        assert len(calls) == 4
        assert result.items == 10
        assert result.name == "append"
