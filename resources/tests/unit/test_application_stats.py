"""
Unit tests for ApplicationStats report rendering.
"""

from apphost.core.interfaces import StatsType
from apphost.core.stats import ApplicationStats


class TestApplicationStats:

    def test_empty_report_has_header(self):
        stats = ApplicationStats()

        assert stats.get_stats().startswith("======Application stats======")
        assert stats.get_benchmark() == "======Benchmark======"

    def test_inline_before_components_and_ordered_by_priority(self):
        stats = ApplicationStats()
        stats.register_stats(lambda: "component low", StatsType.COMPONENT, "Low", priority=1)
        stats.register_stats(lambda: "inline", StatsType.INLINE, "Inline")
        stats.register_stats(lambda: "component high", StatsType.COMPONENT, "High", priority=10)

        lines = [line for line in stats.get_stats().splitlines()[1:] if line]

        assert lines == ["inline", "component high", "component low"]

    def test_benchmark_only_renders_benchmark_entries(self):
        stats = ApplicationStats()
        stats.register_stats(lambda: "inline", StatsType.INLINE, "Inline")
        stats.register_stats(lambda: "12 ops/s", StatsType.BENCHMARK, "Bench")

        assert stats.get_benchmark().splitlines() == ["======Benchmark======", "12 ops/s"]

    def test_failing_render_does_not_break_report(self):
        stats = ApplicationStats()

        def broken():
            raise RuntimeError("no data")

        stats.register_stats(broken, StatsType.INLINE, "Broken")
        stats.register_stats(lambda: "still here", StatsType.INLINE, "Working")

        report = stats.get_stats()

        assert "Broken: stats unavailable (no data)" in report
        assert "still here" in report

    def test_string_stats_type_is_accepted(self):
        stats = ApplicationStats()

        stats.register_stats(lambda: "bench", "benchmark", "Bench")

        assert "bench" in stats.get_benchmark()
