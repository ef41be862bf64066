from __future__ import annotations

from cleanup_stats import StatsAggregator
from deletion_executor import ExecutionResult


def test_record_accumulates_totals_and_breakdown() -> None:
    aggregator = StatsAggregator()
    aggregator.record(ExecutionResult(target="Caches", files_removed=3, bytes_freed=300, attempted=3))
    aggregator.record(
        ExecutionResult(
            target="Logs", files_removed=1, bytes_freed=50, attempted=2, errors=[("/var/log/x", "Permission denied")]
        )
    )
    aggregator.record(ExecutionResult(target="Trash", declined=True))

    stats = aggregator.summary()

    assert stats.files_removed == 4
    assert stats.bytes_freed == 350
    assert stats.per_target["Caches"].files_removed == 3
    assert stats.per_target["Logs"].error_count == 1
    assert stats.per_target["Trash"].declined is True
    assert stats.errors == [("Logs", "/var/log/x", "Permission denied")]
    assert stats.error_count == 1


def test_summary_is_an_independent_snapshot() -> None:
    aggregator = StatsAggregator()
    aggregator.record(ExecutionResult(target="Caches", files_removed=1, bytes_freed=10))

    snapshot = aggregator.summary()
    snapshot.per_target["Caches"].files_removed = 99
    snapshot.errors.append(("x", "y", "z"))
    aggregator.record(ExecutionResult(target="Caches", files_removed=1, bytes_freed=10))

    later = aggregator.summary()
    assert snapshot.files_removed == 1
    assert later.files_removed == 2
    assert later.per_target["Caches"].files_removed == 2
    assert later.errors == []


def test_empty_summary() -> None:
    stats = StatsAggregator().summary()

    assert stats.files_removed == 0
    assert stats.bytes_freed == 0
    assert stats.per_target == {}


def test_targets_sharing_a_name_are_kept_apart() -> None:
    aggregator = StatsAggregator()
    aggregator.record(ExecutionResult(target="Caches", key="user_caches", files_removed=2, bytes_freed=20))
    aggregator.record(ExecutionResult(target="Caches", key="system_caches", files_removed=5, bytes_freed=50))

    stats = aggregator.summary()

    assert set(stats.per_target) == {"user_caches", "system_caches"}
    assert stats.per_target["user_caches"].files_removed == 2
    assert stats.per_target["system_caches"].files_removed == 5
    assert stats.per_target["system_caches"].name == "Caches"
    assert stats.files_removed == 7
