#!/usr/bin/env python3
"""
Run-wide cleanup statistics

The orchestrator owns one StatsAggregator per run and feeds it every
ExecutionResult; summary() hands out an independent snapshot.
Per-target entries are keyed by target key, so targets sharing a display
name stay separate.
"""

from dataclasses import dataclass, field

from deletion_executor import ExecutionResult


@dataclass
class TargetStats:
    name: str = ""
    files_removed: int = 0
    bytes_freed: int = 0
    error_count: int = 0
    declined: bool = False


@dataclass
class CleanupStats:
    files_removed: int = 0
    bytes_freed: int = 0
    per_target: dict[str, TargetStats] = field(default_factory=dict)
    errors: list[tuple[str, str, str]] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)


class StatsAggregator:
    """Accumulates ExecutionResults into CleanupStats"""

    def __init__(self):
        self._stats = CleanupStats()

    def record(self, result: ExecutionResult):
        self._stats.files_removed += result.files_removed
        self._stats.bytes_freed += result.bytes_freed

        entry = self._stats.per_target.setdefault(result.key or result.target, TargetStats(name=result.target))
        entry.files_removed += result.files_removed
        entry.bytes_freed += result.bytes_freed
        entry.error_count += len(result.errors)
        entry.declined = entry.declined or result.declined

        for path, reason in result.errors:
            self._stats.errors.append((result.target, path, reason))

    def summary(self) -> CleanupStats:
        return CleanupStats(
            files_removed=self._stats.files_removed,
            bytes_freed=self._stats.bytes_freed,
            per_target={
                key: TargetStats(s.name, s.files_removed, s.bytes_freed, s.error_count, s.declined)
                for key, s in self._stats.per_target.items()
            },
            errors=list(self._stats.errors),
        )
