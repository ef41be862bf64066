from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

import pytest

from cleanup_errors import DeletionError, ScanError
from cleanup_targets import CleanupTarget, TargetAction
from command_runner import CommandOutcome
from deletion_executor import ExecutionMode, Executor, remove_candidate
from deletion_planner import Candidate, DeletionPlan, Planner
from system_status import MemoryStatus


def _write_file(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


def _plan_for(tmp_path: Path, sizes: dict[str, int]) -> DeletionPlan:
    for name, size in sizes.items():
        _write_file(tmp_path / name, size)
    target = CleanupTarget(key="t", name="Temp", roots=(tmp_path,))
    return Planner().plan(target)


class FakeRunner:
    def __init__(self, returncode: int = 0, output: str = ""):
        self.returncode = returncode
        self.output = output
        self.calls: list[tuple[tuple[str, ...], bool]] = []

    def __call__(self, argv: Sequence[str], privileged: bool = False) -> CommandOutcome:
        self.calls.append((tuple(argv), privileged))
        return CommandOutcome(argv=tuple(argv), returncode=self.returncode, output=self.output)


def test_force_removes_every_candidate(tmp_path: Path) -> None:
    plan = _plan_for(tmp_path, {"a.log": 10, "b.log": 20, "dir/c.log": 5})

    result = Executor().execute(plan, ExecutionMode.FORCE)

    assert result.files_removed == 3
    assert result.bytes_freed == 35
    assert result.attempted == 3
    assert result.errors == []
    assert list(tmp_path.iterdir()) == []


def test_dry_run_never_deletes(tmp_path: Path) -> None:
    plan = _plan_for(tmp_path, {"a.log": 10, "b.log": 20})
    removed: list[Candidate] = []

    result = Executor(remove=removed.append).execute(plan, ExecutionMode.DRY_RUN)

    assert result.files_removed == 0
    assert result.bytes_freed == 0
    assert removed == []
    assert (tmp_path / "a.log").exists()
    assert plan.estimated_bytes == 30


def test_dry_run_never_runs_commands() -> None:
    runner = FakeRunner()
    target = CleanupTarget(key="docker", name="Docker", action=TargetAction.COMMAND, command=("docker", "system", "prune"))

    result = Executor(run_command=runner).execute(DeletionPlan(target=target), ExecutionMode.DRY_RUN)

    assert runner.calls == []
    assert result.errors == []


def test_partial_failure_does_not_stop_remaining_deletions(tmp_path: Path) -> None:
    plan = _plan_for(tmp_path, {"a": 1, "b": 2, "c": 3, "d": 4})
    attempted: list[str] = []

    def flaky_remove(candidate: Candidate) -> None:
        attempted.append(candidate.path.name)
        if candidate.path.name == "b":
            raise PermissionError(13, "Permission denied", str(candidate.path))
        remove_candidate(candidate)

    result = Executor(remove=flaky_remove).execute(plan, ExecutionMode.FORCE)

    assert attempted == ["a", "b", "c", "d"]
    assert result.attempted == len(plan.candidates)
    assert result.files_removed == 3
    assert result.bytes_freed == 1 + 3 + 4
    assert result.errors == [(str(tmp_path / "b"), "Permission denied")]
    assert (tmp_path / "b").exists()


def test_already_removed_candidate_is_recorded(tmp_path: Path) -> None:
    plan = _plan_for(tmp_path, {"gone": 5, "here": 6})
    (tmp_path / "gone").unlink()

    result = Executor().execute(plan, ExecutionMode.FORCE)

    assert result.files_removed == 1
    assert result.files_removed <= len(plan.candidates)
    assert result.errors[0][0] == str(tmp_path / "gone")


def test_interactive_decline_yields_empty_result(tmp_path: Path) -> None:
    plan = _plan_for(tmp_path, {"a": 1})
    plan.scan_errors.append(ScanError("/nope", "Permission denied"))
    asked: list[DeletionPlan] = []

    def decline(p: DeletionPlan) -> bool:
        asked.append(p)
        return False

    result = Executor(confirm=decline).execute(plan, ExecutionMode.INTERACTIVE)

    assert asked == [plan]
    assert result.declined is True
    assert result.files_removed == 0
    assert result.bytes_freed == 0
    assert result.errors == []
    assert (tmp_path / "a").exists()


def test_interactive_accept_proceeds_as_force(tmp_path: Path) -> None:
    plan = _plan_for(tmp_path, {"a": 1, "b": 2})

    result = Executor(confirm=lambda p: True).execute(plan, ExecutionMode.INTERACTIVE)

    assert result.files_removed == 2
    assert result.declined is False


def test_empty_plan_is_not_prompted(tmp_path: Path) -> None:
    plan = DeletionPlan(target=CleanupTarget(key="t", name="T", roots=(tmp_path,)))

    def fail(p: DeletionPlan) -> bool:
        raise AssertionError("should not prompt")

    result = Executor(confirm=fail).execute(plan, ExecutionMode.INTERACTIVE)

    assert result.declined is False
    assert result.attempted == 0


def test_scan_errors_are_surfaced_but_missing_roots_are_not(tmp_path: Path) -> None:
    plan = _plan_for(tmp_path, {"a": 1})
    plan.scan_errors.append(ScanError("/missing", "does not exist", missing=True))
    plan.scan_errors.append(ScanError("/locked", "Permission denied"))

    result = Executor().execute(plan, ExecutionMode.FORCE)

    assert result.errors == [("/locked", "Permission denied")]


def test_progress_callback_sees_each_attempt(tmp_path: Path) -> None:
    plan = _plan_for(tmp_path, {"a": 1, "b": 1})
    seen: list[tuple[str, object]] = []

    Executor(progress_callback=lambda c, err: seen.append((c.path.name, err))).execute(plan, ExecutionMode.FORCE)

    assert seen == [("a", None), ("b", None)]


def test_remove_candidate_refuses_mount_points(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    folder = tmp_path / "volume"
    folder.mkdir()
    monkeypatch.setattr(os.path, "ismount", lambda p: p == str(folder))

    with pytest.raises(DeletionError):
        remove_candidate(Candidate(path=folder, size_bytes=0, last_modified=0, is_dir=True))
    assert folder.exists()


def test_remove_candidate_unlinks_symlink_not_target(tmp_path: Path) -> None:
    real = tmp_path / "real"
    _write_file(real / "keep", 3)
    link = tmp_path / "link"
    link.symlink_to(real, target_is_directory=True)

    remove_candidate(Candidate(path=link, size_bytes=0, last_modified=0, is_dir=True))

    assert not link.exists()
    assert (real / "keep").exists()


def test_command_target_reports_freed_bytes_from_measure(tmp_path: Path) -> None:
    _write_file(tmp_path / "bottle.tar.gz", 1000)
    target = CleanupTarget(
        key="homebrew",
        name="Homebrew",
        roots=(tmp_path,),
        action=TargetAction.COMMAND,
        command=("brew", "cleanup", "-s"),
    )
    plan = Planner().plan(target)
    runner = FakeRunner()

    result = Executor(run_command=runner, measure=lambda t: 400).execute(plan, ExecutionMode.FORCE)

    assert runner.calls == [(("brew", "cleanup", "-s"), False)]
    assert result.bytes_freed == 600
    assert result.files_removed == 0
    assert result.errors == []


def test_failed_command_is_a_single_target_error() -> None:
    target = CleanupTarget(key="docker", name="Docker", action=TargetAction.COMMAND, command=("docker", "system", "prune"))
    runner = FakeRunner(returncode=1, output="Cannot connect to the Docker daemon\n")

    result = Executor(run_command=runner).execute(DeletionPlan(target=target), ExecutionMode.FORCE)

    assert result.errors == [("docker system prune", "Cannot connect to the Docker daemon")]


def test_memory_purge_failure_is_a_privilege_error() -> None:
    target = CleanupTarget(
        key="memory",
        name="RAM Memory",
        action=TargetAction.PURGE_MEMORY,
        command=("purge",),
        requires_elevated_privilege=True,
    )
    runner = FakeRunner(returncode=1)

    result = Executor(run_command=runner, settle_seconds=0).execute(DeletionPlan(target=target), ExecutionMode.FORCE)

    assert runner.calls == [(("purge",), True)]
    assert len(result.errors) == 1
    assert "sudo" in result.errors[0][1]
    assert result.files_removed == 0


def test_memory_purge_reports_inactive_memory_freed() -> None:
    target = CleanupTarget(
        key="memory",
        name="RAM Memory",
        action=TargetAction.PURGE_MEMORY,
        command=("purge",),
        requires_elevated_privilege=True,
    )
    readings = iter([MemoryStatus(inactive_pages=1024), MemoryStatus(inactive_pages=0)])

    result = Executor(run_command=FakeRunner(), memory_probe=lambda: next(readings), settle_seconds=0).execute(
        DeletionPlan(target=target), ExecutionMode.FORCE
    )

    assert result.errors == []
    assert result.message == "Inactive memory purged, approximately 4 MB freed"


def test_stop_request_is_honoured_between_candidates(tmp_path: Path) -> None:
    plan = _plan_for(tmp_path, {"a.log": 1, "b.log": 2, "c.log": 3})
    removed: list[Candidate] = []

    def remove(candidate: Candidate) -> None:
        removed.append(candidate)

    result = Executor(remove=remove, should_stop=lambda: len(removed) >= 1).execute(plan, ExecutionMode.FORCE)

    assert [c.path.name for c in removed] == ["a.log"]
    assert result.interrupted is True
    assert result.attempted == 1
    assert result.files_removed == 1
    assert result.bytes_freed == 1
