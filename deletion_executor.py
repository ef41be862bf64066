#!/usr/bin/env python3
"""
Deletion execution

Carries out a DeletionPlan in dry-run, interactive or force mode. A failure
on one candidate is recorded and never stops the remaining deletions;
external and privileged commands are injected so they can be replaced in tests.
"""

import os
import shutil
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Sequence

from cleanup_errors import DeletionError, PrivilegeError, describe_os_error
from cleanup_targets import CleanupTarget, TargetAction
from command_runner import CommandOutcome
from deletion_planner import Candidate, DeletionPlan
from system_status import MemoryStatus


class ExecutionMode(Enum):
    """How a plan is carried out"""

    DRY_RUN = "dry-run"
    INTERACTIVE = "interactive"
    FORCE = "force"


@dataclass
class ExecutionResult:
    """Outcome of executing one target's plan"""

    target: str
    key: str = ""
    files_removed: int = 0
    bytes_freed: int = 0
    attempted: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    declined: bool = False
    message: Optional[str] = None
    interrupted: bool = False


def remove_candidate(candidate: Candidate):
    """Remove a single file, symlink or directory tree"""
    path = str(candidate.path)
    if candidate.is_dir and not os.path.islink(path):
        if os.path.ismount(path):
            raise DeletionError(path, "is a mount point")
        shutil.rmtree(path)
    else:
        os.unlink(path)


class Executor:
    """Executes deletion plans and external cleanup commands"""

    def __init__(
        self,
        confirm: Optional[Callable[[DeletionPlan], bool]] = None,
        run_command: Optional[Callable[[Sequence[str], bool], CommandOutcome]] = None,
        measure: Optional[Callable[[CleanupTarget], int]] = None,
        memory_probe: Optional[Callable[[], Optional[MemoryStatus]]] = None,
        remove: Callable[[Candidate], None] = remove_candidate,
        progress_callback: Optional[Callable[[Candidate, Optional[str]], None]] = None,
        settle_seconds: float = 2.0,
        should_stop: Optional[Callable[[], bool]] = None,
    ):
        self.confirm = confirm
        self.run_command = run_command
        self.measure = measure
        self.memory_probe = memory_probe
        self.remove = remove
        self.progress_callback = progress_callback
        self.settle_seconds = settle_seconds
        self.should_stop = should_stop

    def execute(self, plan: DeletionPlan, mode: ExecutionMode) -> ExecutionResult:
        result = ExecutionResult(target=plan.target.name, key=plan.target.key)

        if mode is ExecutionMode.DRY_RUN or plan.is_empty:
            self._record_scan_errors(plan, result)
            return result

        if mode is ExecutionMode.INTERACTIVE:
            if self.confirm is None or not self.confirm(plan):
                result.declined = True
                return result

        self._record_scan_errors(plan, result)

        action = plan.target.action
        if action is TargetAction.DELETE:
            self._delete_candidates(plan, result)
        elif action is TargetAction.COMMAND:
            self._run_target_command(plan, result)
        elif action is TargetAction.PURGE_MEMORY:
            self._purge_memory(plan, result)
        return result

    # -- helpers --------------------------------------------------------------

    def _record_scan_errors(self, plan: DeletionPlan, result: ExecutionResult):
        for error in plan.scan_errors:
            if not error.missing:
                result.errors.append((error.path, error.reason))

    def _delete_candidates(self, plan: DeletionPlan, result: ExecutionResult):
        for candidate in plan.candidates:
            # a candidate is never abandoned half-removed
            if self.should_stop and self.should_stop():
                result.interrupted = True
                break
            result.attempted += 1
            error: Optional[str] = None
            try:
                self.remove(candidate)
            except DeletionError as e:
                error = e.reason
            except OSError as e:
                error = describe_os_error(e)

            if error is None:
                result.files_removed += 1
                result.bytes_freed += candidate.size_bytes
            else:
                result.errors.append((str(candidate.path), error))

            if self.progress_callback:
                self.progress_callback(candidate, error)

    def _run(self, argv: Sequence[str], privileged: bool) -> CommandOutcome:
        if self.run_command is None:
            return CommandOutcome(argv=tuple(argv), returncode=1, output="no command runner configured")
        return self.run_command(argv, privileged)

    def _run_target_command(self, plan: DeletionPlan, result: ExecutionResult):
        target = plan.target
        outcome = self._run(target.command, target.requires_elevated_privilege)
        if not outcome.success:
            if target.requires_elevated_privilege:
                error = PrivilegeError(outcome.command_line)
                result.errors.append((error.command, error.reason))
            else:
                reason = outcome.output.strip().splitlines()[-1] if outcome.output.strip() else ""
                result.errors.append((outcome.command_line, reason or f"exited with status {outcome.returncode}"))
            return

        if self.measure is not None and plan.candidates:
            remaining = self.measure(target)
            result.bytes_freed = max(0, plan.estimated_bytes - remaining)
        result.message = f"{' '.join(target.command)} completed"

    def _purge_memory(self, plan: DeletionPlan, result: ExecutionResult):
        target = plan.target
        before = self.memory_probe() if self.memory_probe else None

        outcome = self._run(target.command, True)
        if not outcome.success:
            error = PrivilegeError(outcome.command_line)
            result.errors.append((error.command, error.reason))
            return

        if self.settle_seconds > 0:
            time.sleep(self.settle_seconds)

        after = self.memory_probe() if self.memory_probe else None
        if before is not None and after is not None:
            freed = max(0, before.inactive_bytes - after.inactive_bytes)
            result.message = f"Inactive memory purged, approximately {freed // 1_048_576} MB freed"
        else:
            result.message = "Inactive memory purged"
