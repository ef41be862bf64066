#!/usr/bin/env python3
"""
Deletion planning

Walks each root of a target (never following symlinks), applies the
target's age, match and exclusion filters and returns a DeletionPlan.
Planning only reads the filesystem.
"""

import fnmatch
import os
import pathlib
import stat
import time
from dataclasses import dataclass, field
from typing import Callable

from cleanup_errors import ScanError, describe_os_error
from cleanup_targets import CleanupTarget, Granularity, TargetAction

SECONDS_PER_DAY = 86400


@dataclass
class Candidate:
    path: pathlib.Path
    size_bytes: int
    last_modified: float
    is_dir: bool = False


@dataclass
class DeletionPlan:
    target: CleanupTarget
    candidates: list[Candidate] = field(default_factory=list)
    scan_errors: list[ScanError] = field(default_factory=list)

    @property
    def estimated_bytes(self) -> int:
        return sum(c.size_bytes for c in self.candidates)

    @property
    def is_empty(self) -> bool:
        """True when executing the plan would do nothing"""
        return not self.candidates and self.target.action is TargetAction.DELETE


def _matches_any(name: str, patterns: tuple[str, ...]) -> bool:
    return any(fnmatch.fnmatchcase(name, p) for p in patterns)


def dir_size(path: str) -> int:
    """Total bytes of all entries below *path*, symlinks counted by their own size"""
    total = 0
    for dirpath, dirnames, filenames in os.walk(path, followlinks=False):
        # symlinked directories show up in dirnames but are never walked
        for name in filenames + [d for d in dirnames if os.path.islink(os.path.join(dirpath, d))]:
            try:
                total += os.lstat(os.path.join(dirpath, name)).st_size
            except OSError:
                pass
    return total


class Planner:
    """Builds deletion plans for cleanup targets"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock

    def plan(self, target: CleanupTarget) -> DeletionPlan:
        plan = DeletionPlan(target=target)
        now = self.clock()
        for root in target.roots:
            try:
                self._scan_root(target, root, now, plan)
            except ScanError as e:
                plan.scan_errors.append(e)
        return plan

    def measure(self, target: CleanupTarget) -> int:
        """Bytes currently reclaimable for *target*"""
        return self.plan(target).estimated_bytes

    # -- walking --------------------------------------------------------------

    def _scan_root(self, target: CleanupTarget, root: pathlib.Path, now: float, plan: DeletionPlan):
        try:
            st = os.lstat(root)
        except FileNotFoundError:
            raise ScanError(str(root), "does not exist", missing=True) from None
        except OSError as e:
            raise ScanError(str(root), describe_os_error(e)) from e

        if stat.S_ISLNK(st.st_mode):
            raise ScanError(str(root), "is a symbolic link (not followed)")
        if not stat.S_ISDIR(st.st_mode):
            raise ScanError(str(root), "not a directory")

        entries = self._list_dir(root)
        self._walk(target, entries, 1, now, plan)

    def _list_dir(self, directory: pathlib.Path) -> list[os.DirEntry]:
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise ScanError(str(directory), describe_os_error(e)) from e

    def _walk(self, target: CleanupTarget, entries: list[os.DirEntry], depth: int, now: float, plan: DeletionPlan):
        for entry in entries:
            if _matches_any(entry.name, target.exclusions):
                continue

            try:
                st = entry.stat(follow_symlinks=False)
            except OSError:
                # vanished between listing and stat
                continue
            is_dir = stat.S_ISDIR(st.st_mode)
            name_matches = not target.match or _matches_any(entry.name, target.match)

            if target.granularity is Granularity.ENTRIES:
                if name_matches:
                    self._consider(target, entry, st, is_dir, now, plan)
                continue

            if target.granularity is Granularity.DIRECTORIES and is_dir and name_matches:
                self._consider(target, entry, st, is_dir, now, plan)
                continue

            if is_dir:
                if depth < target.max_depth and not _matches_any(entry.name, target.skip_dirs):
                    try:
                        children = self._list_dir(pathlib.Path(entry.path))
                    except ScanError as e:
                        plan.scan_errors.append(e)
                        continue
                    self._walk(target, children, depth + 1, now, plan)
                continue

            if target.granularity is Granularity.FILES and name_matches:
                self._consider(target, entry, st, is_dir, now, plan)

    def _consider(
        self,
        target: CleanupTarget,
        entry: os.DirEntry,
        st: os.stat_result,
        is_dir: bool,
        now: float,
        plan: DeletionPlan,
    ):
        if target.min_age_days is not None:
            age_days = (now - st.st_mtime) / SECONDS_PER_DAY
            if age_days < target.min_age_days:
                return

        size = dir_size(entry.path) if is_dir else st.st_size
        plan.candidates.append(
            Candidate(path=pathlib.Path(entry.path), size_bytes=size, last_modified=st.st_mtime, is_dir=is_dir)
        )
