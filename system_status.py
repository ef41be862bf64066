#!/usr/bin/env python3
"""
Disk and memory status probes

Disk usage comes from shutil.disk_usage and is only used for the
before/after display. Memory status is parsed from macOS vm_stat output
and is unavailable (None) elsewhere.
"""

import re
import shutil
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from command_runner import CommandOutcome

DEFAULT_PAGE_SIZE = 4096

_PAGE_SIZE_RE = re.compile(r"page size of (\d+) bytes")

_VM_STAT_FIELDS = {
    "Pages free": "free_pages",
    "Pages inactive": "inactive_pages",
    "Pages active": "active_pages",
    "Pages wired down": "wired_pages",
    "Pages occupied by compressor": "compressed_pages",
}


@dataclass
class DiskStatus:
    """Usage of the filesystem holding a path"""

    total: int
    used: int
    free: int

    @property
    def percent_used(self) -> float:
        if not self.total:
            return 0.0
        return self.used / self.total * 100.0


@dataclass
class MemoryStatus:
    """Page counts reported by vm_stat"""

    page_size: int = DEFAULT_PAGE_SIZE
    free_pages: int = 0
    inactive_pages: int = 0
    active_pages: int = 0
    wired_pages: int = 0
    compressed_pages: int = 0

    @property
    def used_bytes(self) -> int:
        return (self.active_pages + self.wired_pages + self.compressed_pages) * self.page_size

    @property
    def available_bytes(self) -> int:
        return (self.free_pages + self.inactive_pages) * self.page_size

    @property
    def inactive_bytes(self) -> int:
        return self.inactive_pages * self.page_size


def read_disk_status(path: str = "/") -> Optional[DiskStatus]:
    try:
        usage = shutil.disk_usage(path)
    except OSError:
        return None
    return DiskStatus(total=usage.total, used=usage.used, free=usage.free)


def parse_vm_stat(text: str) -> MemoryStatus:
    """Parse `vm_stat` output into a MemoryStatus

    Unknown lines are ignored; the page size falls back to 4096 bytes when
    the header is missing.
    """
    status = MemoryStatus()
    match = _PAGE_SIZE_RE.search(text)
    if match:
        status.page_size = int(match.group(1))

    for line in text.splitlines():
        label, sep, value = line.partition(":")
        if not sep:
            continue
        attr = _VM_STAT_FIELDS.get(label.strip())
        if attr is None:
            continue
        try:
            setattr(status, attr, int(value.strip().rstrip(".")))
        except ValueError:
            continue
    return status


def read_memory_status(run_command: Callable[[Sequence[str], bool], CommandOutcome]) -> Optional[MemoryStatus]:
    outcome = run_command(("vm_stat",), False)
    if not outcome.success:
        return None
    return parse_vm_stat(outcome.output)
