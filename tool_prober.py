#!/usr/bin/env python3
"""
External tool detection

Decides whether optional ecosystems (Xcode, Homebrew, Docker) are installed
so that their targets can be enabled. Probes only look at PATH and the
filesystem; nothing is executed.
"""

import pathlib
import shutil
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional


@dataclass(frozen=True)
class ToolSpec:
    """How to recognise one external tool"""

    key: str
    binaries: tuple[str, ...] = ()
    paths: tuple[pathlib.Path, ...] = ()


@dataclass
class Prober:
    """Detects presence of external tools"""

    tools: dict[str, ToolSpec] = field(default_factory=dict)
    which: Callable[[str], Optional[str]] = shutil.which
    exists: Callable[[pathlib.Path], bool] = pathlib.Path.exists

    def detect(self, tool_id: str) -> bool:
        spec = self.tools.get(tool_id)
        if spec is None:
            return False

        for binary in spec.binaries:
            if self.which(binary):
                return True

        for path in spec.paths:
            try:
                if self.exists(path):
                    return True
            except OSError:
                continue
        return False

    def probe(self, tool_ids: Iterable[str]) -> dict[str, bool]:
        """Detect every tool in *tool_ids*, keyed by id"""
        return {tool_id: self.detect(tool_id) for tool_id in tool_ids}
