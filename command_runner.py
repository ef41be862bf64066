#!/usr/bin/env python3
"""
External command execution

Thin wrapper over subprocess used for brew/docker cleanup, the privileged
memory purge and the vm_stat probe. Never raises for a missing binary.
"""

import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

COMMAND_NOT_FOUND = 127


@dataclass
class CommandOutcome:
    """Result of running an external command"""

    argv: tuple[str, ...]
    returncode: int
    output: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)


class CommandRunner:
    """Runs external commands, optionally through sudo"""

    def __init__(self, timeout: Optional[float] = None, sudo: str = "sudo"):
        self.timeout = timeout
        self.sudo = sudo

    def run(self, argv: Sequence[str], privileged: bool = False) -> CommandOutcome:
        full_argv = tuple(argv)
        if privileged:
            full_argv = (self.sudo, *full_argv)

        try:
            # stdin stays attached so sudo can ask for a password
            completed = subprocess.run(
                full_argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            return CommandOutcome(argv=full_argv, returncode=COMMAND_NOT_FOUND, output=str(e))
        except subprocess.TimeoutExpired:
            return CommandOutcome(argv=full_argv, returncode=1, output=f"timed out after {self.timeout}s")

        return CommandOutcome(argv=full_argv, returncode=completed.returncode, output=completed.stdout or "")

    def __call__(self, argv: Sequence[str], privileged: bool = False) -> CommandOutcome:
        return self.run(argv, privileged)
