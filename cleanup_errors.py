#!/usr/bin/env python3
"""
Error types for Kenosis

Everything except FatalConfigError is local to a single target or candidate
and ends up in the run summary instead of stopping the run.
"""

from typing import Optional


class KenosisError(Exception):
    """Base class for all Kenosis errors"""


class ScanError(KenosisError):
    """A root (or nested directory) could not be scanned"""

    def __init__(self, path: str, reason: str, missing: bool = False):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
        self.missing = missing


class DeletionError(KenosisError):
    """A single candidate could not be removed"""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class PrivilegeError(KenosisError):
    """An elevated command failed or the password prompt was declined"""

    def __init__(self, command: str, reason: Optional[str] = None):
        self.command = command
        self.reason = reason or "elevated command failed (sudo declined or unavailable)"
        super().__init__(f"{command}: {self.reason}")


class FatalConfigError(KenosisError):
    """Setup failed before any target could run"""


def describe_os_error(error: OSError) -> str:
    """Short human-readable reason for an OSError"""
    return error.strerror or str(error)
