#!/usr/bin/env python3
"""
Kenosis Configuration

User preferences read from ~/.kenosis/config.json. The file is optional,
hand-edited and never written by Kenosis.
"""

import json
import pathlib
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class KenosisConfig:
    """User configuration for Kenosis"""

    version: str = "1.0"
    project_dirs: list[str] = field(default_factory=list)  # overrides the catalog's search dirs
    disabled_targets: list[str] = field(default_factory=list)
    extra_exclusions: list[str] = field(default_factory=list)
    verbose: bool = False
    targets_file: Optional[str] = None

    def get_targets_path(self, config_dir: pathlib.Path) -> Optional[pathlib.Path]:
        """Catalog override, relative paths resolved against the config directory"""
        if not self.targets_file:
            return None
        path = pathlib.Path(self.targets_file).expanduser()
        return path if path.is_absolute() else config_dir / path

    @classmethod
    def from_dict(cls, data: dict) -> "KenosisConfig":
        return cls(
            version=data.get("version", "1.0"),
            project_dirs=list(data.get("project_dirs", [])),
            disabled_targets=list(data.get("disabled_targets", [])),
            extra_exclusions=list(data.get("extra_exclusions", [])),
            verbose=bool(data.get("verbose", False)),
            targets_file=data.get("targets_file"),
        )


class ConfigManager:
    """Loads Kenosis configuration"""

    def __init__(self, config_file: Optional[pathlib.Path] = None, home: Optional[pathlib.Path] = None):
        """Initialize configuration manager

        Args:
            config_file: Override default ~/.kenosis/config.json location
            home: Home directory used for the default location
        """
        if config_file:
            self.config_file = config_file
        else:
            self.config_file = (home or pathlib.Path.home()) / ".kenosis" / "config.json"
        self.config_dir = self.config_file.parent

    def load(self) -> KenosisConfig:
        """Load configuration from file"""
        if self.config_file.exists():
            try:
                with self.config_file.open() as f:
                    data = json.load(f)
                    return KenosisConfig.from_dict(data)
            except (json.JSONDecodeError, KeyError, TypeError, AttributeError, OSError):
                # If config is corrupted, return default
                return KenosisConfig()
        return KenosisConfig()
