#!/usr/bin/env python3
"""
Cleanup target catalog

Targets are plain data records loaded once from kenosis_targets.toml.
The catalog filters them by tool availability, user configuration and
--ram-only mode; it never changes a target after loading.
"""

import pathlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

import tomllib

from cleanup_errors import FatalConfigError
from tool_prober import ToolSpec

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


class Granularity(Enum):
    ENTRIES = "entries"
    FILES = "files"
    DIRECTORIES = "directories"


class TargetAction(Enum):
    DELETE = "delete"
    COMMAND = "command"
    PURGE_MEMORY = "purge_memory"


@dataclass(frozen=True)
class CleanupTarget:
    key: str
    name: str
    description: str = ""
    roots: tuple[pathlib.Path, ...] = ()
    granularity: Granularity = Granularity.ENTRIES
    max_depth: int = 1
    min_age_days: Optional[float] = None
    match: tuple[str, ...] = ()
    exclusions: tuple[str, ...] = ()
    skip_dirs: tuple[str, ...] = ()
    requires_tool: Optional[str] = None
    requires_elevated_privilege: bool = False
    action: TargetAction = TargetAction.DELETE
    command: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Catalog loading from TOML
# ---------------------------------------------------------------------------

CATALOG_FILE = pathlib.Path(__file__).parent / "kenosis_targets.toml"

_GRANULARITY_MAP = {g.value: g for g in Granularity}
_ACTION_MAP = {a.value: a for a in TargetAction}


def resolve_home() -> pathlib.Path:
    """Return the user's home directory or raise FatalConfigError"""
    try:
        home = pathlib.Path.home()
    except (RuntimeError, KeyError) as e:
        raise FatalConfigError(f"Cannot resolve home directory: {e}") from e

    if not home.is_dir():
        raise FatalConfigError(f"Home directory does not exist: {home}")
    return home


def expand_path(value: str, home: pathlib.Path) -> pathlib.Path:
    if value == "~":
        return home
    if value.startswith("~/"):
        return home / value[2:]
    return pathlib.Path(value)


def _build_target(
    entry: dict,
    home: pathlib.Path,
    project_dirs: Sequence[pathlib.Path],
    extra_exclusions: Sequence[str],
) -> CleanupTarget:
    roots_from = entry.get("roots_from")
    if roots_from == "project_dirs":
        roots = tuple(project_dirs)
    elif roots_from is not None:
        raise ValueError(f"unknown roots_from '{roots_from}'")
    else:
        roots = tuple(expand_path(r, home) for r in entry.get("roots", []))

    action = _ACTION_MAP[entry.get("action", "delete")]
    command = tuple(entry.get("command", []))
    if action is not TargetAction.DELETE and not command:
        raise ValueError(f"target '{entry['key']}' needs a command")

    min_age = entry.get("min_age_days")
    return CleanupTarget(
        key=entry["key"],
        name=entry.get("name", entry["key"]),
        description=entry.get("description", ""),
        roots=roots,
        granularity=_GRANULARITY_MAP[entry.get("granularity", "entries")],
        max_depth=int(entry.get("max_depth", 1)),
        min_age_days=float(min_age) if min_age is not None else None,
        match=tuple(entry.get("match", [])),
        exclusions=tuple(entry.get("exclusions", [])) + tuple(extra_exclusions),
        skip_dirs=tuple(entry.get("skip_dirs", [])),
        requires_tool=entry.get("requires_tool"),
        requires_elevated_privilege=bool(entry.get("requires_elevated_privilege", False)),
        action=action,
        command=command,
    )


def load_catalog(
    path: pathlib.Path,
    home: pathlib.Path,
    project_dirs: Optional[Sequence[str]] = None,
    extra_exclusions: Sequence[str] = (),
) -> tuple["TargetCatalog", dict[str, ToolSpec]]:
    """Load targets and tool probes from a TOML catalog

    *project_dirs* overrides the catalog's [search] project_dirs.
    Returns (catalog, tool_specs). Any problem with the file is fatal.
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise FatalConfigError(f"Cannot read target catalog {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise FatalConfigError(f"Invalid target catalog {path}: {e}") from e

    search = data.get("search", {})
    dirs = project_dirs if project_dirs else search.get("project_dirs", [])
    expanded_dirs = [expand_path(d, home) for d in dirs]

    tools: dict[str, ToolSpec] = {}
    for key, spec in data.get("tools", {}).items():
        tools[key] = ToolSpec(
            key=key,
            binaries=tuple(spec.get("binaries", [])),
            paths=tuple(expand_path(p, home) for p in spec.get("paths", [])),
        )

    targets: list[CleanupTarget] = []
    try:
        for entry in data.get("targets", []):
            targets.append(_build_target(entry, home, expanded_dirs, extra_exclusions))
    except (KeyError, ValueError, TypeError) as e:
        raise FatalConfigError(f"Invalid target definition in {path}: {e}") from e

    keys = [t.key for t in targets]
    duplicates = sorted({k for k in keys if keys.count(k) > 1})
    if duplicates:
        raise FatalConfigError(f"Duplicate target keys in {path}: {', '.join(duplicates)}")

    return TargetCatalog(targets), tools


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass
class TargetCatalog:
    """Static, ordered registry of cleanup targets"""

    targets: list[CleanupTarget] = field(default_factory=list)

    def required_tools(self) -> list[str]:
        seen: list[str] = []
        for target in self.targets:
            if target.requires_tool and target.requires_tool not in seen:
                seen.append(target.requires_tool)
        return seen

    def get(self, key: str) -> Optional[CleanupTarget]:
        for target in self.targets:
            if target.key == key:
                return target
        return None

    def available_targets(
        self,
        probe_results: Mapping[str, bool],
        ram_only: bool = False,
        disabled: Iterable[str] = (),
    ) -> list[CleanupTarget]:
        """Targets to run, in catalog order

        With *ram_only* only the memory purge target is returned and tool
        probes are not consulted.
        """
        if ram_only:
            return [t for t in self.targets if t.action is TargetAction.PURGE_MEMORY]

        disabled_keys = set(disabled)
        available = []
        for target in self.targets:
            if target.key in disabled_keys:
                continue
            if target.requires_tool and not probe_results.get(target.requires_tool, False):
                continue
            available.append(target)
        return available
