#!/usr/bin/env python3
"""
Kenosis — Ancient Greek κένωσις (emptying)

A disk cleanup tool that walks a fixed catalog of well-known locations
(caches, logs, trash, old downloads, developer tool data), filters entries
by age and exclusion rules and deletes them after confirmation, reporting
the space it freed.

Usage:
    kenosis                  # Interactive: confirm each target
    kenosis --dry-run        # Show what would be deleted
    kenosis --force          # Delete without asking (use with caution!)
    kenosis --ram-only       # Only purge inactive memory
    kenosis --list           # Show the target catalog and exit
"""

import argparse
import pathlib
import signal
import sys
from enum import Enum
from typing import Optional

from cleanup_errors import FatalConfigError
from cleanup_reporter import Reporter
from cleanup_stats import StatsAggregator
from cleanup_targets import CATALOG_FILE, CleanupTarget, TargetAction, TargetCatalog, load_catalog, resolve_home
from command_runner import CommandRunner
from console_ui import ConsoleUI
from deletion_executor import ExecutionMode, Executor, remove_candidate
from deletion_planner import Candidate, Planner
from kenosis_config import ConfigManager, KenosisConfig
from system_status import read_disk_status, read_memory_status
from tool_prober import Prober


class RunState(Enum):
    INIT = "init"
    PROBING = "probing"
    PLANNING = "planning"
    EXECUTING = "executing"
    SUMMARIZING = "summarizing"
    DONE = "done"
    ABORTED = "aborted"


def resolve_mode(args: argparse.Namespace) -> ExecutionMode:
    if getattr(args, "dry_run", False):
        return ExecutionMode.DRY_RUN
    if getattr(args, "force", False):
        return ExecutionMode.FORCE
    return ExecutionMode.INTERACTIVE


class Kenosis:
    """Main application class for the Kenosis cleanup tool"""

    def __init__(
        self,
        args: argparse.Namespace,
        ui: Optional[ConsoleUI] = None,
        runner: Optional[CommandRunner] = None,
        prober: Optional[Prober] = None,
    ):
        self.args = args
        self.ui = ui or ConsoleUI()
        self.runner = runner or CommandRunner()
        self.prober = prober
        self.mode = resolve_mode(args)
        self.state = RunState.INIT
        self.home: Optional[pathlib.Path] = None
        self._shutdown_requested = False
        self._force_quit = False
        self._removing = False

    # -- signal handling ----------------------------------------------------

    def _signal_handler(self, signum, frame):
        if self._shutdown_requested:
            if not self._removing:
                sys.exit(1)
            # never leave a candidate half-removed
            self._force_quit = True
            self.ui.print_warning("\nForce quit requested, stopping after the current item...")
            return
        self._shutdown_requested = True
        self.ui.print_warning("\nStopping after the current target... press Ctrl+C again to force quit.")

    def _remove_candidate(self, candidate: Candidate):
        self._removing = True
        try:
            remove_candidate(candidate)
        finally:
            self._removing = False

    def install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, self._signal_handler)

    # -- setup ----------------------------------------------------------------

    def _load_config(self, home: pathlib.Path) -> tuple[KenosisConfig, pathlib.Path]:
        config_path = getattr(self.args, "config", None)
        manager = ConfigManager(config_file=pathlib.Path(config_path) if config_path else None, home=home)
        return manager.load(), manager.config_dir

    def _prepare(self) -> tuple[TargetCatalog, dict[str, bool], list[CleanupTarget], KenosisConfig]:
        """Probe tools and build the filtered target list; raises FatalConfigError"""
        self.state = RunState.PROBING
        home = resolve_home()
        self.home = home
        config, config_dir = self._load_config(home)

        catalog_path = config.get_targets_path(config_dir) or CATALOG_FILE
        catalog, tools = load_catalog(
            catalog_path,
            home,
            project_dirs=config.project_dirs or None,
            extra_exclusions=config.extra_exclusions,
        )

        if self.prober is None:
            self.prober = Prober(tools=tools)
        probe_results = self.prober.probe(catalog.required_tools())

        available = catalog.available_targets(
            probe_results,
            ram_only=getattr(self.args, "ram_only", False),
            disabled=config.disabled_targets,
        )
        return catalog, probe_results, available, config

    # -- main entry point ----------------------------------------------------

    def run(self) -> int:
        try:
            catalog, probe_results, targets, config = self._prepare()
        except FatalConfigError as e:
            self.state = RunState.ABORTED
            self.ui.print_error(f"Aborted: {e}")
            return 1

        verbose = getattr(self.args, "verbose", False) or config.verbose
        reporter = Reporter(self.ui, verbose=verbose, home=str(self.home))

        if getattr(self.args, "list", False):
            reporter.show_catalog(catalog.targets, probe_results, targets)
            self.state = RunState.DONE
            return 0

        reporter.show_banner(self.mode)
        initial_disk = read_disk_status(str(self.home))
        if not getattr(self.args, "ram_only", False):
            reporter.show_disk_status(initial_disk, "Current Disk Status")

        if self.mode is ExecutionMode.INTERACTIVE and not getattr(self.args, "ram_only", False):
            reporter.show_menu(targets)
            if not reporter.confirm_start():
                self.ui.print_warning("\nCleanup cancelled.")
                self.state = RunState.DONE
                return 0

        planner = Planner()
        executor = Executor(
            confirm=reporter.confirm_plan,
            run_command=self.runner,
            measure=planner.measure,
            memory_probe=lambda: read_memory_status(self.runner),
            progress_callback=reporter.show_candidate,
            remove=self._remove_candidate,
            should_stop=lambda: self._force_quit,
        )
        aggregator = StatsAggregator()

        if not getattr(self.args, "ram_only", False):
            with self.ui.create_activity_progress() as progress:
                progress.add_task("Calculating cleanup potential...", total=None)
                potential = sum(planner.measure(t) for t in targets if t.action is not TargetAction.PURGE_MEMORY)
            reporter.show_total_potential(potential)

        for target in targets:
            if self._shutdown_requested:
                self.ui.print_warning("Cleanup interrupted, remaining targets skipped.")
                break

            reporter.show_target_header(target)
            self.state = RunState.PLANNING
            with self.ui.create_activity_progress() as progress:
                progress.add_task(f"Scanning {target.name}...", total=None)
                plan = planner.plan(target)
            reporter.show_plan(plan, read_disk_status(str(self.home)))
            purging = target.action is TargetAction.PURGE_MEMORY and self.mode is not ExecutionMode.DRY_RUN
            if purging:
                reporter.show_memory_status(read_memory_status(self.runner))

            self.state = RunState.EXECUTING
            result = executor.execute(plan, self.mode)
            reporter.show_result(result, self.mode, plan)
            aggregator.record(result)

            if purging and not result.declined and not result.errors:
                reporter.show_memory_status(read_memory_status(self.runner), title="Updated RAM status")

            if self._force_quit:
                break

        self.state = RunState.SUMMARIZING
        final_disk = read_disk_status(str(self.home))
        reporter.show_summary(aggregator.summary(), self.mode, initial_disk, final_disk)

        if self._force_quit:
            self.ui.print_error("Cleanup aborted.")
            self.state = RunState.ABORTED
            return 1

        self.state = RunState.DONE
        return 0


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kenosis",
        description="Kenosis — disk cleanup for caches, logs, trash and developer tools",
    )
    parser.add_argument("-d", "--dry-run", action="store_true", help="Only show what would be deleted")
    parser.add_argument("-f", "--force", action="store_true", help="Delete without asking (use with caution!)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show every candidate and error")
    parser.add_argument("-r", "--ram-only", action="store_true", help="Only purge inactive memory")
    parser.add_argument("--list", action="store_true", help="Show the target catalog and exit")
    parser.add_argument("--config", type=str, default=None, help="Config file (default ~/.kenosis/config.json)")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    app = Kenosis(args)
    app.install_signal_handlers()
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
