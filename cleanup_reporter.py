#!/usr/bin/env python3
"""
Cleanup reporting

Renders banners, plan previews, per-target results and the final summary
through ConsoleUI. Per-candidate detail is only printed in verbose mode.
"""

from typing import Mapping, Optional

from rich import box
from rich.markup import escape
from rich.table import Table

from auxiliary import format_bytes, format_path_for_display, truncate_path, usage_bar
from cleanup_stats import CleanupStats
from cleanup_targets import CleanupTarget, TargetAction
from console_ui import ConsoleUI
from deletion_executor import ExecutionMode, ExecutionResult
from deletion_planner import Candidate, DeletionPlan
from system_status import DiskStatus, MemoryStatus

PREVIEW_LIMIT = 5

_MODE_BANNERS = {
    ExecutionMode.DRY_RUN: ("yellow", "Running in DRY RUN mode - nothing will be deleted"),
    ExecutionMode.FORCE: ("red", "Running in FORCE mode - no confirmation prompts!"),
    ExecutionMode.INTERACTIVE: ("green", "Running in INTERACTIVE mode - will ask before actions"),
}


class Reporter:
    """Human-readable output for a cleanup run"""

    def __init__(self, ui: ConsoleUI, verbose: bool = False, home: Optional[str] = None):
        self.ui = ui
        self.verbose = verbose
        self.home = home

    def _display(self, path) -> str:
        return escape(format_path_for_display(str(path), self.home))

    # -- run framing ----------------------------------------------------------

    def show_banner(self, mode: ExecutionMode):
        self.ui.print_header("Kenosis", "Disk cleanup for caches, logs, trash and developer tools")
        color, text = _MODE_BANNERS[mode]
        self.ui.console.print(f"\n[{color}]{text}[/{color}]\n")

    def show_menu(self, targets: list[CleanupTarget]):
        self.ui.console.print("[bold]This tool will clean the following:[/bold]")
        for target in targets:
            self.ui.console.print(f"  • {escape(target.name)} [dim]{escape(target.description)}[/dim]")
        self.ui.console.print()

    def confirm_start(self) -> bool:
        return self.ui.confirm("Continue with cleanup?", default=False)

    def show_catalog(
        self, targets: list[CleanupTarget], probe_results: Mapping[str, bool], available: list[CleanupTarget]
    ):
        table = Table(title="Cleanup Targets", box=box.ROUNDED)
        table.add_column("Key", style="cyan")
        table.add_column("Name")
        table.add_column("Roots", style="dim")
        table.add_column("Age", justify="right")
        table.add_column("Tool", justify="center")
        table.add_column("Enabled", justify="center")

        enabled = {t.key for t in available}
        for target in targets:
            if target.requires_tool:
                found = probe_results.get(target.requires_tool, False)
                tool = f"{target.requires_tool} ({'found' if found else 'missing'})"
            else:
                tool = ""
            roots = "\n".join(self._display(r) for r in target.roots) or escape(" ".join(target.command))
            age = f"{target.min_age_days:g}d" if target.min_age_days is not None else ""
            table.add_row(
                target.key,
                escape(target.name),
                roots,
                age,
                tool,
                "[green]yes[/green]" if target.key in enabled else "[dim]no[/dim]",
            )
        self.ui.console.print(table)

    # -- per target -----------------------------------------------------------

    def show_target_header(self, target: CleanupTarget):
        self.ui.print_section(target.name)

    def show_total_potential(self, total_bytes: int):
        self.ui.console.print(
            f"  [bold]Total potential cleanup:[/bold] [bold yellow]{format_bytes(total_bytes)}[/bold yellow]\n"
        )

    def show_plan(self, plan: DeletionPlan, disk: Optional[DiskStatus] = None):
        target = plan.target
        if target.action is TargetAction.PURGE_MEMORY:
            return

        if self.verbose:
            for error in plan.scan_errors:
                if error.missing:
                    self.ui.print_progress(f"  Skipping {self._display(error.path)} (not present)")

        if target.action is TargetAction.COMMAND:
            if plan.candidates:
                self.ui.print_info(f"  Cache size: {format_bytes(plan.estimated_bytes)}")
                self.show_space_preview(disk, plan.estimated_bytes)
            return

        if not plan.candidates:
            self.ui.print_info("  Nothing to clean")
            return

        self.ui.print_info(
            f"  Found {len(plan.candidates)} items, estimated size: {format_bytes(plan.estimated_bytes)}"
        )
        shown = plan.candidates if self.verbose else plan.candidates[:PREVIEW_LIMIT]
        for candidate in shown:
            suffix = "/" if candidate.is_dir else ""
            self.ui.console.print(
                f"    [dim]•[/dim] [dim]{self._display(candidate.path)}{suffix}[/dim]"
                f" [red]({format_bytes(candidate.size_bytes)})[/red]"
            )
        hidden = len(plan.candidates) - len(shown)
        if hidden > 0:
            self.ui.console.print(f"    [dim]• ... and {hidden} more[/dim]")
        self.show_space_preview(disk, plan.estimated_bytes)

    def confirm_plan(self, plan: DeletionPlan) -> bool:
        target = plan.target
        question = f"{target.description or target.name}?"
        if target.action is TargetAction.DELETE and plan.candidates:
            question = f"{question} [dim](frees approximately {format_bytes(plan.estimated_bytes)})[/dim]"
        elif target.requires_elevated_privilege:
            question = f"{question} [dim](requires sudo password)[/dim]"
        return self.ui.confirm(f"  {question}", default=False)

    def show_candidate(self, candidate: Candidate, error: Optional[str]):
        if not self.verbose:
            return
        if error is None:
            self.ui.console.print(f"    [green]✓[/green] Removed: {self._display(candidate.path)}")
        else:
            self.ui.console.print(f"    [red]✗[/red] {self._display(candidate.path)}: {escape(error)}")

    def show_result(self, result: ExecutionResult, mode: ExecutionMode, plan: DeletionPlan):
        if result.declined:
            self.ui.print_progress("  Skipped")
            return

        if mode is ExecutionMode.DRY_RUN:
            if plan.target.action is TargetAction.DELETE:
                if plan.candidates:
                    self.ui.print_warning(
                        f"  [DRY RUN] Would remove {len(plan.candidates)} items"
                        f" ({format_bytes(plan.estimated_bytes)})"
                    )
            else:
                prefix = "sudo " if plan.target.requires_elevated_privilege else ""
                self.ui.print_warning(f"  [DRY RUN] Would run: {escape(prefix + ' '.join(plan.target.command))}")
        elif result.attempted or result.message:
            if result.message:
                self.ui.print_success(f"  ✓ {escape(result.message)}")
            if result.attempted:
                self.ui.print_success(
                    f"  ✓ Cleaned {result.files_removed} items, freed {format_bytes(result.bytes_freed)}"
                )
            elif result.bytes_freed:
                self.ui.print_success(f"  ✓ Freed approximately {format_bytes(result.bytes_freed)}")

        if result.interrupted:
            self.ui.print_warning("  Stopped before all items were removed")

        if result.errors:
            self.ui.print_error(f"  ✗ {len(result.errors)} errors")
            if self.verbose:
                for path, reason in result.errors:
                    self.ui.console.print(f"    [red dim]{self._display(path)}: {escape(reason)}[/red dim]")

    # -- system status --------------------------------------------------------

    def show_disk_status(self, disk: Optional[DiskStatus], title: str):
        if disk is None:
            return
        used_bar, free_bar = usage_bar(disk.percent_used)
        self.ui.console.print(f"[bold cyan]{title}[/bold cyan]")
        self.ui.console.print(
            f"  [bold]Disk Usage:[/bold] [[red]{used_bar}[/red][dim]{free_bar}[/dim]] {disk.percent_used:.1f}%"
        )
        self.ui.console.print(
            f"  [bold]Space:[/bold] [red]{format_bytes(disk.used)}[/red] / {format_bytes(disk.total)}"
            f" ([green]{format_bytes(disk.free)} free[/green])"
        )

    def show_space_preview(self, disk: Optional[DiskStatus], estimated_bytes: int):
        """Free space and usage if *estimated_bytes* were reclaimed"""
        if disk is None or estimated_bytes <= 0:
            return
        new_free = disk.free + estimated_bytes
        new_percent = max(0, disk.used - estimated_bytes) / disk.total * 100.0 if disk.total else 0.0
        self.ui.console.print(
            f"  [dim]Preview:[/dim] [dim]{format_bytes(disk.free)}[/dim] → [green]{format_bytes(new_free)}[/green]"
            f" ({disk.percent_used:.1f}% → {new_percent:.1f}%)"
        )

    def show_memory_status(self, memory: Optional[MemoryStatus], title: Optional[str] = None):
        if title:
            self.ui.print_info(f"\n  {title}:")
        if memory is None:
            self.ui.print_progress("  Memory status unavailable on this system")
            return
        self.ui.console.print(f"  [bold]RAM Usage:[/bold] [red]{format_bytes(memory.used_bytes)}[/red]")
        self.ui.console.print(
            f"  [bold]Available:[/bold] [green]{format_bytes(memory.available_bytes)}[/green]"
            f" ({format_bytes(memory.inactive_bytes)} inactive can be freed)"
        )

    # -- summary --------------------------------------------------------------

    def show_summary(
        self,
        stats: CleanupStats,
        mode: ExecutionMode,
        before: Optional[DiskStatus] = None,
        after: Optional[DiskStatus] = None,
    ):
        self.ui.console.print()
        self.ui.console.print("[green]" + "=" * 60 + "[/green]")
        self.ui.console.print("[bold green]Cleanup Complete![/bold green]")
        self.ui.console.print("[green]" + "=" * 60 + "[/green]")

        if stats.per_target:
            table = Table(title="Cleanup Statistics", box=box.ROUNDED)
            table.add_column("Target", style="cyan", min_width=20)
            table.add_column("Removed", justify="right")
            table.add_column("Freed", justify="right", style="yellow")
            table.add_column("Errors", justify="right", style="red")
            for target_stats in stats.per_target.values():
                removed = "skipped" if target_stats.declined else str(target_stats.files_removed)
                table.add_row(
                    escape(target_stats.name),
                    removed,
                    format_bytes(target_stats.bytes_freed),
                    str(target_stats.error_count) if target_stats.error_count else "",
                )
            self.ui.console.print(table)

        self.ui.console.print(f"  [bold]Files removed:[/bold] [yellow]{stats.files_removed}[/yellow]")
        self.ui.console.print(f"  [bold]Reported freed:[/bold] [green]{format_bytes(stats.bytes_freed)}[/green]")

        if mode is ExecutionMode.DRY_RUN:
            self.ui.print_progress("No files were actually deleted (dry run mode)")
        elif before is not None and after is not None:
            actual = max(0, after.free - before.free)
            self.ui.console.print()
            self.ui.console.print("[bold cyan]Disk Space Summary:[/bold cyan]")
            self.ui.console.print(
                f"  [bold]Before:[/bold] [red]{format_bytes(before.free)} available[/red]"
                f" → [green]{format_bytes(after.free)} available[/green]"
            )
            self.ui.console.print(f"  [bold]Actual space freed:[/bold] [bold green]{format_bytes(actual)}[/bold green]")
            self.ui.console.print()
            self.show_disk_status(after, "Final Disk Status")
            if actual and after.total:
                self.ui.print_success(f"\n  Disk space improved by {actual / after.total * 100:.1f}%!")

        if stats.errors:
            self.ui.console.print()
            failures = [
                (f"{escape(target)}: {escape(truncate_path(format_path_for_display(path, self.home)))}", escape(reason))
                for target, path, reason in stats.errors
            ]
            self.ui.show_failures(failures, "Errors", show_limit=len(failures) if self.verbose else 10)
