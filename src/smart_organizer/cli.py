"""Command line interface for the smart organizer."""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.prompt import Prompt, Confirm

from .core.events import (
    FileFailed,
    FileMoved,
    FilePreviewed,
    FileRestored,
    NoLogFound,
    OrganizationSummary,
    OrganizerEvent,
    RestoreFailed,
    UndoCompleted,
)
from .core.move_log import MoveLog
from .core.organizer import FileOrganizer, OrganizationReport
from .core.undo import UndoEngine
from .exceptions import OrganizerError, NoLogError, PersistenceError
from .models.config import (
    CustomRuleSet,
    OrganizerConfig,
    SortMode,
    create_default_config,
    load_config,
)

console = Console()

MODE_MENU = {
    SortMode.TYPE: "TYPE",
    SortMode.EXTENSION: "EXTENSION",
    SortMode.DATE: "DATE",
    SortMode.CUSTOM: "CUSTOM RULES",
}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # Per-file outcomes are printed from events; engine log lines only show with --verbose
    logging.getLogger("smart_organizer").setLevel(logging.DEBUG if verbose else logging.CRITICAL)


def render_event(event: OrganizerEvent) -> None:
    """Print one organizer or undo event."""
    if isinstance(event, FilePreviewed):
        console.print(f"[cyan]\\[PREVIEW][/cyan] {escape(event.file_name)} → {escape(event.folder)}")
    elif isinstance(event, FileMoved):
        suffix = " [yellow](overwrote existing file)[/yellow]" if event.overwrote else ""
        console.print(f"Moved: {escape(event.file_name)} → {escape(event.folder)}{suffix}")
    elif isinstance(event, FileFailed):
        console.print(f"[red]Error moving {escape(event.file_name)}: {escape(event.reason)}[/red]")
    elif isinstance(event, OrganizationSummary):
        if event.preview:
            console.print(f"\n[cyan]Preview complete: {event.previewed} files would be moved[/cyan]")
        else:
            console.print(f"\n[green]✓ Organization complete! Log saved at: {event.log_path}[/green]")
    elif isinstance(event, FileRestored):
        console.print(f"Restored: {escape(event.file_name)}")
    elif isinstance(event, RestoreFailed):
        console.print(f"[red]Failed to restore {escape(event.file_name)}: {escape(event.reason)}[/red]")
    elif isinstance(event, UndoCompleted):
        console.print("\n[green]Undo complete. Files restored to original locations.[/green]")
    elif isinstance(event, NoLogFound):
        console.print("[yellow]No log file found. Nothing to undo.[/yellow]")


def _print_report(report: OrganizationReport) -> None:
    results_table = Table(title="Preview" if report.preview else "Results")
    results_table.add_column("Folder", style="cyan")
    results_table.add_column("Files", justify="right")

    for folder, count in sorted(report.by_folder.items()):
        results_table.add_row(folder, str(count))

    console.print(results_table)

    if report.overwritten:
        console.print(f"[yellow]{report.overwritten} existing files were overwritten[/yellow]")

    if report.errors:
        console.print(f"\n[red]{report.failed} files could not be moved:[/red]")
        for error in report.errors[:10]:
            console.print(f"  • {error}")
        if len(report.errors) > 10:
            console.print(f"  ... and {len(report.errors) - 10} more errors")


def _prompt_sort_mode() -> SortMode:
    console.print("\n[cyan]Choose sorting mode:[/cyan]")
    for number, label in enumerate(MODE_MENU.values(), start=1):
        console.print(f"  {number}. {label}")

    choice = Prompt.ask("Your choice", choices=["1", "2", "3", "4"], default="2")
    return SortMode.parse(choice)


def _prompt_custom_rules() -> CustomRuleSet:
    console.print("Enter custom rules (e.g. pdf=Documents, jpg=Images). Type 'done' when finished:")
    rules = CustomRuleSet()
    while True:
        line = Prompt.ask(">", default="done")
        if line.strip().lower() == "done":
            break
        try:
            rules.update_from(CustomRuleSet.from_strings([line]))
        except OrganizerError as e:
            console.print(f"[yellow]Ignored: {e}[/yellow]")
    return rules


def _build_config(directory: Path, mode: Optional[str], rules: Tuple[str, ...],
                  config_path: Optional[Path], preview: bool) -> OrganizerConfig:
    if config_path:
        cfg = load_config(config_path)
        cfg.source_directory = directory
    else:
        cfg = OrganizerConfig(source_directory=directory)

    if mode:
        cfg.sort_mode = SortMode.parse(mode)
    if rules:
        cfg.custom_rules.update_from(CustomRuleSet.from_strings(rules))
    if preview:
        cfg.preview_only = True
    return cfg


@click.group()
@click.version_option(package_name="smart-organizer")
def cli():
    """Sort the files of a directory into folders, and undo the last run."""
    pass


@cli.command()
@click.argument('directory', type=click.Path(path_type=Path))
@click.option(
    '--mode',
    type=click.Choice([mode.value for mode in SortMode], case_sensitive=False),
    help='Sorting mode (default: extension)'
)
@click.option(
    '--rule',
    'rules',
    multiple=True,
    help="Custom rule 'ext=Folder' for --mode custom (repeatable)"
)
@click.option(
    '--config',
    'config_path',
    type=click.Path(exists=True, path_type=Path),
    help='Configuration file path'
)
@click.option(
    '--preview',
    is_flag=True,
    help='Show what would be done without making changes'
)
@click.option(
    '--interactive',
    is_flag=True,
    help='Prompt for mode, rules and preview, and offer to undo afterwards'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Verbose output'
)
def organize(directory: Path, mode: Optional[str], rules: Tuple[str, ...],
             config_path: Optional[Path], preview: bool, interactive: bool, verbose: bool):
    """Organize the files in DIRECTORY into sub-folders."""
    _setup_logging(verbose)

    try:
        cfg = _build_config(directory, mode, rules, config_path, preview)

        if interactive:
            if not mode and not config_path:
                cfg.sort_mode = _prompt_sort_mode()
            if cfg.sort_mode is SortMode.CUSTOM and not cfg.custom_rules:
                cfg.custom_rules = _prompt_custom_rules()
            if not preview:
                cfg.preview_only = Confirm.ask("Run preview before organizing?", default=False)

        console.print("\n[bold cyan]🔍 PREVIEW MODE[/bold cyan]" if cfg.preview_only
                      else "\n[bold cyan]🚀 ORGANIZING FILES...[/bold cyan]")

        organizer = FileOrganizer.from_config(cfg)
        report = organizer.organize(preview_only=cfg.preview_only, on_event=render_event)
        _print_report(report)

        if interactive and not cfg.preview_only:
            if Confirm.ask("\nDo you want to undo last operation?", default=False):
                UndoEngine(cfg.source_directory).undo_last(on_event=render_event)

    except PersistenceError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        if e.report is not None:
            console.print(
                f"[red]{e.report.moved} files were moved but cannot be undone automatically.[/red]"
            )
        sys.exit(1)
    except OrganizerError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n[red]Unexpected error: {e}[/red]")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        sys.exit(1)


@cli.command()
@click.argument('directory', type=click.Path(path_type=Path))
@click.option(
    '--clean-folders',
    is_flag=True,
    help='Remove folders left empty by the undo, including empty ones that existed before the organize run'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Verbose output'
)
def undo(directory: Path, clean_folders: bool, verbose: bool):
    """Undo the last organization of DIRECTORY."""
    _setup_logging(verbose)

    try:
        report = UndoEngine(directory).undo_last(
            on_event=render_event,
            remove_empty_folders=clean_folders
        )
    except OrganizerError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)

    for folder in report.removed_folders:
        console.print(f"[dim]Removed empty folder {folder}[/dim]")

    if report.failed:
        sys.exit(1)


@cli.command(name='show-log')
@click.argument('directory', type=click.Path(path_type=Path))
def show_log(directory: Path):
    """Show the moves recorded by the last organization of DIRECTORY."""
    log_path = MoveLog.path_for(directory)

    try:
        move_log = MoveLog.load(log_path)
    except NoLogError:
        console.print("[yellow]No log file found. Nothing to undo.[/yellow]")
        return
    except OrganizerError as e:
        console.print(f"\n[red]Error: {e}[/red]")
        sys.exit(1)

    table = Table(title=f"Last organization ({len(move_log)} moves)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Original", style="cyan")
    table.add_column("Moved to", style="green")

    for number, record in enumerate(move_log, start=1):
        table.add_row(str(number), str(record.source), str(record.destination))

    console.print(table)


@cli.command(name='init-config')
@click.argument('config_path', type=click.Path(path_type=Path))
@click.option(
    '--source',
    type=click.Path(path_type=Path),
    default=Path('.'),
    help='Directory to organize'
)
def init_config(config_path: Path, source: Path):
    """Write an example configuration file to CONFIG_PATH."""
    if config_path.exists() and not Confirm.ask(f"{config_path} exists. Overwrite?", default=False):
        console.print("[yellow]Cancelled[/yellow]")
        return

    create_default_config(config_path, source)
    console.print(f"[green]Configuration written to {config_path}[/green]")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
