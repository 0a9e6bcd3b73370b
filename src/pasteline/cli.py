"""Command-line front end for pasteline."""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pasteline import __version__, config
from pasteline.errors import REMEDIATION, PasteSimulationError, PastelineError
from pasteline.orchestrator import PasteOrchestrator

console = Console()


def setup_logging() -> None:
    level = getattr(logging, config.get_log_level(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def cmd_check(engine: PasteOrchestrator, args: list[str]) -> int:
    """Show which paste tools this session can use."""
    report = engine.check_paste_tool_availability()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("platform", report["platform"])
    status = "[green]yes[/green]" if report["available"] else "[red]no[/red]"
    table.add_row("available", status)
    table.add_row("method", report["method"] or "-")
    table.add_row("tools", ", ".join(report["tools"]) or "-")
    if report.get("requires_permission"):
        table.add_row("permission", "Accessibility required")
    if "is_wayland" in report:
        table.add_row("session", "wayland" if report["is_wayland"] else "x11")
        table.add_row("compositor", report["compositor"])
        table.add_row("xwayland", "yes" if report["bridge_available"] else "no")
    table.add_row("config", str(config.CONFIG_FILE) if config.config_exists() else "defaults")
    if report.get("recommended_install"):
        table.add_row("install", f"[yellow]{report['recommended_install']}[/yellow]")

    console.print(table)
    return 0 if report["available"] else 1


def cmd_paste(engine: PasteOrchestrator, args: list[str]) -> int:
    """Paste the given text (or stdin) into the focused window.

    ``--json`` prints the attempt record instead of a summary line.
    """
    as_json = "--json" in args
    args = [a for a in args if a != "--json"]
    text = " ".join(args) if args else sys.stdin.read()
    if not text:
        console.print("[yellow]nothing to paste[/yellow]")
        return 1

    try:
        result = engine.paste_text(text)
    except PasteSimulationError as e:
        if not as_json:
            raise
        console.print_json(data={"code": e.code, "reason": e.reason.value, **e.result.to_dict()})
        return 1

    if as_json:
        console.print_json(data=result.to_dict())
        return 0
    console.print(f"[green]pasted via {result.tool_used}[/green]")
    for attempt in result.failed_attempts:
        console.print(f"[dim]  skipped {attempt.tool}: {escape(attempt.detail)}[/dim]")
    return 0


def cmd_read(engine: PasteOrchestrator, args: list[str]) -> int:
    console.print(engine.read_clipboard(), markup=False, highlight=False)
    return 0


def cmd_write(engine: PasteOrchestrator, args: list[str]) -> int:
    engine.write_clipboard(" ".join(args) if args else sys.stdin.read())
    console.print("[green]clipboard set[/green]")
    return 0


def cmd_permission(engine: PasteOrchestrator, args: list[str]) -> int:
    if engine.check_accessibility_permission():
        console.print("[green]accessibility permission granted[/green]")
        return 0
    console.print("[red]accessibility permission missing[/red]")
    return 1


def cmd_help(engine: PasteOrchestrator, args: list[str]) -> int:
    console.print(f"[bold]pasteline {__version__}[/bold]")
    console.print()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Command", style="cyan")
    table.add_column("Description")

    table.add_row("check", "Show available paste tools for this session")
    table.add_row(
        "paste [--json] [TEXT]", "Paste TEXT (or stdin) into the focused window"
    )
    table.add_row("read", "Print the clipboard")
    table.add_row("write [TEXT]", "Set the clipboard to TEXT (or stdin)")
    table.add_row("permission", "Check macOS Accessibility permission")
    table.add_row("help", "Show this help message")

    console.print(table)
    return 0


COMMANDS = {
    "check": cmd_check,
    "paste": cmd_paste,
    "read": cmd_read,
    "write": cmd_write,
    "permission": cmd_permission,
    "help": cmd_help,
}


def report_error(error: PastelineError) -> None:
    console.print(f"[red]{error.code}[/red]: {error}", highlight=False)
    reason = getattr(error, "reason", None)
    if reason in REMEDIATION:
        console.print(f"[dim]{REMEDIATION[reason]}[/dim]")
    if not isinstance(error, PasteSimulationError):
        return
    for attempt in error.failed_attempts:
        detail = escape(attempt.detail)
        console.print(f"[dim]  {attempt.tool}: {attempt.reason.value} {detail}[/dim]")
    if error.recommended_install:
        console.print(f"[yellow]try installing: {error.recommended_install}[/yellow]")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()

    name = argv[0] if argv else "help"
    command = COMMANDS.get(name)
    if command is None:
        console.print(f"[red]unknown command: {name}[/red]")
        console.print("[dim]run 'pasteline help' for available commands[/dim]")
        return 2

    engine = PasteOrchestrator(config=config.load_config())
    try:
        return command(engine, argv[1:])
    except PastelineError as e:
        report_error(e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
