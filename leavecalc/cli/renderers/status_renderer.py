"""Rich renderer for employee leave status.

Transforms SDK LeaveStatus output into formatted Rich tables.
"""

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from leavecalc.sdk.entitlement import LeaveStatus


TYPE_LABELS = {
    "paid": "Paid leave",
    "special": "Special leave",
    "other": "Other leave",
}


def render_leave_status(console: Console, employee: dict, status: LeaveStatus, today: str) -> None:
    """Render one employee's leave status.

    Args:
        console: Rich Console instance
        employee: Stored employee dict
        status: SDK output from get_leave_status()
        today: Current date; records after it are shown as planned
    """
    _render_header(console, employee, status)

    if status.has_shortfall:
        console.print(Panel(
            f"[red]Net balance is {fmt_days(status.net_balance)} day(s). "
            f"Leave beyond the entitlement is unpaid absence and needs a salary deduction.[/red]",
            title="Shortfall",
            border_style="red"
        ))

    _render_summary(console, status)
    _render_grants(console, status)
    _render_history(console, status, today)


def _render_header(console: Console, employee: dict, status: LeaveStatus) -> None:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value")

    table.add_row("Employee", f"{employee.get('name')} ({employee.get('id')})")
    table.add_row("Department", employee.get("department") or "[dim]unassigned[/dim]")
    table.add_row("Hire date", employee.get("hire_date", "?"))
    if employee.get("baseline_date") and employee.get("baseline_days") is not None:
        table.add_row(
            "Baseline",
            f"{fmt_days(employee['baseline_days'])} day(s) on {employee['baseline_date']}",
        )
    table.add_row("As of", status.as_of)

    console.print(Panel(table, title="Employee", border_style="dim"))


def _render_summary(console: Console, status: LeaveStatus) -> None:
    table = Table(title="Balance", box=box.ROUNDED)
    table.add_column("Granted", justify="right")
    table.add_column("Used", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Deficit", justify="right")
    table.add_column("Net", justify="right")

    net_style = "bold red" if status.has_shortfall else "bold green"
    deficit = fmt_days(status.deficit)
    table.add_row(
        fmt_days(status.total_granted),
        fmt_days(status.total_used),
        fmt_days(status.remaining),
        f"[red]{deficit}[/red]" if status.deficit > 0 else deficit,
        f"[{net_style}]{fmt_days(status.net_balance)}[/{net_style}]",
    )
    console.print(table)


def _render_grants(console: Console, status: LeaveStatus) -> None:
    if not status.grants:
        console.print("[dim]No active grants.[/dim]")
        return

    table = Table(title="Active grants", box=box.ROUNDED)
    table.add_column("Granted on")
    table.add_column("Expires")
    table.add_column("Days", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Source")

    for grant in status.grants:
        remaining = fmt_days(grant.remaining)
        table.add_row(
            grant.date,
            grant.expiry_date,
            fmt_days(grant.days),
            remaining if grant.remaining > 0 else f"[dim]{remaining}[/dim]",
            "baseline" if grant.is_baseline else "statutory",
        )
    console.print(table)


def _render_history(console: Console, status: LeaveStatus, today: str) -> None:
    if not status.history:
        console.print("[dim]No leave records.[/dim]")
        return

    table = Table(title="Leave history", box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Days", justify="right")
    table.add_column("Status")
    table.add_column("Note")

    for entry in status.history:
        table.add_row(
            entry.get("id", ""),
            entry.get("date", ""),
            TYPE_LABELS.get(entry.get("type"), entry.get("type", "?")),
            fmt_days(entry.get("days", 0)),
            describe_entry(entry, today),
            entry.get("note") or "",
        )
    console.print(table)


def describe_entry(entry: dict, today: str) -> str:
    """Status label for a history entry: deduction, planned or plain."""
    days = entry.get("days", 0)
    deficit = entry.get("deficit_days", 0)

    if deficit > 0:
        if deficit < days:
            return (f"[red]-{fmt_days(deficit)} deducted[/red], "
                    f"{fmt_days(days - deficit)} paid")
        return f"[red]-{fmt_days(deficit)} deducted[/red]"
    if entry.get("date", "") > today:
        return "[blue]planned[/blue]"
    if entry.get("type") == "paid":
        return "[green]paid[/green]"
    return "[dim]not deducted[/dim]"


def fmt_days(days: float | None) -> str:
    """Format a day count: 10, 2.5, -1."""
    if days is None:
        return "-"
    return f"{days:g}"
