"""Leave command group and month calendar view."""

import calendar
import json
from datetime import datetime
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich import box

from leavecalc.sdk import (
    store,
    EmployeeNotFoundError,
    RecordNotFoundError,
    ValidationError,
)
from .employees_commands import parse_date_arg, _resolve_format
from .renderers.status_renderer import fmt_days

LEAVE_TYPES = ["paid", "special", "other"]

# Names shown per calendar cell before collapsing into "+N more"
CELL_LIMIT = 3


def parse_month(value: Optional[str]) -> str:
    """Validate a YYYY-MM month (default: current month)."""
    if not value:
        return datetime.now().strftime("%Y-%m")
    try:
        return datetime.strptime(value, "%Y-%m").strftime("%Y-%m")
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a YYYY-MM month.")


def format_record_row(record: dict, names: dict) -> str:
    """Format a leave record as a table row."""
    name = names.get(record.get("employee_id"), "unknown")[:20]
    note = record.get("note") or ""
    return (f"{record.get('id', ''):<10} {record.get('date', ''):<12} {name:<20} "
            f"{record.get('type', ''):<8} {fmt_days(record.get('days', 0)):>5}  {note}").rstrip()


@click.group()
def leave():
    """Record and list leave taken.

    \b
    Examples:
      leave-calc leave add 1a2b3c4d 2025-05-02 1
      leave-calc leave add 1a2b3c4d 2025-05-07 0.5 --note "afternoon"
      leave-calc leave add 1a2b3c4d 2025-06-10 2 --type special
      leave-calc leave list 1a2b3c4d
      leave-calc leave list --month 2025-05
      leave-calc leave remove 9f8e7d6c
    """
    pass


@leave.command("add")
@click.argument("employee_id")
@click.argument("date", callback=parse_date_arg)
@click.argument("days", type=float)
@click.option("--type", "leave_type", type=click.Choice(LEAVE_TYPES), default="paid",
              show_default=True, help="Only paid leave draws on the entitlement.")
@click.option("--note", help="Free-text note.")
def leave_add(employee_id: str, date: str, days: float, leave_type: str, note: Optional[str]):
    """Record DAYS of leave (half-day steps) on DATE."""
    try:
        record = store.add_leave_record(employee_id, date, days, type=leave_type, note=note)
    except EmployeeNotFoundError as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.ClickException(str(e))

    click.echo(f"Recorded {fmt_days(record['days'])} day(s) of {record['type']} leave "
               f"on {record['date']} (id={record['id']})")


@leave.command("list")
@click.argument("employee_id", required=False)
@click.option("--month", help="Only records in this month (YYYY-MM).")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              default=None, help="Output format (default from settings, else text).")
def leave_list(employee_id: Optional[str], month: Optional[str], output_format: Optional[str]):
    """List leave records, optionally for one employee or one month."""
    output_format = _resolve_format(output_format)
    if month:
        month = parse_month(month)
    try:
        if employee_id:
            store.get_employee(employee_id)
        records = store.list_leave_records(employee_id=employee_id, month=month)
        names = {e["id"]: e.get("name", "") for e in store.list_employees()}
    except (EmployeeNotFoundError, ValidationError) as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        click.echo(json.dumps(records, indent=2, ensure_ascii=False))
        return

    if not records:
        click.echo("No leave records found.")
        return


    click.echo("-" * 72)
    click.echo(f"{'ID':<10} {'DATE':<12} {'EMPLOYEE':<20} {'TYPE':<8} {'DAYS':>5}  NOTE")
    for record in records:
        click.echo(format_record_row(record, names))
    click.echo("-" * 72)
    click.echo(f"Total: {len(records)} record(s)")


@leave.command("remove")
@click.argument("record_id")
def leave_remove(record_id: str):
    """Delete a leave record."""
    try:
        record = store.remove_leave_record(record_id)
    except RecordNotFoundError as e:
        raise click.ClickException(str(e))

    click.echo(f"Removed leave record {record_id} ({record.get('date')}).")


@click.command("calendar")
@click.argument("month", required=False)
def calendar_view(month: Optional[str]):
    """Show leave taken in MONTH (YYYY-MM, default: this month) as a calendar."""
    month = parse_month(month)
    year_num, month_num = (int(p) for p in month.split("-"))

    try:
        records = store.list_leave_records(month=month)
        names = {e["id"]: e.get("name", "") for e in store.list_employees()}
    except ValidationError as e:
        raise click.ClickException(str(e))

    by_day: dict = {}
    for record in records:
        day = int(record["date"][8:10])
        by_day.setdefault(day, []).append(record)

    table = Table(title=f"{calendar.month_name[month_num]} {year_num}", box=box.ROUNDED,
                  show_lines=True)
    # Sunday-first week, matching calendar.SUNDAY
    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)
    for label in ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"):
        table.add_column(label, vertical="top", min_width=9)

    today = datetime.now().strftime("%Y-%m-%d")
    for week in cal.monthdayscalendar(year_num, month_num):
        cells = []
        for day in week:
            if day == 0:
                cells.append("")
                continue
            cells.append(_render_cell(year_num, month_num, day, by_day.get(day, []), names, today))
        table.add_row(*cells)

    console = Console()
    console.print(table)
    console.print(f"{len(records)} leave record(s) in {month}.")


def _render_cell(year_num: int, month_num: int, day: int, records: list,
                 names: dict, today: str) -> str:
    day_str = f"{year_num:04d}-{month_num:02d}-{day:02d}"
    label = f"[bold]{day}[/bold]" if day_str == today else str(day)
    lines = [label]
    for record in records[:CELL_LIMIT]:
        color = "cyan" if record.get("type") == "paid" else "magenta"
        name = names.get(record.get("employee_id"), "unknown")
        lines.append(f"[{color}]{name}[/{color}]")
    if len(records) > CELL_LIMIT:
        lines.append(f"[dim]+{len(records) - CELL_LIMIT} more[/dim]")
    return "\n".join(lines)
