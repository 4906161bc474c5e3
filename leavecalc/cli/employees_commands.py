"""Employees command group: list, add, show status, baseline, remove."""

import json
from datetime import datetime
from typing import Optional

import click
from rich.console import Console

from leavecalc.sdk import (
    get_output_format,
    SettingsError,
    store,
    EmployeeNotFoundError,
    ValidationError,
)
from leavecalc.sdk.entitlement import compute_leave_status, to_iso
from .renderers.status_renderer import fmt_days, render_leave_status


def _today() -> str:
    return datetime.now().strftime("%Y-%m-%d")


def _resolve_format(output_format: Optional[str]) -> str:
    if output_format:
        return output_format
    try:
        return get_output_format()
    except SettingsError as e:
        raise click.ClickException(str(e))


def parse_date_arg(ctx, param, value):
    """Click callback: accept YYYY-MM-DD (or nothing) and return it canonical."""
    if value is None:
        return None
    try:
        return to_iso(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a YYYY-MM-DD date.")


def format_employee_row(employee: dict, status) -> str:
    """Format an employee and their balance as a table row."""
    name = (employee.get("name") or "")[:20]
    dept = (employee.get("department") or "-")[:14]
    hire = employee.get("hire_date", "?")
    net = status.net_balance
    flag = " !" if status.has_shortfall else ""
    return (f"{employee.get('id', ''):<10} {name:<20} {dept:<14} {hire:<12} "
            f"{fmt_days(status.remaining):>9} {fmt_days(status.deficit):>8} {fmt_days(net):>8}{flag}")


@click.group()
def employees():
    """Manage employees and view their leave balances.

    \b
    Examples:
      leave-calc employees list
      leave-calc employees add "Sato Hana" --hire-date 2021-04-01 --department Sales
      leave-calc employees show 1a2b3c4d --as-of 2025-03-31
      leave-calc employees baseline 1a2b3c4d --date 2024-04-01 --days 12.5
      leave-calc employees remove 1a2b3c4d
    """
    pass


@employees.command("list")
@click.option("--as-of", callback=parse_date_arg,
              help="Report balances as of this date (YYYY-MM-DD). Default: today.")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              default=None, help="Output format (default from settings, else text).")
def employees_list(as_of: Optional[str], output_format: Optional[str]):
    """List employees with their current balance."""
    output_format = _resolve_format(output_format)
    as_of = as_of or _today()
    try:
        all_employees = store.list_employees()
        all_records = store.list_leave_records()
    except ValidationError as e:
        raise click.ClickException(str(e))

    by_employee: dict = {}
    for record in all_records:
        by_employee.setdefault(record.get("employee_id"), []).append(record)

    rows = []
    for emp in all_employees:
        status = compute_leave_status(emp, by_employee.get(emp["id"], []), as_of)
        rows.append((emp, status))

    if output_format == "json":
        output = []
        for emp, status in rows:
            output.append({
                **emp,
                "remaining": status.remaining,
                "deficit": status.deficit,
                "net_balance": status.net_balance,
            })
        click.echo(json.dumps(output, indent=2, ensure_ascii=False))
        return

    if not rows:
        click.echo("No employees found.")
        click.echo("\nRun 'leave-calc employees add' to add one.")
        return

    click.echo(f"\nBalances as of {as_of}")
    click.echo("-" * 88)
    click.echo(f"{'ID':<10} {'NAME':<20} {'DEPARTMENT':<14} {'HIRED':<12} "
               f"{'REMAINING':>9} {'DEFICIT':>8} {'NET':>8}")
    for emp, status in rows:
        click.echo(format_employee_row(emp, status))
    click.echo("-" * 88)
    click.echo(f"Total: {len(rows)} employee(s)")


@employees.command("add")
@click.argument("name")
@click.option("--hire-date", required=True, help="Hire date (YYYY-MM-DD).")
@click.option("--department", help="Department name.")
def employees_add(name: str, hire_date: str, department: Optional[str]):
    """Add an employee. Entitlement accrues from the hire date."""
    try:
        emp = store.add_employee(name, hire_date, department=department)
    except ValidationError as e:
        raise click.ClickException(str(e))

    click.echo(f"Added {emp['name']} (id={emp['id']}), hired {emp['hire_date']}")


@employees.command("show")
@click.argument("employee_id")
@click.option("--as-of", callback=parse_date_arg,
              help="Report as of this date (YYYY-MM-DD). Default: today.")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]),
              default=None, help="Output format (default from settings, else text).")
@click.option("--all-grants", is_flag=True, help="Include expired grants (json only).")
def employees_show(employee_id: str, as_of: Optional[str], output_format: Optional[str],
                   all_grants: bool):
    """Show an employee's balance, active grants and leave history."""
    output_format = _resolve_format(output_format)
    try:
        emp = store.get_employee(employee_id)
        status = store.get_leave_status(employee_id, as_of=as_of)
    except (EmployeeNotFoundError, ValidationError) as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        data = status.to_dict()
        if not all_grants:
            data.pop("ledger")
        click.echo(json.dumps({"employee": emp, "status": data}, indent=2, ensure_ascii=False))
        return

    render_leave_status(Console(), emp, status, today=_today())


@employees.command("baseline")
@click.argument("employee_id")
@click.option("--date", "baseline_date", callback=parse_date_arg, help="Date the balance was counted (YYYY-MM-DD).")
@click.option("--days", "baseline_days", type=float, help="Days remaining on that date.")
@click.option("--clear", is_flag=True, help="Remove the baseline.")
def employees_baseline(employee_id: str, baseline_date: Optional[str],
                       baseline_days: Optional[float], clear: bool):
    """Set or clear a migrated balance from legacy records.

    The baseline says --days were left on --date. Paid leave before that
    date is treated as settled; leave from that date on is replayed.
    """
    try:
        if clear:
            store.clear_baseline(employee_id)
            click.echo(f"Cleared baseline for {employee_id}.")
            return

        if not baseline_date or baseline_days is None:
            raise click.UsageError("Both --date and --days are required (or use --clear).")

        emp = store.set_baseline(employee_id, baseline_date, baseline_days)
    except EmployeeNotFoundError as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.ClickException(str(e))

    click.echo(f"Baseline for {emp['name']}: {fmt_days(emp['baseline_days'])} day(s) "
               f"on {emp['baseline_date']}")


@employees.command("remove")
@click.argument("employee_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation.")
def employees_remove(employee_id: str, yes: bool):
    """Remove an employee and all of their leave records."""
    try:
        emp = store.get_employee(employee_id)
    except EmployeeNotFoundError as e:
        raise click.ClickException(str(e))

    if not yes:
        click.confirm(f"Remove {emp['name']} and all their leave records?", abort=True)

    removed = store.remove_employee(employee_id)
    click.echo(f"Removed {emp['name']} and {removed} leave record(s).")
