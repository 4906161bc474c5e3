"""Data command group: backup export, import and reset."""

from pathlib import Path
from typing import Optional

import click

from leavecalc.sdk import backup, ValidationError


@click.group()
def data():
    """Back up, restore or clear all employees and leave records.

    \b
    Examples:
      leave-calc data export                      # ./leave_backup_<today>.json
      leave-calc data export ~/backups/leave.yaml # YAML by file suffix
      leave-calc data import ~/backups/leave.json
      leave-calc data clear
    """
    pass


@data.command("export")
@click.argument("path", required=False, type=click.Path(dir_okay=False))
def data_export(path: Optional[str]):
    """Write every employee and leave record to PATH (.json, .yaml or .yml)."""
    out = backup.export_dataset(Path(path) if path else None)
    click.echo(f"Exported to {out}")


@data.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation.")
def data_import(path: str, yes: bool):
    """Replace ALL current data with the contents of a backup file."""
    try:
        dataset = backup.load_dataset(Path(path))
    except ValidationError as e:
        click.echo(click.style("Invalid backup file:", fg="red"), err=True)
        for err in e.errors:
            click.echo(f"  - {err}", err=True)
        raise click.ClickException("Nothing was imported.")

    if not yes:
        click.confirm(
            f"Import {len(dataset.employees)} employee(s) and {len(dataset.records)} record(s)? "
            f"Current data will be overwritten.",
            abort=True,
        )

    counts = backup.import_dataset(Path(path))
    click.echo(click.style(
        f"Imported {counts['employees']} employee(s) and {counts['records']} record(s).",
        fg="green",
    ))


@data.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation.")
def data_clear(yes: bool):
    """Delete all employees and leave records. Settings are kept."""
    if not yes:
        click.confirm("Delete ALL employees and leave records?", abort=True)

    employees, records = backup.clear_all()
    click.echo(f"Deleted {employees} employee(s) and {records} record(s).")
