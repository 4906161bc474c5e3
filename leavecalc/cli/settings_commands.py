"""Settings command group: where leave data lives and how it is shown."""

from pathlib import Path
from typing import Optional, Tuple

import click

from leavecalc.sdk import (
    load_settings,
    save_settings,
    set_setting,
    get_settings_path,
    get_data_path,
    JsonStore,
    SettingsError,
    ValidationError,
)
from leavecalc.sdk.config import OUTPUT_FORMATS
from leavecalc.sdk.store import EMPLOYEES_KEY, RECORDS_KEY


def _load_settings() -> dict:
    try:
        return load_settings()
    except SettingsError as e:
        raise click.ClickException(str(e))


def count_leave_data(data_dir: Path) -> Tuple[int, int]:
    """(employees, records) stored under data_dir; missing files count as 0."""
    data_store = JsonStore(data_dir)
    return (len(data_store.load(EMPLOYEES_KEY, [])), len(data_store.load(RECORDS_KEY, [])))


def describe_data_file(data_dir: Path, key: str) -> str:
    """One line per data file: missing, unreadable, or how many entries it holds."""
    data_store = JsonStore(data_dir)
    path = data_store.path_for(key)
    if not path.exists():
        return f"  {path.name}: not created yet"
    try:
        return f"  {path.name}: {len(data_store.load(key, []))} entries"
    except ValidationError:
        return f"  {path.name}: unreadable (not valid JSON)"


@click.group()
def settings():
    """Show or change settings (settings.json).

    \b
    Keys:
      data_dir               where employees.json and records.json live
      default_output_format  text or json for list/show commands
    """
    pass


@settings.command("show")
def settings_show():
    """Show settings, the effective data directory and what it holds."""
    current = _load_settings()
    data_dir = get_data_path()

    click.echo(f"Settings file: {get_settings_path()}")
    if current:
        for key, value in current.items():
            click.echo(f"  {key}: {value}")
    else:
        click.echo("  (no settings, using defaults)")

    source = "" if current.get("data_dir") else " (default)"
    click.echo(f"\nData directory: {data_dir}{source}")
    click.echo(describe_data_file(data_dir, EMPLOYEES_KEY))
    click.echo(describe_data_file(data_dir, RECORDS_KEY))


@settings.command("data-dir")
@click.argument("path", required=False, type=click.Path(file_okay=False))
@click.option("--clear", is_flag=True, help="Go back to the default data directory.")
def settings_data_dir(path: Optional[str], clear: bool):
    """Point leave-calc at another data directory.

    Data is not moved. To carry employees and leave records over, run
    'leave-calc data export' before switching and 'data import' after.

    \b
    Examples:
      leave-calc settings data-dir ~/Dropbox/leave-calc
      leave-calc settings data-dir --clear
    """
    if not path and not clear:
        click.echo(f"Data directory: {get_data_path()}")
        return

    current = _load_settings()
    old_dir = get_data_path()

    if clear:
        current.pop("data_dir", None)
        save_settings(current)
    else:
        new_dir = Path(path).expanduser().resolve()
        try:
            new_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise click.ClickException(f"Cannot create {new_dir}: {e}")
        set_setting("data_dir", str(new_dir))

    new_dir = get_data_path()
    if new_dir.resolve() == old_dir.resolve():
        click.echo(f"Data directory unchanged: {new_dir}")
        return

    click.echo(f"Data directory is now: {new_dir}")
    try:
        left_employees, left_records = count_leave_data(old_dir)
        found_employees, found_records = count_leave_data(new_dir)
    except ValidationError as e:
        raise click.ClickException(str(e))

    if left_employees or left_records:
        click.echo(click.style(
            f"Warning: {old_dir} still holds {left_employees} employee(s) and "
            f"{left_records} record(s); they were not moved.",
            fg="yellow",
        ), err=True)
    if found_employees or found_records:
        click.echo(f"Found {found_employees} employee(s) and {found_records} record(s) there.")


@settings.command("output-format")
@click.argument("output_format", type=click.Choice(OUTPUT_FORMATS))
def settings_output_format(output_format: str):
    """Set the default output format for list/show commands."""
    set_setting("default_output_format", output_format)
    click.echo(f"Set default_output_format: {output_format}")
