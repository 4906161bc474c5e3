"""Leave Calc CLI - Command-line interface for paid-leave tracking."""

import click

from leavecalc import __version__

from .employees_commands import employees as employees_group
from .leave_commands import leave as leave_group, calendar_view
from .data_commands import data as data_group
from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="leave-calc")
def cli():
    """Leave Calc - statutory paid-leave tracking.

    Grants accrue from each employee's hire date (10 days at six months,
    then yearly up to 20 days) and expire two years after they are granted.
    Paid leave draws on the oldest valid grant first; leave that no valid
    grant can cover is reported as a deficit.

    Settings are loaded from (in order):

    \b
    1. LEAVE_CALC_CONFIG_PATH environment variable
    2. ~/.config/leave-calc/settings.json (XDG default)
    """
    pass


cli.add_command(employees_group)
cli.add_command(leave_group)
cli.add_command(calendar_view)
cli.add_command(data_group)
cli.add_command(settings_group)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
