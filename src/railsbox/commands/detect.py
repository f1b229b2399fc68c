"""Detect command for railsbox.

Shows which Rails railsbox would provision and the commands it would use.
"""

import click

from railsbox.core.errors import RailsboxError
from railsbox.core.session import BUNDLE_EXEC, detect_rails_version
from railsbox.core.version import commands_for


@click.command()
def detect() -> None:
    """Detect the installed Rails version.

    Prints the version reported by 'rails --version' followed by the
    commands railsbox uses for that version.

    Examples:

        railsbox detect
    """
    try:
        version = detect_rails_version()
    except RailsboxError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    commands = commands_for(version)
    click.echo(f"Rails {version}")
    click.echo(f"  create project: {commands.create_project} <name>")
    click.echo(f"  run script:     {BUNDLE_EXEC} {commands.run_script} <script>")
    click.echo(f"  run generator:  {BUNDLE_EXEC} {commands.run_generator} <args>")
