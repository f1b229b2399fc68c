"""CLI entry point for railsbox.

Usage:
    railsbox detect                   # Show the Rails version and its commands
    railsbox run script.rb [ARGS]     # Run a script in a throwaway Rails project
    railsbox eval 'puts Rails.env'    # Run inline Ruby in a throwaway Rails project
    railsbox config [KEY [VALUE]]     # Show or set defaults
"""

import click

from railsbox.commands.config import config
from railsbox.commands.detect import detect
from railsbox.commands.run import eval_code, run


@click.group()
@click.version_option(package_name="railsbox")
def main() -> None:
    """railsbox - throwaway Rails projects for scripted verification.

    Generates a fresh Rails project against the Rails you have installed,
    runs your Ruby in it, and cleans up afterwards.
    """


# Register commands
main.add_command(detect)
main.add_command(run)
main.add_command(eval_code)
main.add_command(config)
