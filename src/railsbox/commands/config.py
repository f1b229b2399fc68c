"""Config command for railsbox.

Shows or sets the defaults kept in ~/.railsbox/config.json.
"""

import click

from railsbox.core.options import (
    CONFIG_KEYS,
    get_config_path,
    get_container_dir,
    load_options,
    read_config,
    set_config_value,
)


@click.command()
@click.argument("key", required=False)
@click.argument("value", required=False)
def config(key: str | None, value: str | None) -> None:
    """Show or set railsbox defaults.

    With no arguments, prints every setting in effect. With KEY, prints that
    setting. With KEY and VALUE, stores it.

    \b
    Keys:
      rails_env                 Rails environment to provision (default: test)
      project_name              Generated project name (default: rails_project)
      always_keep_installation  Keep projects after successful runs (true/false)
      container_dir             Where projects are created

    Examples:

        railsbox config

        railsbox config rails_env staging
    """
    if key is not None and key not in CONFIG_KEYS:
        click.echo(f"Error: unknown key '{key}'", err=True)
        raise SystemExit(1)

    if value is not None:
        try:
            set_config_value(key, value)
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1)
        click.echo(f"Saved {key} to {get_config_path()}")
        return

    options = load_options()
    effective = {
        "rails_env": options.rails_env,
        "project_name": options.project_name,
        "always_keep_installation": options.always_keep_installation,
        "container_dir": str(get_container_dir()),
    }
    stored = read_config()

    keys = [key] if key is not None else list(CONFIG_KEYS)
    for name in keys:
        source = "" if name in stored else " (default)"
        click.echo(f"{name} = {effective[name]}{source}")
