"""Run and eval commands for railsbox.

Both provision a throwaway Rails project, run optional generators, then run
Ruby inside it and print the output.
"""

import shlex
from collections.abc import Callable
from pathlib import Path

import click

from railsbox.core.errors import RailsboxError
from railsbox.core.options import get_container_dir, load_options
from railsbox.core.session import RailsSession


def session_options(func: Callable) -> Callable:
    """Options shared by run and eval."""
    decorators = [
        click.option(
            "--rails-env",
            default=None,
            help="Rails environment to provision and activate (default: test)",
        ),
        click.option(
            "--project-name",
            default=None,
            help="Name of the generated Rails project (default: rails_project)",
        ),
        click.option(
            "--container-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Directory to create the project under",
        ),
        click.option(
            "--keep",
            is_flag=True,
            help="Keep the generated project after a successful run",
        ),
        click.option(
            "--generate",
            "generators",
            multiple=True,
            help="Generator arguments to run before the script (repeatable)",
        ),
        click.option(
            "--must-match",
            default=None,
            help="Regular expression the script output must match",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _run_in_session(
    rails_env: str | None,
    project_name: str | None,
    container_dir: Path | None,
    keep: bool,
    generators: tuple[str, ...],
    action: Callable[[RailsSession], str],
) -> None:
    try:
        options = load_options(
            rails_env=rails_env,
            project_name=project_name,
            always_keep_installation=True if keep else None,
        )
    except ValueError as e:
        click.echo(f"Error: bad config file value: {e}", err=True)
        raise SystemExit(1)

    session = None
    try:
        session = RailsSession(container_dir or get_container_dir(), options)

        def callback(s: RailsSession) -> str:
            for generator in generators:
                s.run_generator(*shlex.split(generator))
            return action(s)

        output = session.run(callback)
    except RailsboxError as e:
        click.echo()
        click.echo(f"Error: {e}", err=True)
        if session is not None and session.root is not None:
            click.echo(f"Left Rails project at {session.root} for inspection", err=True)
        raise SystemExit(1)

    # Progress notices don't end their line
    click.echo()
    if session.root is not None:
        click.echo(f"Kept Rails project at {session.root}", err=True)
    click.echo(output, nl=False)


@click.command()
@click.argument("script", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("args", nargs=-1)
@session_options
def run(
    script: Path,
    args: tuple[str, ...],
    rails_env: str | None,
    project_name: str | None,
    container_dir: Path | None,
    keep: bool,
    generators: tuple[str, ...],
    must_match: str | None,
) -> None:
    """Run a Ruby script inside a throwaway Rails project.

    SCRIPT is run with the Rails runner; ARGS are passed after it.

    Examples:

        railsbox run check_models.rb

        railsbox run --rails-env staging --generate "model Widget name:string" check.rb
    """
    script_path = script.resolve()
    _run_in_session(
        rails_env,
        project_name,
        container_dir,
        keep,
        generators,
        lambda s: s.run_script(script_path, *args, output_must_match=must_match),
    )


@click.command("eval")
@click.argument("code")
@session_options
def eval_code(
    code: str,
    rails_env: str | None,
    project_name: str | None,
    container_dir: Path | None,
    keep: bool,
    generators: tuple[str, ...],
    must_match: str | None,
) -> None:
    """Run inline Ruby inside a throwaway Rails project.

    Examples:

        railsbox eval 'puts Rails.env'

        railsbox eval --rails-env staging --must-match staging 'puts Rails.env'
    """
    _run_in_session(
        rails_env,
        project_name,
        container_dir,
        keep,
        generators,
        lambda s: s.run_as_script(code, output_must_match=must_match),
    )
