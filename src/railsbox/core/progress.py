"""Bracketed progress notices, e.g. ``[running 'bundle install'...]``."""

from collections.abc import Iterator
from contextlib import contextmanager

import click


@contextmanager
def notify(message: str) -> Iterator[None]:
    """Print ``[message...`` before the body and ``]`` after it succeeds.

    The closing bracket is left off when the body raises, so a failed step
    is visible in the output.
    """
    click.echo(f"[{message}...", nl=False)
    yield
    click.echo("]", nl=False)


def report(text: str) -> None:
    """Print ``text`` inside the current notice."""
    click.echo(text, nl=False)
