"""Capture and restore process-wide state around a session."""

import os
from collections.abc import Iterator
from contextlib import contextmanager


@contextmanager
def preserve_state(variable: str) -> Iterator[None]:
    """Restore the working directory and one environment variable on exit.

    Both are put back whether the body returns or raises. A variable that
    was unset on entry is unset again on exit.

    Args:
        variable: Name of the environment variable to preserve.
    """
    old_dir = os.getcwd()
    old_value = os.environ.get(variable)

    try:
        yield
    finally:
        os.chdir(old_dir)
        if old_value is None:
            os.environ.pop(variable, None)
        else:
            os.environ[variable] = old_value
