"""Shell command execution for railsbox.

All external commands (rails, bundle, ruby) go through ``safe_system``.
Commands run with Bundler's own environment stripped, so the caller's
bundle never leaks into the target project.
"""

import os
import re
import subprocess
from pathlib import Path

from railsbox.core.errors import CommandError

# Variables Bundler sets up for the process it runs under
STRIPPED_ENV_PREFIXES = ("BUNDLE_", "BUNDLER_")
STRIPPED_ENV_NAMES = frozenset({"RUBYOPT", "RUBYLIB"})


def clean_environment(base: dict[str, str] | None = None) -> dict[str, str]:
    """Return a copy of the environment with Bundler's variables removed.

    Args:
        base: Environment to clean. Defaults to ``os.environ``.

    Returns:
        A new dict safe to hand to a child process.
    """
    source = os.environ if base is None else base
    return {
        key: value
        for key, value in source.items()
        if key not in STRIPPED_ENV_NAMES and not key.startswith(STRIPPED_ENV_PREFIXES)
    }


def _matches(pattern: str | re.Pattern[str], output: str) -> bool:
    if isinstance(pattern, re.Pattern):
        return pattern.search(output) is not None
    return re.search(pattern, output, re.MULTILINE) is not None


def safe_system(
    command: str,
    *,
    output_must_match: str | re.Pattern[str] | None = None,
    what_we_were_doing: str | None = None,
    cwd: Path | None = None,
) -> str:
    """Run a shell command and return its combined stdout and stderr.

    Args:
        command: Shell command line to run.
        output_must_match: Optional pattern the output must contain.
        what_we_were_doing: Human-readable description used in error messages.
        cwd: Working directory. Defaults to the current directory.

    Returns:
        The command's output.

    Raises:
        CommandError: If the command exits non-zero or its output doesn't
            match ``output_must_match``.
    """
    doing = what_we_were_doing or f"running '{command}'"

    result = subprocess.run(
        command,
        shell=True,
        cwd=cwd,
        env=clean_environment(),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )
    output = result.stdout or ""

    if result.returncode != 0:
        raise CommandError(
            f"Failed while {doing}: '{command}' exited with status "
            f"{result.returncode}. Output:\n{output}",
            command=command,
            output=output,
            returncode=result.returncode,
            what_we_were_doing=what_we_were_doing,
        )

    if output_must_match is not None and not _matches(output_must_match, output):
        shown = getattr(output_must_match, "pattern", output_must_match)
        raise CommandError(
            f"Failed while {doing}: output of '{command}' did not match "
            f"{shown!r}. Output:\n{output}",
            command=command,
            output=output,
            returncode=result.returncode,
            what_we_were_doing=what_we_were_doing,
        )

    return output
