"""Look up gems in a Bundler lockfile.

Reads the ``GIT``, ``GEM`` and ``PATH`` sections of a ``Gemfile.lock``:

    GIT
      remote: https://github.com/rails/rails.git
      revision: 0123abcd
      specs:
        rails (7.1.0.alpha)
          actionpack (= 7.1.0.alpha)

Top-level specs sit at four spaces of indentation; their dependencies at six.
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path

SOURCE_SECTIONS = {"GIT", "GEM", "PATH"}
SPEC_LINE = re.compile(r"^    (\S+) \(([^)]+)\)\s*$")
REMOTE_LINE = re.compile(r"^  remote: (.+?)\s*$")


@dataclass(frozen=True)
class LockedSpec:
    """A gem as resolved by the caller's bundle.

    Attributes:
        name: Gem name
        version: Locked version string
        source: Git remote URI when the gem comes from git, else None
    """

    name: str
    version: str
    source: str | None = None

    @property
    def requirement(self) -> str:
        """The Gemfile requirement that pins this exact gem."""
        if self.source:
            return f":git => '{self.source}'"
        return f"'{self.version}'"


def default_lockfile() -> Path:
    """Get the lockfile of the bundle we are running under.

    Uses ``BUNDLE_GEMFILE`` when set, else ``Gemfile.lock`` in the current
    directory.
    """
    gemfile = os.environ.get("BUNDLE_GEMFILE")
    if gemfile:
        return Path(f"{gemfile}.lock").absolute()
    return (Path.cwd() / "Gemfile.lock").absolute()


def parse_lockfile(text: str) -> dict[str, LockedSpec]:
    """Parse lockfile text into a mapping of gem name to spec."""
    specs: dict[str, LockedSpec] = {}
    section = None
    remote = None

    for line in text.splitlines():
        if line and not line[0].isspace():
            section = line.strip()
            remote = None
            continue
        if section not in SOURCE_SECTIONS:
            continue

        if match := REMOTE_LINE.match(line):
            remote = match.group(1)
            continue

        if match := SPEC_LINE.match(line):
            name, version = match.groups()
            # Only the first source wins, same as Bundler
            if name not in specs:
                specs[name] = LockedSpec(
                    name=name,
                    version=version,
                    source=remote if section == "GIT" else None,
                )

    return specs


def find_locked_spec(lockfile: Path, name: str) -> LockedSpec | None:
    """Find a gem in a lockfile.

    Returns:
        The locked spec, or None if the lockfile doesn't exist or doesn't
        mention the gem.
    """
    if not lockfile.exists():
        return None
    return parse_lockfile(lockfile.read_text()).get(name)
