"""Rewrites of the generated project's configuration files.

Paths are relative to the project root.
"""

import copy
import re
import shutil
from pathlib import Path

import yaml

from railsbox.core.errors import ConfigError
from railsbox.core.lockfile import LockedSpec
from railsbox.core.version import VersionSpec

GEMFILE = Path("Gemfile")
DATABASE_YML = Path("config") / "database.yml"
ENVIRONMENTS_DIR = Path("config") / "environments"

DEFAULT_GEM_SOURCE = "https://rubygems.org"
DOCUMENT_SEPARATOR = re.compile(r"^-+$")


def gemfile_lines(
    rails_spec: LockedSpec, version: VersionSpec, ruby_engine: str | None = None
) -> list[str]:
    """Build the contents of a Gemfile that pins Rails and nothing else.

    Installing against the caller's Rails only works for gems the caller's
    own bundle already has, so the generated Gemfile is cut down to Rails
    itself. Rails 3.2+ won't boot without a sqlite adapter.
    """
    lines = [
        f"source '{DEFAULT_GEM_SOURCE}'",
        f"gem 'rails', {rails_spec.requirement}",
    ]
    if version.at_least(3, 2):
        if ruby_engine == "jruby":
            lines.append("gem 'activerecord-jdbcsqlite3-adapter'")
        else:
            lines.append("gem 'sqlite3'")
    return lines


def write_gemfile(
    root: Path, rails_spec: LockedSpec, version: VersionSpec, ruby_engine: str | None = None
) -> None:
    """Overwrite the project's Gemfile."""
    lines = gemfile_lines(rails_spec, version, ruby_engine)
    (root / GEMFILE).write_text("\n".join(lines) + "\n")


def ensure_database_entry(root: Path, rails_env: str) -> bool:
    """Make sure database.yml has an entry for ``rails_env``.

    Some Rails versions refuse to start without one, even when nothing
    touches the database. The entry is a copy of the ``test`` entry.

    Returns:
        True if the file was rewritten, False if the entry already existed.

    Raises:
        ConfigError: If there is no ``test`` entry to copy.
    """
    path = root / DATABASE_YML
    try:
        config = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Unable to read {path}: {e}") from e

    if rails_env in config:
        return False

    test_entry = config.get("test")
    if test_entry is None:
        raise ConfigError(f"No 'test' entry in {path} to copy for '{rails_env}'")

    # A deep copy keeps the dumper from emitting anchors for shared objects
    config[rails_env] = copy.deepcopy(test_entry)
    dumped = yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
    lines = [line for line in dumped.splitlines() if not DOCUMENT_SEPARATOR.match(line)]
    path.write_text("\n".join(lines) + "\n")
    return True


def ensure_environment_file(root: Path, rails_env: str) -> bool:
    """Make sure config/environments has a settings file for ``rails_env``.

    Returns:
        True if the file was copied from test.rb, False if it already existed.

    Raises:
        ConfigError: If there is no test.rb to copy.
    """
    env_dir = root / ENVIRONMENTS_DIR
    env_file = env_dir / f"{rails_env}.rb"
    if env_file.exists():
        return False

    test_file = env_dir / "test.rb"
    if not test_file.exists():
        raise ConfigError(f"No test.rb file at: {test_file}")

    shutil.copyfile(test_file, env_file)
    return True
