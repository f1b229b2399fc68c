"""Test helpers shared across railsbox tests."""

import os
from pathlib import Path
from types import SimpleNamespace

from railsbox.core.session import RUBY_ENGINE_COMMAND

DATABASE_YML = """\
default: &default
  adapter: sqlite3
  pool: 5
  timeout: 5000

development:
  <<: *default
  database: db/development.sqlite3

test:
  <<: *default
  database: db/test.sqlite3
"""

TEST_ENVIRONMENT_RB = """\
Rails.application.configure do
  config.cache_classes = true
end
"""

GEM_LOCKFILE = """\
GEM
  remote: https://rubygems.org/
  specs:
    actionpack (3.2.13)
      rack (~> 1.4.5)
    rails (3.2.13)
      actionpack (= 3.2.13)

PLATFORMS
  ruby

DEPENDENCIES
  rails (= 3.2.13)
"""


class FakeRails:
    """Stands in for subprocess.run behind railsbox.core.shell.

    Answers the commands a session issues the way a real Rails install
    would, and generates a minimal project skeleton for the create command.

    Attributes:
        version: What 'rails --version' reports
        installed_version: What the generated project reports (None = version)
        ruby_engine: What RUBY_ENGINE prints
        install_returncode: Exit status of 'bundle install'
        create_output: Output of the create command (None = success output)
        outputs: Output for bundle exec commands, keyed by command prefix
        calls: (command, cwd, env) for every command run
    """

    def __init__(self) -> None:
        self.version = "3.2.13"
        self.installed_version: str | None = None
        self.ruby_engine = "ruby"
        self.install_returncode = 0
        self.create_output: str | None = None
        self.outputs: dict[str, str] = {}
        self.calls: list[tuple[str, Path, dict]] = []

    @property
    def commands(self) -> list[str]:
        return [command for command, _, _ in self.calls]

    def __call__(self, command, **kwargs):
        cwd = Path(kwargs.get("cwd") or os.getcwd())
        self.calls.append((command, cwd, kwargs.get("env") or {}))
        returncode, stdout = self._answer(command, cwd)
        return SimpleNamespace(returncode=returncode, stdout=stdout)

    def _answer(self, command: str, cwd: Path) -> tuple[int, str]:
        if command == "rails --version":
            return 0, f"Rails {self.version}\n"
        if command == RUBY_ENGINE_COMMAND:
            return 0, self.ruby_engine
        if command.startswith("rails "):
            name = command.split()[-1]
            self._generate(cwd / name)
            return 0, self.create_output or (
                "      create  \n      create  config/boot.rb\n"
            )
        if command == "bundle install":
            if self.install_returncode:
                return self.install_returncode, "Could not find gem 'sqlite3'\n"
            return 0, "Bundle complete!\n"
        if "check_rails_version" in command:
            return 0, f"Rails version: {self.installed_version or self.version}\n"
        for prefix, output in self.outputs.items():
            if command.startswith(prefix):
                return 0, output
        return 0, "ok\n"

    def _generate(self, root: Path) -> None:
        (root / "config" / "environments").mkdir(parents=True)
        (root / "config" / "boot.rb").write_text("# boot\n")
        (root / "config" / "database.yml").write_text(DATABASE_YML)
        (root / "config" / "environments" / "test.rb").write_text(TEST_ENVIRONMENT_RB)
        (root / "Gemfile").write_text("source 'https://rubygems.org'\ngem 'rails'\ngem 'pg'\n")


