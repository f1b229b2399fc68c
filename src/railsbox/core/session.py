"""Throwaway Rails projects for running verification scripts.

A RailsSession detects the installed Rails, generates a fresh project under
a container directory, rewrites it so it installs against the caller's own
Rails, and then hands itself to a callback that can run scripts and
generators inside the project. The working directory and RAILS_ENV are
restored afterwards, whatever happens.

Example:

    session = RailsSession("/tmp/railsbox", SessionOptions(rails_env="staging"))
    session.run(lambda s: s.run_as_script("puts Rails.env"))
"""

import os
import random
import re
import shlex
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from railsbox.core.ambient import preserve_state
from railsbox.core.errors import (
    CommandError,
    ConfigError,
    ConstructionError,
    FilesystemError,
    GenerationError,
    InstallError,
    PreconditionError,
    VersionDetectionError,
    VersionMismatchError,
)
from railsbox.core.lockfile import default_lockfile, find_locked_spec
from railsbox.core.options import SessionOptions
from railsbox.core.progress import notify, report
from railsbox.core.project_files import (
    ensure_database_entry,
    ensure_environment_file,
    write_gemfile,
)
from railsbox.core.shell import safe_system
from railsbox.core.version import CommandSet, VersionSpec, commands_for

T = TypeVar("T")

RAILS_ENV_VARIABLE = "RAILS_ENV"
BUNDLE_EXEC = "bundle exec"

RAILS_VERSION_OUTPUT = re.compile(r"^\s*Rails\s+(\d+\.\d+\.\d+)", re.IGNORECASE | re.MULTILINE)
PROJECT_CREATED_OUTPUT = re.compile(r"create.*config/boot", re.IGNORECASE | re.DOTALL)
VERSION_REPORT_OUTPUT = re.compile(
    r"^\s*Rails\s+version\s*:\s*(\S+)\s*$", re.IGNORECASE | re.MULTILINE
)
VERSION_REPORT_SCRIPT = 'puts "Rails version: " + Rails.version'
RUBY_ENGINE_COMMAND = 'ruby -e "print RUBY_ENGINE"'


def detect_rails_version() -> VersionSpec:
    """Ask the ``rails`` command which version it is.

    Raises:
        VersionDetectionError: If rails can't be run or its output doesn't
            contain a three-part version number.
    """
    try:
        output = safe_system(
            "rails --version",
            output_must_match=RAILS_VERSION_OUTPUT,
            what_we_were_doing="checking the version of Rails used by the 'rails' command",
        )
    except CommandError as e:
        raise VersionDetectionError(f"Unable to determine version of Rails: {e}") from e

    return VersionSpec.parse(RAILS_VERSION_OUTPUT.search(output).group(1))


@dataclass
class SessionState:
    """Lifecycle record of a RailsSession.

    Transitions:
    - start: running False -> True; only once per session
    - record_version: version None -> VersionSpec, during provisioning
    - record_root: root None -> Path, during provisioning
    - clear_root: root Path -> None, after the project is deleted
    - stop: running True -> False, on every exit from run
    """

    running: bool = False
    used: bool = False
    version: VersionSpec | None = None
    root: Path | None = None

    def start(self) -> None:
        if self.running:
            raise PreconditionError("This Rails session is already running.")
        if self.used:
            raise PreconditionError(
                "This Rails session has already been run; create a new one."
            )
        self.running = True
        self.used = True

    def stop(self) -> None:
        self.running = False

    def record_version(self, version: VersionSpec) -> None:
        if self.version is not None:
            raise PreconditionError(f"Rails version already recorded as {self.version}")
        self.version = version

    def record_root(self, root: Path) -> None:
        if self.root is not None:
            raise PreconditionError(f"Project root already recorded as {self.root}")
        self.root = root

    def clear_root(self) -> None:
        self.root = None


class RailsSession:
    """One throwaway Rails project, provisioned for the span of ``run``.

    Sessions are single-use and not reentrant.
    """

    def __init__(
        self, container_dir: Path | str, options: SessionOptions | None = None
    ) -> None:
        self.container_dir = Path(container_dir).absolute()
        self.options = options or SessionOptions()
        self.rails_env = (self.options.rails_env or "").strip()
        if not self.rails_env:
            raise ConstructionError(
                f"This is not a valid Rails environment: {self.options.rails_env!r}"
            )
        # Resolved now, while we're still in the caller's directory
        self.lockfile = (self.options.lockfile or default_lockfile()).absolute()
        self.state = SessionState()

    @property
    def root(self) -> Path | None:
        """Path of the generated project, once it exists."""
        return self.state.root

    @property
    def version(self) -> str | None:
        """Detected Rails version string, once known."""
        return self.state.version.text if self.state.version else None

    @property
    def version_spec(self) -> VersionSpec | None:
        return self.state.version

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def commands(self) -> CommandSet:
        """Command vocabulary for the detected Rails version."""
        if self.state.version is None:
            raise PreconditionError("The Rails version hasn't been detected yet.")
        return commands_for(self.state.version)

    def must_be_running(self) -> None:
        """Raise PreconditionError unless we're inside ``run``."""
        if not self.running:
            raise PreconditionError(
                "You can only call this while the Rails session is running, "
                "and it isn't right now."
            )

    def run(self, callback: Callable[["RailsSession"], T]) -> T:
        """Provision the project, call ``callback(self)`` inside it, then clean up.

        The project is deleted only after the callback returns, and only
        when ``always_keep_installation`` is off. On failure it is left on
        disk and the exception propagates.

        Returns:
            Whatever the callback returns.
        """
        self.state.start()
        try:
            with preserve_state(RAILS_ENV_VARIABLE):
                self._install()

                os.chdir(self.root)
                os.environ[RAILS_ENV_VARIABLE] = self.rails_env

                result = callback(self)

                if not self.options.always_keep_installation:
                    self._remove_installation()
                return result
        finally:
            self.state.stop()

    def run_script(
        self,
        script_path: Path | str,
        *args: str,
        output_must_match: str | re.Pattern[str] | None = None,
        what_we_were_doing: str | None = None,
    ) -> str:
        """Run a Ruby script inside the project with the Rails runner.

        The script path and each argument are shell-quoted, so paths with
        spaces and arguments with shell characters arrive as single words.

        Returns:
            Combined output of the runner.
        """
        self.must_be_running()
        quoted = [shlex.quote(str(arg)) for arg in (script_path, *args)]
        parts = [BUNDLE_EXEC, self.commands.run_script, *quoted]
        return safe_system(
            " ".join(parts),
            output_must_match=output_must_match,
            what_we_were_doing=what_we_were_doing,
            cwd=self.root,
        )

    def run_as_script(
        self,
        contents: str,
        script_name: str | None = None,
        output_must_match: str | re.Pattern[str] | None = None,
        what_we_were_doing: str | None = None,
    ) -> str:
        """Write ``contents`` to a .rb file in the project root and run it."""
        self.must_be_running()
        name = script_name or f"temp_rails_script_{random.randrange(1_000_000)}"
        if not name.lower().endswith(".rb"):
            name += ".rb"

        text = contents if contents.endswith("\n") else contents + "\n"
        (self.root / name).write_text(text)

        return self.run_script(
            name,
            output_must_match=output_must_match,
            what_we_were_doing=what_we_were_doing,
        )

    def run_generator(self, *args: str) -> str:
        """Run a Rails generator inside the project and return its output."""
        self.must_be_running()
        quoted = [shlex.quote(str(arg)) for arg in args]
        parts = [BUNDLE_EXEC, self.commands.run_generator, *quoted]
        return safe_system(" ".join(parts), cwd=self.root)

    def _install(self) -> None:
        self._detect_version()
        holder = self._create_holder()

        os.chdir(holder)
        self._create_project()

        self.state.record_root(holder / self.options.project_name)
        os.chdir(self.root)

        self._write_gemfile()
        self._ensure_database_entry()
        self._ensure_environment_file()
        self._bundle_install()
        self._check_installed_version()

    def _detect_version(self) -> None:
        with notify("checking version of Rails we're using"):
            version = detect_rails_version()
            report(version.text)

        self.state.record_version(version)

    def _create_holder(self) -> Path:
        stamp = time.strftime("%Y%m%d-%H%M%S")
        holder = self.container_dir / f"rails-{stamp}-{random.randrange(1_000_000)}-{self.version}"
        try:
            holder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Unable to create directory {holder}: {e}") from e
        return holder

    def _create_project(self) -> None:
        name = self.options.project_name
        with notify("creating new Rails installation"):
            try:
                safe_system(
                    f"{self.commands.create_project} {name}",
                    output_must_match=PROJECT_CREATED_OUTPUT,
                    what_we_were_doing="creating a Rails project to run scripts in",
                )
            except CommandError as e:
                raise GenerationError(f"Unable to generate Rails project '{name}': {e}") from e

    def _ruby_engine(self) -> str:
        if self.options.ruby_engine:
            return self.options.ruby_engine
        output = safe_system(
            RUBY_ENGINE_COMMAND,
            what_we_were_doing="checking which Ruby engine we're running on",
        )
        return output.strip()

    def _write_gemfile(self) -> None:
        rails_spec = find_locked_spec(self.lockfile, "rails")
        if rails_spec is None:
            raise ConfigError(f"Can't find a locked spec for 'rails' in {self.lockfile}")

        version = self.state.version
        engine = self._ruby_engine() if version.at_least(3, 2) else None

        with notify("adding required lines to Gemfile"):
            write_gemfile(self.root, rails_spec, version, engine)

    def _ensure_database_entry(self) -> None:
        with notify(f"making sure database.yml has an entry for '{self.rails_env}'"):
            ensure_database_entry(self.root, self.rails_env)

    def _ensure_environment_file(self) -> None:
        with notify(f"making sure there is an environment file for '{self.rails_env}'"):
            ensure_environment_file(self.root, self.rails_env)

    def _bundle_install(self) -> None:
        with notify("running 'bundle install'"):
            try:
                safe_system(
                    "bundle install",
                    what_we_were_doing="running 'bundle install' for our Rails project",
                    cwd=self.root,
                )
            except CommandError as e:
                raise InstallError(f"Unable to install the project's gems: {e}") from e

    def _check_installed_version(self) -> None:
        with notify("checking version of Rails in our new project"):
            output = self.run_as_script(
                VERSION_REPORT_SCRIPT,
                script_name="check_rails_version",
                output_must_match=VERSION_REPORT_OUTPUT,
                what_we_were_doing="running a small script to check the version of Rails we installed",
            )
            installed = VERSION_REPORT_OUTPUT.search(output).group(1)
            if installed != self.version:
                raise VersionMismatchError(detected=self.version, installed=installed)

    def _remove_installation(self) -> None:
        holder = self.root.parent
        try:
            shutil.rmtree(holder)
        except OSError as e:
            raise FilesystemError(f"Unable to remove {holder}: {e}") from e
        self.state.clear_root()
