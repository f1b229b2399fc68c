"""Shared pytest fixtures for railsbox tests."""

import pytest

from railsbox.core.options import SessionOptions
from railsbox.core.session import RailsSession

from tests.helpers import GEM_LOCKFILE, FakeRails


@pytest.fixture(autouse=True)
def mock_config_path(tmp_path, monkeypatch):
    """Point the railsbox config file into tmp_path.

    Keeps tests from reading or writing the real ~/.railsbox/config.json.
    """
    config_path = tmp_path / "home" / ".railsbox" / "config.json"
    monkeypatch.setattr("railsbox.core.options.get_config_path", lambda: config_path)
    monkeypatch.delenv("RAILS_ENV", raising=False)
    return config_path


@pytest.fixture
def fake_rails(monkeypatch):
    """Replace subprocess.run in the shell module with a FakeRails."""
    fake = FakeRails()
    monkeypatch.setattr("railsbox.core.shell.subprocess.run", fake)
    return fake


@pytest.fixture
def lockfile(tmp_path):
    """A Gemfile.lock that pins rails 3.2.13 from rubygems."""
    path = tmp_path / "outer" / "Gemfile.lock"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(GEM_LOCKFILE)
    return path


@pytest.fixture
def container_dir(tmp_path):
    """Directory sessions create their holder directories under."""
    return tmp_path / "container"


@pytest.fixture
def make_session(container_dir, lockfile):
    """Build a RailsSession with the test lockfile and the given options."""

    def factory(**options) -> RailsSession:
        options.setdefault("lockfile", lockfile)
        return RailsSession(container_dir, SessionOptions(**options))

    return factory
