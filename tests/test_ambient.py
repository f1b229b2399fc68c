"""Tests for ambient state preservation."""

import os

import pytest

from railsbox.core.ambient import preserve_state


def test_preserve_state_restores_after_body(tmp_path, monkeypatch):
    """Test cwd and the variable are restored after a normal exit."""
    start = tmp_path / "start"
    elsewhere = tmp_path / "elsewhere"
    start.mkdir()
    elsewhere.mkdir()
    monkeypatch.chdir(start)
    monkeypatch.setenv("RAILS_ENV", "development")

    with preserve_state("RAILS_ENV"):
        os.chdir(elsewhere)
        os.environ["RAILS_ENV"] = "staging"
        assert os.getcwd() == str(elsewhere)

    assert os.getcwd() == str(start)
    assert os.environ["RAILS_ENV"] == "development"


def test_preserve_state_restores_after_exception(tmp_path, monkeypatch):
    """Test state is restored and the exception propagates unchanged."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RAILS_ENV", "development")
    error = RuntimeError("setup failed")

    with pytest.raises(RuntimeError) as exc_info:
        with preserve_state("RAILS_ENV"):
            os.chdir("/")
            os.environ["RAILS_ENV"] = "staging"
            raise error

    assert exc_info.value is error
    assert os.getcwd() == str(tmp_path)
    assert os.environ["RAILS_ENV"] == "development"


def test_preserve_state_unsets_new_variable(tmp_path, monkeypatch):
    """Test a variable that was unset on entry is unset again."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("RAILS_ENV", raising=False)

    with preserve_state("RAILS_ENV"):
        os.environ["RAILS_ENV"] = "staging"

    assert "RAILS_ENV" not in os.environ


def test_preserve_state_leaves_other_variables(tmp_path, monkeypatch):
    """Test only the named variable is restored."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("RAILSBOX_OTHER", "before")

    with preserve_state("RAILS_ENV"):
        os.environ["RAILSBOX_OTHER"] = "after"

    assert os.environ["RAILSBOX_OTHER"] == "after"
