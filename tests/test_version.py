"""Tests for version parsing and command dispatch."""

import pytest

from railsbox.core.version import (
    LEGACY_COMMANDS,
    MODERN_COMMANDS,
    VersionSpec,
    commands_for,
)


def test_parse_version():
    """Test a three-part version is split into major and minor."""
    version = VersionSpec.parse("3.2.13")

    assert version.major == 3
    assert version.minor == 2
    assert version.major_and_minor == 3.2
    assert str(version) == "3.2.13"


def test_parse_prerelease_version():
    """Test trailing prerelease tags are kept in the text."""
    version = VersionSpec.parse("7.1.0.alpha")

    assert version.major == 7
    assert version.text == "7.1.0.alpha"


def test_parse_invalid_version():
    """Test strings without three dotted numbers are rejected."""
    for text in ["", "rails", "3.2", "v3.2.1"]:
        with pytest.raises(ValueError, match="Not a Rails version"):
            VersionSpec.parse(text)


def test_major_and_minor_rails_4():
    """Test 4.0.0 gives 4.0."""
    assert VersionSpec.parse("4.0.0").major_and_minor == 4.0


def test_at_least_boundaries():
    """Test at_least compares major and minor as integers."""
    assert VersionSpec.parse("3.2.0").at_least(3, 2)
    assert not VersionSpec.parse("3.1.9").at_least(3, 2)
    assert VersionSpec.parse("3.10.0").at_least(3, 2)
    assert VersionSpec.parse("4.0.0").at_least(3, 2)
    assert not VersionSpec.parse("2.3.8").at_least(3)


def test_commands_for_legacy():
    """Test Rails 1 and 2 use script/runner and script/generate."""
    for text in ["1.2.6", "2.3.8"]:
        assert commands_for(VersionSpec.parse(text)) is LEGACY_COMMANDS

    assert LEGACY_COMMANDS.create_project == "rails"
    assert LEGACY_COMMANDS.run_script == "ruby script/runner"
    assert LEGACY_COMMANDS.run_generator == "script/generate"


def test_commands_for_modern():
    """Test Rails 3 and later use the rails command."""
    for text in ["3.0.0", "3.2.13", "4.0.0", "7.1.2"]:
        assert commands_for(VersionSpec.parse(text)) is MODERN_COMMANDS

    assert MODERN_COMMANDS.create_project == "rails new"
    assert MODERN_COMMANDS.run_script == "rails runner"
    assert MODERN_COMMANDS.run_generator == "rails generate"
