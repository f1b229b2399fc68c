"""Rails version parsing and the per-version command vocabulary."""

import re
from dataclasses import dataclass

VERSION_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)")


@dataclass(frozen=True)
class VersionSpec:
    """A parsed ``major.minor.patch`` Rails version.

    Attributes:
        text: The version string as reported (e.g., "3.2.13")
        major: Major version number
        minor: Minor version number
    """

    text: str
    major: int
    minor: int

    @classmethod
    def parse(cls, text: str) -> "VersionSpec":
        """Parse a version string, ignoring anything after the patch number.

        Raises:
            ValueError: If the string doesn't start with three dotted numbers.
        """
        match = VERSION_PATTERN.match(text.strip())
        if not match:
            raise ValueError(f"Not a Rails version: {text!r}")
        return cls(text=text.strip(), major=int(match.group(1)), minor=int(match.group(2)))

    @property
    def major_and_minor(self) -> float:
        """Major and minor as a float, e.g. 4.0 for "4.0.0"."""
        return float(f"{self.major}.{self.minor}")

    def at_least(self, major: int, minor: int = 0) -> bool:
        """Compare by integer pairs, so 3.10 ranks above 3.2."""
        return (self.major, self.minor) >= (major, minor)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class CommandSet:
    """The command words one family of Rails versions understands."""

    create_project: str
    run_script: str
    run_generator: str


LEGACY_COMMANDS = CommandSet(
    create_project="rails",
    run_script="ruby script/runner",
    run_generator="script/generate",
)

MODERN_COMMANDS = CommandSet(
    create_project="rails new",
    run_script="rails runner",
    run_generator="rails generate",
)

# (highest major version in the bracket, commands); None closes the table
COMMAND_TABLE: tuple[tuple[int | None, CommandSet], ...] = (
    (2, LEGACY_COMMANDS),
    (None, MODERN_COMMANDS),
)


def commands_for(version: VersionSpec) -> CommandSet:
    """Look up the command vocabulary for a Rails version."""
    for highest_major, commands in COMMAND_TABLE:
        if highest_major is None or version.major <= highest_major:
            return commands
    raise LookupError(f"No command set for Rails {version}")
