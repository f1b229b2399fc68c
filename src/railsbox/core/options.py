"""Session options and the railsbox defaults file.

Defaults live in ~/.railsbox/config.json. Recognized keys:
- rails_env: Rails environment to provision and activate
- project_name: Name passed to the Rails generator
- always_keep_installation: Skip deleting the project after a run
- container_dir: Where holder directories are created
"""

import tempfile
from dataclasses import dataclass
from pathlib import Path

import orjson

DEFAULT_RAILS_ENV = "test"
DEFAULT_PROJECT_NAME = "rails_project"

CONFIG_KEYS = ("rails_env", "project_name", "always_keep_installation", "container_dir")
BOOLEAN_KEYS = {"always_keep_installation"}
TRUE_WORDS = {"true", "1", "yes"}
FALSE_WORDS = {"false", "0", "no"}


@dataclass(frozen=True)
class SessionOptions:
    """Configuration for one RailsSession.

    Attributes:
        rails_env: Rails environment to provision and activate
        always_keep_installation: Keep the project on disk after a successful run
        project_name: Name of the generated Rails project
        lockfile: Gemfile.lock to read the Rails requirement from (None = default)
        ruby_engine: Ruby engine of the host (None = ask ruby)
    """

    rails_env: str = DEFAULT_RAILS_ENV
    always_keep_installation: bool = False
    project_name: str = DEFAULT_PROJECT_NAME
    lockfile: Path | None = None
    ruby_engine: str | None = None


def get_config_path() -> Path:
    """Get the path to railsbox's config file."""
    return Path.home() / ".railsbox" / "config.json"


def read_config() -> dict:
    """Read railsbox config, returning empty dict if not found."""
    config_path = get_config_path()
    if not config_path.exists():
        return {}
    try:
        content = config_path.read_bytes()
        return orjson.loads(content) if content else {}
    except (orjson.JSONDecodeError, OSError):
        return {}


def write_config(config: dict) -> None:
    """Write railsbox config."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_bytes(orjson.dumps(config, option=orjson.OPT_INDENT_2))


def _parse_boolean(key: str, value: str | bool) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered not in TRUE_WORDS | FALSE_WORDS:
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return lowered in TRUE_WORDS


def set_config_value(key: str, value: str) -> None:
    """Set one key in the config file, converting booleans from text.

    Raises:
        KeyError: If the key isn't a recognized option.
        ValueError: If a boolean key gets something other than true/false.
    """
    if key not in CONFIG_KEYS:
        raise KeyError(key)

    parsed: str | bool = _parse_boolean(key, value) if key in BOOLEAN_KEYS else value

    config = read_config()
    config[key] = parsed
    write_config(config)


def get_container_dir() -> Path:
    """Get the directory holder directories are created under.

    Returns:
        The configured container_dir, or <tmp>/railsbox.
    """
    configured = read_config().get("container_dir")
    if configured:
        return Path(configured).expanduser()
    return Path(tempfile.gettempdir()) / "railsbox"


def load_options(**overrides) -> SessionOptions:
    """Build SessionOptions from the config file plus explicit overrides.

    Overrides that are None are ignored, so unset CLI flags fall through to
    the config file and then to the built-in defaults. Config file values
    are hand-editable, so they're coerced to the option's type here.

    Raises:
        ValueError: If the config file holds a non-boolean for a boolean key.
    """
    config = read_config()
    values: dict[str, str | bool] = {}
    for key in ("rails_env", "project_name", "always_keep_installation"):
        if key not in config:
            continue
        if key in BOOLEAN_KEYS:
            values[key] = _parse_boolean(key, config[key])
        else:
            values[key] = str(config[key])
    values.update({key: value for key, value in overrides.items() if value is not None})
    return SessionOptions(**values)
