"""
Configuration file support for paren-tools.

Provides hierarchical configuration loading from:
1. Project config: .paren-tools.toml or paren-tools.toml in project root
2. User config: ~/.config/paren-tools/config.toml

Explicit arguments override config file values, and project config overrides user config.

Config files are opt-in: reading and printing use the built-in defaults
unless a loaded configuration is passed in::

    from paren_tools import Config, read_values, render_pretty

    config = Config.load()
    values = read_values(text, config=config)
    print(render_pretty(values, config=config))
"""

import logging
import sys
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from paren_tools.exceptions import ParenToolsError

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

# Config file names to search for in project directories
CONFIG_FILENAMES = [".paren-tools.toml", "paren-tools.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "paren-tools" / "config.toml"

# All known config keys for validation
KNOWN_KEYS = {
    "read": {"strict_whitespace", "max_depth"},
    "pretty": {"width", "indent"},
}


@dataclass
class ReadConfig:
    """Options for reading s-expression text."""

    strict_whitespace: bool = True
    max_depth: int | None = None


@dataclass
class PrettyConfig:
    """Pretty-printer layout options."""

    width: int = 80
    indent: int = 2


@dataclass
class Config:
    """Merged configuration from all sources."""

    read: ReadConfig = field(default_factory=ReadConfig)
    pretty: PrettyConfig = field(default_factory=PrettyConfig)

    # Track which file each setting came from
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        # Load user config first (lower precedence)
        if USER_CONFIG_PATH.exists():
            user_data = _load_toml_file(USER_CONFIG_PATH)
            if user_data:
                _merge_config(config, user_data, str(USER_CONFIG_PATH), sources)

        # Load project config (higher precedence)
        project_config = _find_project_config(start_dir)
        if project_config:
            project_data = _load_toml_file(project_config)
            if project_data:
                _merge_config(config, project_data, str(project_config), sources)

        config._sources = sources
        logger.debug(f"Loaded configuration from {sorted(set(sources.values())) or 'defaults'}")
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")


class ConfigError(ParenToolsError):
    """Invalid or unreadable configuration file."""

    pass


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at .git directory or filesystem root.

    Args:
        start_dir: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        # Stop at .git directory (project root)
        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any] | None:
    """
    Load a TOML file safely.

    Args:
        path: Path to TOML file

    Returns:
        Parsed TOML data or None if no TOML parser is available

    Raises:
        ConfigError: If TOML is invalid
    """
    if tomllib is None:
        warnings.warn(
            "tomli package not installed. Config file support requires 'pip install tomli' for Python < 3.11.",
            stacklevel=2,
        )
        return None

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(
            f"Invalid TOML in {path}: {e}",
            context={"file": str(path)},
        ) from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}", context={"file": str(path)}) from e


def _check_type(value: Any, expected: type, key: str, source: str, allow_none: bool = False) -> Any:
    """Return ``value`` if it has the expected type, otherwise raise ConfigError."""
    if value is None and allow_none:
        return value
    # bool is an int subclass, but true/false is never a valid width
    if isinstance(value, expected) and not (expected is int and isinstance(value, bool)):
        return value
    raise ConfigError(
        f"Invalid value for '{key}' in {source}",
        context={"key": key, "expected": expected.__name__, "got": repr(value)},
    )


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """
    Merge loaded config data into Config object.

    Args:
        config: Config object to update
        data: Raw config data from TOML
        source: Source file path (for tracking)
        sources: Dict to update with source info
    """
    # Warn about unknown top-level keys
    for key in data:
        if key not in KNOWN_KEYS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    # Merge read section
    if "read" in data:
        read_data = data["read"]
        _warn_unknown_keys(read_data, KNOWN_KEYS["read"], "read", source)

        if "strict_whitespace" in read_data:
            config.read.strict_whitespace = _check_type(
                read_data["strict_whitespace"], bool, "read.strict_whitespace", source
            )
            sources["read.strict_whitespace"] = source
        if "max_depth" in read_data:
            config.read.max_depth = _check_type(
                read_data["max_depth"], int, "read.max_depth", source, allow_none=True
            )
            sources["read.max_depth"] = source

    # Merge pretty section
    if "pretty" in data:
        pretty_data = data["pretty"]
        _warn_unknown_keys(pretty_data, KNOWN_KEYS["pretty"], "pretty", source)

        if "width" in pretty_data:
            config.pretty.width = _check_type(pretty_data["width"], int, "pretty.width", source)
            sources["pretty.width"] = source
        if "indent" in pretty_data:
            config.pretty.indent = _check_type(pretty_data["indent"], int, "pretty.indent", source)
            sources["pretty.indent"] = source


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)
