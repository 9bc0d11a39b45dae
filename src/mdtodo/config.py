"""Configuration and list resolution for the todo CLI.

The configuration is loaded once per invocation and handed to whatever
needs it; the list core itself only ever sees resolved file paths.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MDTODO_CONFIG"
DEFAULT_CONFIG_PATH = "~/.todo/config.yaml"
DEFAULT_MAIN_DIR = "~/.todo/lists"
DEFAULT_GENERAL_LIST = "general"
LIST_SUFFIX = ".md"

# Files picked up as "the list for this directory"
DIRECTORY_LIST_NAMES = ("TODO.md", "todo.md")


@dataclass
class ListMetadata:
    """A named list and the file it lives in."""
    name: str
    path: Path

    def __str__(self) -> str:
        return f"{self.name}: {self.path}"


@dataclass
class ConfigModel:
    """User configuration."""

    # All lists created by name live in main_dir
    main_dir: str = DEFAULT_MAIN_DIR
    # Used when no list is named and the current directory has none
    general_list: str = DEFAULT_GENERAL_LIST
    # Lists registered from elsewhere on disk: name -> path
    lists: Dict[str, str] = field(default_factory=dict)

    # Display preferences
    no_color: bool = False
    use_emoji: bool = True

    def __post_init__(self):
        self.main_dir = os.path.expanduser(self.main_dir)
        if not self.general_list:
            self.general_list = DEFAULT_GENERAL_LIST

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data = {
            "main_dir": self.main_dir,
            "general_list": self.general_list,
            "lists": dict(self.lists),
            "no_color": self.no_color,
            "use_emoji": self.use_emoji,
        }
        return yaml.dump(data, default_flow_style=False, allow_unicode=True)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ConfigModel":
        """Deserialize config from YAML.

        Raises:
            ConfigError: The YAML is malformed or has values of the wrong type
        """
        try:
            data = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid config file: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Invalid config file: expected a mapping at the top level")

        known = {f.name for f in fields(cls)}
        for key in sorted(set(data) - known):
            logger.warning(f"Ignoring unknown config key '{key}'")
        data = {key: value for key, value in data.items() if key in known}

        for key in ("main_dir", "general_list"):
            if key in data and not isinstance(data[key], str):
                raise ConfigError(f"Invalid config file: '{key}' must be a string")
        for key in ("no_color", "use_emoji"):
            if key in data and not isinstance(data[key], bool):
                raise ConfigError(f"Invalid config file: '{key}' must be true or false")
        lists = data.get("lists")
        if lists is None:
            lists = {}
        if not isinstance(lists, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in lists.items()
        ):
            raise ConfigError("Invalid config file: 'lists' must map list names to paths")
        data["lists"] = lists

        return cls(**data)

    def list_path(self, name: str) -> Path:
        """Get the file path for a list name."""
        if name in self.lists:
            return Path(os.path.expanduser(self.lists[name]))
        return Path(self.main_dir) / f"{name}{LIST_SUFFIX}"

    def general_list_path(self) -> Path:
        return self.list_path(self.general_list)

    def existing_lists(self) -> List[ListMetadata]:
        """Registered lists followed by the list files in main_dir."""
        results = [ListMetadata(name, self.list_path(name)) for name in self.lists]
        main_dir = Path(self.main_dir)
        if main_dir.is_dir():
            for list_file in sorted(main_dir.glob(f"*{LIST_SUFFIX}")):
                if list_file.stem not in self.lists:
                    results.append(ListMetadata(list_file.stem, list_file))
        return results

    def register_list(self, name: str, path: Union[str, Path]) -> ListMetadata:
        """Register a list that lives outside main_dir."""
        resolved = Path(path).expanduser().resolve()
        self.lists[name] = str(resolved)
        logger.debug(f"Registered list '{name}' at {resolved}")
        return ListMetadata(name, resolved)

    def ensure_main_dir(self) -> None:
        Path(self.main_dir).mkdir(parents=True, exist_ok=True)


def default_config_path() -> Path:
    """Config path from $MDTODO_CONFIG, else ~/.todo/config.yaml."""
    return Path(os.path.expanduser(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH))


def load_config(config_path: Optional[Path] = None) -> ConfigModel:
    """Load configuration from file, writing the defaults on first use.

    Raises:
        ConfigError: The file can't be read or is invalid
    """
    if config_path is None:
        config_path = default_config_path()

    if not config_path.exists():
        config = ConfigModel()
        save_config(config, config_path)
        logger.info(f"Created default configuration at {config_path}")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_content = f.read()
    except OSError as e:
        raise ConfigError(f"Couldn't read the config at '{config_path}': {e}") from e

    config = ConfigModel.from_yaml(yaml_content)
    logger.debug(f"Loaded configuration from {config_path}")
    return config


def save_config(config: ConfigModel, config_path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    if config_path is None:
        config_path = default_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(config.to_yaml())
    except OSError as e:
        raise ConfigError(f"Couldn't write the config to '{config_path}': {e}") from e
    logger.debug(f"Configuration saved to {config_path}")


def resolve_list(
    config: ConfigModel,
    name: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> ListMetadata:
    """Work out which list a command applies to.

    An explicitly named list wins. Otherwise a TODO.md in the current
    directory is used, and failing that the general list.
    """
    if name:
        return ListMetadata(name, config.list_path(name))

    directory = Path(cwd) if cwd is not None else Path.cwd()
    for candidate in DIRECTORY_LIST_NAMES:
        list_file = directory / candidate
        if list_file.is_file():
            return ListMetadata(directory.name or candidate, list_file)

    return ListMetadata(config.general_list, config.general_list_path())
