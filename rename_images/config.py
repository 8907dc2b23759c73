"""
Configuration for the image rename tool.

Resolves the application config directory and the max-name-length policy.
Values are loaded once by the caller and passed explicitly into the
planner and executor.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .utils import write_text_atomic

load_dotenv()

APP_NAME = "rename-images"
CONFIG_DIR_ENV = "RENAME_IMAGES_CONFIG_DIR"
MAX_NAME_LENGTH_ENV = "RENAME_IMAGES_MAX_NAME_LENGTH"
MAX_NAME_LENGTH_FILE = "max_name_length.txt"
DEFAULT_MAX_NAME_LENGTH = 50


def get_user_config_dir(app_name: str = APP_NAME) -> Path:
    """Get user configuration directory based on OS."""
    if os.name == "nt":
        base_dir = os.environ.get("APPDATA", os.path.expanduser("~"))
    else:
        base_dir = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(base_dir) / app_name


@dataclass(frozen=True)
class AppHome:
    """The directory holding inputs, rules and settings."""
    path: Path

    def file_path(self, name: str) -> Path:
        """Return the path for a file name under the app home."""
        return self.path / name

    def ensure_dir(self) -> None:
        self.path.mkdir(parents=True, exist_ok=True)

    @classmethod
    def resolve(cls) -> "AppHome":
        """
        Resolve the app home.

        * If RENAME_IMAGES_CONFIG_DIR is set, use that directory
        * Otherwise use the platform user config directory
        """
        override = os.environ.get(CONFIG_DIR_ENV)
        if override:
            return cls(Path(override))
        return cls(get_user_config_dir())


def _parse_length(text: str) -> int | None:
    try:
        value = int(text.strip())
    except (ValueError, TypeError):
        return None
    return value if value >= 0 else None


def load_max_name_length(home: AppHome) -> int:
    """
    Resolve the max name length.

    1. If RENAME_IMAGES_MAX_NAME_LENGTH is set and valid, use it (the file is
       not touched)
    2. Otherwise read `max_name_length.txt` under the app home
    3. Otherwise write the default to that file and return it

    Args:
        home: The app home to read from / write to.

    Returns:
        The resolved max name length.
    """
    env_value = os.environ.get(MAX_NAME_LENGTH_ENV)
    if env_value is not None:
        value = _parse_length(env_value)
        if value is not None:
            return value
        print(f"[WARN] Invalid {MAX_NAME_LENGTH_ENV} '{env_value}', falling back to file/default")

    path = home.file_path(MAX_NAME_LENGTH_FILE)
    if path.exists():
        text = path.read_text(encoding='utf-8')
        value = _parse_length(text)
        if value is not None:
            return value
        print(f"[WARN] Invalid {path} contents: '{text.strip()}', resetting to default")

    set_max_name_length(home, DEFAULT_MAX_NAME_LENGTH)
    return DEFAULT_MAX_NAME_LENGTH


def set_max_name_length(home: AppHome, value: int) -> Path:
    """Persist a max name length. Returns the file written."""
    if value < 0:
        raise ValueError(f"Max name length must be non-negative, got {value}")
    home.ensure_dir()
    path = home.file_path(MAX_NAME_LENGTH_FILE)
    write_text_atomic(path, f"{value}\n")
    return path


def reset_max_name_length(home: AppHome) -> int:
    """Write the default max name length back to the settings file."""
    set_max_name_length(home, DEFAULT_MAX_NAME_LENGTH)
    return DEFAULT_MAX_NAME_LENGTH
