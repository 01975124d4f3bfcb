"""
Global configuration settings for the music player application.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Application settings
APP_NAME = "fsmp"
QUEUE_WINDOW_SIZE = 9
AUDIO_EXTENSIONS = (".flac", ".mp3", ".wav", ".ogg", ".m4a", ".aac", ".opus", ".wma")

CONFIG_DIR = Path(os.environ.get("FSMP_CONFIG_DIR", Path.home() / ".config" / APP_NAME))
CONFIG_FILE = CONFIG_DIR / "config.json"
QUEUE_STATE_FILE = CONFIG_DIR / "queue_state.json"
CATALOG_FILE = CONFIG_DIR / "library.json"

# UI settings
console = Console()

logger = logging.getLogger("fsmp.config")


@dataclass
class AppConfig:
    """Settings stored in config.json."""

    queue_state_path: str = str(QUEUE_STATE_FILE)
    catalog_path: str = str(CATALOG_FILE)
    default_volume: int = 75
    remember_queue: bool = True
    log_level: str = "INFO"


def save_config(config: AppConfig, path: Optional[Path] = None) -> None:
    """Write the configuration as indented JSON, creating its directory."""
    path = Path(path or CONFIG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(config), f, indent=2, ensure_ascii=False)


def _validate(data) -> None:
    """Raise ValueError unless every known key holds a value of its default's type."""
    if not isinstance(data, dict):
        raise ValueError("config root must be a JSON object")
    defaults = AppConfig()
    for f in fields(AppConfig):
        if f.name in data and type(data[f.name]) is not type(getattr(defaults, f.name)):
            raise ValueError(f"{f.name} must be of type {type(getattr(defaults, f.name)).__name__}")
    if not 0 <= data.get("default_volume", defaults.default_volume) <= 100:
        raise ValueError("default_volume must be between 0 and 100")


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Load the configuration file.

    A missing or corrupt file, or one holding values of the wrong type, is
    replaced by the defaults. An unreadable file yields the defaults and is
    left alone. Unknown keys are ignored.

    Args:
        path: Location of config.json, defaults to CONFIG_FILE

    Returns:
        The loaded configuration
    """
    path = Path(path or CONFIG_FILE)
    if not path.exists():
        config = AppConfig()
        save_config(config, path)
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        _validate(data)
    except OSError as e:
        logger.warning("Cannot read config file %s, using defaults: %s", path, e)
        return AppConfig()
    except (ValueError, RecursionError) as e:
        logger.warning("Corrupt config file %s, restoring defaults: %s", path, e)
        config = AppConfig()
        save_config(config, path)
        return config

    known = {f.name for f in fields(AppConfig)}
    return AppConfig(**{key: value for key, value in data.items() if key in known})


def setup_logging(level: str = "INFO") -> None:
    """Route the fsmp loggers to the shared rich console."""
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    root = logging.getLogger("fsmp")
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.propagate = False
