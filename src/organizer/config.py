"""Configuration management for Organizer."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ORGANIZER_HOME = Path(os.environ.get("ORGANIZER_HOME", Path.home() / "organizer"))
CONFIG_FILE = ORGANIZER_HOME / "config" / "organizer.conf"
DATA_DIR = ORGANIZER_HOME / "data"


@dataclass
class Config:
    """Organizer configuration."""

    data_dir: str = ""
    export_dir: str = ""
    default_sort: str = "deadline"
    default_filter: str = "all"
    log_level: str = "WARNING"

    def resolved_data_dir(self) -> Path:
        """Data directory, falling back to DATA_DIR."""
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR

    def resolved_export_dir(self) -> Path:
        if self.export_dir:
            return Path(self.export_dir).expanduser()
        return self.resolved_data_dir() / "exports"


def _parse_value(value: str) -> str:
    """Strip quotes, or an inline comment when the value is unquoted."""
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from organizer.conf file."""
    path = path or CONFIG_FILE
    config = Config()

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _parse_value(value.strip())

        match key:
            case "data_dir":
                config.data_dir = value
            case "export_dir":
                config.export_dir = value
            case "default_sort":
                config.default_sort = value
            case "default_filter":
                config.default_filter = value
            case "log_level":
                config.log_level = value.upper()
            case _:
                logger.debug(f"Ignoring unknown config key: {key}")

    return config
