from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

import toml

from .errors import ConfigError


@dataclass
class Config:
    """Persisted defaults for a run."""

    context: int = 0
    color: str = "auto"
    smart_case: bool = True
    hidden: bool = False
    threads: int = 0
    compact: bool = False
    debug: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create Config instance from dictionary."""
        return cls(**{key: value for key, value in data.items() if key in cls.__annotations__})

    def to_dict(self) -> dict:
        """Convert Config to dictionary."""
        return {key: value for key, value in asdict(self).items()}


class ConfigManager:
    """Manages configuration storage and retrieval (TOML version)."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or Path.home() / ".fnr_config.toml"
        self.default_config = Config()

    def save_config(self, **kwargs) -> None:
        """Save configuration to hidden TOML file in user's home directory."""
        try:
            config = self.load_config()
            config_dict = config.to_dict()

            for key, value in kwargs.items():
                if value is not None and key in config_dict:
                    config_dict[key] = value

            with open(self.config_file, "w", encoding="utf-8") as file_obj:
                toml.dump(config_dict, file_obj)

            self.config_file.chmod(0o600)
        except (OSError, TypeError, ConfigError) as exc:
            raise ConfigError(f"Failed to save config: {str(exc)}") from exc

    def load_config(self) -> Config:
        """Load configuration from hidden TOML file."""
        try:
            if self.config_file.exists():
                with open(self.config_file, "r", encoding="utf-8") as file_obj:
                    config_dict = toml.load(file_obj)
                combined_config = {**self.default_config.to_dict(), **config_dict}
                return Config.from_dict(combined_config)
            return self.default_config
        except (OSError, toml.TomlDecodeError) as exc:
            raise ConfigError(f"Failed to load config: {str(exc)}") from exc
