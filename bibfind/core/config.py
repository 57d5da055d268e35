"""Configuration management for bibfind."""

from pathlib import Path
from typing import List, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, field_validator, model_validator

from .library import DEFAULT_PATTERN

DEFAULT_CONFIG_CANDIDATES = (
    Path("bibfind.yaml"),
    Path.home() / ".config" / "bibfind" / "config.yaml",
)

DEFAULT_LOG_FILE = Path.home() / ".local" / "share" / "bibfind" / "logs" / "bibfind.log"


class LibraryConfig(BaseModel):
    path: Path = Path.home() / "papers"
    pattern: str = DEFAULT_PATTERN
    stringify_scalars: bool = True
    output_field: str = "files"

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        return Path(v).expanduser()


class SearchConfig(BaseModel):
    """
    Search categories and their presentation.

    Every record and every query box share `categories`; `labels` and
    `weights`, when given, must have one element per category.
    """
    categories: List[List[str]] = Field(
        default_factory=lambda: [["title"], ["author"], ["year"]]
    )
    labels: Optional[List[str]] = None
    weights: Optional[List[float]] = None
    tick_rate_ms: int = 250

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, v: List[List[str]]) -> List[List[str]]:
        if not v:
            raise ValueError("at least one search category is required")
        for fields in v:
            if not fields:
                raise ValueError("search categories must name at least one field")
        return v

    @field_validator("tick_rate_ms")
    @classmethod
    def validate_tick_rate(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("tick_rate_ms must be positive")
        return v

    @model_validator(mode="after")
    def validate_lengths(self) -> "SearchConfig":
        count = len(self.categories)
        if self.labels is not None and len(self.labels) != count:
            raise ValueError(f"labels has {len(self.labels)} entries, expected {count}")
        if self.weights is not None and len(self.weights) != count:
            raise ValueError(f"weights has {len(self.weights)} entries, expected {count}")
        return self

    @property
    def category_labels(self) -> List[str]:
        if self.labels is not None:
            return list(self.labels)
        return [fields[0] for fields in self.categories]

    @property
    def tick_rate(self) -> float:
        """Tick interval in seconds."""
        return self.tick_rate_ms / 1000.0


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    file: Optional[Path] = DEFAULT_LOG_FILE


class Config(BaseModel):
    """Main configuration for bibfind."""

    library: LibraryConfig = Field(default_factory=LibraryConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """
        Load configuration from a YAML file.

        An explicit path must exist. Without one, the default locations are
        tried in order and built-in defaults are used if none exists.
        """
        if config_path is None:
            for candidate in DEFAULT_CONFIG_CANDIDATES:
                if candidate.exists():
                    config_path = candidate
                    break
            else:
                logger.debug("No config file found, using defaults")
                return cls()
        elif not Path(config_path).exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    def save(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            f.write(self.to_yaml())

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.model_dump(mode="json"), default_flow_style=False, sort_keys=False)
