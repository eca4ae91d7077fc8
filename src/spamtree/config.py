"""Configuration management for spamtree."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, TypeVar

import yaml

from .exceptions import ConfigurationError
from .features import DEFAULT_FEATURES, resolve_feature
from .tree import Hyperparameters

_Section = TypeVar("_Section")


@dataclass
class PathConfig:
    """Locations of the labelled CSV files."""

    training_data: Path = Path("training-data.csv")
    test_data: Path = Path("test-data.csv")

    def __post_init__(self):
        self.training_data = Path(self.training_data)
        self.test_data = Path(self.test_data)


@dataclass
class ModelConfig:
    """Feature selection and tree hyperparameters.

    ``features`` accepts column names or display labels (``"free"``, ``"$"``),
    either as a list or as a single name, and is stored as column names.
    """

    features: Tuple[str, ...] = DEFAULT_FEATURES
    min_split: int = 2
    min_bucket: int = 1
    max_depth: int = 5

    def __post_init__(self):
        features = self.features
        if isinstance(features, str):
            features = (features,)
        elif not isinstance(features, (list, tuple)):
            raise ConfigurationError(f"model.features must be a name or a list of names, got {features!r}")
        self.features = tuple(resolve_feature(str(name)) for name in features)

    def hyperparams(self) -> Hyperparameters:
        """Validated :class:`Hyperparameters`; raises ``ConfigurationError`` when out of range."""
        return Hyperparameters(min_split=self.min_split, min_bucket=self.min_bucket, max_depth=self.max_depth)


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    format: str = "short"


@dataclass
class Config:
    """Top-level configuration container."""

    paths: PathConfig = field(default_factory=PathConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data view of the config, suitable for ``yaml.safe_dump``."""
        return {
            "paths": {name: str(value) for name, value in asdict(self.paths).items()},
            "model": {**asdict(self.model), "features": list(self.model.features)},
            "logging": asdict(self.logging),
        }


def load_config(path: Optional[Path] = None) -> Config:
    """
    Load configuration from YAML if provided, otherwise return defaults.

    Parameters
    ----------
    path:
        Optional path to a YAML file with ``paths``, ``model`` and ``logging``
        sections.  Missing sections and keys keep their defaults; unknown ones
        are ignored.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    ConfigurationError
        If the file is not valid YAML, a section is not a mapping, or a
        configured feature is unknown.
    """
    if path is None:
        return Config()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Cannot parse {path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{path} must contain a mapping of config sections")

    return Config(
        paths=_section(PathConfig, "paths", raw.get("paths")),
        model=_section(ModelConfig, "model", raw.get("model")),
        logging=_section(LoggingConfig, "logging", raw.get("logging")),
    )


def _section(cls: Type[_Section], name: str, raw: Any) -> _Section:
    if raw is None:
        return cls()
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Config section {name!r} must be a mapping, got {raw!r}")
    known = {f.name for f in fields(cls)}
    return cls(**{key: value for key, value in raw.items() if key in known})
