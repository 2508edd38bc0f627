import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

from .constants import COLUMN_ORDER, WIDTH
from .enums import SolveMode
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "solver.yaml"

# Environment overrides
ENV_CONFIG = "ORACLE_CONFIG"
ENV_LOG_LEVEL = "ORACLE_LOG_LEVEL"
ENV_MODE = "ORACLE_MODE"
ENV_MOVE_ORDERING = "ORACLE_MOVE_ORDERING"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class SolverSettings(BaseModel):
    log_level: str = "INFO"
    default_mode: SolveMode = SolveMode.STRONG
    move_ordering: bool = False
    column_order: List[int] = list(COLUMN_ORDER)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown logging level {value!r}")
        return level

    @field_validator("column_order")
    @classmethod
    def _is_permutation(cls, value: List[int]) -> List[int]:
        if sorted(value) != list(range(WIDTH)):
            raise ValueError(f"column_order must be a permutation of 0..{WIDTH - 1}")
        return value


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean", context={"value": raw})


def load_settings(config_path: Optional[str] = None) -> SolverSettings:
    """
    Loads settings from YAML, then applies environment overrides.
    Path priority: argument, ORACLE_CONFIG, packaged solver.yaml.
    A missing file falls back to defaults.
    """
    load_dotenv()

    path = Path(config_path or os.getenv(ENV_CONFIG) or DEFAULT_CONFIG_PATH)
    data = {}
    if path.exists():
        with open(path, "r") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Cannot parse {path}", context={"error": str(exc)}) from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping")
        logger.debug("Loaded solver settings from %s", path)
    else:
        logger.debug("No settings file at %s, using defaults", path)

    if (level := os.getenv(ENV_LOG_LEVEL)) is not None:
        data["log_level"] = level
    if (mode := os.getenv(ENV_MODE)) is not None:
        data["default_mode"] = mode.strip().lower()
    if (ordering := os.getenv(ENV_MOVE_ORDERING)) is not None:
        data["move_ordering"] = _parse_bool(ENV_MOVE_ORDERING, ordering)

    try:
        return SolverSettings(**data)
    except ValidationError as exc:
        raise ConfigurationError("Invalid solver settings", context={"errors": exc.error_count()}) from exc


@lru_cache(maxsize=1)
def get_settings() -> SolverSettings:
    """Process-wide settings, loaded once."""
    return load_settings()
