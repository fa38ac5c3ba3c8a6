"""Mapper configuration.

MapperConfig is a Pydantic model for type-safe mapping options.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from row_graph.core.exceptions import ConfigError


class MapperConfig(BaseModel):
    """Configuration for mapping result sets into object graphs."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    delimiter: str = "_"
    null_child_policy: Literal["any", "all"] = "any"
    use_cache: bool = True

    @field_validator("delimiter")
    @classmethod
    def _non_empty_delimiter(cls, value: str) -> str:
        if not value:
            raise ValueError("delimiter must not be empty")
        return value


def load_config(config: MapperConfig | dict[str, Any] | None) -> MapperConfig:
    """Normalize a config argument into a MapperConfig.

    Accepts an existing MapperConfig, a dict of options, or None for defaults.
    Validation failures surface as ConfigError.
    """
    if config is None:
        return MapperConfig()
    if isinstance(config, MapperConfig):
        return config
    try:
        return MapperConfig.model_validate(config)
    except ValidationError as e:
        raise ConfigError(f"Invalid mapper configuration: {e}") from e
