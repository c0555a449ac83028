"""Configuration for splitting and numbering, using Pydantic Settings."""

import logging
from typing import Annotated, Any

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

logger = logging.getLogger(__name__)

DIRECTION_ALIASES = {
    "ancestors": "ancestors",
    "ancestor": "ancestors",
    "up": "ancestors",
    "descendants": "descendants",
    "descendant": "descendants",
    "down": "descendants",
}

NUMBERING_SYSTEMS = ("ahnentafel", "daboville", "henry")


def _fallback(cls: type[BaseSettings], info: ValidationInfo, value: Any) -> Any:
    default = cls.model_fields[info.field_name].get_default(call_default_factory=True)
    logger.warning(
        "Invalid %s.%s=%r, using default %r", cls.__name__, info.field_name, value, default
    )
    return default


def _positive_int(cls, info: ValidationInfo, value: Any, allow_none: bool = False) -> Any:
    if value is None or value == "":
        if allow_none:
            return None
        return _fallback(cls, info, value)
    try:
        number = int(value)
    except (TypeError, ValueError):
        return _fallback(cls, info, value)
    if number < 1 or isinstance(value, bool):
        return _fallback(cls, info, value)
    return number


def _flag(cls, info: ValidationInfo, value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("1", "true", "yes", "on", "0", "false", "no", "off"):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return _fallback(cls, info, value)


def _string_list(value: Any) -> list[str] | None:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(part).strip() for part in value if str(part).strip()]
    return None


class GenerationSplitSettings(BaseSettings):
    """Generation-range split settings."""

    model_config = SettingsConfigDict(env_prefix="KINGRAPH_GENERATION_", extra="ignore")

    generations_per_partition: int = 4
    direction: str = "ancestors"

    @field_validator("generations_per_partition", mode="before")
    @classmethod
    def _check_band_width(cls, value: Any, info: ValidationInfo) -> Any:
        return _positive_int(cls, info, value)

    @field_validator("direction", mode="before")
    @classmethod
    def _check_direction(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str) and value.strip().lower() in DIRECTION_ALIASES:
            return DIRECTION_ALIASES[value.strip().lower()]
        return _fallback(cls, info, value)


class BranchSplitSettings(BaseSettings):
    """Branch split settings."""

    model_config = SettingsConfigDict(env_prefix="KINGRAPH_BRANCH_", extra="ignore")

    include_paternal: bool = True
    include_maternal: bool = True
    include_descendants: bool = False
    max_generations: int | None = None
    include_spouses: bool = True
    recursion_depth: int = 0

    @field_validator("include_paternal", "include_maternal", "include_descendants", "include_spouses", mode="before")
    @classmethod
    def _check_flags(cls, value: Any, info: ValidationInfo) -> Any:
        return _flag(cls, info, value)

    @field_validator("max_generations", mode="before")
    @classmethod
    def _check_cap(cls, value: Any, info: ValidationInfo) -> Any:
        return _positive_int(cls, info, value, allow_none=True)

    @field_validator("recursion_depth", mode="before")
    @classmethod
    def _check_depth(cls, value: Any, info: ValidationInfo) -> Any:
        try:
            depth = int(value)
        except (TypeError, ValueError):
            return _fallback(cls, info, value)
        return depth if depth >= 0 else _fallback(cls, info, value)


class CollectionSplitSettings(BaseSettings):
    """Collection (grouping tag) split settings."""

    model_config = SettingsConfigDict(env_prefix="KINGRAPH_COLLECTION_", extra="ignore")

    collections: Annotated[list[str], NoDecode] = []
    priority: Annotated[list[str], NoDecode] = []
    include_bridge_people: bool = True
    assign_uncollected: bool = False

    @field_validator("collections", "priority", mode="before")
    @classmethod
    def _check_lists(cls, value: Any, info: ValidationInfo) -> Any:
        parts = _string_list(value)
        return parts if parts is not None else _fallback(cls, info, value)

    @field_validator("include_bridge_people", "assign_uncollected", mode="before")
    @classmethod
    def _check_flags(cls, value: Any, info: ValidationInfo) -> Any:
        return _flag(cls, info, value)


class SurnameSplitSettings(BaseSettings):
    """Surname split settings."""

    model_config = SettingsConfigDict(env_prefix="KINGRAPH_SURNAME_", extra="ignore")

    surnames: Annotated[list[str], NoDecode] = []
    include_spouses: bool = True
    include_maiden_names: bool = True
    handle_variants: bool = True
    separate_partitions: bool = True

    @field_validator("surnames", mode="before")
    @classmethod
    def _check_surnames(cls, value: Any, info: ValidationInfo) -> Any:
        parts = _string_list(value)
        return parts if parts is not None else _fallback(cls, info, value)

    @field_validator(
        "include_spouses", "include_maiden_names", "handle_variants", "separate_partitions", mode="before"
    )
    @classmethod
    def _check_flags(cls, value: Any, info: ValidationInfo) -> Any:
        return _flag(cls, info, value)


class NumberingSettings(BaseSettings):
    """Reference numbering settings."""

    model_config = SettingsConfigDict(env_prefix="KINGRAPH_NUMBERING_", extra="ignore")

    system: str = "ahnentafel"
    root_id: str | None = None

    @field_validator("system", mode="before")
    @classmethod
    def _check_system(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, str):
            normalized = value.strip().lower().replace("'", "").replace("d_aboville", "daboville")
            if normalized in NUMBERING_SYSTEMS:
                return normalized
        return _fallback(cls, info, value)

    @field_validator("root_id", mode="before")
    @classmethod
    def _check_root(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return None
        value = str(value).strip().strip("@")
        return value or None


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # each sub-settings object reads its own env prefix when Settings() is built
    generation: GenerationSplitSettings = Field(default_factory=GenerationSplitSettings)
    branch: BranchSplitSettings = Field(default_factory=BranchSplitSettings)
    collection: CollectionSplitSettings = Field(default_factory=CollectionSplitSettings)
    surname: SurnameSplitSettings = Field(default_factory=SurnameSplitSettings)
    numbering: NumberingSettings = Field(default_factory=NumberingSettings)
