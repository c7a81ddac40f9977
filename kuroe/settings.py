"""Validated model of kuroe.yaml."""
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from . import config


class Limits(BaseModel):
    """Wall-clock time limits, in seconds."""
    model_config = ConfigDict(extra='forbid')

    compile_time: float = Field(default=10, gt=0)
    generate_time: float = Field(default=10, gt=0)
    validate_time: float = Field(default=10, gt=0)
    solve_time: float = Field(default=10, gt=0)
    judge_time: float = Field(default=2, gt=0)
    check_time: float = Field(default=10, gt=0)
    kill_wait: float = Field(default=5, gt=0)


class GenerateDefaults(BaseModel):
    model_config = ConfigDict(extra='forbid')

    count: int = Field(default=1, ge=0)
    seed: int = 0


class Settings(BaseModel):
    model_config = ConfigDict(extra='forbid')

    limits: Limits = Field(default_factory=Limits)
    generate: GenerateDefaults = Field(default_factory=GenerateDefaults)
    # [extension regex, compile command..., run command]
    custom_languages: list[list[str]] = []


def load_settings(priority_dirs: list[Path] | None = None) -> Settings:
    """Load kuroe.yaml from all config locations.

    :raises pydantic.ValidationError: on unknown keys or bad values
    """
    return Settings.model_validate(config.load_config('kuroe.yaml', priority_dirs))
