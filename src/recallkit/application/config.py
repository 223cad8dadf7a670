from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from recallkit.domain.constants import DEFAULT_DIFFICULTY, DIFFICULTIES


class RecallkitSettings(BaseSettings):
    """
    Host-tunable settings for review queues.
    Supports loading from:
    1. Config file (~/.config/recallkit/config.toml)
    2. Environment variables (RECALLKIT_*)
    3. Explicit overrides

    SM-2 constants are not settings; see recallkit.domain.constants.
    """

    model_config = SettingsConfigDict(
        env_prefix="RECALLKIT_",
        extra="ignore",
    )

    # Queue building
    session_limit: int | None = Field(default=None, ge=1)
    ranking: Literal["due", "weakest", "overdue"] = "due"
    default_tag: str | None = None

    # Card defaults
    default_difficulty: str = DEFAULT_DIFFICULTY

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = None
        for f in _config_files():
            if f.exists():
                toml_file = f
                break

        # Earlier sources win: overrides, then env, then file
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("default_difficulty")
    @classmethod
    def check_difficulty(cls, v: str) -> str:
        if v not in DIFFICULTIES:
            raise ValueError(f"default_difficulty must be one of {DIFFICULTIES}")
        return v

    @field_validator("default_tag", mode="before")
    @classmethod
    def blank_tag_is_none(cls, v: Any) -> str | None:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return str(v).strip()


def _config_files() -> list[Path]:
    # Resolved at call time so a patched HOME is honoured
    home = Path.home()
    return [home / ".config/recallkit/config.toml", home / ".recallkit.toml"]


def resolve_config(overrides: dict[str, Any] | None = None) -> RecallkitSettings:
    """
    Multi-layered configuration resolution.
    1. Defaults in RecallkitSettings
    2. ~/.config/recallkit/config.toml (if exists)
    3. Environment variables (RECALLKIT_*)
    4. overrides (None values are ignored)
    """
    clean = {k: v for k, v in (overrides or {}).items() if v is not None}
    return RecallkitSettings(**clean)
