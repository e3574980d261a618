from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from lexis.domain.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_DAILY_GOAL,
    DEFAULT_SESSION_LIMIT,
    DEFAULT_WEAK_LIST_SIZE,
)


def _config_files() -> list[Path]:
    return [
        Path.home() / ".config/lexis/config.toml",
        Path.home() / ".lexis.toml",
    ]


class AppConfig(BaseSettings):
    """
    Runtime configuration for lexis hosts.
    Supports loading from:
    1. Config file (~/.config/lexis/config.toml or ~/.lexis.toml)
    2. Environment variables (LEXIS_*)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="LEXIS_",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/lexis", validate_default=True
    )
    learner_id: str = "default"

    # Sessions
    session_limit: int = DEFAULT_SESSION_LIMIT
    batch_size: int = DEFAULT_BATCH_SIZE
    daily_goal: int = DEFAULT_DAILY_GOAL
    weak_list_size: int = DEFAULT_WEAK_LIST_SIZE

    verbose: int = 1

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

        # First existing file wins; earlier sources take precedence
        toml_file = next((f for f in _config_files() if f.exists()), None)

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

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_data_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("session_limit", "batch_size", "daily_goal")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("weak_list_size")
    @classmethod
    def must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/lexis/config.toml (if exists)
    3. Environment variables (LEXIS_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes None for options the user did not set
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
