from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/cadence/config.toml",
        Path.home() / ".cadence.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for cadence.
    Supports loading from:
    1. Config file (~/.config/cadence/config.toml)
    2. Environment variables (CADENCE_*)
    3. Manual overrides (CLI / server)
    """

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/cadence")
    records_file: Path = Path("records.json")
    catalog_file: Path = Path("catalog.yaml")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".config/cadence/logs")

    # Server
    host: str = "127.0.0.1"
    port: int = 8777

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

        # First existing file wins
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", "log_dir", mode="before")
    @classmethod
    def expand_dir(cls, v: Any) -> Path:
        return Path(v).expanduser()

    @property
    def records_path(self) -> Path:
        return self._under_data_dir(self.records_file)

    @property
    def catalog_path(self) -> Path:
        return self._under_data_dir(self.catalog_file)

    def _under_data_dir(self, path: Path) -> Path:
        path = Path(path).expanduser()
        if path.is_absolute():
            return path
        return self.data_dir / path


def resolve_config(overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/cadence/config.toml (if exists)
    3. Environment variables (CADENCE_*)
    4. overrides (passed from Typer or the server); None values are ignored
    """
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
