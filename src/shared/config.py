"""Configuration loading for ShopCart.

Settings live in ``shopcart.toml`` at the project root. Top-level tables hold
the defaults; an ``[<env>]`` table overlays them for the environment named by
``SHOPCART_ENV`` (``development`` when unset), e.g. ``[test.database]``.

Sources, highest priority first:
    1. keyword arguments (``Settings(env="test", ...)``)
    2. ``SHOPCART_<SECTION>__<KEY>`` variables, e.g. ``SHOPCART_DATABASE__POOL_SIZE``
    3. the ``[<env>]`` overlay of the TOML file
    4. the top-level TOML tables

``SHOPCART_CONFIG_FILE`` points at an alternative file and ``DATABASE_URL``
overrides ``database.uri`` last, so containers can inject the DSN.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "shopcart.toml"
ENVIRONMENTS = ("development", "test", "staging", "production")


class DatabaseSettings(BaseModel):
    uri: str = "sqlite:///shopcart.db"
    echo: bool = False
    pool_size: int = Field(default=5, ge=1)
    # Seconds to wait for a pooled connection
    pool_timeout: float = Field(default=5.0, gt=0)
    # Seconds to wait for a row/database lock before giving up
    lock_timeout: float = Field(default=5.0, gt=0)


class SessionSettings(BaseModel):
    cookie_name: str = "user-login"
    ttl_hours: int = Field(default=24, ge=1)
    secure_cookie: bool = False


class CheckoutSettings(BaseModel):
    allow_empty_cart: bool = False


class EnvironmentSelector(BaseSettings):
    """Which environment overlay and which file to load."""

    model_config = SettingsConfigDict(env_prefix="SHOPCART_", extra="ignore")

    env: str = "development"
    config_file: Path = DEFAULT_CONFIG_PATH

    @field_validator("env")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return value.lower()


class TomlDefaultsSource(TomlConfigSettingsSource):
    """Top-level tables of the config file; environment tables are skipped."""

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        data = super()._read_file(file_path)
        return {key: value for key, value in data.items() if key not in ENVIRONMENTS}


class TomlOverlaySource(TomlConfigSettingsSource):
    """The ``[<env>]`` table of the config file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_file: Path, env: str):
        # Set before the parent reads the file
        self.env = env
        super().__init__(settings_cls, toml_file)

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        return super()._read_file(file_path).get(self.env, {})


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHOPCART_",
        env_nested_delimiter="__",
        populate_by_name=True,
        extra="ignore",
    )

    env: str = "development"
    config_file: Path = DEFAULT_CONFIG_PATH
    database_url: str | None = Field(default=None, validation_alias="DATABASE_URL", exclude=True)

    database: DatabaseSettings = DatabaseSettings()
    session: SessionSettings = SessionSettings()
    checkout: CheckoutSettings = CheckoutSettings()

    @field_validator("env")
    @classmethod
    def _lowercase(cls, value: str) -> str:
        return value.lower()

    @model_validator(mode="after")
    def _apply_database_url(self) -> "Settings":
        if self.database_url:
            self.database = self.database.model_copy(update={"uri": self.database_url})
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        selector = EnvironmentSelector()
        explicit = getattr(init_settings, "init_kwargs", {})
        env = str(explicit.get("env") or selector.env).lower()
        config_file = Path(explicit.get("config_file") or selector.config_file)

        return (
            init_settings,
            env_settings,
            TomlOverlaySource(settings_cls, config_file, env),
            TomlDefaultsSource(settings_cls, config_file),
        )


def current_env() -> str:
    return EnvironmentSelector().env


def load_settings(path: str | Path | None = None, env: str | None = None) -> Settings:
    """Build settings for ``env`` from ``path``, falling back to the environment."""
    overrides: dict[str, Any] = {}
    if path is not None:
        overrides["config_file"] = Path(path)
    if env is not None:
        overrides["env"] = env
    return Settings(**overrides)
