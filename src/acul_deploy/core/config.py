from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from .errors import ConfigError, InvalidSettingsError

LogFormat = Literal["json", "console"]

# Pause between successive screen updates. Fixed, not a runtime setting.
SCREEN_UPDATE_PAUSE_S = 0.5

DEFAULT_SCREENS = ("login-id",)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ACUL_DEPLOY_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # Deployment credentials keep their conventional names (no prefix).
    auth0_domain: str | None = Field(default=None, validation_alias="AUTH0_DOMAIN")
    auth0_mgmt_token: str | None = Field(
        default=None, validation_alias="AUTH0_MGMT_TOKEN"
    )
    vercel_url: str | None = Field(default=None, validation_alias="VERCEL_URL")

    build_dir: Path = Field(default=Path("react-js/dist/assets"))
    deployment_info_path: Path = Field(default=Path("deployment-info.json"))
    screens: list[str] = Field(default_factory=lambda: list(DEFAULT_SCREENS))
    fetch_max_attempts: int = Field(default=1, ge=1)

    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default="console")


@dataclass(frozen=True, slots=True)
class DeployEnv:
    domain: str
    token: str
    base_url: str


_REQUIRED_ENV: tuple[tuple[str, str], ...] = (
    ("AUTH0_DOMAIN", "auth0_domain"),
    ("AUTH0_MGMT_TOKEN", "auth0_mgmt_token"),
    ("VERCEL_URL", "vercel_url"),
)


def missing_deploy_env(settings: Settings) -> list[str]:
    return [
        env_name
        for env_name, attr in _REQUIRED_ENV
        if not (getattr(settings, attr) or "").strip()
    ]


def require_deploy_env(settings: Settings) -> DeployEnv:
    missing = missing_deploy_env(settings)
    if missing:
        raise ConfigError(missing)

    return DeployEnv(
        domain=(settings.auth0_domain or "").strip(),
        token=(settings.auth0_mgmt_token or "").strip(),
        base_url=(settings.vercel_url or "").strip(),
    )


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    try:
        return Settings()
    except (ValidationError, SettingsError) as e:
        raise InvalidSettingsError(str(e)) from e
