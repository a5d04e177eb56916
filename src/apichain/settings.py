"""Process-wide defaults consumed by every call."""

from __future__ import annotations

import os
from typing import Any, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ApiValidationError
from .security import validate_base_url

DEFAULT_API_URL = "https://api.evrythng.com"
DEFAULT_TIMEOUT = 30.0
API_URL_ENV_VAR = "APICHAIN_API_URL"
API_KEY_ENV_VAR = "APICHAIN_API_KEY"


class Settings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    api_url: str = Field(default=DEFAULT_API_URL, validation_alias=AliasChoices("api_url", "apiUrl"))
    api_key: str | None = Field(default=None, validation_alias=AliasChoices("api_key", "apiKey"))
    headers: dict[str, str] = Field(default_factory=dict)
    interceptors: list[Any] = Field(default_factory=list)
    full_response: bool = Field(default=False, validation_alias=AliasChoices("full_response", "fullResponse"))
    timeout: float = DEFAULT_TIMEOUT
    allow_http: bool = Field(default=False, validation_alias=AliasChoices("allow_http", "allowHttp"))

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be greater than 0")
        return value

    @model_validator(mode="after")
    def _check_api_url(self) -> "Settings":
        validate_base_url(self.api_url, allow_http=self.allow_http)
        return self

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from APICHAIN_* environment variables."""
        values: dict[str, Any] = {}
        api_url = os.getenv(API_URL_ENV_VAR)
        if api_url:
            values["api_url"] = api_url.rstrip("/")
        api_key = os.getenv(API_KEY_ENV_VAR)
        if api_key:
            values["api_key"] = api_key
        return build_settings(values)

    def updated(self, partial: Mapping[str, Any]) -> "Settings":
        """Return a new validated Settings with ``partial`` shallow-merged over this one."""
        current = {name: getattr(self, name) for name in type(self).model_fields}
        # camelCase keys in ``partial`` must replace, not collide with, the field names.
        for name, field in type(self).model_fields.items():
            aliases = field.validation_alias.choices if isinstance(field.validation_alias, AliasChoices) else []
            if any(alias in partial for alias in aliases):
                current.pop(name, None)
        return build_settings({**current, **partial})


def build_settings(values: Mapping[str, Any]) -> Settings:
    try:
        return Settings.model_validate(dict(values))
    except ValidationError as exc:
        raise ApiValidationError(f"Invalid settings: {exc}", cause=exc) from exc


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def setup(new_settings: Settings | Mapping[str, Any] | None = None, **fields: Any) -> Settings:
    """Shallow-merge new defaults into the process-wide settings.

    Only calls started afterwards observe the change.
    """
    global _settings
    partial: dict[str, Any] = {}
    if isinstance(new_settings, Settings):
        partial.update({name: getattr(new_settings, name) for name in Settings.model_fields})
    elif new_settings is not None:
        partial.update(new_settings)
    partial.update(fields)
    _settings = get_settings().updated(partial)
    return _settings


def reset_settings() -> Settings:
    """Restore the environment-derived defaults."""
    global _settings
    _settings = Settings.from_env()
    return _settings
