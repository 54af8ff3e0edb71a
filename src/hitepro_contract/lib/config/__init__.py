"""Settings for contract runs, loaded from the environment.

Required variables (checked before any network call):

    HITEPRO_BASE_URL   hub API root, e.g. http://192.168.1.10/rest
    HITEPRO_USER       Basic-auth username
    HITEPRO_PASS       Basic-auth password

Optional tuning:

    HITEPRO_REQUEST_TIMEOUT   seconds per HTTP request (default 30)
    HITEPRO_RUN_TIMEOUT       seconds for the whole run (default 60)
    HITEPRO_CONCURRENCY       checks in flight at once (default 4)
    HITEPRO_REPORT_DIR        where report.html / report.json go (default reports)

Values are layered: YAML settings file < .env file < process environment <
explicit overrides (CLI flags).

Usage:
    from hitepro_contract.lib.config import load_settings

    settings = load_settings()
    settings = load_settings(env_file=".env.staging", overrides={"concurrency": 1})
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from ...exceptions import ConfigurationError
from ..hub_client.auth import basic_auth_header


ENV_PREFIX = "HITEPRO_"

REQUIRED_ENV_VARS = {
    "base_url": f"{ENV_PREFIX}BASE_URL",
    "username": f"{ENV_PREFIX}USER",
    "password": f"{ENV_PREFIX}PASS",
}

OPTIONAL_ENV_VARS = {
    "request_timeout": f"{ENV_PREFIX}REQUEST_TIMEOUT",
    "run_timeout": f"{ENV_PREFIX}RUN_TIMEOUT",
    "concurrency": f"{ENV_PREFIX}CONCURRENCY",
    "report_dir": f"{ENV_PREFIX}REPORT_DIR",
}


class HubSettings(BaseModel):
    """Validated connection and run settings."""

    model_config = {
        "frozen": True,
        "extra": "forbid"
    }

    base_url: str = Field(description="Hub API root URL")
    username: str = Field(min_length=1, description="Basic-auth username")
    password: SecretStr = Field(description="Basic-auth password")

    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        le=600.0,
        description="Seconds to wait for each HTTP response"
    )
    run_timeout: float = Field(
        default=60.0,
        gt=0.0,
        le=86400.0,
        description="Seconds for the whole run before remaining checks are abandoned"
    )
    concurrency: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Maximum checks in flight at once"
    )
    report_dir: Path = Field(default=Path("reports"), description="Report artifact directory")

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop trailing slashes."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("must start with http:// or https://")
        return v.rstrip("/")

    @property
    def auth_header(self) -> str:
        return basic_auth_header(self.username, self.password.get_secret_value())

    def describe(self) -> Dict[str, Any]:
        """Settings as a dictionary with the password masked."""
        data = self.model_dump(mode='json')
        data["password"] = "***"
        return data


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[Union[str, Path]] = None,
    config_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> HubSettings:
    """Resolve settings from YAML, .env, environment and overrides.

    Args:
        env: Environment mapping; defaults to ``os.environ`` plus ``./.env``
        env_file: Explicit .env file (must exist)
        config_path: Optional YAML settings file
        overrides: Values that win over everything else; None entries are ignored

    Raises:
        ConfigurationError: required values missing or any value invalid
    """
    data: Dict[str, Any] = {}

    if config_path is not None:
        data.update(_load_yaml_settings(Path(config_path)))

    environment = _collect_environment(env, env_file)
    for field, var in {**REQUIRED_ENV_VARS, **OPTIONAL_ENV_VARS}.items():
        value = environment.get(var)
        if value is not None and value.strip() != "":
            data[field] = value

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    missing = [
        var for field, var in REQUIRED_ENV_VARS.items()
        if data.get(field) is None or str(data[field]).strip() == ""
    ]
    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}. "
            "Set them in the environment or in a .env file.",
            missing=missing
        )

    try:
        return HubSettings(**data)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e


def _collect_environment(
    env: Optional[Mapping[str, str]],
    env_file: Optional[Union[str, Path]]
) -> Dict[str, Optional[str]]:
    """Merge .env values under the given (or process) environment."""
    values: Dict[str, Optional[str]] = {}

    if env_file is not None:
        path = Path(env_file)
        if not path.is_file():
            raise ConfigurationError(f"Env file not found: {path}")
        values.update(dotenv_values(path))
    elif env is None:
        default_path = Path.cwd() / ".env"
        if default_path.is_file():
            values.update(dotenv_values(default_path))

    values.update(os.environ if env is None else env)
    return values


def _load_yaml_settings(path: Path) -> Dict[str, Any]:
    """Load the optional YAML settings file."""
    if not path.is_file():
        raise ConfigurationError(f"Settings file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"YAML parsing error in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")

    unknown = set(data) - set(HubSettings.model_fields)
    if unknown:
        raise ConfigurationError(
            f"Unknown settings in {path}: {', '.join(sorted(unknown))}"
        )
    return data


def _format_validation_error(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        path = ".".join(str(p) for p in item["loc"]) or "settings"
        problems.append(f"{path}: {item['msg']}")
    return "Invalid configuration: " + "; ".join(problems)


__all__ = [
    "ENV_PREFIX",
    "REQUIRED_ENV_VARS",
    "OPTIONAL_ENV_VARS",
    "HubSettings",
    "ConfigurationError",
    "load_settings",
]
