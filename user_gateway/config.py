from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from user_gateway.errors import ConfigError

USER_ECHO_SERVICE_ID = "userecho"


class Environment(str, Enum):
    PRODUCTION = "production"
    TEST = "test"


class ServiceConfig(BaseModel):
    base_url: str
    timeout: float = 30
    connect_timeout: float = 10
    verify_ssl: bool = True


class ListenConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080


class SecurityConfig(BaseModel):
    # Without a secret, bearer tokens are opaque and only checked for presence.
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    jwt_audience: str | None = None
    jwt_issuer: str | None = None


class LoggingConfig(BaseModel):
    level: str = "INFO"
    quiet: bool = False


class AppConfig(BaseModel):
    environment: Environment = Environment.PRODUCTION
    services: dict[str, ServiceConfig] = {}
    listen: ListenConfig = ListenConfig()
    security: SecurityConfig = SecurityConfig()
    logging: LoggingConfig = LoggingConfig()

    def service(self, service_id: str) -> ServiceConfig:
        """Resolve a logical service id to its configured address."""
        try:
            return self.services[service_id]
        except KeyError:
            raise ConfigError(
                f"No address configured for service '{service_id}'"
            ) from None


def load_config() -> AppConfig:
    config_path = Path(
        os.environ.get("USER_GATEWAY_CONFIG", "config.yaml")
    )
    data: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"Cannot parse {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{config_path} must contain a mapping")

    env_override = os.environ.get("USER_GATEWAY_ENV")
    if env_override:
        data["environment"] = env_override

    try:
        return AppConfig(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
