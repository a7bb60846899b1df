from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from persistence.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "jsondeck.yml"

SAMPLE_CONFIG = """\
hostname: "0.0.0.0"
port: 8080
apiVersion: "v1"
jsonDatabaseName: "database.json"
publicFolderName: "public"
uploadsFolderName: "uploads"
requiresAuthorization: true
jwtSecret: "MY_JWT_SECRET"
jwtExpirationTime: 300 # 5 minutes
adminUsername: "admin"
adminPassword: "password"
resources:
  - name: "posts"
  - name: "comments"
"""


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ResourceConfig:
    name: str


@dataclass(frozen=True)
class AppConfig:
    # Server
    hostname: str = "0.0.0.0"
    port: int = 8080
    api_version: str = "v1"

    # Storage / folders (relative to the working directory)
    json_database_name: str = "database.json"
    public_folder_name: str | None = None
    uploads_folder_name: str | None = None

    # Auth
    requires_authorization: bool = False
    jwt_secret: str | None = None
    jwt_expiration_time: int | None = None
    admin_username: str | None = None
    admin_password: str | None = None

    resources: tuple[ResourceConfig, ...] = field(default_factory=tuple)

    @property
    def resource_names(self) -> list[str]:
        return [r.name for r in self.resources]

    @classmethod
    def from_mapping(cls, data: Any) -> "AppConfig":
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a mapping")

        raw_resources = data.get("resources")
        if not isinstance(raw_resources, list):
            raise ConfigError("'resources' (list of {name: ...}) is required")
        resources: list[ResourceConfig] = []
        for entry in raw_resources:
            name = entry.get("name") if isinstance(entry, dict) else None
            if not isinstance(name, str) or not name.strip():
                raise ConfigError(f"invalid resource entry: {entry!r}")
            resources.append(ResourceConfig(name=name.strip()))
        names = [r.name for r in resources]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ConfigError(f"duplicate resource names: {', '.join(dupes)}")

        requires_authorization = bool(data.get("requiresAuthorization", False))
        jwt_secret = data.get("jwtSecret")
        if requires_authorization and not jwt_secret:
            raise ConfigError("'jwtSecret' is required when requiresAuthorization is true")

        try:
            return cls(
                hostname=str(data.get("hostname", "0.0.0.0")),
                port=int(data.get("port", 8080)),
                api_version=str(data.get("apiVersion", "v1")),
                json_database_name=str(data.get("jsonDatabaseName", "database.json")),
                public_folder_name=data.get("publicFolderName"),
                uploads_folder_name=data.get("uploadsFolderName"),
                requires_authorization=requires_authorization,
                jwt_secret=str(jwt_secret) if jwt_secret is not None else None,
                jwt_expiration_time=(
                    int(data["jwtExpirationTime"]) if data.get("jwtExpirationTime") is not None else None
                ),
                admin_username=data.get("adminUsername"),
                admin_password=data.get("adminPassword"),
                resources=tuple(resources),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid configuration value: {e}") from e


def load_app_config(path: Path) -> AppConfig:
    """Load the YAML configuration file (camelCase keys, see SAMPLE_CONFIG)."""
    if not path.exists():
        raise ConfigError(f"Configuration file '{path.name}' not found at {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Configuration file '{path.name}' is not valid YAML: {e}") from e
    config = AppConfig.from_mapping(data)
    logger.info("Loaded %s: %d resource(s)", path, len(config.resources))
    return config


@dataclass(frozen=True)
class Settings:
    # Location of the YAML config
    config_path: Path

    # Logging
    log_level: str

    # JWT
    jwt_alg: str

    # Debug
    debug_log_tokens: bool
    debug_log_requests: bool


def get_settings() -> Settings:
    config_path = Path(os.getenv("JSONDECK_CONFIG", DEFAULT_CONFIG_FILE))
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    jwt_alg = os.getenv("JWT_ALG", "HS256")

    debug_log_tokens = _env_bool("DEBUG_LOG_TOKENS", False)
    debug_log_requests = _env_bool("DEBUG_LOG_REQUESTS", False)

    return Settings(
        config_path=config_path,
        log_level=log_level,
        jwt_alg=jwt_alg,
        debug_log_tokens=debug_log_tokens,
        debug_log_requests=debug_log_requests,
    )
