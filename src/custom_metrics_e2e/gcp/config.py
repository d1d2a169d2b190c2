"""
GCP Configuration and Credentials Management.

This module holds the project and authentication settings used to talk to
Cloud Monitoring, loaded from environment variables or a YAML file.
"""

import json
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from ..shared.exceptions import ConfigurationError
from ..shared.logging import get_logger

logger = get_logger(__name__)


class AuthMethod(Enum):
    """GCP Authentication methods."""

    SERVICE_ACCOUNT = "service_account"
    APPLICATION_DEFAULT = "application_default"
    COMPUTE_ENGINE = "compute_engine"


@dataclass
class ServiceAccountConfig:
    """Service account key material."""

    client_email: str
    client_id: str
    private_key: str
    private_key_id: str
    project_id: str
    token_uri: str = "https://oauth2.googleapis.com/token"
    type: str = "service_account"

    @classmethod
    def from_json_file(cls, path: str | Path) -> "ServiceAccountConfig":
        """Load service account config from JSON key file."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Service account key file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)

            return cls(
                client_email=data["client_email"],
                client_id=data["client_id"],
                private_key=data["private_key"],
                private_key_id=data["private_key_id"],
                project_id=data["project_id"],
                token_uri=data.get("token_uri", cls.token_uri),
                type=data.get("type", cls.type),
            )
        except (json.JSONDecodeError, KeyError) as e:
            raise ConfigurationError(f"Invalid service account key file: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dictionary shape google-auth expects."""
        return {
            "type": self.type,
            "project_id": self.project_id,
            "private_key_id": self.private_key_id,
            "private_key": self.private_key,
            "client_email": self.client_email,
            "client_id": self.client_id,
            "token_uri": self.token_uri,
        }


@dataclass
class GCPConfig:
    """Main GCP configuration."""

    project_id: str
    auth_method: AuthMethod = AuthMethod.APPLICATION_DEFAULT
    service_account_config: ServiceAccountConfig | None = None

    # API configuration
    api_endpoint_override: str | None = None
    api_timeout: float = 30.0

    @property
    def project_name(self) -> str:
        """Resource name of the project, as used by the monitoring API."""
        return f"projects/{self.project_id}"

    @classmethod
    def from_env(cls) -> "GCPConfig":
        """Create configuration from environment variables."""
        project_id = os.getenv("GCP_PROJECT_ID", os.getenv("GOOGLE_CLOUD_PROJECT"))
        if not project_id:
            raise ConfigurationError(
                "GCP_PROJECT_ID or GOOGLE_CLOUD_PROJECT environment variable is required"
            )

        auth_method = AuthMethod(os.getenv("GCP_AUTH_METHOD", AuthMethod.APPLICATION_DEFAULT.value))

        service_account_config = None
        if auth_method == AuthMethod.SERVICE_ACCOUNT:
            key_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
            if not key_path:
                raise ConfigurationError(
                    "GOOGLE_APPLICATION_CREDENTIALS is required for service_account auth"
                )
            service_account_config = ServiceAccountConfig.from_json_file(key_path)

        return cls(
            project_id=project_id,
            auth_method=auth_method,
            service_account_config=service_account_config,
            api_endpoint_override=os.getenv("GCP_MONITORING_ENDPOINT"),
            api_timeout=float(os.getenv("GCP_API_TIMEOUT", "30")),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "GCPConfig":
        """Load configuration from YAML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        service_account_config = None
        if "service_account" in data:
            sa_data = data["service_account"]
            if isinstance(sa_data, str):
                service_account_config = ServiceAccountConfig.from_json_file(sa_data)
            else:
                service_account_config = ServiceAccountConfig(**sa_data)

        try:
            project_id = data["project_id"]
        except KeyError as e:
            raise ConfigurationError(f"{path} does not define project_id") from e

        return cls(
            project_id=project_id,
            auth_method=AuthMethod(data.get("auth_method", "application_default")),
            service_account_config=service_account_config,
            api_endpoint_override=data.get("api_endpoint_override"),
            api_timeout=float(data.get("api_timeout", 30)),
        )


@lru_cache(maxsize=1)
def get_config() -> GCPConfig:
    """Get or create the GCP configuration singleton.

    Environment variables take precedence; otherwise the first YAML file
    found in the usual locations is used.
    """
    try:
        config = GCPConfig.from_env()
        logger.info("Loaded GCP configuration from environment")
        return config
    except ConfigurationError as e:
        logger.debug(f"Could not load config from environment: {e}")

    config_paths = [
        Path("config/gcp-config.yaml"),
        Path.home() / ".gcp" / "config.yaml",
    ]
    for config_path in config_paths:
        if config_path.exists():
            config = GCPConfig.from_yaml(config_path)
            logger.info(f"Loaded GCP configuration from {config_path}")
            return config

    raise ConfigurationError(
        "No GCP configuration found; set GCP_PROJECT_ID or CM_E2E_PROJECT_ID"
    )


def validate_config(config: GCPConfig) -> bool:
    """Validate GCP configuration, logging every problem found."""
    errors = []

    if not config.project_id:
        errors.append("Valid GCP project ID is required")

    if config.auth_method == AuthMethod.SERVICE_ACCOUNT and not config.service_account_config:
        errors.append("Service account configuration is required for SERVICE_ACCOUNT auth method")

    if config.api_timeout <= 0:
        errors.append(f"api_timeout must be positive, got {config.api_timeout}")

    if errors:
        for error in errors:
            logger.error(f"Config validation error: {error}")
        return False

    return True
