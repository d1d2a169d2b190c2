"""
GCP Authentication Manager.

The e2e runner normally authenticates with Application Default Credentials
(``gcloud auth application-default login`` when run from a workstation);
the exposer runs on a cluster node and uses the Compute Engine metadata
token source.
"""

import threading
import time
from functools import wraps

from google.auth import compute_engine
from google.auth import default
from google.auth.exceptions import DefaultCredentialsError
from google.auth.exceptions import RefreshError
from google.auth.transport import requests as auth_requests
from google.oauth2 import service_account

from ..shared.exceptions import AuthenticationError
from ..shared.logging import get_logger
from .config import AuthMethod
from .config import GCPConfig

logger = get_logger(__name__)

MONITORING_SCOPES = [
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/monitoring",
]


def retry_on_refresh_error(max_retries: int = 3, delay: float = 1.0):
    """Decorator to retry operations on token refresh errors."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            last_error = None
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except RefreshError as e:
                    last_error = e
                    if attempt < max_retries - 1:
                        logger.warning(
                            f"Token refresh failed (attempt {attempt + 1}/{max_retries}): {e}"
                        )
                        time.sleep(delay * (2**attempt))
                    else:
                        logger.error(f"Token refresh failed after {max_retries} attempts")
            raise AuthenticationError(f"Failed to refresh credentials: {last_error}")

        return wrapper

    return decorator


class GCPAuthManager:
    """Creates and caches credentials for the configured auth method."""

    def __init__(self, config: GCPConfig):
        self.config = config
        self._credentials = None
        self._lock = threading.Lock()
        self._request = auth_requests.Request()

    @property
    def credentials(self):
        """Get or create credentials based on configured auth method."""
        if self._credentials is None:
            with self._lock:
                if self._credentials is None:
                    self._credentials = self._create_credentials()

        if getattr(self._credentials, "expired", False):
            self.refresh_credentials()

        return self._credentials

    def _create_credentials(self):
        logger.info(f"Creating credentials using {self.config.auth_method.value} method")

        if self.config.auth_method == AuthMethod.SERVICE_ACCOUNT:
            return self._create_service_account_credentials()
        elif self.config.auth_method == AuthMethod.APPLICATION_DEFAULT:
            return self._create_adc_credentials()
        elif self.config.auth_method == AuthMethod.COMPUTE_ENGINE:
            return self._create_compute_engine_credentials()
        raise AuthenticationError(f"Unsupported authentication method: {self.config.auth_method}")

    def _create_service_account_credentials(self):
        if not self.config.service_account_config:
            raise AuthenticationError("Service account configuration is required")

        sa_config = self.config.service_account_config
        credentials = service_account.Credentials.from_service_account_info(
            sa_config.to_dict(), scopes=MONITORING_SCOPES
        )
        logger.info(f"Created service account credentials for {sa_config.client_email}")
        return credentials

    def _create_adc_credentials(self):
        try:
            credentials, project = default(scopes=MONITORING_SCOPES)
        except DefaultCredentialsError as e:
            raise AuthenticationError(
                f"Failed to create Application Default Credentials: {e}"
            ) from e

        if project and not self.config.project_id:
            self.config.project_id = project

        logger.info(f"Created Application Default Credentials for project {project}")
        return credentials

    def _create_compute_engine_credentials(self):
        credentials = compute_engine.Credentials(scopes=MONITORING_SCOPES)
        logger.info("Created Compute Engine credentials")
        return credentials

    @retry_on_refresh_error(max_retries=3)
    def refresh_credentials(self) -> None:
        """Refresh credentials if expired."""
        if self._credentials:
            self._credentials.refresh(self._request)
            logger.debug("Successfully refreshed credentials")
