"""
Compute Engine instance metadata lookups.

The metrics exposer runs on a GKE node and labels every time series with the
project, zone and cluster it runs in; all three come from the metadata
server.
"""

import os
from dataclasses import dataclass

import requests

from ..shared.exceptions import MetadataError
from ..shared.logging import get_logger

logger = get_logger(__name__)

DEFAULT_METADATA_HOST = "metadata.google.internal"
METADATA_HEADERS = {"Metadata-Flavor": "Google"}


class MetadataClient:
    """Minimal client for ``computeMetadata/v1``."""

    def __init__(
        self,
        host: str | None = None,
        timeout: float = 3.0,
        session: requests.Session | None = None,
    ):
        # GCE_METADATA_HOST is the override honoured by Google's own libraries.
        self.host = host or os.getenv("GCE_METADATA_HOST", DEFAULT_METADATA_HOST)
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return f"http://{self.host}/computeMetadata/v1"

    def get(self, path: str) -> str:
        """Fetch a metadata value as text.

        Args:
            path: Path below ``computeMetadata/v1``, e.g. ``project/project-id``

        Returns:
            The response body

        Raises:
            MetadataError: on transport errors or a non-200 response
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.get(url, headers=METADATA_HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            raise MetadataError(f"Metadata request for {path} failed: {e}") from e

        if response.status_code != 200:
            raise MetadataError(
                f"Metadata server returned {response.status_code} for {path}",
                error_code=str(response.status_code),
            )
        return response.text

    def project_id(self) -> str:
        return self.get("project/project-id").strip()

    def zone(self) -> str:
        # The server answers with projects/<number>/zones/<zone>.
        return self.get("instance/zone").strip().rsplit("/", 1)[-1]

    def instance_attribute(self, name: str) -> str:
        return self.get(f"instance/attributes/{name}")


@dataclass(frozen=True)
class PodIdentity:
    """Where the exposer runs, as reported by the metadata server."""

    project_id: str
    zone: str
    cluster_name: str

    @classmethod
    def discover(cls, client: MetadataClient | None = None) -> "PodIdentity":
        client = client or MetadataClient()
        identity = cls(
            project_id=client.project_id(),
            zone=client.zone(),
            cluster_name=client.instance_attribute("cluster-name").strip(),
        )
        logger.info(
            f"Running in project {identity.project_id}, zone {identity.zone}, "
            f"cluster {identity.cluster_name}"
        )
        return identity
