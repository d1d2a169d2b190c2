"""``metrics-exposer`` entry point.

Runs inside the test pods::

    metrics-exposer --pod_id=$(POD_ID) --metric_name=foo-metric --metric_value=448
"""

from typing import Annotated
from typing import Optional

import typer
from google.auth.exceptions import GoogleAuthError

from ..gcp.config import AuthMethod
from ..gcp.config import GCPConfig
from ..gcp.metadata import MetadataClient
from ..gcp.metadata import PodIdentity
from ..gcp.monitoring import MonitoringManager
from ..shared.exceptions import CustomMetricsE2EError
from ..shared.logging import get_logger
from ..shared.logging import setup_logging
from .exposer import DEFAULT_INTERVAL_SECONDS
from .exposer import MetricsExposer

logger = get_logger(__name__)

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

app = typer.Typer(
    name="metrics-exposer",
    help="Push a constant custom metric for this pod to Cloud Monitoring.",
    add_completion=False,
)


@app.command()
def expose(
    pod_id: Annotated[str, typer.Option("--pod_id", help="UID of the pod the metric belongs to")] = "",
    metric_name: Annotated[
        str, typer.Option("--metric_name", help="Custom metric name, without prefix")
    ] = "foo",
    metric_value: Annotated[
        int,
        typer.Option("--metric_value", min=INT64_MIN, max=INT64_MAX, help="Value to report"),
    ] = 0,
    interval: Annotated[
        float, typer.Option("--interval", min=0.0, help="Seconds between writes")
    ] = DEFAULT_INTERVAL_SECONDS,
    log_level: Annotated[str, typer.Option("--log-level", help="Logging level")] = "INFO",
    json_logs: Annotated[bool, typer.Option("--json-logs", help="Emit JSON log lines")] = False,
    max_iterations: Annotated[
        Optional[int],
        typer.Option(
            "--max-iterations", hidden=True, help="Stop after this many writes (for tests)"
        ),
    ] = None,
) -> None:
    """Write METRIC_VALUE for POD_ID every INTERVAL seconds until stopped."""
    setup_logging(level=log_level, json_output=json_logs)

    try:
        identity = PodIdentity.discover(MetadataClient())
        monitoring = MonitoringManager(
            GCPConfig(project_id=identity.project_id, auth_method=AuthMethod.COMPUTE_ENGINE)
        )
        # Build the client up front so credential problems stop the process here.
        _ = monitoring.client
    except (CustomMetricsE2EError, GoogleAuthError) as e:
        logger.error(f"error: {e}")
        raise typer.Exit(1) from e

    exposer = MetricsExposer(
        monitoring,
        identity,
        pod_id=pod_id,
        metric_name=metric_name,
        metric_value=metric_value,
        interval=interval,
    )
    try:
        exposer.run(max_iterations=max_iterations)
    except KeyboardInterrupt:
        logger.info("Interrupted, exiting")


if __name__ == "__main__":
    app()
