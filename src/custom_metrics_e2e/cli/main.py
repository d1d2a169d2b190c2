"""Main CLI entry point for the custom metrics adapter e2e check.

Commands:
    run        provision, wait, verify and tear down
    manifests  print the Kubernetes objects the scenario creates
    cleanup    remove leftovers of an aborted run
    version    show the installed version
"""

from pathlib import Path
from typing import Annotated
from typing import Optional

import typer
from rich.table import Table

from ..config.settings import E2ESettings
from ..e2e.scenario import AdapterScenario
from ..e2e.scenario import require_supported_provider
from ..k8s.manifests import AdapterManifests
from ..k8s.manifests import render_manifests
from ..shared.exceptions import ProviderNotSupportedError
from .utils import get_console
from .utils import handle_exceptions
from .utils import setup_logging

app = typer.Typer(
    name="custom-metrics-e2e",
    help="End-to-end check of the Stackdriver custom metrics adapter",
    rich_markup_mode="rich",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = get_console()


def _load_settings(**overrides) -> E2ESettings:
    settings = E2ESettings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    return settings.model_copy(update=updates) if updates else settings


@app.command()
@handle_exceptions(console)
def run(
    provider: Annotated[
        Optional[str], typer.Option("--provider", help="Cluster provider (gce or gke)")
    ] = None,
    project: Annotated[
        Optional[str], typer.Option("--project", help="Monitoring project ID")
    ] = None,
    namespace: Annotated[Optional[str], typer.Option("--namespace", "-n")] = None,
    settle_seconds: Annotated[
        Optional[float],
        typer.Option("--settle-seconds", min=0.0, help="Wait before querying the API"),
    ] = None,
    kubeconfig: Annotated[Optional[Path], typer.Option("--kubeconfig")] = None,
    context: Annotated[Optional[str], typer.Option("--context")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Run the adapter scenario against the current cluster."""
    setup_logging(verbose)
    settings = _load_settings(
        provider=provider.lower() if provider else None,
        project_id=project,
        namespace=namespace,
        settle_seconds=settle_seconds,
        kubeconfig=kubeconfig,
        kube_context=context,
    )

    try:
        require_supported_provider(settings.provider)
    except ProviderNotSupportedError as e:
        console.print(f"SKIPPED: {e}", style="yellow", markup=False)
        return

    result = AdapterScenario.from_settings(settings).run()

    table = Table(title="Custom Metrics API", show_header=True, header_style="bold cyan")
    table.add_column("Pod")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for value in result.pod_values:
        table.add_row(value.name, value.metric_name, str(value.value))
    console.print(table)
    console.print(f"PASSED in {result.duration_seconds}s", style="bold green")


@app.command()
@handle_exceptions(console)
def manifests(
    output: Annotated[
        Optional[Path], typer.Option("--output", "-o", help="Write YAML here instead of stdout")
    ] = None,
    namespace: Annotated[Optional[str], typer.Option("--namespace", "-n")] = None,
) -> None:
    """Print the adapter and exposer objects as YAML."""
    settings = _load_settings(namespace=namespace)
    rendered = render_manifests(AdapterManifests.build(settings).all_objects())

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered, encoding="utf-8")
        console.print(f"Wrote manifests to {output}", style="green")
    else:
        typer.echo(rendered)


@app.command()
@handle_exceptions(console)
def cleanup(
    project: Annotated[Optional[str], typer.Option("--project")] = None,
    namespace: Annotated[Optional[str], typer.Option("--namespace", "-n")] = None,
    kubeconfig: Annotated[Optional[Path], typer.Option("--kubeconfig")] = None,
    context: Annotated[Optional[str], typer.Option("--context")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v")] = False,
) -> None:
    """Delete every object and descriptor the scenario creates."""
    setup_logging(verbose)
    settings = _load_settings(
        project_id=project, namespace=namespace, kubeconfig=kubeconfig, kube_context=context
    )
    AdapterScenario.from_settings(settings).cleanup()
    console.print("Cleanup finished", style="green")


@app.command()
def version() -> None:
    """Show version information."""
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as get_version

    try:
        version_str = get_version("custom-metrics-e2e")
    except PackageNotFoundError:
        version_str = "development"
    console.print(f"custom-metrics-e2e v{version_str}", style="bold cyan")


if __name__ == "__main__":
    app()
