"""CLI utilities: console, logging and error handling for ``custom-metrics-e2e``."""

import functools
import logging
from collections.abc import Callable
from typing import Any
from typing import TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..shared.exceptions import CustomMetricsE2EError
from ..shared.logging.logger import configure_third_party_loggers

F = TypeVar("F", bound=Callable[..., Any])

_console: Console | None = None


def get_console() -> Console:
    """Get the global Rich console instance."""
    global _console
    if _console is None:
        _console = Console(color_system="auto", legacy_windows=False)
    return _console


def setup_logging(verbose: bool = False) -> None:
    """Route log records through Rich."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        handlers=[RichHandler(console=get_console(), rich_tracebacks=True, show_path=verbose)],
        format="%(message)s",
        force=True,
    )
    configure_third_party_loggers()


def handle_exceptions(console: Console) -> Callable[[F], F]:
    """Decorator that turns errors raised by a command into exit code 1."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                console.print("\nOperation interrupted by user", style="yellow")
                raise typer.Exit(1)
            except typer.Exit:
                raise
            except CustomMetricsE2EError as e:
                console.print(f"FAILED: {e}", style="bold red", markup=False)
                raise typer.Exit(1)
            except Exception as e:
                console.print(f"Unexpected error: {e}", style="red", markup=False)
                console.print_exception()
                raise typer.Exit(1)

        return wrapper

    return decorator
