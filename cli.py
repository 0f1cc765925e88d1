"""
CLI tool for running and inspecting the signaling relay.

Provides commands for serving the application with keep-alive timing taken
from settings and for viewing the registered WebSocket event handlers.
"""

import copy

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from castrelay.api.ws.constants import SignalEvent
from castrelay.settings import app_settings

# Initialize Typer app with help text
typer_app = typer.Typer(
    name="castrelay",
    help="Signaling relay CLI - serve the relay and inspect event handlers",
    add_completion=False,
)
console = Console()


def build_log_config() -> dict:
    """
    Uvicorn's default logging config with monitoring paths filtered out
    of the access log.
    """
    log_config = copy.deepcopy(uvicorn.config.LOGGING_CONFIG)
    log_config.setdefault("filters", {})["exclude_metrics"] = {
        "()": "castrelay.uvicorn_filters.ExcludeMetricsFilter"
    }
    log_config["handlers"]["access"]["filters"] = ["exclude_metrics"]
    return log_config


@typer_app.command(name="serve")
def serve(
    host: str = typer.Option(app_settings.HOST, help="Bind address"),
    port: int = typer.Option(app_settings.PORT, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """
    Run the relay under uvicorn.

    The WebSocket ping interval and timeout come from WS_PING_INTERVAL and
    WS_PING_TIMEOUT, the same values the Host grace period is derived from.

    Example:
        python cli.py serve --port 4241
    """
    console.print(
        Panel.fit(
            f"[bold cyan]castrelay[/bold cyan] on {host}:{port}\n"
            f"ping {app_settings.WS_PING_INTERVAL}s / "
            f"timeout {app_settings.WS_PING_TIMEOUT}s / "
            f"host grace {app_settings.host_grace_period}s",
            border_style="cyan",
        )
    )
    uvicorn.run(
        "castrelay:app",
        host=host,
        port=port,
        reload=reload,
        ws_ping_interval=app_settings.WS_PING_INTERVAL,
        ws_ping_timeout=app_settings.WS_PING_TIMEOUT,
        log_config=build_log_config(),
    )


@typer_app.command(name="ws-handlers")
def ws_handlers():
    """
    Display a table of all WebSocket events and their handlers.

    Outbound-only events show no handler; a client sending one gets its
    frame dropped.

    Example:
        python cli.py ws-handlers
    """
    from castrelay.api.ws.handlers import load_handlers
    from castrelay.routing import event_router

    load_handlers()

    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Registered WebSocket Handlers[/bold cyan]",
            border_style="cyan",
        )
    )
    console.print()

    table = Table(
        "Event",
        "Payload",
        "Handler Path",
        title="WebSocket Handlers Registry",
        show_lines=True,
    )

    for event in SignalEvent:
        handler = event_router.handlers_registry.get(event)

        if not handler:
            table.add_row(
                f"[dim]{event.value}[/dim]",
                "[dim]-[/dim]",
                "[dim]outbound only[/dim]",
            )
            continue

        payload = event_router.payloads_registry[event]
        table.add_row(
            f"[green]{event.value}[/green]",
            payload.__name__,
            f"{handler.__module__}.[yellow]{handler.__name__}[/yellow]",
        )

    console.print(table)
    console.print()
    console.print(
        f"[bold]Summary:[/bold] {len(event_router.handlers_registry)}/"
        f"{len(SignalEvent)} events handled inbound"
    )
    console.print()


if __name__ == "__main__":
    typer_app()
