"""CLI commands for actionbridge.

`serve` runs the bridge (HTTP callers and the worker socket share one port);
`config` prints the effective configuration; `status` and `call` talk to a
running bridge over HTTP.
"""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console

from actionbridge import __logo__, __version__
from actionbridge.cli.shared.logging_utils import configure_console_logging, ensure_rotating_log_file
from actionbridge.cli.shared.network_utils import is_port_in_use
from actionbridge.config.loader import get_config_path, load_config

app = typer.Typer(
    name="actionbridge",
    help=f"{__logo__} actionbridge - HTTP to WebSocket worker action bridge",
    no_args_is_help=True,
)

console = Console()


def _load_or_exit(config_path: Path | None):
    try:
        return load_config(config_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e


@app.command()
def version():
    """Show the actionbridge version."""
    console.print(f"{__logo__} actionbridge v{__version__}")


@app.command("config")
def show_config(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file (default ~/.actionbridge/config.json)"),
):
    """Print the effective configuration (file + ACTIONBRIDGE_* env vars)."""
    config = _load_or_exit(config_path)
    console.print(f"[dim]Config file: {config_path or get_config_path()}[/dim]")
    console.print_json(json.dumps(config.model_dump()))


# ============================================================================
# Server
# ============================================================================


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind host"),
    port: int | None = typer.Option(None, "--port", "-p", envvar="PORT", help="HTTP/WebSocket port"),
    timeout: float | None = typer.Option(None, "--timeout", "-t", help="Seconds to wait for a worker reply"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file (default ~/.actionbridge/config.json)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Start the bridge: HTTP requests become worker actions, a WebSocket upgrade attaches the worker."""
    config = _load_or_exit(config_path)
    if host is not None:
        config.server.host = host
    if port is not None:
        config.server.port = port
    if timeout is not None:
        if timeout <= 0:
            console.print("[red]--timeout must be positive.[/red]")
            raise typer.Exit(1)
        config.bridge.call_timeout_seconds = timeout

    host, port = config.server.host, config.server.port
    if is_port_in_use(host, port):
        console.print(
            f"[red]Port {port} is already in use.[/red] "
            f"Please close the process using this port, or use [cyan]--port[/cyan] to specify another port (current: {host}:{port})."
        )
        raise typer.Exit(1)

    level = "DEBUG" if verbose else config.server.log_level
    configure_console_logging(level)
    log_path = ensure_rotating_log_file("serve", level=level)

    from actionbridge.api.server import create_bridge_app

    import uvicorn

    api_app = create_bridge_app(config=config)
    uvicorn_config = uvicorn.Config(
        api_app,
        host=host,
        port=port,
        log_level="debug" if verbose else "info",
    )
    api_server = uvicorn.Server(uvicorn_config)

    console.print(f"{__logo__} Starting actionbridge on {host}:{port}...")
    console.print(f"[dim]Logs: {log_path}[/dim]")
    console.print(f"[green]✓[/green] Worker: ws://{host}:{port}/  Callers: http://{host}:{port}/<action>")

    try:
        asyncio.run(api_server.serve())
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down...[/yellow]")


# ============================================================================
# Client helpers
# ============================================================================


@app.command()
def status(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file (default ~/.actionbridge/config.json)"),
):
    """Check whether a bridge is answering on the configured host/port."""
    from actionbridge.cli.shared.http_utils import get_bridge_base_url, ping

    base_url = get_bridge_base_url(_load_or_exit(config_path))
    if ping(base_url):
        console.print(f"[green]✓[/green] actionbridge is up at {base_url}")
        return
    console.print(f"[red]✗[/red] No bridge answering at {base_url}")
    raise typer.Exit(1)


@app.command()
def call(
    action: str = typer.Argument(..., help="Action name (request path)"),
    param: list[str] = typer.Option([], "--param", "-p", help="Query parameter key=value (GET)"),
    data: str | None = typer.Option(None, "--data", "-d", help="JSON object body (sends POST)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file (default ~/.actionbridge/config.json)"),
):
    """Invoke an action on a running bridge and print the worker's reply."""
    import httpx

    from actionbridge.cli.shared.http_utils import call_action, get_bridge_base_url, parse_params

    config = _load_or_exit(config_path)
    try:
        params = parse_params(param)
        body = json.loads(data) if data is not None else None
    except (ValueError, json.JSONDecodeError) as e:
        console.print(f"[red]Invalid input: {e}[/red]")
        raise typer.Exit(2) from e

    try:
        response = call_action(
            get_bridge_base_url(config),
            action,
            params=params,
            data=body,
            timeout=config.bridge.call_timeout_seconds + 5.0,
        )
    except httpx.HTTPError as e:
        console.print(f"[red]Bridge unavailable: {e}[/red]")
        raise typer.Exit(1) from e

    if response.status_code != 200:
        console.print(f"[red]{response.status_code}[/red] {response.text}")
        raise typer.Exit(1)
    if response.headers.get("content-type", "").startswith("application/json"):
        console.print_json(response.text)
    else:
        console.print(response.text, markup=False)
