"""CLI entry point for react-lens."""

from __future__ import annotations

import asyncio
import os
import signal
from pathlib import Path

import typer
from rich.console import Console

import react_lens

app = typer.Typer(
    name="react-lens",
    help="Correlate a live React page's component tree with its accessibility tree.",
    no_args_is_help=True,
    add_completion=False,
)

# Console for stderr output (stdout is reserved for MCP JSON-RPC)
_stderr_console = Console(stderr=True)


def _print_startup_banner() -> None:
    """Print startup message to stderr."""
    _stderr_console.print(
        f"[bold cyan]react-lens MCP Server[/bold cyan] [dim]v{react_lens.__version__}[/dim]"
    )
    _stderr_console.print(
        "Running on stdio transport. Press [bold yellow]Ctrl+C[/bold yellow] to stop."
    )


def _setup_signal_handlers() -> None:
    """Set up signal handlers for clean exit."""

    def handle_signal(signum: int, _frame: object) -> None:
        sig_name = signal.Signals(signum).name
        _stderr_console.print(f"\n[dim]Received {sig_name}, shutting down...[/dim]")
        # sys.exit() does not reliably stop a running asyncio loop
        os._exit(0)

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)


def _load_config(
    config: Path | None,
    headless: bool | None,
    connect: bool | None,
    cdp_port: int | None,
    url: str | None,
) -> None:
    """Load config and apply command-line overrides to the global instance."""
    from react_lens.config import get_config, set_config

    try:
        loaded = get_config(config, reload=config is not None)
    except ValueError as e:
        _stderr_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    overrides = {
        "headless": headless,
        "connect_existing": connect,
        "cdp_port": cdp_port,
        "target_url": url,
    }
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        set_config(loaded.model_copy(update=updates))


_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config.yaml.",
    exists=True,
    readable=True,
)
_HEADLESS_OPTION = typer.Option(
    None, "--headless/--headed", help="Run the launched browser headless or with a window."
)
_CONNECT_OPTION = typer.Option(
    None, "--connect/--launch", help="Attach to a running Chrome over CDP or launch Chromium."
)
_CDP_PORT_OPTION = typer.Option(None, "--cdp-port", help="CDP port used with --connect.")


@app.command()
def serve(
    config: Path | None = _CONFIG_OPTION,
    headless: bool | None = _HEADLESS_OPTION,
    connect: bool | None = _CONNECT_OPTION,
    cdp_port: int | None = _CDP_PORT_OPTION,
    url: str | None = typer.Option(None, "--url", "-u", help="URL to open on startup."),
) -> None:
    """Run the react-lens MCP server over stdio transport.

    Examples:
        react-lens serve
        react-lens serve --connect --cdp-port 9222
        react-lens serve --headed --url http://localhost:5173
    """
    _load_config(config, headless, connect, cdp_port, url)
    _setup_signal_handlers()
    _print_startup_banner()

    # Import here so config overrides are in place before the server module loads
    from react_lens.server import main as server_main

    server_main()


async def _component_map(url: str, include_state: bool, verbose: bool) -> str:
    from react_lens.browser import BrowserService

    service = BrowserService()
    try:
        await service.ensure_connected()
        await service.navigate_page(url)
        session = await service.current_session()
        return await session.get_component_map(verbose=verbose, include_state=include_state)
    finally:
        await service.disconnect()


@app.command("map")
def component_map(
    url: str = typer.Argument(..., help="Page to inspect."),
    state: bool = typer.Option(False, "--state", help="Include component state summaries."),
    verbose: bool = typer.Option(False, "--verbose", help="Keep ignored accessibility nodes."),
    config: Path | None = _CONFIG_OPTION,
    headless: bool | None = _HEADLESS_OPTION,
    connect: bool | None = _CONNECT_OPTION,
    cdp_port: int | None = _CDP_PORT_OPTION,
) -> None:
    """Print the annotated component tree of a page and exit."""
    from react_lens.logging import configure_logging

    _load_config(config, headless, connect, cdp_port, None)
    configure_logging(log_name="map", level="WARNING")

    with _stderr_console.status(f"Inspecting {url}..."):
        text = asyncio.run(_component_map(url, include_state=state, verbose=verbose))
    typer.echo(text)
    if text.startswith("Error:"):
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version and exit."""
    typer.echo(f"react-lens {react_lens.__version__}")


def cli() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    cli()
