"""CLI commands for superbridge."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from superbridge import __logo__, __version__
from superbridge.cli.shared.logging_utils import configure_console_logging, ensure_rotating_log_file
from superbridge.cli.shared.network_utils import is_port_in_use, suggest_free_port

app = typer.Typer(
    name="superbridge",
    help=f"{__logo__} superbridge - playback and library bridge for a hardware remote",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} superbridge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """superbridge - inter-app action bridge for a hardware remote."""
    pass


def _load(config_path: Path | None):
    from superbridge.config.access import get_config as get_cached_config

    try:
        return get_cached_config(config_path=config_path, force_reload=True)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


# ============================================================================
# Serve
# ============================================================================


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default from config)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default from config)"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
):
    """Start the WebSocket server the remote connects to."""
    import uvicorn

    from superbridge.api.server import create_app
    from superbridge.auth.token_store import TokenStore

    cfg = _load(config_path)
    bind_host = host or cfg.server.host
    bind_port = port if port is not None else cfg.server.port
    level = "DEBUG" if verbose else cfg.server.log_level

    if is_port_in_use(bind_host, bind_port):
        console.print(f"[red]Port {bind_port} on {bind_host} is already in use.[/red]")
        free = suggest_free_port(bind_host, bind_port)
        if free is not None:
            console.print(f"Try [cyan]superbridge serve --port {free}[/cyan]")
        raise typer.Exit(1)

    if TokenStore(cfg.token_path).load() is None:
        console.print(f"[red]No valid access token at {cfg.token_path}[/red]")
        console.print("Run [cyan]superbridge auth[/cyan] first.")
        raise typer.Exit(1)

    configure_console_logging(level)
    log_path = ensure_rotating_log_file("serve", level=level)

    console.print(f"{__logo__} Starting superbridge on {bind_host}:{bind_port}...")
    console.print(f"[dim]Logs: {log_path}[/dim]")

    uvicorn.run(create_app(cfg), host=bind_host, port=bind_port, log_level=level.lower())


# ============================================================================
# Auth
# ============================================================================


@app.command()
def auth(
    client_id: str | None = typer.Option(None, "--client-id", help="Save this app client id to the config first"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Authorize against the upstream account and store the access token."""
    from superbridge.auth import pkce
    from superbridge.auth.token_store import TokenStore
    from superbridge.config.access import update_config
    from superbridge.utils.exceptions import AuthError

    cfg = _load(config_path)
    if client_id:

        def _set_client_id(c):
            c.spotify.client_id = client_id

        cfg = update_config(_set_client_id, config_path=config_path)
        console.print("[green]✓[/green] Client id saved")

    client_id = cfg.spotify.client_id
    if not client_id:
        console.print("[red]No client id configured.[/red] Set spotify.clientId or SPOTIFY_CLIENT_ID.")
        raise typer.Exit(1)

    verifier = pkce.generate_code_verifier()
    url = pkce.build_authorize_url(
        client_id=client_id,
        redirect_uri=cfg.spotify.redirect_uri,
        verifier=verifier,
        accounts_base=cfg.spotify.accounts_base,
    )
    console.print("Open this URL and approve access:\n")
    console.print(url, soft_wrap=True)
    redirected = typer.prompt("\nPaste the URL you were redirected to")

    code = pkce.extract_code(redirected)
    if not code:
        console.print("[red]No authorization code in that URL.[/red]")
        raise typer.Exit(1)

    try:
        token = asyncio.run(
            pkce.exchange_code(
                code=code,
                verifier=verifier,
                client_id=client_id,
                redirect_uri=cfg.spotify.redirect_uri,
                accounts_base=cfg.spotify.accounts_base,
            )
        )
    except AuthError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    TokenStore(cfg.token_path).save(token)
    console.print(f"[green]✓[/green] Token saved to {cfg.token_path}")


# ============================================================================
# Status
# ============================================================================


@app.command()
def status(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Show superbridge status."""
    from superbridge.auth.token_store import TokenStore
    from superbridge.config.loader import get_config_path

    cfg = _load(config_path)
    path = config_path or get_config_path()

    console.print(f"{__logo__} superbridge Status\n")
    token_ok = TokenStore(cfg.token_path).load() is not None

    table = Table(title="Bridge")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Config", str(path) if path.exists() else f"{path} (defaults)")
    table.add_row("Token", "[green]valid[/green]" if token_ok else "[red]missing or expired[/red]")
    table.add_row("Listen", f"{cfg.server.host}:{cfg.server.port}")
    table.add_row("Poll interval", f"{cfg.sync.poll_interval_ms} ms")
    table.add_row("Cache entries", str(cfg.cache.max_entries))
    table.add_row("Image cache", str(cfg.image_dir))
    console.print(table)


if __name__ == "__main__":
    app()
