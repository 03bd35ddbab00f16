"""Glass Photo CLI - glassphoto command line tool."""

from __future__ import annotations

import json
import sys
import uuid
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from glassphoto import __version__
from glassphoto.common.errors import ConfigurationError
from glassphoto.config import Config, load_config
from glassphoto.web.auth import sign_user_token

app = typer.Typer(
    name="glassphoto",
    help="Glass Photo app server",
    no_args_is_help=True,
)
console = Console()


def get_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration or exit with an error."""
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/] {e}")
        console.print("[dim]Set PACKAGE_NAME and MENTRAOS_API_KEY in the environment or config.yaml[/]")
        sys.exit(1)


@app.command()
def serve(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    simulate: Optional[str] = typer.Option(
        None, "--simulate", help="Attach a mock glasses session for this user id"
    ),
):
    """Run the app server."""
    from glassphoto.app import PhotoApp
    from glassphoto.session.mock import MockSession

    cfg = get_config(config_path)
    photo_app = PhotoApp(cfg)

    console.print(
        Panel(
            f"[bold]{cfg.package_name}[/] on http://{cfg.host}:{cfg.port}\n"
            f"Webview: /webview   Health: /health",
            title=f"Glass Photo v{__version__}",
        )
    )

    async def attach_simulated_session() -> None:
        if simulate:
            await photo_app.start_session(MockSession(), f"sim-{uuid.uuid4().hex[:8]}", simulate)
            token = sign_user_token(cfg.api_key, simulate)
            console.print(f"[green]Simulated session[/] for {simulate}")
            console.print(f"  Viewer: http://localhost:{cfg.port}/webview?token={token}")

    photo_app.run(on_started=attach_simulated_session)


@app.command()
def token(
    user_id: str,
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Print a webview token for a user."""
    cfg = get_config(config_path)
    print(sign_user_token(cfg.api_key, user_id))


@app.command()
def config(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    json_output: bool = typer.Option(False, "--json", help="Print as JSON"),
):
    """Show configuration (secrets masked)."""
    cfg = get_config(config_path)
    data = cfg.masked_dump()

    if json_output:
        print(json.dumps(data, indent=2, default=str))
        return

    console.print("[bold]Configuration[/]")
    console.print(f"  Package: {cfg.package_name}")
    console.print(f"  API key: {data['api_key']}")
    console.print(f"  Listen: {cfg.host}:{cfg.port}")
    console.print(f"  Mode: {cfg.device.mode} ({cfg.device.log_level})")
    console.print("\n[bold]Streaming[/]")
    console.print(f"  Poll interval: {cfg.streaming.poll_interval_seconds}s")
    console.print(f"  Guard window: {cfg.streaming.guard_window_seconds}s")
    console.print(f"  Hold guard after capture: {cfg.streaming.hold_guard_after_capture}")
    console.print("\n[bold]Geocoding[/]")
    console.print(f"  Enabled: {cfg.geocoding_enabled}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
