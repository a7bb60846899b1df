"""Command line entry point.

Usage:
    jsondeck init                 # write a sample jsondeck.yml
    jsondeck serve                # start the server from ./jsondeck.yml
    jsondeck serve -c other.yml   # explicit config file
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.logging import RichHandler

from dotenv import load_dotenv

from persistence.errors import JsonDeckError
from settings import DEFAULT_CONFIG_FILE, SAMPLE_CONFIG, get_settings, load_app_config

app = typer.Typer(
    name="jsondeck",
    help="Configuration-driven mock REST API backed by a JSON file",
    no_args_is_help=True,
)
console = Console(stderr=True)


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@app.command("init")
def cmd_init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config file"),
) -> None:
    """Write a sample jsondeck.yml into the current directory."""
    path = Path.cwd() / DEFAULT_CONFIG_FILE
    if path.exists() and not force:
        console.print(f"[bold red]{DEFAULT_CONFIG_FILE} already exists (use --force to overwrite).[/bold red]")
        raise typer.Exit(1)
    try:
        path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    except OSError as e:
        console.print(f"[bold red]Error creating {DEFAULT_CONFIG_FILE}: {e}[/bold red]")
        raise typer.Exit(1)
    console.print(f"[bold green]{DEFAULT_CONFIG_FILE} file has been created successfully.[/bold green]")


@app.command("serve")
def cmd_serve(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to the YAML config"),
    host: Optional[str] = typer.Option(None, "--host", help="Override hostname from the config"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Override port from the config"),
) -> None:
    """Start the server."""
    from app import create_app

    load_dotenv("local.env")
    settings = get_settings()
    setup_logging(settings.log_level)

    config_path = (config or settings.config_path).resolve()
    try:
        app_config = load_app_config(config_path)
        server = create_app(app_config, base_dir=config_path.parent)
    except JsonDeckError as e:
        console.print(f"[bold red]{e.message}[/bold red]")
        raise typer.Exit(1)

    console.print("[bold green]jsondeck started successfully ![/bold green]")
    uvicorn.run(
        server,
        host=host or app_config.hostname,
        port=port or app_config.port,
        log_config=None,
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
