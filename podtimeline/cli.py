from __future__ import annotations
import typer
from rich.console import Console
from rich.table import Table

from .categorize import categorize_episode
from .config import load_config
from .logging_setup import setup_logging
from .models import EpisodeType
from .paths import get_dirs
from .pipelines.ingest import REFRESH_MODES, run_ingest
from .store import EpisodeStore

console = Console()

app = typer.Typer(no_args_is_help=True)


@app.command("paths")
def show_paths():
    """Show where podtimeline keeps logs, cache, config."""
    t = Table(title="podtimeline paths")
    t.add_column("Kind"); t.add_column("Location")
    for k, p in get_dirs().items():
        t.add_row(k, str(p))
    console.print(t)


@app.command()
def categorize(title: str = typer.Argument(..., help="Episode title")):
    """Print the content label a title maps to."""
    console.print(categorize_episode(title).value)


@app.command()
def refresh(
    mode: str = typer.Option(None, help="replace or upsert (default: config)"),
    type: str = typer.Option("all", "--type", help="Only show this episode type"),
    search: str = typer.Option(None, help="Only show episodes matching this text"),
    limit: int = typer.Option(50, help="Max rows to print"),
):
    """Fetch both feeds once and print the resulting timeline."""
    cfg = load_config()
    mode = mode or cfg.refresh_mode
    if mode not in REFRESH_MODES:
        console.print(f"[red]Invalid mode: {mode}[/red]")
        raise typer.Exit(code=2)
    try:
        episode_type = None if type == "all" else EpisodeType(type)
    except ValueError:
        console.print(f"[red]Invalid type: {type}[/red]")
        raise typer.Exit(code=2)
    setup_logging(cfg.log_level)

    store = EpisodeStore()
    result = run_ingest(store, cfg.resolved_feeds(), mode=mode)

    t = Table(title=f"Episodes ({result.summary()})")
    t.add_column("Date"); t.add_column("Type"); t.add_column("#")
    t.add_column("Title"); t.add_column("Source")
    for ep in store.query(episode_type=episode_type, search=search)[:limit]:
        t.add_row(
            ep.pub_date.strftime("%Y-%m-%d"),
            ep.episode_type.value,
            ep.episode_number or "",
            ep.title,
            ep.source,
        )
    console.print(t)
    console.print(f"[green]{result.message()}[/green]")
    if not any(f.ok for f in result.feeds):
        raise typer.Exit(code=1)


@app.command("serve")
def serve_cmd(
    host: str = typer.Option(None, help="Bind address (default: config)"),
    port: int = typer.Option(None, help="Port to listen on (default: config)"),
):
    """Start the API server (with background refresh if configured)."""
    cfg = load_config()
    setup_logging(cfg.log_level)
    h = host or cfg.web_host
    p = port or cfg.web_port
    import uvicorn
    from .web.app import create_app
    uvicorn.run(create_app(cfg), host=h, port=p)


if __name__ == "__main__":
    app()
