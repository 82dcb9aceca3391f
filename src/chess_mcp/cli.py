import logging
from pathlib import Path

import typer
import uvicorn

from chess_mcp.app import create_app
from chess_mcp.config import Settings

app = typer.Typer(
    name="chess-mcp",
    help="Chess MCP server over streamable HTTP",
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


@app.callback()
def main() -> None:
    """Chess MCP server over streamable HTTP."""


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Interface to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on"),
    games_dir: Path | None = typer.Option(
        None, "--games-dir", help="Directory for saved games"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level"),
) -> None:
    """Start the HTTP server."""
    try:
        settings = Settings.from_env().with_overrides(
            host=host,
            port=port,
            games_dir=games_dir,
            log_level=log_level.upper() if log_level else None,
        )
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Starting server on {settings.url}")

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
