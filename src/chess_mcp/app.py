import contextlib
import logging
from collections.abc import AsyncIterator

from starlette.applications import Starlette

from chess_mcp.config import Settings
from chess_mcp.game.server import ChessServerFactory
from chess_mcp.game.store import FileGameStore
from chess_mcp.transport.streamable_http.server.router import SessionRouter

logger = logging.getLogger(__name__)


def create_router(settings: Settings) -> SessionRouter:
    store = FileGameStore(settings.games_dir)
    return SessionRouter(ChessServerFactory(store), endpoint_path=settings.endpoint_path)


def create_app(settings: Settings | None = None) -> Starlette:
    """ASGI app serving the chess MCP server at `settings.endpoint_path`."""
    settings = settings or Settings()
    router = create_router(settings)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        yield
        logger.info(f"Shutting down, closing {len(router.registry)} sessions")
        await router.close()

    app = Starlette(routes=router.app.routes, lifespan=lifespan)
    app.state.router = router
    return app
