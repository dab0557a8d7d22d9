import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rrchess.api.endpoints import lichess as lichess_endpoints
from rrchess.api.endpoints import matches as match_endpoints
from rrchess.api.endpoints import players as player_endpoints
from rrchess.api.endpoints import tournaments as tournament_endpoints
from rrchess.core.config import settings
from rrchess.core.exceptions import AuthenticationError, TournamentError
from rrchess.models import create_tables
from rrchess.services.lichess_service import LichessClient

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def tournament_error_handler(request: Request, exc: TournamentError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    yield


def create_app(lichess_client: Optional[LichessClient] = None) -> FastAPI:
    app = FastAPI(title="Round-Robin Chess Tournament API", lifespan=lifespan)
    app.state.lichess_client = lichess_client or LichessClient()

    app.add_exception_handler(TournamentError, tournament_error_handler)

    app.include_router(tournament_endpoints.router, prefix="/tournaments", tags=["Tournaments"])
    app.include_router(match_endpoints.router, prefix="/matches", tags=["Matches"])
    app.include_router(player_endpoints.router, prefix="/players", tags=["Players"])
    app.include_router(lichess_endpoints.router, prefix="/lichess", tags=["Lichess"])

    @app.get("/")
    async def root():
        return {"message": "Round-Robin Chess Tournament API"}

    return app


configure_logging()
app = create_app()
