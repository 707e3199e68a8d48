import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from league.api.endpoints import auth as auth_endpoints
from league.api.endpoints import matches as match_endpoints
from league.api.endpoints import participants as participant_endpoints
from league.api.endpoints import teams as team_endpoints
from league.api.endpoints import tournaments as tournament_endpoints
from league.core.config import settings
from league.core.database import init_db
from league.core.errors import LeagueError
from league.core.logging_config import log_requests, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting league API", extra={"environment": settings.ENVIRONMENT})
    init_db()
    yield
    logger.info("Shutting down league API")


app = FastAPI(title="League Result API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
app.middleware("http")(log_requests)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _internal_error(request: Request, exc: Exception, message: str) -> JSONResponse:
    logger.error(
        "Unhandled error",
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method, "error": str(exc)},
    )
    if settings.is_development:
        message = f"{message}: {exc}"
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


@app.exception_handler(LeagueError)
async def league_error_handler(request: Request, exc: LeagueError):
    if exc.status_code >= 500:
        logger.error(exc.message, extra={"path": request.url.path})
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning("Request validation failed", extra={"path": request.url.path, "errors": len(errors)})
    if not errors:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return _error(status.HTTP_400_BAD_REQUEST, f"{field}: {message}" if field else message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    return _internal_error(request, exc, "A database error occurred")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    return _internal_error(request, exc, "An unexpected error occurred")


app.include_router(auth_endpoints.router, prefix="/auth", tags=["Authentication"])
app.include_router(tournament_endpoints.router, prefix="/tournaments", tags=["Tournaments"])
app.include_router(team_endpoints.router, prefix="/teams", tags=["Teams"])
app.include_router(participant_endpoints.team_router, prefix="/team/participants", tags=["Participants"])
app.include_router(participant_endpoints.admin_router, prefix="/admin", tags=["Participants"])
app.include_router(match_endpoints.team_router, prefix="/team/matches", tags=["Matches"])
app.include_router(match_endpoints.router, prefix="/matches", tags=["Matches"])


@app.get("/")
async def root():
    return {"message": "League Result API"}
