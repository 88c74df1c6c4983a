import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.ext.asyncio import AsyncSession

from .api import links
from . import web
from .config import settings
from .database import engine, get_db, init_models
from .exceptions import TinyLinkError, LinkNotFoundError, StoreUnavailableError
from .logging_config import setup_logging
from .observability import PrometheusMiddleware, metrics_endpoint, REDIRECT_TOTAL, REDIRECT_404_TOTAL, REDIRECT_ERROR_TOTAL
from .schemas import HealthResponse
from .services.redirect import resolve_redirect

setup_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

START_TIME = time.monotonic()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    await init_models()
    logger.info(f"TinyLink {settings.APP_VERSION} ready")
    yield
    # Shutdown logic
    await engine.dispose()

app = FastAPI(
    title="TinyLink",
    description="Short links with click accounting",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(PrometheusMiddleware)

@app.exception_handler(TinyLinkError)
async def tinylink_error_handler(request: Request, exc: TinyLinkError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.__class__.__name__}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})

app.add_route("/metrics", metrics_endpoint)
app.mount("/static", StaticFiles(directory=web.STATIC_DIR), name="static")

app.include_router(links.router, prefix="/api")
app.include_router(web.router)

@app.get("/healthz", response_model=HealthResponse)
async def healthz():
    return HealthResponse(
        ok=True,
        version=settings.APP_VERSION,
        uptime=time.monotonic() - START_TIME,
        timestamp=datetime.now(timezone.utc),
    )

@app.get("/{code}", include_in_schema=False)
async def redirect_to_url(
    code: str,
    db: AsyncSession = Depends(get_db)
):
    try:
        link = await resolve_redirect(db, code)
    except LinkNotFoundError:
        REDIRECT_404_TOTAL.inc()
        return PlainTextResponse("Not found", status_code=404)
    except StoreUnavailableError:
        REDIRECT_ERROR_TOTAL.inc()
        logger.error("Redirect failed, no click recorded", extra={"code": code})
        return PlainTextResponse("Internal server error", status_code=500)

    REDIRECT_TOTAL.inc()
    return RedirectResponse(url=link.original_url, status_code=302)
