import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from topup import config
from topup.crud import init_db
from topup.errors import TopUpError
from topup.logging_config import setup_logging
from topup.routes import router
from topup.security import SecurityHeadersMiddleware, global_limit, limiter
from topup.sessions import SessionStore

setup_logging()
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

app = FastAPI(title="Top-up Service", docs_url=None, redoc_url=None)

app.state.sessions = SessionStore(ttl_seconds=config.SESSION_TTL_MINUTES * 60)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(SecurityHeadersMiddleware)

app.include_router(router)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.exception_handler(TopUpError)
async def topup_error_handler(request: Request, exc: TopUpError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.reason})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "invalid request"})


@app.get("/", include_in_schema=False)
@global_limit
def index_page(request: Request):
    return FileResponse(STATIC_DIR / "index.html")


@app.get("/success", include_in_schema=False, name="success_page")
@global_limit
def success_page(request: Request):
    return FileResponse(STATIC_DIR / "success.html")


@app.get("/admin", include_in_schema=False)
@global_limit
def admin_page(request: Request):
    return FileResponse(STATIC_DIR / "admin.html")


init_db()

if config.SESSION_SECRET == config.DEFAULT_SESSION_SECRET:
    logger.warning("SESSION_SECRET is unset; using the insecure default secret")
