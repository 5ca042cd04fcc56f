import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import load_settings
from app.errors import PageDeployError
from app.limiter import limiter
from app.routers.deploy import router as deploy_router
from app.routers.landing_page import router as landing_page_router

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A missing NETLIFY_AUTH_TOKEN raises here and aborts startup.
    settings = load_settings()
    app.state.settings = settings
    logger.info(
        "Settings loaded",
        extra={"site_id": settings.netlify_site_id, "api_base": settings.netlify_api_base},
    )
    yield


app = FastAPI(
    title="Landing Page Deployer",
    description="Fetches or generates an HTML page and publishes it to Netlify.",
    version="1.0.0",
    lifespan=lifespan,
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(PageDeployError)
async def page_deploy_error_handler(request: Request, exc: PageDeployError) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_payload()))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning("Rejected request body for %s", request.url.path)
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"error": "An unexpected error occurred."})


app.include_router(deploy_router)
app.include_router(landing_page_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from Landing Page Deployer"}
