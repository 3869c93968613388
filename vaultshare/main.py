import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from vaultshare.config import settings
from vaultshare.core.dependencies import http_error_for
from vaultshare.core.errors import BackendError, ConfigurationError, RetryExhaustedError, ValidationError
from vaultshare.database.supabase_client import BackendConnector
from vaultshare.modules.photos import routes as photos_routes
from vaultshare.modules.profiles import routes as profiles_routes
from vaultshare.modules.usage import routes as usage_routes
from vaultshare.modules.vaults import routes as vaults_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.state.connector = None
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RetryExhaustedError)
async def retry_exhausted_handler(request: Request, exc: RetryExhaustedError):
    logger.error("Backend unreachable: %s", exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "The service is temporarily unreachable. Please try again.", "retry": True},
    )


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    error = http_error_for(exc)
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.critical("Configuration error: %s", exc)
    return JSONResponse(status_code=500, content={"detail": "Service is not configured"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(profiles_routes.router, prefix="/api/v1")
app.include_router(vaults_routes.router, prefix="/api/v1")
app.include_router(photos_routes.router, prefix="/api/v1")
app.include_router(usage_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    if app.state.connector is None:
        # Strict mode raises ConfigurationError here and aborts startup
        connector = BackendConnector(settings)
        await connector.connect()
        app.state.connector = connector
    app.state.connector.schedule_health_probe()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")
    if app.state.connector is not None:
        await app.state.connector.close()


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready(request: Request):
    """Readiness probe: checks the backend is reachable."""
    connector = request.app.state.connector
    if connector is None or not await connector.check_health():
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}
