from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from taskgate.core import config
from taskgate.core.database.engine import init_db
from taskgate.core.errors import TaskgateError
from taskgate.features.audit.routes import router as audit_router
from taskgate.features.organizations.routes import router as organization_router
from taskgate.features.tasks.routes import router as task_router
from taskgate.features.users.dependencies import limiter
from taskgate.features.users.routes import auth_router, router as user_router
from taskgate.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="Taskgate",
    description="Multi-tenant task tracking with hierarchical organization scoping",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
app.state.limiter = limiter


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.taskgate.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def error_response(request: Request, status_code: int, error: str, message) -> JSONResponse:
    """Consistent JSON error envelope for every failure."""
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "statusCode": status_code,
            "error": error,
            "message": message,
            "path": request.url.path,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }),
    )


@app.exception_handler(TaskgateError)
async def taskgate_exception_handler(request: Request, exc: TaskgateError):
    log.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    response = error_response(request, exc.status_code, exc.error, exc.message)
    if headers:
        response.headers.update(headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[str(key)] = error["msg"]
    log.info("Request validation error %s", errors)
    return error_response(request, 400, "Bad Request", errors)


@app.exception_handler(SQLAlchemyError)
async def storage_exception_handler(request: Request, exc: SQLAlchemyError):
    log.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(request, 500, "Internal Server Error", "An unexpected error occurred")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return error_response(request, 500, "Internal Server Error", "An unexpected error occurred")


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(request: Request, _exc: RateLimitExceeded) -> Response:
    return error_response(request, 429, "Too Many Requests", "You are going too fast")


@app.on_event("startup")
async def startup():
    """Initialize database on application startup."""
    log.info("Initializing database...")
    await init_db()
    log.info("Database initialized successfully")


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "Taskgate API",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "authentication": {
            "info": "Protected endpoints require Bearer token in Authorization header",
            "public_endpoints": ["/auth/signup", "/auth/login", "/auth/signup-organizations"],
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(user_router, prefix="/users", tags=["users"])
app.include_router(organization_router, prefix="/organizations", tags=["organizations"])
# Alias for British spelling used by older clients
app.include_router(organization_router, prefix="/organisations", tags=["organizations"], include_in_schema=False)
app.include_router(task_router, prefix="/tasks", tags=["tasks"])
app.include_router(audit_router, prefix="/audit-log", tags=["audit"])
