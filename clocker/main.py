
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from dotenv import load_dotenv
import time
import logging
from clocker.utils.logging import configure_logging
from clocker.utils.ids import request_id as get_request_id
from clocker.config import settings
from clocker.credentials import DotenvSecretStore, has_credentials
from clocker.middleware.cors import setup_cors
from clocker.models import ApiResponse
from clocker.observability.metrics import setup_metrics
from clocker.routes import clock as clock_routes
from clocker.routes import setup as setup_routes
from clocker.scheduler import RefreshScheduler
from clocker.service import ClockerService

load_dotenv()
configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(title="Clocker", version="0.1")

# Setup Prometheus metrics if enabled
setup_metrics(app)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to all requests and responses, log request/response."""

    async def dispatch(self, request: Request, call_next):
        req_id = get_request_id(request.headers.get("x-request-id"))
        request.state.request_id = req_id

        start_time = time.time()
        logger.debug(
            f"Request started: {request.method} {request.url.path}",
            extra={"request_id": req_id, "path": request.url.path},
        )

        response = await call_next(request)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Request completed: {request.method} {request.url.path} status={response.status_code}",
            extra={
                "request_id": req_id,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response


app.add_middleware(RequestIDMiddleware)
setup_cors(app)

app.state.secret_store = DotenvSecretStore(settings.SECRETS_FILE)
app.state.service = ClockerService(app.state.secret_store)
app.state.scheduler = RefreshScheduler(app.state.service)


@app.on_event("startup")
async def _startup():
    if settings.SCHEDULER_ENABLED:
        app.state.scheduler.start()
    logger.info("Clocker started")


@app.on_event("shutdown")
async def _shutdown():
    app.state.scheduler.stop()


@app.get("/healthz")
async def health(request: Request):
    """Basic health check."""
    req_id = request.state.request_id
    return ApiResponse.success(data={"status": "healthy"}, request_id=req_id)


@app.get("/readyz")
async def readiness(request: Request):
    """Ready once credentials are stored."""
    req_id = request.state.request_id
    configured = has_credentials(app.state.secret_store)
    return ApiResponse.success(
        data={
            "ready": configured,
            "checks": {"credentials": "configured" if configured else "missing"},
            "state": app.state.service.state.value,
            "scheduler": "running" if app.state.scheduler.running else "stopped",
        },
        request_id=req_id,
    )


app.include_router(clock_routes.router)
app.include_router(setup_routes.router)
