"""
Base service class for Read-Aside services.
"""

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Dict, Optional
import time
import os

from shared.config import ServiceConfig, get_config
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.metrics import get_metrics_collector
from shared.errors import ReadAsideException, ValidationError, NotFoundError, ExternalServiceError


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, port: int, config: Optional[ServiceConfig] = None):
        self.service_name = service_name
        self.port = port
        self.config = config or get_config(service_name, port)

        configure_logging(service_name, self.config.log_level)
        self.logger = get_logger(f"{service_name}.service")
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        if self.config.enable_tracing:
            from shared.tracing import configure_tracing
            configure_tracing(service_name, self.config.otel_exporter, self.config.enable_console_tracing)

        self.app = self._create_app()
        if self.config.enable_tracing:
            from shared.tracing import instrument_app
            instrument_app(self.app)

        self._setup_middleware()
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            await self.start()
            try:
                yield
            finally:
                await self.stop()

        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description=f"Read-Aside - {self.service_name.title()} Service",
            version="1.0.0",
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url="/redoc" if self.config.env == "local" else None,
            lifespan=lifespan,
        )

    def _setup_middleware(self):
        """Set up middleware."""

        @self.app.middleware("http")
        async def add_request_timing(request: Request, call_next):
            request_id = set_request_id(request.headers.get("x-request-id"))
            start_time = time.time()

            try:
                response = await call_next(request)
            except Exception:
                self._record_request(request, 500, time.time() - start_time, request_id)
                raise
            finally:
                clear_context()

            self._record_request(request, response.status_code, time.time() - start_time, request_id)
            response.headers["x-request-id"] = request_id
            return response

    def _record_request(self, request: Request, status_code: int, duration: float, request_id: str):
        self.metrics.record_http_request(
            method=request.method,
            endpoint=request.url.path,
            status_code=status_code,
            duration=duration
        )
        self.logger.info(
            "HTTP request",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration * 1000, 2),
            request_id=request_id
        )

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            dependencies = await self._check_dependencies()
            healthy = all(status == "ok" for status in dependencies.values())
            self.metrics.record_health_check("ok" if healthy else "degraded")

            return {
                "service": self.service_name,
                "status": "ok" if healthy else "degraded",
                "uptime_seconds": time.time() - self._start_time,
                "dependencies": dependencies,
                "version": "1.0.0",
                "commit": os.getenv("GIT_COMMIT", "unknown")
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            from prometheus_client import CONTENT_TYPE_LATEST
            return Response(content=self.metrics.render(), media_type=CONTENT_TYPE_LATEST)

        @self.app.exception_handler(ReadAsideException)
        async def read_aside_exception_handler(request: Request, exc: ReadAsideException):
            """Render ReadAsideException as an ErrorResponse."""
            status_code = self._status_for_exception(exc)
            log = self.logger.error if status_code >= 500 else self.logger.info
            log(
                "Request failed",
                code=exc.code,
                message=exc.message,
                details=exc.details,
                status_code=status_code
            )
            self.metrics.record_error(exc.code)
            return JSONResponse(
                status_code=status_code,
                content=exc.to_response().model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return JSONResponse(
                status_code=500,
                content={
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "details": {}
                }
            )

    def _status_for_exception(self, exc: ReadAsideException) -> int:
        """Map a service exception to an HTTP status code."""
        if isinstance(exc, ValidationError):
            return 400
        if isinstance(exc, NotFoundError):
            return 404
        if isinstance(exc, ExternalServiceError):
            return 503
        return 500

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check service dependencies. Override in subclasses."""
        return {}

    async def start(self):
        """Acquire external resources. Override in subclasses."""

    async def stop(self):
        """Release external resources. Override in subclasses."""

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
