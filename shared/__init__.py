"""
Shared utilities for the Read-Aside Item Service.

This package aggregates common building blocks consumed by the service
and the seeder CLI:

- config: Service configuration via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- tracing: OpenTelemetry tracing config
- errors: Canonical error types and responses
- circuit_breaker: Fast-fail protection for best-effort dependencies
- base_service: FastAPI service skeleton (health, metrics, error handlers)

Do not import from service_* packages into shared/.
"""
