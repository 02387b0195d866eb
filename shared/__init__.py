"""
Shared utilities for the Extension App Auth service.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI application shell (middleware, health, metrics)
- test_helpers: Key and token factories for tests and mocks

Do not import from service packages into shared/.
"""
