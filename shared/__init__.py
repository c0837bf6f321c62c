"""
Shared utilities for the Orders Access Layer.

This package aggregates common building blocks consumed by the services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI service scaffold (health, metrics, error handlers)

Do not import from service_* packages into shared/.
"""
