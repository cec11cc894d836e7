"""Generate OpenAPI documents from application routes."""

__version__ = "0.1.0"
