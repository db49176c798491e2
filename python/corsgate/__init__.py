"""corsgate - CORS policy enforcement for ASGI services."""

__version__ = "0.1.0"
