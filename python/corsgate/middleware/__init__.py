"""Middleware modules for corsgate."""

from corsgate.middleware.cors import CORSPolicyMiddleware

__all__ = ["CORSPolicyMiddleware"]
