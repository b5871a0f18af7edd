"""Middleware protocol shared by the ASGI host and ``Ottoman``."""

from ottoman.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
