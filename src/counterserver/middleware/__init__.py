"""
Middleware components.

Each middleware wraps the router's handle() and sees every request on
the way in and every response on the way out.
"""

from .base import Middleware, MiddlewarePipeline, NextHandler
from .cors import CORSConfig, CORSMiddleware

__all__ = [
    "Middleware",
    "MiddlewarePipeline",
    "NextHandler",
    "CORSConfig",
    "CORSMiddleware",
]
