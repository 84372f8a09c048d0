"""
Request handlers: the counter API and the static file / index page.
"""

from .counter import CounterHandler
from .static import StaticFileHandler

__all__ = ["CounterHandler", "StaticFileHandler"]
