"""Routers module - FastAPI route handlers"""

from . import assistant, config

__all__ = ["assistant", "config"]
