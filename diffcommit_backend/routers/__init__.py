"""Routers module - FastAPI route handlers"""

from . import config, merge, selection

__all__ = ["config", "merge", "selection"]
