"""
FastAPI Routes.

API 라우트 (JSON)
"""

from . import plugins, templates

__all__ = ["plugins", "templates"]
