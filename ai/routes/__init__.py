"""
AI Routes Package
=================

All API routes for the EduNex AI proxy.
"""

from . import text_ai_routes

__all__ = [
    "text_ai_routes",
]
