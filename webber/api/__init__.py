"""
HTTP interface for sketch-to-website generation.

Exposes a single FastAPI application with the generation endpoint.
"""

from webber.api.server import app, get_generator

__all__ = [
    "app",
    "get_generator",
]
