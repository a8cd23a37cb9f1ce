"""
API Package
===========
HTTP routes for the model gateway.
"""

from gateway.api.router import api_router

__all__ = ["api_router"]
