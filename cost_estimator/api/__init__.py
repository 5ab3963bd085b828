"""
API Package
===========
HTTP routes for the cost estimator.
"""

from cost_estimator.api.router import api_router

__all__ = ["api_router"]
