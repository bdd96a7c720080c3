"""Routes package for FastAPI endpoints.

This package contains all API route modules for Formly.
"""

from formly.routes import auth, forms, health, responses

__all__ = ["auth", "forms", "health", "responses"]
