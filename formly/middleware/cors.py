"""CORS configuration helper.

Browsers need credentials allowed to send the session cookie, and the
Content-Disposition header exposed to read CSV download names.
"""

from typing import Iterable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

EXPOSE_HEADERS = ["Content-Disposition"]


def apply_cors(app: FastAPI, *, origins: Optional[Iterable[str]] = None) -> None:
    """Allow the given browser origins to call the API with the session cookie."""
    # Credentials cannot be combined with a wildcard origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(origins or []),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=EXPOSE_HEADERS,
    )


__all__ = ["apply_cors", "EXPOSE_HEADERS"]
