"""CORS configuration.

The bug tracker frontend runs on its own origin (localhost:3000 during
development), so the API must list it explicitly.
"""

import os
from typing import List

DEFAULT_ORIGIN = "http://localhost:3000"


def get_allowed_origins() -> List[str]:
    """
    Get list of allowed CORS origins.

    Environment Variables:
        ALLOWED_ORIGINS: Comma-separated list of allowed origins
        CORS_ORIGIN: Single allowed origin, used when ALLOWED_ORIGINS is unset

    Returns:
        List of allowed origin URLs
    """
    env_origins = os.getenv("ALLOWED_ORIGINS") or os.getenv("CORS_ORIGIN", "")

    origins = [origin.strip() for origin in env_origins.split(",") if origin.strip()]
    if not origins:
        origins = [DEFAULT_ORIGIN]

    if os.getenv("DEBUG", "false").lower() == "true" and "http://127.0.0.1:3000" not in origins:
        origins.append("http://127.0.0.1:3000")

    return origins


def get_allowed_methods() -> List[str]:
    return ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


def get_allowed_headers() -> List[str]:
    return ["Content-Type", "Accept", "Origin", "Cache-Control", "X-Requested-With"]


def build_cors_config() -> dict:
    """Keyword arguments for FastAPI's CORSMiddleware."""
    return {
        "allow_origins": get_allowed_origins(),
        "allow_credentials": True,
        "allow_methods": get_allowed_methods(),
        "allow_headers": get_allowed_headers(),
        "max_age": 600,  # Cache preflight requests for 10 minutes
    }
