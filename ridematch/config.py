"""
Configuration for the ridematch dispatch service.

Every value can be overridden through an environment variable of the same
name, which is how the server is configured when deployed.
"""

import os


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


# =============================================================================
# ROUTING
# =============================================================================

AVG_SPEED_KMH: float = _env_float("AVG_SPEED_KMH", 40.0)
"""Average vehicle speed used for ETA estimates (distance units per hour)."""

# =============================================================================
# DISPATCH
# =============================================================================

DEMAND_WINDOW_SIZE: int = _env_int("DEMAND_WINDOW_SIZE", 20)
"""Number of most recent queued requests kept for demand analysis."""

HOTSPOT_COUNT: int = _env_int("HOTSPOT_COUNT", 3)
"""How many pickup locations are reported as hotspots."""

# =============================================================================
# SERVER
# =============================================================================

HOST: str = os.environ.get("HOST", "0.0.0.0")
PORT: int = _env_int("PORT", 5000)
SECRET_KEY: str = os.environ.get("SECRET_KEY", "ride-sharing-secret-key")

SOCKETIO_ASYNC_MODE: str = os.environ.get("SOCKETIO_ASYNC_MODE", "threading")
"""Async mode handed to Flask-SocketIO ('threading', 'eventlet', 'gevent')."""

CORS_ORIGINS: str = os.environ.get("CORS_ORIGINS", "*")

LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")
