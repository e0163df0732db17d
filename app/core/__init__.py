"""Core: config, error mapping, rate limiting and application lifespan."""

from app.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
