"""Configuration module for FixturePool.

Usage:
    from fixturepool.config import get_settings

    settings = get_settings()  # Cached singleton
    print(settings.test_env)

Note:
    We intentionally don't export a module-level `settings` instance.
    Use `get_settings()` so tests can override environment variables
    and clear the cache between cases.
"""

from fixturepool.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
