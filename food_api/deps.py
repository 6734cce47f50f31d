"""
deps.py – Dependency Injection: singleton service instances.
Created once when the module is imported; routes and middleware go through
the getters so tests can swap the singletons with unittest.mock.patch.
"""
from .core.cache import ResponseCache
from .core.config import Settings, get_settings as load_settings
from .core.health import HealthChecker
from .core.ratelimit import RateLimiter
from .core.store import FoodStore
from .handlers.food_handler import FoodHandler
from .handlers.search_handler import SearchHandler

# ── Core singletons ────────────────────────────────────────────────────────────

_settings = load_settings()
_store    = FoodStore(_settings.core.database_url)
_cache    = ResponseCache(
    capacity=_settings.core.cache_capacity,
    ttl_seconds=_settings.core.cache_ttl_seconds,
)
_limiter  = RateLimiter(
    rate=_settings.core.rate_limit_per_second,
    max_memory=_settings.core.rate_limit_max_memory,
)


# ── Getters (used by routes and middleware) ────────────────────────────────────

def get_settings()       -> Settings:       return _settings
def get_store()          -> FoodStore:      return _store
def get_cache()          -> ResponseCache:  return _cache
def get_limiter()        -> RateLimiter:    return _limiter


# Handlers are stateless; building them per request picks up the current
# settings snapshot and store.
def get_food_handler()   -> FoodHandler:    return FoodHandler(_store, _settings)
def get_search_handler() -> SearchHandler:  return SearchHandler(_store, _settings)
def get_health_checker() -> HealthChecker:  return HealthChecker(_store, **_health_links())


def _health_links() -> dict:
    return {
        "documentation": _settings.api.documentation_url,
        "source_code": _settings.api.source_code_url,
    }
