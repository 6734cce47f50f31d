"""tests/conftest.py – shared fixtures for all tests."""
import asyncio

import pytest
from unittest.mock import patch

from food_api.core.cache import ResponseCache
from food_api.core.ratelimit import RateLimiter
from food_api.core.store import FoodStore
from food_api.db.migrate import run_migrations
from food_api.models import NUTRIENT_FIELDS, FoodItem


def make_food(description: str = "Fuji Elma", **kw) -> FoodItem:
    defaults = dict(
        description=description,
        image_url="/images/fuji-elma.webp",
        source="TÜRKOMP",
        tags=["Meyve"],
        allergens=[],
        servings={"Adet (Orta)": 182.0},
    )
    defaults.update({name: 1.0 for name in NUTRIENT_FIELDS})
    defaults.update(kw)
    return FoodItem(**defaults)


def run_sync(coro):
    """Run a coroutine on a private loop, leaving the test loop untouched."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# ── Global: reset engine cache between tests ───────────────────────────────────

@pytest.fixture(autouse=True)
def clear_engine_cache():
    """Dispose cached SQLAlchemy engines so every test gets its own database."""
    from food_api.db import session as sess_module
    sess_module.dispose_all()
    yield
    sess_module.dispose_all()


# ── Store ──────────────────────────────────────────────────────────────────────

@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'foods.sqlite'}"


@pytest.fixture
def store(database_url) -> FoodStore:
    """Empty, migrated store."""
    s = FoodStore(database_url)
    run_migrations(s.engine)
    return s


@pytest.fixture
def sample_foods() -> list[FoodItem]:
    return [
        make_food("Fuji Elma", tags=["Meyve", "Elma"]),
        make_food("Muz", image_url="/images/muz.webp"),
        make_food("Karpuz", image_url="https://cdn.example.com/karpuz.webp"),
        make_food("Makarna", tags=["Tahıl"], allergens=["Gluten"], image_url="/images/makarna.webp"),
        make_food("Çiğ Köfte", verified=False, tags=["Et"], image_url="/images/cig-kofte.webp"),
    ]


@pytest.fixture
def seeded_store(store, sample_foods) -> FoodStore:
    async def _seed():
        for food in sample_foods:
            await store.insert_food(food)
    run_sync(_seed())
    return store


# ── API ────────────────────────────────────────────────────────────────────────

@pytest.fixture
def cache() -> ResponseCache:
    return ResponseCache()


@pytest.fixture
def limiter() -> RateLimiter:
    return RateLimiter(rate=1000)


@pytest.fixture
def client(seeded_store, cache, limiter):
    """TestClient over the seeded store; the lifespan (migrate + seed from disk) is not run."""
    from fastapi.testclient import TestClient

    with (
        patch("food_api.deps._store", seeded_store),
        patch("food_api.deps._cache", cache),
        patch("food_api.deps._limiter", limiter),
    ):
        from food_api.main import app
        yield TestClient(app)
