"""
handlers/food_handler.py – FoodHandler class.
Single-food lookup, slug listing and tag listing.
"""
from ..core.config import Settings
from ..core.errors import Forbidden
from ..core.images import rewrite_image_url
from ..core.sanitizer import check_slug
from ..core.store import FoodStore
from ..models import FoodItem


class FoodHandler:
    """Handles /food/{slug}, /foods/list and /tags."""

    def __init__(self, store: FoodStore, settings: Settings) -> None:
        self._store = store
        self._base_url = settings.api.base_url
        self._static_url = settings.api.static_url

    async def get_food(self, slug: str) -> FoodItem:
        """Raises BadRequest, NotFound, StoreFailure or Forbidden (unverified)."""
        check_slug(slug)
        food = await self._store.select_food_by_slug(slug)
        if not food.verified:
            raise Forbidden(slug)
        return rewrite_image_url(food, self._static_url)

    async def list_foods(self) -> dict[str, str]:
        """{slug: url} for every verified food, sorted by slug."""
        slugs = await self._store.select_all_verified_slugs()
        return {slug: f"{self._base_url}/food/{slug}" for slug in sorted(slugs)}

    async def list_tags(self) -> list[str]:
        return await self._store.select_all_tags()
