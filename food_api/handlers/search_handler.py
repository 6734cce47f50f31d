"""
handlers/search_handler.py – SearchHandler class.
Coordinates a /foods/search request:
size bound → mode → limit → sanitize → store → rank → drop unverified → truncate → image urls.
"""
from typing import Optional

from ..core.config import Settings
from ..core.errors import BadRequest
from ..core.images import rewrite_image_urls
from ..core.ranker import rank_foods
from ..core.sanitizer import check_search_params, sanitize_input
from ..core.store import FoodStore
from ..models import FoodItem

DEFAULT_MODE = "description"
DEFAULT_LIMIT = 5
DESCRIPTION_MODES = {"description", "name"}
TAG_MODE = "tag"


class SearchHandler:
    """Handles the /foods/search endpoint."""

    def __init__(self, store: FoodStore, settings: Settings) -> None:
        self._store = store
        self._static_url = settings.api.static_url
        self._max_limit = settings.api.search_max_limit

    @staticmethod
    def resolve_mode(mode: Optional[str]) -> str:
        resolved = (mode or DEFAULT_MODE).lower()
        if resolved not in DESCRIPTION_MODES and resolved != TAG_MODE:
            raise BadRequest("invalid_mode")
        return resolved

    async def handle(self, q: str, mode: Optional[str] = None, limit: Optional[int] = None) -> list[FoodItem]:
        check_search_params(q, mode, limit)
        resolved_mode = self.resolve_mode(mode)
        resolved_limit = DEFAULT_LIMIT if limit is None else limit
        if resolved_limit > self._max_limit:
            raise BadRequest("limit_exceeded")
        sanitize_input(q)

        if resolved_mode == TAG_MODE:
            foods = await self._store.search_by_tag_wild(q)
        else:
            foods = await self._store.search_by_description_wild(q)
            # Rank before truncating so the top-k by relevance survives
            rank_foods(q, foods)

        foods = [food for food in foods if food.verified]
        del foods[resolved_limit:]
        rewrite_image_urls(foods, self._static_url)
        return foods
