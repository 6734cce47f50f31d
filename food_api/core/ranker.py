"""
core/ranker.py – Relevance ordering for description search.

Pure and synchronous: no database access, no failure modes.
"""
from ..models import FoodItem

PREFIX_SCORE = 20
POSITION_SCALE = 10


def relevance_score(description: str, query: str) -> int:
    """Score a lowercased description against a lowercased query.

    Prefix match → 20. Otherwise an earlier occurrence scores higher:
    floor(10 * (L - p) / max(L, 1)). No occurrence → 0.
    """
    if description.startswith(query):
        return PREFIX_SCORE
    pos = description.find(query)
    if pos < 0:
        return 0
    length = len(description)
    return POSITION_SCALE * (length - pos) // max(length, 1)


def rank_foods(query: str, foods: list[FoodItem]) -> None:
    """Sort `foods` in place by descending relevance to `query`.

    list.sort is stable (also with reverse=True), so ties keep input order.
    """
    q = query.lower()
    foods.sort(key=lambda food: relevance_score(food.description.lower(), q), reverse=True)
