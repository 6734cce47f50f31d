"""core/images.py – Turn relative image paths into absolute static URLs."""
from typing import Iterable

from ..models import FoodItem


def rewrite_image_url(food: FoodItem, static_url: str) -> FoodItem:
    # /images/muz.webp → {static_url}/images/muz.webp; absolute URLs stay as they are
    if food.image_url.startswith("/"):
        food.image_url = f"{static_url}{food.image_url}"
    return food


def rewrite_image_urls(foods: Iterable[FoodItem], static_url: str) -> None:
    for food in foods:
        rewrite_image_url(food, static_url)
