"""routes/foods.py – GET /food/{slug}, /foods, /foods/list, /foods/search, /tags"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from ..core.errors import MESSAGES, BadRequest, CatalogError, Forbidden, NotFound, StoreFailure
from ..deps import get_food_handler, get_search_handler, get_settings
from ..middleware import client_ip
from ..models import ErrorResponse, FoodItem

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Foods"])

SEARCH_URL_TEMPLATE = "foods/search?q={query}&mode={description, tag}&limit={limit}"


def _error_responses(*codes: int) -> dict:
    return {code: {"model": ErrorResponse} for code in codes}


@router.get("/food/{slug}", response_model=FoodItem, responses=_error_responses(400, 403, 404))
async def food(slug: str, request: Request):
    try:
        item = await get_food_handler().get_food(slug)
    except BadRequest as e:
        raise HTTPException(status_code=400, detail=MESSAGES[e.key])
    except Forbidden:
        raise HTTPException(status_code=403, detail=MESSAGES["food_unverified"])
    except NotFound:
        raise HTTPException(status_code=404, detail=MESSAGES["food_not_found"])
    except StoreFailure as e:
        # Reported as "not found" on purpose, internals stay in the log
        logger.error(f"Store error while reading food {slug!r}: {e}")
        raise HTTPException(status_code=404, detail=MESSAGES["food_not_found"])

    logger.debug(f"GET /food: ({slug}), {client_ip(request)}")
    return item


@router.get("/foods")
async def foods(request: Request):
    base_url = get_settings().api.base_url
    endpoints = {
        "list_all_foods_url": f"{base_url}/foods/list",
        "search_food_url": f"{base_url}/{SEARCH_URL_TEMPLATE}",
    }
    logger.debug(f"GET /foods: ({len(endpoints)} endpoints), {client_ip(request)}")
    return endpoints


@router.get("/foods/list", responses=_error_responses(500))
async def foods_list(request: Request):
    try:
        slugs = await get_food_handler().list_foods()
    except StoreFailure as e:
        logger.error(f"Store error while listing foods: {e}")
        raise HTTPException(status_code=500, detail=MESSAGES["list_failed"])

    logger.debug(f"GET /foods/list: ({len(slugs)} foods), {client_ip(request)}")
    return slugs


@router.get("/foods/search", response_model=list[FoodItem], responses=_error_responses(400, 404))
async def foods_search(
    request: Request,
    q:     str           = Query(...),
    mode:  Optional[str] = Query(default=None, description="description | name | tag"),
    limit: Optional[int] = Query(default=None, ge=0),
):
    handler = get_search_handler()
    try:
        items = await handler.handle(q, mode, limit)
    except BadRequest as e:
        raise HTTPException(status_code=400, detail=MESSAGES[e.key])
    except CatalogError as e:
        logger.error(f"Store error while searching {q!r}: {e}")
        key = "tag_search_failed" if handler.resolve_mode(mode) == "tag" else "search_failed"
        raise HTTPException(status_code=404, detail=MESSAGES[key])

    logger.debug(
        f"GET /foods/search: mode={mode or 'description'}, limit={limit}, "
        f"q={q!r}, ({len(items)} foods), {client_ip(request)}"
    )
    return items


@router.get("/tags", response_model=list[str], responses=_error_responses(500))
async def tags_list(request: Request):
    try:
        tags = await get_food_handler().list_tags()
    except StoreFailure as e:
        logger.error(f"Store error while listing tags: {e}")
        raise HTTPException(status_code=500, detail=MESSAGES["tags_failed"])

    logger.debug(f"GET /tags: ({len(tags)} tags), {client_ip(request)}")
    return tags
