"""routes/system.py – GET /, /health"""
import logging

from fastapi import APIRouter, Request

from ..deps import get_health_checker, get_settings
from ..middleware import client_ip
from ..models import ServerHealth
from .foods import SEARCH_URL_TEMPLATE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/")
async def endpoints(request: Request):
    base_url = get_settings().api.base_url
    urls = {
        "api_health_url": f"{base_url}/health",
        "get_food_url": f"{base_url}/food/{{slug}}",
        "list_all_foods_url": f"{base_url}/foods/list",
        "search_food_url": f"{base_url}/{SEARCH_URL_TEMPLATE}",
        "show_all_tags": f"{base_url}/tags",
    }
    logger.debug(f"GET /: ({len(urls)} endpoints), {client_ip(request)}")
    return urls


@router.get("/health", response_model=ServerHealth)
async def health(request: Request):
    # Copy the URLs out of the settings snapshot before any network I/O
    urls = list(get_settings().api.health_internet_check_urls)
    report = await get_health_checker().check(urls)
    logger.debug(f"GET /health: ({report.status}), {client_ip(request)}")
    return report
