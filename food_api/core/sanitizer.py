"""
core/sanitizer.py – Input checks for path and query parameters.

The store only uses bound parameters; these checks keep odd input out of
logs and queries anyway. Bounds are fixed on purpose.
"""
from typing import Optional
from urllib.parse import urlencode

from .errors import BadRequest

FORBIDDEN_SEQUENCES = ("..", "/", "\\", "\0", ";", "*", "--", "/*", "*/", "'", '"')

MAX_SLUG_LENGTH = 100
MAX_SEARCH_PARAMS_BYTES = 96


def sanitize_input(value: str) -> str:
    """Raise BadRequest if `value` is blank or holds a forbidden sequence."""
    if not value.strip() or any(seq in value for seq in FORBIDDEN_SEQUENCES):
        raise BadRequest("invalid_characters")
    return value


def check_slug(slug: str) -> str:
    if not 0 < len(slug) <= MAX_SLUG_LENGTH:
        raise BadRequest("slug_length")
    return sanitize_input(slug)


def search_params_size(q: str, mode: Optional[str] = None, limit: Optional[int] = None) -> int:
    """UTF-8 byte length of the URL-encoded parameters the client supplied."""
    params = [("q", q)]
    if mode is not None:
        params.append(("mode", mode))
    if limit is not None:
        params.append(("limit", str(limit)))
    return len(urlencode(params).encode("utf-8"))


def check_search_params(q: str, mode: Optional[str] = None, limit: Optional[int] = None) -> None:
    if search_params_size(q, mode, limit) > MAX_SEARCH_PARAMS_BYTES:
        raise BadRequest("params_too_large")
