"""
core/errors.py – Domain exceptions + the fixed client-facing message catalog.

Routes translate these into HTTP statuses; the catalog keeps the wording
stable so internals never leak into responses.
"""


class CatalogError(Exception):
    """Base class for every error raised by the catalog core."""


class BadRequest(CatalogError):
    """Sanitizer or parameter-bound violation."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(MESSAGES[key])


class NotFound(CatalogError):
    pass


class Forbidden(CatalogError):
    pass


class AlreadyExists(CatalogError):
    pass


class StoreFailure(CatalogError):
    """I/O, schema or query error in the store."""


class UpstreamFailure(CatalogError):
    """Outbound probe failure (reported in /health, never raised to clients)."""


MESSAGES: dict[str, str] = {
    "invalid_characters": "The query contains invalid characters",
    "slug_length": "A slug must be between 1 and 100 characters long",
    "params_too_large": "The search parameters exceed the 96 byte limit",
    "invalid_mode": "Invalid search mode, expected one of: description, name, tag",
    "limit_exceeded": "The requested limit exceeds the maximum search limit",
    "invalid_request": "The request parameters are invalid",
    "food_not_found": "No data could be found for this food",
    "food_unverified": "This food has not been verified yet and cannot be shown",
    "search_failed": "The food search could not be completed",
    "tag_search_failed": "No foods could be found for this tag",
    "list_failed": "An error occurred while listing foods",
    "tags_failed": "An error occurred while listing tags",
    "not_found": "The requested resource does not exist",
    "rate_limited": "Too many requests, please slow down",
    "internal": "An internal error occurred",
}
