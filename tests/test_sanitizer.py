"""
tests/test_sanitizer.py – Unit tests for slug and query checks.
Scenarios: forbidden sequences, slug length bounds, 96-byte search bound.
"""
import pytest

from food_api.core.errors import BadRequest
from food_api.core.sanitizer import (
    MAX_SEARCH_PARAMS_BYTES,
    check_search_params,
    check_slug,
    sanitize_input,
    search_params_size,
)


class TestSanitizeInput:

    @pytest.mark.parametrize("value", ["elma", "fuji-elma", "Çiğ Köfte", "a b", "100%"])
    def test_accepts(self, value):
        assert sanitize_input(value) == value

    @pytest.mark.parametrize("value", [
        "../etc/passwd",
        "a/b",
        "a\\b",
        "a\0b",
        "elma; DROP TABLE foods",
        "elma*",
        "elma --",
        "/* x */",
        "' OR 1=1 --",
        'say "hi"',
        "",
        "   ",
    ])
    def test_rejects(self, value):
        with pytest.raises(BadRequest) as exc:
            sanitize_input(value)
        assert exc.value.key == "invalid_characters"


class TestCheckSlug:

    def test_max_length_ok(self):
        assert check_slug("a" * 100) == "a" * 100

    @pytest.mark.parametrize("slug", ["", "a" * 101])
    def test_length_out_of_bounds(self, slug):
        with pytest.raises(BadRequest) as exc:
            check_slug(slug)
        assert exc.value.key == "slug_length"

    def test_forbidden_sequence(self):
        with pytest.raises(BadRequest) as exc:
            check_slug("fuji..elma")
        assert exc.value.key == "invalid_characters"


class TestSearchParams:

    def test_size_counts_only_supplied_params(self):
        assert search_params_size("elma") == len("q=elma")
        assert search_params_size("elma", "tag", 3) == len("q=elma&mode=tag&limit=3")

    def test_size_is_encoded_bytes(self):
        # "ç" → %C3%A7
        assert search_params_size("ç") == len("q=%C3%A7")

    def test_at_bound_is_accepted(self):
        q = "a" * (MAX_SEARCH_PARAMS_BYTES - len("q="))
        assert search_params_size(q) == MAX_SEARCH_PARAMS_BYTES
        check_search_params(q)

    def test_one_over_bound_is_rejected(self):
        q = "a" * (MAX_SEARCH_PARAMS_BYTES - len("q=") + 1)
        with pytest.raises(BadRequest) as exc:
            check_search_params(q)
        assert exc.value.key == "params_too_large"

    def test_mode_and_limit_count_toward_bound(self):
        q = "a" * 80
        check_search_params(q)
        with pytest.raises(BadRequest):
            check_search_params(q, "description", 5)
