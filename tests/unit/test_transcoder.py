"""Unit tests for parameter key transcoding."""

import pytest

from crawl4ai_mcp.core.transcoder import UNDEFINED, to_snake_case, transcode


class TestToSnakeCase:
    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("url", "url"),
            ("waitFor", "wait_for"),
            ("onlyMainContent", "only_main_content"),
            ("removeBase64Images", "remove_base64_images"),
            ("already_snake", "already_snake"),
            ("maxDepth2", "max_depth2"),
        ],
    )
    def test_converts_camel_case(self, key: str, expected: str) -> None:
        assert to_snake_case(key) == expected

    def test_every_uppercase_letter_gets_underscore(self) -> None:
        assert to_snake_case("deduplicateSimilarURLs") == "deduplicate_similar_u_r_ls"

    def test_non_ascii_letters_are_untouched(self) -> None:
        assert to_snake_case("étéÉcole") == "étéÉcole"


class TestTranscode:
    def test_renames_top_level_keys(self) -> None:
        assert transcode({"waitFor": 2000, "mobile": True}) == {
            "wait_for": 2000,
            "mobile": True,
        }

    def test_drops_undefined_keeps_none(self) -> None:
        assert transcode({"a": 1, "b": UNDEFINED}) == {"a": 1}
        assert transcode({"a": None}) == {"a": None}

    def test_recurses_into_nested_mappings(self) -> None:
        params = {"scrapeOptions": {"onlyMainContent": True, "waitFor": UNDEFINED}}
        assert transcode(params) == {"scrape_options": {"only_main_content": True}}

    def test_maps_lists_element_wise(self) -> None:
        params = {
            "actions": [{"type": "click", "fullPage": False}, "raw"],
            "includeTags": ["article", "main"],
        }
        assert transcode(params) == {
            "actions": [{"type": "click", "full_page": False}, "raw"],
            "include_tags": ["article", "main"],
        }

    def test_values_are_not_rewritten(self) -> None:
        assert transcode({"prompt": "findTheTitle"}) == {"prompt": "findTheTitle"}

    def test_does_not_mutate_input(self) -> None:
        params = {"scrapeOptions": {"waitFor": 10}, "urls": ["https://a.dev"]}
        transcode(params)
        assert params == {"scrapeOptions": {"waitFor": 10}, "urls": ["https://a.dev"]}

    def test_idempotent_on_own_output(self) -> None:
        once = transcode({"scrapeOptions": {"onlyMainContent": True}, "maxDepth": 3})
        assert transcode(once) == once


def test_undefined_is_falsy_singleton() -> None:
    assert not UNDEFINED
    assert repr(UNDEFINED) == "UNDEFINED"
    assert type(UNDEFINED)() is UNDEFINED
