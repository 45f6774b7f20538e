"""Tests for the search orchestrator and response envelope."""

import json

import httpx
import pytest

from conftest import BASE_URL
from searx_alfred.alfred.items import JSON_FORMAT_DOCS_URL
from searx_alfred.alfred.schema import AlfredItem
from searx_alfred.search.favicons import FALLBACK_ICON
from searx_alfred.search.service import build_response, search

ONE_RESULT = {
    "query": "breaking story",
    "results": [
        {
            "title": "Storm hits coast",
            "url": "https://www.news.example.com/storm",
            "content": "Heavy rain and wind battered the coast overnight.",
            "engine": "bing news",
            "category": "news",
        }
    ],
}


def json_response(payload) -> httpx.Response:
    return httpx.Response(200, text=json.dumps(payload))


def titles(response):
    return [i.title for i in response.items]


class TestBuildResponse:
    def items(self):
        return [AlfredItem(title="test")]

    def test_with_cache(self):
        assert build_response(self.items(), 60).to_dict() == {
            "items": [{"title": "test"}],
            "cache": {"seconds": 60, "loosereload": True},
        }

    @pytest.mark.parametrize("seconds", [None, 0, -30])
    def test_no_cache_seconds(self, seconds):
        assert build_response(self.items(), seconds).to_dict() == {"items": [{"title": "test"}]}

    def test_disabled_by_config(self):
        response = build_response(self.items(), 60, enable_cache=False)
        assert response.cache is None
        assert "cache" not in json.loads(response.to_json())

    def test_empty_items(self):
        assert build_response([], 60).to_dict()["items"] == []


class TestGuards:
    def test_missing_url(self, make_settings):
        response = search("anything", make_settings(searxng_url=""))
        assert len(response.items) == 1
        item = response.items[0]
        assert "not configured" in item.title
        assert item.valid is False
        assert response.cache is None

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_empty_input(self, make_settings, fake_searx, raw):
        searx = fake_searx({})
        response = search(raw, make_settings(), fetcher=searx.fetcher())
        assert titles(response) == ["Search SearXNG..."]
        assert response.items[0].valid is False
        assert searx.requests == []

    def test_only_bangs(self, make_settings, fake_searx):
        searx = fake_searx({})
        response = search("!i !d", make_settings(), fetcher=searx.fetcher())
        assert len(response.items) == 1
        assert "Images · Past day" in response.items[0].title
        assert searx.requests == []


class TestShortQueries:
    def test_suggestions_only(self, make_settings, fake_searx):
        searx = fake_searx({"/autocompleter": httpx.Response(200, text='["cat", ["cats", "catalog"]]')})
        response = search("cat", make_settings(), fetcher=searx.fetcher())

        assert titles(response) == ["cats", "catalog"]
        assert response.cache.seconds == 30
        assert searx.paths() == ["/autocompleter"]

    def test_fallback_when_no_suggestions(self, make_settings, fake_searx):
        searx = fake_searx({"/autocompleter": httpx.ConnectError("down")})
        response = search("!i cat", make_settings(), fetcher=searx.fetcher())

        assert len(response.items) == 1
        assert response.items[0].arg == f"{BASE_URL}/search?q=cat&categories=images"

    def test_suggestions_capped(self, make_settings, fake_searx):
        many = json.dumps(["ca", [f"s{i}" for i in range(10)]])
        searx = fake_searx({"/autocompleter": httpx.Response(200, text=many)})
        response = search("ca", make_settings(max_suggestions=3), fetcher=searx.fetcher())
        assert titles(response) == ["s0", "s1", "s2"]


class TestFullSearch:
    def test_bangs_end_to_end(self, make_settings, fake_searx):
        searx = fake_searx({
            "/autocompleter": httpx.Response(200, text='["breaking story", []]'),
            "/search": json_response(ONE_RESULT),
        })

        response = search("!n !d breaking story", make_settings(), fetcher=searx.fetcher())

        search_req = [r for r in searx.requests if r.url.path == "/search"][0]
        assert search_req.url.params["q"] == "breaking story"
        assert search_req.url.params["format"] == "json"
        assert search_req.url.params["categories"] == "news"
        assert search_req.url.params["time_range"] == "day"

        result = response.items[0]
        assert result.title == "Storm hits coast"
        assert "News" in result.subtitle
        assert "Past day" in result.subtitle
        assert "Heavy rain and wind" in result.subtitle
        assert result.icon.path == FALLBACK_ICON
        assert response.items[-1].title == 'Search "breaking story" in browser'
        assert response.cache.seconds == 60
        assert response.cache.loosereload is True

    def test_suggestions_prefix_results(self, make_settings, fake_searx):
        searx = fake_searx({
            "/autocompleter": httpx.Response(200, text='["breaking", ["breaking news"]]'),
            "/search": json_response(ONE_RESULT),
        })
        response = search("breaking", make_settings(), fetcher=searx.fetcher())

        assert titles(response)[0] == "breaking news"
        assert response.items[1].valid is False
        assert titles(response)[2] == "Storm hits coast"
        assert len(response.items) == 4

    def test_cache_disabled(self, make_settings, fake_searx):
        searx = fake_searx({"/search": json_response(ONE_RESULT)})
        response = search("breaking", make_settings(enable_result_cache="false"), fetcher=searx.fetcher())
        assert response.cache is None

    def test_results_without_url_skipped(self, make_settings, fake_searx):
        payload = {"results": [{"title": "no link"}, ONE_RESULT["results"][0]]}
        searx = fake_searx({"/search": json_response(payload)})
        response = search("breaking", make_settings(), fetcher=searx.fetcher())
        assert titles(response)[:-1] == ["Storm hits coast"]

    def test_favicons_with_secret(self, make_settings, fake_searx, tmp_path):
        searx = fake_searx({
            "/search": json_response(ONE_RESULT),
            "/favicon_proxy": httpx.Response(200, content=b"\x89PNG"),
        })
        settings = make_settings(secret_key="s3cret")

        response = search("breaking", settings, fetcher=searx.fetcher())

        expected = settings.favicon_dir() / "news.example.com.png"
        assert response.items[0].icon.path == str(expected)
        assert expected.read_bytes() == b"\x89PNG"


class TestFailures:
    def run(self, make_settings, fake_searx, search_route):
        searx = fake_searx({"/search": search_route})
        return search("!i sunset photos", make_settings(), fetcher=searx.fetcher())

    def test_html_body(self, make_settings, fake_searx):
        response = self.run(make_settings, fake_searx, httpx.Response(403, text="<!DOCTYPE html><html>Forbidden</html>"))

        assert len(response.items) == 2
        error, fallback = response.items
        assert "JSON API not enabled" in error.title
        assert error.arg == JSON_FORMAT_DOCS_URL
        assert fallback.arg == f"{BASE_URL}/search?q=sunset%20photos&categories=images"
        assert response.cache is None

    def test_network_error(self, make_settings, fake_searx):
        response = self.run(make_settings, fake_searx, httpx.ConnectTimeout("slow"))
        assert "Cannot reach SearXNG" in response.items[0].title
        assert response.items[0].arg == BASE_URL
        assert "curl --silent" in response.items[0].text.copy_text
        assert len(response.items) == 2

    def test_empty_body(self, make_settings, fake_searx):
        response = self.run(make_settings, fake_searx, httpx.Response(200, text=""))
        assert "Empty response" in response.items[0].title

    def test_invalid(self, make_settings, fake_searx):
        response = self.run(make_settings, fake_searx, httpx.Response(502, text="Bad Gateway"))
        assert "Invalid response" in response.items[0].title
        assert "kind: invalid-response" in response.items[0].text.copy_text

    def test_api_error(self, make_settings, fake_searx):
        response = self.run(make_settings, fake_searx, json_response({"error": "too many requests"}))
        assert "API Error" in response.items[0].title
        assert response.items[0].subtitle == "too many requests"

    def test_no_results(self, make_settings, fake_searx):
        response = self.run(make_settings, fake_searx, json_response({"results": []}))
        assert len(response.items) == 1
        assert "No results found" in response.items[0].title
        assert response.items[0].valid is True

    def test_no_results_with_suggestions(self, make_settings, fake_searx):
        searx = fake_searx({
            "/autocompleter": httpx.Response(200, text='["sunset photos", ["sunset photography"]]'),
            "/search": json_response({"results": []}),
        })
        response = search("sunset photos", make_settings(), fetcher=searx.fetcher())

        assert titles(response)[0] == "sunset photography"
        assert response.items[1].valid is False
        assert "No results found" in response.items[2].title


class TestFaviconFailuresStayLocal:
    def test_result_url_with_long_query_string(self, make_settings, fake_searx):
        payload = {"results": [{"title": "Long", "url": "https://example.com?x=" + "a" * 300}]}
        searx = fake_searx({
            "/search": json_response(payload),
            "/favicon_proxy": httpx.Response(200, content=b"\x89PNG"),
        })
        settings = make_settings(secret_key="s3cret")

        response = search("long query", settings, fetcher=searx.fetcher())

        assert titles(response) == ["Long", 'Search "long query" in browser']
        assert response.items[0].subtitle.startswith("example.com")
        assert response.items[0].icon.path == str(settings.favicon_dir() / "example.com.png")

    def test_unwritable_cache_falls_back_to_generic_icon(self, make_settings, fake_searx, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        searx = fake_searx({
            "/search": json_response(ONE_RESULT),
            "/favicon_proxy": httpx.Response(200, content=b"\x89PNG"),
        })
        settings = make_settings(secret_key="s3cret", alfred_workflow_data=str(blocker))

        response = search("breaking", settings, fetcher=searx.fetcher())

        assert response.items[0].title == "Storm hits coast"
        assert response.items[0].icon.path == FALLBACK_ICON
