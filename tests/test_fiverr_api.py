"""Tests for the HTTP layer, with requests.get replaced by fakes."""

import requests

from gigscope import fiverr_api
from gigscope.fiverr_api import (
    extract_suggestions_from_html,
    fallback_suggestions,
    fetch_listings,
    fetch_suggestions,
    search_urls,
)
from gigscope.models import PageType

from conftest import card_html, search_page_html


class FakeResponse:
    def __init__(self, text="", status_code=200, content_type="text/html", payload=None):
        self.text = text
        self.status_code = status_code
        self.ok = status_code < 400
        self.headers = {"content-type": content_type}
        self._payload = payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON")
        return self._payload


def _page(count):
    return search_page_html([card_html(f"I will design logo style {i}") for i in range(count)])


def test_search_urls():
    urls = search_urls("logo design")

    assert len(urls) == 4
    assert all(u.startswith(f"{fiverr_api.FIVERR_BASE_URL}/search/gigs?query=logo+design") for u in urls)
    assert urls[1].endswith("&sort=relevance")


def test_fetch_listings_keeps_richest_variant(monkeypatch):
    """Test the variant with the most listings wins and failures are skipped."""
    calls = []

    def fake_get(url, headers=None, timeout=None):
        calls.append(url)
        if "price_high_to_low" in url:
            raise requests.ConnectionError("boom")
        if "price_low_to_high" in url:
            return FakeResponse(status_code=503)
        if "relevance" in url:
            return FakeResponse(_page(3))
        return FakeResponse(_page(1))

    monkeypatch.setattr(fiverr_api.requests, "get", fake_get)
    result = fetch_listings("logo design")

    assert len(calls) == 4
    assert len(result.listings) == 3
    assert result.keyword == "logo design"
    assert result.page_type == PageType.SEARCH
    assert "relevance" in result.page_info.url


def test_fetch_listings_all_fail(monkeypatch):
    """Test every variant failing yields an empty result instead of raising."""
    def fake_get(url, headers=None, timeout=None):
        raise requests.Timeout("slow")

    monkeypatch.setattr(fiverr_api.requests, "get", fake_get)
    result = fetch_listings("logo design")

    assert result.listings == []
    assert result.keyword == "logo design"
    assert result.page_type == PageType.SEARCH


def test_fetch_listings_sends_headers(monkeypatch):
    seen = {}

    def fake_get(url, headers=None, timeout=None):
        seen["headers"] = headers
        seen["timeout"] = timeout
        return FakeResponse(_page(0))

    monkeypatch.setattr(fiverr_api.requests, "get", fake_get)
    fetch_listings("logo")

    assert seen["headers"]["User-Agent"] == fiverr_api.USER_AGENT
    assert seen["timeout"] == fiverr_api.REQUEST_TIMEOUT


def test_fetch_suggestions_from_json(monkeypatch):
    def fake_get(url, headers=None, timeout=None):
        return FakeResponse(
            content_type="application/json; charset=utf-8",
            payload={"suggestions": ["logo design", "logo design minimalist"]},
        )

    monkeypatch.setattr(fiverr_api.requests, "get", fake_get)
    assert fetch_suggestions("logo design") == ["logo design", "logo design minimalist"]


def test_fetch_suggestions_scrapes_search_page(monkeypatch):
    """Test non-JSON endpoint replies fall through to the search page."""
    html = '<div data-suggestion="logo design ideas"></div><div data-keyword="cat toys"></div>'

    def fake_get(url, headers=None, timeout=None):
        if "autocomplete" in url:
            return FakeResponse("<html></html>")
        return FakeResponse(html)

    monkeypatch.setattr(fiverr_api.requests, "get", fake_get)
    assert fetch_suggestions("logo design") == ["logo design ideas"]


def test_fetch_suggestions_fallback(monkeypatch):
    def fake_get(url, headers=None, timeout=None):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(fiverr_api.requests, "get", fake_get)
    assert fetch_suggestions("logo") == fallback_suggestions("logo")


def test_fallback_suggestions():
    assert fallback_suggestions("logo") == [
        "logo design", "logo logo", "logo website", "logo app", "logo service", "logo writing",
    ]


def test_extract_suggestions_from_html():
    html = """
    <li class="search-suggestion-item">Logo Design Pro</li>
    <span data-suggestion="logo design ideas"></span>
    <span data-suggestion="logo design ideas"></span>
    <span data-keyword="banner design"></span>
    """
    assert extract_suggestions_from_html(html, "logo design") == ["logo design ideas", "Logo Design Pro"]
