import logging
import os
import re
from urllib.parse import quote_plus

import requests
from dotenv import load_dotenv

from .models import PageInfo, PageType, ParseResult
from .page_parser import TEXT_CARD_LIMIT, parse_html

load_dotenv()

logger = logging.getLogger(__name__)

FIVERR_BASE_URL = os.getenv("FIVERR_BASE_URL", "https://www.fiverr.com").rstrip("/")
REQUEST_TIMEOUT = float(os.getenv("FIVERR_REQUEST_TIMEOUT", "15"))
USER_AGENT = os.getenv(
    "FIVERR_USER_AGENT",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
)

SUGGESTION_LIMIT = 8
FALLBACK_SUFFIXES = [" design", " logo", " website", " app", " service", " writing", " marketing", " animation"]

_SUGGESTION_PATTERNS = [
    re.compile(r'data-suggestion="([^"]+)"'),
    re.compile(r'data-keyword="([^"]+)"'),
    re.compile(r'class="[^"]*suggestion[^"]*"[^>]*>([^<]+)<'),
    re.compile(r'class="[^"]*keyword[^"]*"[^>]*>([^<]+)<'),
]


def _html_headers() -> dict:
    return {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "User-Agent": USER_AGENT,
        "Referer": f"{FIVERR_BASE_URL}/",
        "Cache-Control": "no-cache",
    }


def _json_headers() -> dict:
    return {
        "Accept": "application/json, text/plain, */*",
        "User-Agent": USER_AGENT,
        "Referer": f"{FIVERR_BASE_URL}/",
        "Origin": FIVERR_BASE_URL,
    }


def search_urls(keyword: str) -> list[str]:
    """Search-page variants tried in order; the one yielding the most listings wins."""
    q = quote_plus(keyword)
    base = f"{FIVERR_BASE_URL}/search/gigs?query={q}"
    return [
        f"{base}&source=main_banner&search_in=everywhere",
        f"{base}&sort=relevance",
        f"{base}&sort=price_low_to_high",
        f"{base}&sort=price_high_to_low",
    ]


def fetch_listings(keyword: str, limit: int = TEXT_CARD_LIMIT) -> ParseResult:
    """
    Fetch Fiverr search pages for a keyword and parse them.

    Args:
        keyword: search keyword
        limit: card cap per page

    Returns:
        The ParseResult with the most listings. Every variant failing yields an
        empty ParseResult; callers fall back to mock data on zero listings.
    """
    best = None
    for url in search_urls(keyword):
        try:
            resp = requests.get(url, headers=_html_headers(), timeout=REQUEST_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Search page {url} failed: {e}")
            continue

        result = parse_html(resp.text, url=url, keyword=keyword, limit=limit)
        logger.info(f"{len(result.listings)} listings from {url}")
        if best is None or len(result.listings) > len(best.listings):
            best = result

    if best is None:
        return ParseResult(
            page_type=PageType.SEARCH,
            listings=[],
            page_info=PageInfo(url=search_urls(keyword)[0]),
            keyword=keyword,
        )
    return best


# ─── keyword suggestions ───

def _suggestion_list(data) -> list:
    if isinstance(data, list):
        return data[:SUGGESTION_LIMIT]
    if isinstance(data, dict):
        for key in ("suggestions", "terms", "data", "results"):
            if isinstance(data.get(key), list):
                return data[key][:SUGGESTION_LIMIT]
    return []


def suggestion_endpoints(keyword: str) -> list[str]:
    q = quote_plus(keyword)
    return [
        f"{FIVERR_BASE_URL}/api/v1/autocomplete?query={q}",
        f"{FIVERR_BASE_URL}/autocomplete?q={q}",
        f"{FIVERR_BASE_URL}/api/v2/autocomplete?q={q}",
    ]


def extract_suggestions_from_html(html: str, keyword: str) -> list[str]:
    """Related terms embedded in a search page that contain the keyword."""
    lowered = keyword.lower()
    suggestions = []
    for pattern in _SUGGESTION_PATTERNS:
        for match in pattern.finditer(html or ""):
            suggestion = match.group(1).strip()
            if suggestion and lowered in suggestion.lower() and suggestion not in suggestions:
                suggestions.append(suggestion)
    return suggestions


def fallback_suggestions(keyword: str) -> list[str]:
    return [keyword + suffix for suffix in FALLBACK_SUFFIXES][:6]


def fetch_suggestions(keyword: str) -> list:
    """Autocomplete endpoints, then the search page, then generated fallbacks."""
    for url in suggestion_endpoints(keyword):
        try:
            resp = requests.get(url, headers=_json_headers(), timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            logger.warning(f"Suggestion endpoint {url} failed: {e}")
            continue
        if not resp.ok:
            continue
        if "application/json" not in resp.headers.get("content-type", "").lower():
            continue
        try:
            suggestions = _suggestion_list(resp.json())
        except ValueError:
            continue
        if suggestions:
            return suggestions

    url = search_urls(keyword)[1]
    try:
        resp = requests.get(url, headers=_html_headers(), timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.warning(f"Scraping suggestions from {url} failed: {e}")
        return fallback_suggestions(keyword)

    scraped = extract_suggestions_from_html(resp.text, keyword)
    if scraped:
        return scraped[:SUGGESTION_LIMIT]
    return fallback_suggestions(keyword)
