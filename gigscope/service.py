"""Request-scoped analysis session and message-envelope dispatch."""
import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Optional

from . import fiverr_api
from .analyzer import build_report
from .mock_data import generate_mock
from .models import DataSource, ParseResult, Report
from .page_parser import LIVE_CARD_LIMIT, Page, parse
from .storage import (
    SUGGESTION_TTL,
    Favorites,
    KeyValueStore,
    MemoryStore,
    ReportCache,
    SearchHistory,
    TTLCache,
)
from .suggestions import build_suggestion_objects, market_trends, trending_keywords

logger = logging.getLogger(__name__)

NO_LISTINGS_MESSAGE = "No gigs found on current page"


@dataclass
class AnalysisSession:
    """Everything one caller's analyses share: storage, caches, randomness, page source."""

    store: KeyValueStore = field(default_factory=MemoryStore)
    rng: random.Random = field(default_factory=random.Random)
    fetch_listings: Callable[[str], ParseResult] = fiverr_api.fetch_listings
    fetch_suggestions: Callable[[str], list] = fiverr_api.fetch_suggestions
    report_cache: Optional[ReportCache] = None
    suggestion_cache: Optional[TTLCache] = None
    history: Optional[SearchHistory] = None
    favorites: Optional[Favorites] = None

    def __post_init__(self):
        self.report_cache = self.report_cache or ReportCache(self.store)
        self.suggestion_cache = self.suggestion_cache or TTLCache(self.store, SUGGESTION_TTL, "suggestions_")
        self.history = self.history or SearchHistory(self.store)
        self.favorites = self.favorites or Favorites(self.store)

    def analyze_keyword(self, keyword: str, force_refresh: bool = False) -> Report:
        """Cached report, else live listings, else mock data."""
        keyword = keyword.strip()
        if force_refresh:
            self.report_cache.invalidate(keyword)
        else:
            cached = self.report_cache.get_report(keyword)
            if cached is not None:
                self.history.record(keyword)
                return cached

        result = self.fetch_listings(keyword)
        if result.listings:
            report = build_report(keyword, result.listings, source=DataSource.LIVE)
        else:
            logger.info(f"No live listings for '{keyword}', using mock data")
            report = generate_mock(keyword, self.rng)

        self.report_cache.put_report(report)
        self.history.record(keyword)
        return report

    def analyze_page(self, html: str, url: str = "", keyword: Optional[str] = None) -> Report:
        """Scrape a page the caller already holds. No mock fallback: empty pages report an error."""
        result = parse(Page.from_html(html, url), limit=LIVE_CARD_LIMIT, keyword=keyword)
        error = None if result.listings else NO_LISTINGS_MESSAGE
        return build_report(result.keyword, result.listings, source=DataSource.LIVE, error=error)

    def suggestions(self, keyword: str) -> list:
        cached = self.suggestion_cache.get(keyword)
        if cached is not None:
            return cached
        suggestions = self.fetch_suggestions(keyword)
        self.suggestion_cache.put(keyword, suggestions)
        return suggestions


def _require_keyword(message: dict) -> str:
    keyword = str(message.get("keyword") or "").strip()
    if not keyword:
        raise ValueError("keyword is required")
    return keyword


def handle_message(session: AnalysisSession, message: dict) -> dict:
    """
    Dispatch one {action, ...} envelope.

    Returns:
        {"result": ...} on success, {"error": message} otherwise
    """
    action = None
    try:
        if not isinstance(message, dict):
            raise ValueError("message must be an object with an action")
        action = message.get("action") or message.get("type")

        if action in ("analyzeKeyword", "searchKeyword"):
            report = session.analyze_keyword(
                _require_keyword(message), force_refresh=bool(message.get("forceRefresh"))
            )
            return {"result": report.to_dict()}

        if action == "scrapePage":
            report = session.analyze_page(
                message.get("html", ""), message.get("url", ""), message.get("keyword")
            )
            return {"result": report.to_dict()}

        if action == "getSuggestions":
            return {"result": session.suggestions(_require_keyword(message))}

        if action == "getSmartSuggestions":
            raw = session.suggestions(str(message.get("keyword") or ""))
            return {
                "result": build_suggestion_objects(raw, include_trending=message.get("includeTrending") is True)
            }

        if action == "getTrendingKeywords":
            return {"result": trending_keywords(session.rng)}

        if action == "getMarketTrends":
            return {"result": market_trends(session.rng)}

        if action == "getHistory":
            return {"result": session.history.entries()}

        if action == "clearHistory":
            session.history.clear()
            return {"result": []}

        if action == "getFavorites":
            return {"result": session.favorites.entries()}

        if action == "addFavorite":
            return {"result": session.favorites.add(_require_keyword(message), message.get("data"))}

        if action == "removeFavorite":
            return {"result": session.favorites.remove(_require_keyword(message))}

    except Exception as e:
        logger.warning(f"Action {action} failed: {e}")
        return {"error": str(e)}

    return {"error": "Unknown action"}
