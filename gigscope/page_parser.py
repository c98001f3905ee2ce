"""Page classification and listing discovery for marketplace pages."""
import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlparse

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from .extractor import CARD_FIELDS, GIG_PAGE_FIELDS, Extractor, clean_text
from .models import Listing, PageInfo, PageType, ParseResult

logger = logging.getLogger(__name__)

LIVE_CARD_LIMIT = 30
TEXT_CARD_LIMIT = 20

SEARCH_URL_PATTERNS = [r"/search/", r"/categories/", r"/subcategories/"]
LISTING_URL_PATTERNS = [r"/gig/"]
DETAIL_LINK_SELECTOR = 'a[href*="/gig/"]'

CONTAINER_SELECTORS = [
    '[data-qa="search-results"]',
    ".search-results",
    ".gigs-container",
    ".search-gigs",
    "ol, ul",
]

CARD_SELECTORS = [
    ".gig-card-layout",
    "[data-gig-id]",
    ".gig-wrapper",
    ".search-gig-card",
    ".gig-card",
    "article[data-gig-id]",
    ".gig-card-wrapper",
    ".search-result-item",
    '[data-testid="gig-card"]',
    ".gig-item",
    'li:has(a[href*="/gig/"])',
    'article:has(a[href*="/gig/"])',
]

_RESULTS_FOR_PATTERN = re.compile(r"Results for (.+)")


@dataclass
class Page:
    """A fetched page: its address plus the parsed node tree."""

    url: str
    document: BeautifulSoup

    @classmethod
    def from_html(cls, html: str, url: str = "") -> "Page":
        return cls(url=url or "", document=BeautifulSoup(html or "", "html.parser"))


def _select(root: Tag, selector: str) -> list[Tag]:
    try:
        return root.select(selector)
    except SelectorSyntaxError:
        return []


def detect_page_type(page: Page) -> PageType:
    """search-results vs single-listing: URL patterns first, then detail-link count."""
    url = page.url.lower()
    if any(re.search(pattern, url) for pattern in SEARCH_URL_PATTERNS):
        return PageType.SEARCH
    if any(re.search(pattern, url) for pattern in LISTING_URL_PATTERNS):
        return PageType.LISTING
    if len(_select(page.document, DETAIL_LINK_SELECTOR)) > 2:
        return PageType.SEARCH
    return PageType.LISTING


def _cards_in(containers: list[Tag]) -> list[Tag]:
    cards = []
    for container in containers:
        for selector in CARD_SELECTORS:
            found = _select(container, selector)
            if found:
                cards.extend(found)
                break

    unique = []
    seen = set()
    for card in cards:
        if id(card) in seen:
            continue
        seen.add(id(card))
        unique.append(card)
    return unique


def find_candidate_cards(root: Tag) -> list[Tag]:
    """Card nodes in document order, deduplicated by identity."""
    for selector in CONTAINER_SELECTORS:
        containers = _select(root, selector)
        if not containers:
            continue
        cards = _cards_in(containers)
        if cards:
            logger.info(f"Found {len(cards)} candidate cards in container '{selector}'")
            return cards

    cards = _cards_in([root])
    if cards:
        logger.info(f"Found {len(cards)} candidate cards at document scope")
    return cards


def extract_page_info(page: Page) -> PageInfo:
    doc = page.document
    title = clean_text(doc.title.get_text()) if doc.title else ""
    return PageInfo(
        url=page.url,
        title=title,
        has_search_results=bool(
            _select(doc, '[data-qa="search-results"], .search-results, .gigs-container, .search-gigs')
        ),
        has_pagination=bool(_select(doc, ".pagination, .pager")),
    )


def extract_current_keyword(page: Page) -> str:
    """Search keyword from the URL query, the search box, or a "Results for" heading."""
    params = parse_qs(urlparse(page.url).query)
    for name in ("query", "q"):
        values = params.get(name)
        if values and values[0].strip():
            return values[0].strip()

    for node in _select(page.document, 'input[name="query"], input[data-testid="search-input"]'):
        value = clean_text(node.get("value") or "")
        if value:
            return value

    for heading in _select(page.document, "h1, h2, .page-title"):
        match = _RESULTS_FOR_PATTERN.search(clean_text(heading.get_text()))
        if match:
            return match.group(1).replace('"', "").strip()

    return "unknown"


def _parse_search_results(page: Page, limit: int) -> list[Listing]:
    extractor = Extractor(CARD_FIELDS, base_url=page.url)
    listings = []
    for index, card in enumerate(find_candidate_cards(page.document)):
        if index >= limit:
            break
        try:
            listing = extractor.extract(card)
        except Exception as e:
            logger.warning(f"Skipping card {index}: {e}")
            continue
        if listing.title:
            listings.append(listing)
    return listings


def _parse_gig_page(page: Page) -> list[Listing]:
    extractor = Extractor(GIG_PAGE_FIELDS)
    try:
        listing = extractor.extract(page.document)
    except Exception as e:
        logger.warning(f"Failed to extract gig page {page.url}: {e}")
        return []
    if not listing.title:
        return []
    listing.url = page.url or None
    return [listing]


def parse(page: Page, limit: int = LIVE_CARD_LIMIT, keyword: Optional[str] = None) -> ParseResult:
    """
    Classify a page and extract its listings.

    Args:
        page: fetched page
        limit: maximum number of candidate cards examined on a search page
        keyword: search keyword, detected from the page when omitted

    Returns:
        ParseResult. No candidates yields an empty listing sequence, never an exception.
    """
    page_type = detect_page_type(page)
    if page_type == PageType.SEARCH:
        listings = _parse_search_results(page, limit)
    else:
        listings = _parse_gig_page(page)

    if not listings:
        logger.info(f"No listings extracted from {page.url or 'document'} ({page_type.value})")

    return ParseResult(
        page_type=page_type,
        listings=listings,
        page_info=extract_page_info(page),
        keyword=keyword or extract_current_keyword(page),
    )


def parse_html(
    html: str, url: str = "", keyword: Optional[str] = None, limit: int = TEXT_CARD_LIMIT
) -> ParseResult:
    """Text-based parsing of fetched HTML (smaller card cap than live scraping)."""
    return parse(Page.from_html(html, url), limit=limit, keyword=keyword)
