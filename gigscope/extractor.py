"""Listing-card extraction with ordered selector fallbacks."""
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import urljoin

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from .models import Listing, SellerLevel

MAX_TAGS = 5
MAX_DESCRIPTION_LENGTH = 200

_PRICE_PATTERN = re.compile(r"\$\s*(\d+(?:,\d{3})*(?:\.\d+)?)")
_NUMBER_PATTERN = re.compile(r"\d[\d,]*(?:\.\d+)?")
_REVIEWS_PAREN_PATTERN = re.compile(r"\(\s*(\d[\d,]*(?:\.\d+)?)\s*(k\b)?\+?\s*\)", re.IGNORECASE)
_REVIEWS_BARE_PATTERN = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s*(k\b)?", re.IGNORECASE)

# (badge substrings, level), checked top-down
_LEVEL_KEYWORDS = [
    (("top rated", "pro"), SellerLevel.TOP_RATED),
    (("level 2", "lv2"), SellerLevel.LEVEL_2),
    (("level 1", "lv1"), SellerLevel.LEVEL_1),
]


def clean_text(value: str) -> str:
    return " ".join((value or "").split())


def parse_price(text: str) -> Optional[float]:
    """First dollar amount, e.g. "Starting at $1,250.00" -> 1250.0. No currency conversion."""
    match = _PRICE_PATTERN.search(text or "")
    if not match:
        return None
    return float(match.group(1).replace(",", ""))


def parse_rating(text: str) -> Optional[float]:
    """First number in the text; values above 5 (including "1,234") are review counts, not ratings."""
    match = _NUMBER_PATTERN.search(text or "")
    if not match:
        return None
    value = float(match.group().replace(",", ""))
    if value > 5:
        return None
    return value


def parse_reviews(text: str) -> Optional[int]:
    """Review count, e.g. "(1,234)" -> 1234 and "(1k+)" -> 1000."""
    text = text or ""
    match = _REVIEWS_PAREN_PATTERN.search(text) or _REVIEWS_BARE_PATTERN.search(text)
    if not match:
        return None
    value = float(match.group(1).replace(",", ""))
    if match.group(2):
        value *= 1000
    return int(value)


def classify_seller_level(text: str) -> SellerLevel:
    lowered = (text or "").lower()
    for needles, level in _LEVEL_KEYWORDS:
        if any(needle in lowered for needle in needles):
            return level
    return SellerLevel.NEW_SELLER


# ─── node transforms ───

def _text(node: Tag) -> str:
    return clean_text(node.get_text())


def _description(node: Tag) -> str:
    return _text(node)[:MAX_DESCRIPTION_LENGTH]


def _price(node: Tag) -> Optional[float]:
    return parse_price(_text(node))


def _rating(node: Tag) -> Optional[float]:
    return parse_rating(_text(node))


def _reviews(node: Tag) -> Optional[int]:
    return parse_reviews(_text(node))


def _seller_level(node: Tag) -> Optional[SellerLevel]:
    text = _text(node)
    if not text:
        return None
    return classify_seller_level(text)


def _href(node: Tag) -> Optional[str]:
    return clean_text(node.get("href") or "") or None


def _image_src(node: Tag) -> Optional[str]:
    return clean_text(node.get("src") or node.get("data-src") or "") or None


def _tag_texts(nodes: list[Tag]) -> list[str]:
    texts = [_text(node) for node in nodes]
    return [t for t in texts if t][:MAX_TAGS]


# ─── lookup strategies ───

def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


@dataclass(frozen=True)
class Lookup:
    """One locator + transform pair. A transform returning an empty value is a miss."""

    selector: str
    transform: Callable[[Any], Any] = _text


@dataclass(frozen=True)
class FieldLookup:
    """Ordered lookups for a single Listing field; the first non-empty result wins."""

    name: str
    lookups: tuple[Lookup, ...]
    multiple: bool = False

    def resolve(self, root: Tag) -> Any:
        for lookup in self.lookups:
            try:
                if self.multiple:
                    found = root.select(lookup.selector)
                else:
                    found = root.select_one(lookup.selector)
            except SelectorSyntaxError:
                continue
            if not found:
                continue
            value = lookup.transform(found)
            if not _is_empty(value):
                return value
        return None


def _field(name: str, selectors: list[str], transform=_text, multiple: bool = False) -> FieldLookup:
    return FieldLookup(
        name=name,
        lookups=tuple(Lookup(selector, transform) for selector in selectors),
        multiple=multiple,
    )


CARD_FIELDS = (
    _field(
        "title",
        [
            'h3[data-testid="gig-title"] a',
            ".gig-title a",
            "h3 a",
            "a[data-gig-id] h3",
            ".gig-card-title",
            '[data-testid="gig-title"]',
            '[data-qa="gig-title"]',
            '[data-qa="gig-card-title"]',
            ".gig-title",
            'a[href*="/gig/"] h3',
            "h3",
            "h2",
        ],
    ),
    _field(
        "description",
        [
            ".gig-card-description p",
            'p[data-testid="gig-description"]',
            ".gig-description",
            '[data-testid="gig-description"]',
            "p.description",
            ".gig-card-description",
        ],
        _description,
    ),
    _field(
        "price",
        [
            ".price-wrapper .price",
            '[data-testid="price"]',
            '[data-qa="gig-price"]',
            ".gig-price",
            ".price-display",
            ".starting-price",
            ".starting-at",
            ".price",
            '[aria-label*="price" i]',
        ],
        _price,
    ),
    _field(
        "seller_level",
        [
            ".seller-level-badge",
            ".level-badge",
            '[data-testid="seller-level"]',
            ".badge-level",
            ".seller-level",
        ],
        _seller_level,
    ),
    _field(
        "rating",
        [
            ".rating-score",
            '[data-testid="rating"]',
            '[data-qa="gig-rating"]',
            ".star-rating-score",
            ".gig-rating .score",
            ".rating",
            ".gig-rating",
        ],
        _rating,
    ),
    _field(
        "reviews",
        [
            ".rating-count",
            '[data-testid="review-count"]',
            ".reviews-count",
        ],
        _reviews,
    ),
    _field(
        "seller",
        [
            ".seller-name",
            '[data-testid="seller-name"]',
            '[data-qa="seller-name"]',
            ".seller-info .name",
            'a[href*="/profiles/"]',
        ],
    ),
    _field(
        "url",
        [
            'a[href*="/gig/"]',
            "a[data-gig-id]",
            'a[href*="/share/"]',
        ],
        _href,
    ),
    _field(
        "image_url",
        [
            ".gig-media img",
            ".gig-image img",
            'img[data-testid="gig-image"]',
            "img",
        ],
        _image_src,
    ),
    _field(
        "tags",
        [
            ".gig-tags .tag",
            ".tag-list .tag",
            '[data-testid="tag"]',
            ".keywords .keyword",
        ],
        _tag_texts,
        multiple=True,
    ),
)

# Single-listing page: same fields looked up at page scope. The URL comes from the page itself.
GIG_PAGE_FIELDS = (
    _field("title", ['h1[data-qa="gig-title"]', "h1:has(span)", "h1"]),
    _field(
        "description",
        [
            '[data-qa="gig-description"]',
            'section[aria-label*="About this gig" i]',
            ".gig-description",
        ],
        _description,
    ),
    _field(
        "price",
        [
            '[data-qa="package-price"]',
            '[data-qa="gig-price"]',
            '[aria-label*="price" i]',
            ".price",
        ],
        _price,
    ),
    _field(
        "seller_level",
        ['[data-qa="seller-level"]', ".seller-level", ".level-badge"],
        _seller_level,
    ),
    _field(
        "rating",
        ['[data-qa="gig-rating"]', '[aria-label*="rating" i]', ".rating-score"],
        _rating,
    ),
    _field("reviews", ['[data-qa="rating-count"]', ".rating-count"], _reviews),
    _field(
        "seller",
        [
            'a[href*="/seller/"]',
            '[data-qa="seller-name"]',
            ".seller-name",
            'a[href*="/profiles/"]',
        ],
    ),
    _field(
        "image_url",
        ['img[data-qa="gig-image"]', ".gig-gallery img"],
        _image_src,
    ),
    _field(
        "tags",
        ['[data-qa="gig-tag"]', ".gig-tags .tag"],
        _tag_texts,
        multiple=True,
    ),
)


class Extractor:
    """Builds a Listing from a card (or page) node using a field lookup table."""

    def __init__(self, fields: tuple[FieldLookup, ...] = CARD_FIELDS, base_url: str = ""):
        self.fields = fields
        self.base_url = base_url

    def extract(self, node: Tag) -> Listing:
        values = {}
        for field_lookup in self.fields:
            value = field_lookup.resolve(node)
            if value is not None:
                values[field_lookup.name] = value

        for key in ("url", "image_url"):
            if values.get(key) and self.base_url:
                values[key] = urljoin(self.base_url, values[key])

        values.setdefault("title", "")
        return Listing(**values)


def extract(card: Tag, base_url: str = "") -> Listing:
    """Extract a Listing from one search-result card. Lookup misses fall back to defaults."""
    return Extractor(CARD_FIELDS, base_url).extract(card)
