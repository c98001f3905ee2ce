"""Synthetic listing sets for when live extraction comes back empty."""
import logging
import random
from typing import Optional, Protocol
from urllib.parse import quote

from .analyzer import build_report
from .models import DataSource, Listing, Report, SellerLevel

logger = logging.getLogger(__name__)

MIN_LISTINGS = 8
MAX_LISTINGS = 12

PRICE_MULTIPLIERS = [0.8, 0.9, 1.0, 1.1, 1.2, 1.5, 2.0]
LEVEL_ROTATION = [SellerLevel.NEW_SELLER, SellerLevel.LEVEL_1, SellerLevel.LEVEL_2, SellerLevel.TOP_RATED]
RATING_LADDER = [4.2, 4.3, 4.5, 4.6, 4.7, 4.8, 4.9, 5.0]

# checked in order; first category with a matching term wins
SERVICE_CATEGORIES = {
    "design": ["logo", "graphic", "web design", "ui", "brand", "creative"],
    "writing": ["content", "copywriting", "blog", "article", "seo writing"],
    "programming": ["website", "app", "development", "coding", "software"],
    "marketing": ["social media", "seo", "marketing", "promotion", "advertising"],
    "video": ["video", "animation", "editing", "motion", "explainer"],
    "music": ["music", "audio", "voice", "sound", "mixing"],
}
DEFAULT_CATEGORY = "general"

TEMPLATES = {
    "design": [
        {
            "title": "I will create a professional {kw} for your business",
            "description": "High-quality {kw} with unlimited revisions. Modern, clean design that represents your brand perfectly.",
            "price": 25,
            "rating": 4.8,
            "reviews": 156,
            "tags": ["professional", "modern", "business"],
        },
        {
            "title": "I will design amazing {kw} in 24 hours",
            "description": "Quick turnaround {kw} service with creative approach and customer satisfaction guarantee.",
            "price": 15,
            "rating": 4.6,
            "reviews": 89,
            "tags": ["24hours", "creative", "fast"],
        },
    ],
    "writing": [
        {
            "title": "I will write engaging {kw} content for your audience",
            "description": "SEO-optimized {kw} that drives traffic and engages readers. Professional writer with 5+ years experience.",
            "price": 30,
            "rating": 4.9,
            "reviews": 234,
            "tags": ["seo", "engaging", "professional"],
        },
        {
            "title": "I will provide quality {kw} services",
            "description": "Well-researched {kw} with proper formatting and plagiarism-free guarantee.",
            "price": 20,
            "rating": 4.5,
            "reviews": 67,
            "tags": ["quality", "research", "original"],
        },
    ],
    "programming": [
        {
            "title": "I will develop a custom {kw} solution",
            "description": "Full-stack {kw} development with modern technologies. Clean code and documentation included.",
            "price": 150,
            "rating": 5.0,
            "reviews": 78,
            "tags": ["custom", "full-stack", "modern"],
        },
        {
            "title": "I will build your {kw} quickly and efficiently",
            "description": "Professional {kw} development with responsive design and cross-browser compatibility.",
            "price": 85,
            "rating": 4.7,
            "reviews": 145,
            "tags": ["responsive", "professional", "efficient"],
        },
    ],
    "marketing": [
        {
            "title": "I will run a results-driven {kw} campaign",
            "description": "Data-backed {kw} strategy with weekly reporting and audience targeting.",
            "price": 60,
            "rating": 4.8,
            "reviews": 112,
            "tags": ["campaign", "growth", "reporting"],
        },
        {
            "title": "I will set up and manage your {kw}",
            "description": "Hands-on {kw} management, competitor research and monthly optimization.",
            "price": 40,
            "rating": 4.6,
            "reviews": 73,
            "tags": ["management", "strategy", "optimization"],
        },
    ],
    "video": [
        {
            "title": "I will produce a professional {kw} for your brand",
            "description": "Polished {kw} with motion graphics, color grading and licensed music.",
            "price": 70,
            "rating": 4.9,
            "reviews": 98,
            "tags": ["professional", "motion", "brand"],
        },
        {
            "title": "I will edit your {kw} with fast delivery",
            "description": "Clean cuts, transitions and captions for your {kw} delivered in 48 hours.",
            "price": 35,
            "rating": 4.6,
            "reviews": 141,
            "tags": ["editing", "captions", "fast"],
        },
    ],
    "music": [
        {
            "title": "I will record and mix your {kw} in studio quality",
            "description": "Studio-grade {kw} recording, mixing and mastering with unlimited revisions.",
            "price": 50,
            "rating": 4.9,
            "reviews": 87,
            "tags": ["studio", "mixing", "mastering"],
        },
        {
            "title": "I will create custom {kw} for your project",
            "description": "Original {kw} tailored to your project, delivered in WAV and MP3.",
            "price": 30,
            "rating": 4.7,
            "reviews": 64,
            "tags": ["original", "custom", "royalty-free"],
        },
    ],
}


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...

    def random(self) -> float: ...


def classify_service(keyword: str) -> str:
    """Service category for a keyword by substring match in either direction."""
    lowered = keyword.lower()
    for category, terms in SERVICE_CATEGORIES.items():
        if any(term in lowered or lowered in term for term in terms):
            return category
    return DEFAULT_CATEGORY


def _variation(template: dict, keyword: str, index: int, rng: RandomSource) -> Listing:
    first_word = (keyword.split() or [keyword])[0]
    return Listing(
        title=template["title"].format(kw=keyword),
        description=template["description"].format(kw=keyword),
        price=round(template["price"] * PRICE_MULTIPLIERS[index % len(PRICE_MULTIPLIERS)]),
        seller_level=LEVEL_ROTATION[index % len(LEVEL_ROTATION)],
        rating=RATING_LADDER[index % len(RATING_LADDER)],
        reviews=int(template["reviews"] * (0.5 + rng.random())),
        tags=[first_word, *template["tags"], f"variation{index + 1}"],
        seller=f"seller_{index + 1}",
        image_url=f"https://via.placeholder.com/300x200/1dbf73/ffffff?text={quote(keyword)}",
    )


def generate_listings(keyword: str, service_type: str, rng: RandomSource) -> list[Listing]:
    templates = TEMPLATES.get(service_type) or TEMPLATES["design"]
    count = rng.randint(MIN_LISTINGS, MAX_LISTINGS)
    return [_variation(templates[i % len(templates)], keyword, i, rng) for i in range(count)]


def generate_mock(keyword: str, rng: Optional[RandomSource] = None) -> Report:
    """
    Build a synthetic Report for a keyword.

    Args:
        keyword: search keyword; every generated title contains it
        rng: random source with randint()/random(); random.Random() when omitted

    Returns:
        Report with source=mock and 8-12 listings
    """
    rng = rng or random.Random()
    service_type = classify_service(keyword)
    listings = generate_listings(keyword, service_type, rng)
    logger.info(f"Generated {len(listings)} mock listings for '{keyword}' ({service_type})")
    return build_report(keyword, listings, source=DataSource.MOCK, service_type=service_type)
