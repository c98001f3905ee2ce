import random
from typing import Optional

SUGGESTION_LIMIT = 10

COMPETITIVE_TERMS = ["logo", "seo", "design", "website", "wordpress", "shopify", "ai"]
TRENDING_TERMS = ["logo", "ai", "tiktok", "shorts", "notion", "shopify"]

TRENDING_SEEDS = [
    "logo design", "ai content writing", "shopify store", "tiktok video editing", "notion templates",
    "youtube shorts editing", "wordpress speed optimization", "seo audit", "canva templates", "podcast editing",
]

# (category, low, high) percentage change range
MARKET_TREND_RANGES = [
    ("Graphic Design", -5, 10),
    ("Video Editing", 0, 18),
    ("AI & Automation", 5, 30),
    ("Web Development", -3, 9),
    ("SEO", -2, 12),
]


def _suggestion_text(item) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return str(item.get("text") or item.get("term") or item.get("name") or "")
    return ""


def build_suggestion_objects(suggestions: list, include_trending: bool = False) -> list[dict]:
    """Attach heuristic difficulty / competition / trending labels to raw suggestions."""
    texts = [t for t in dict.fromkeys(_suggestion_text(s).strip() for s in suggestions or []) if t]

    results = []
    for text in texts[:SUGGESTION_LIMIT]:
        lowered = text.lower()
        word_count = len(text.split())
        length_score = min(len(text), 30)
        if length_score <= 12 and word_count <= 2:
            difficulty = "high"
        elif length_score <= 20:
            difficulty = "medium"
        else:
            difficulty = "low"

        if any(term in lowered for term in COMPETITIVE_TERMS):
            competition = "High"
        elif word_count >= 3:
            competition = "Low"
        else:
            competition = "Medium"

        trending = include_trending and any(term in lowered for term in TRENDING_TERMS)
        results.append(
            {"text": text, "difficulty": difficulty, "competition": competition, "trending": trending}
        )
    return results


def trending_keywords(rng: Optional[random.Random] = None, limit: int = 8) -> list[dict]:
    rng = rng or random.Random()
    scored = [{"text": text, "score": rng.randint(60, 99)} for text in TRENDING_SEEDS]
    scored.sort(key=lambda item: -item["score"])
    return scored[:limit]


def market_trends(rng: Optional[random.Random] = None) -> list[dict]:
    rng = rng or random.Random()
    return [
        {"category": category, "change": rng.randint(low, high)}
        for category, low, high in MARKET_TREND_RANGES
    ]
