import re

from .models import KeywordStat, Listing

STOP_WORDS = frozenset(
    {
        "i", "you", "we", "they", "to", "the", "a", "an", "and", "or", "for",
        "of", "in", "on", "with", "by", "at", "from", "as", "is", "are", "be",
        "your", "my", "our", "their", "this", "that", "it", "will", "can", "do",
        "make", "create", "fix", "build", "best", "top",
        # marketplace noise
        "service", "services", "gig", "fiverr", "pro",
    }
)

_NON_ALNUM = re.compile(r"[^a-z0-9\s]+")


def tokenize(text: str) -> list[str]:
    """Lower-cased alphanumeric tokens longer than 2 characters, stop words removed."""
    cleaned = _NON_ALNUM.sub(" ", (text or "").lower())
    return [t for t in cleaned.split() if len(t) > 2 and t not in STOP_WORDS]


def compute_frequency(listings: list[Listing]) -> list[KeywordStat]:
    """
    Keyword -> {count, avg_price, avg_rating} over title + description.

    A token is counted once per listing. Sorted by count desc, then keyword asc.
    """
    totals: dict[str, dict] = {}
    for listing in listings or []:
        tokens = dict.fromkeys(tokenize(listing.title) + tokenize(listing.description))
        for token in tokens:
            stat = totals.setdefault(token, {"count": 0, "price": 0.0, "rating": 0.0})
            stat["count"] += 1
            if listing.price is not None:
                stat["price"] += listing.price
            if listing.rating is not None:
                stat["rating"] += listing.rating

    results = [
        KeywordStat(
            keyword=token,
            count=stat["count"],
            avg_price=stat["price"] / stat["count"],
            avg_rating=stat["rating"] / stat["count"],
        )
        for token, stat in totals.items()
    ]
    results.sort(key=lambda s: (-s.count, s.keyword))
    return results
