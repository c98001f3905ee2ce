from dataclasses import dataclass, field
from typing import Optional

from .keywords import compute_frequency
from .models import (
    CompetitionAssessment,
    CompetitionFactors,
    CompetitionLevel,
    DataSource,
    Insight,
    Listing,
    OpportunityKeyword,
    PerformanceMetrics,
    Report,
    SellerLevel,
)

OPPORTUNITY_LIMIT = 10

MODIFIERS = [
    "custom", "unique", "premium", "professional", "creative", "modern",
    "vintage", "minimalist", "luxury", "budget", "fast", "quick",
    "detailed", "simple", "complex", "advanced", "beginner", "expert",
]

SERVICE_NOUNS = [
    "design", "service", "solution", "package", "bundle", "template",
    "kit", "tool", "guide", "tutorial", "course", "consultation",
]

LONG_TAIL_TEMPLATES = [
    "{kw} for business",
    "{kw} for beginners",
    "{kw} for professionals",
    "affordable {kw}",
    "cheap {kw}",
    "premium {kw}",
    "{kw} template",
    "{kw} package",
]


@dataclass(frozen=True)
class CompetitionTable:
    """(threshold, points) ladders for the four competition factors, checked top-down."""

    volume: tuple = ((1000, 40), (500, 30), (100, 20), (50, 10))
    price: tuple = ((20, 25), (50, 15), (100, 10))
    top_rated: tuple = ((30, 20), (15, 15), (5, 10))
    rating: tuple = ((4.8, 15), (4.5, 10), (4.0, 5))
    levels: tuple = (
        (70, CompetitionLevel.VERY_HIGH),
        (50, CompetitionLevel.HIGH),
        (30, CompetitionLevel.MEDIUM),
        (15, CompetitionLevel.LOW),
    )


COMPETITION_TABLE = CompetitionTable()


@dataclass(frozen=True)
class BestKeywordWeights:
    """Tunable best-keyword scoring constants."""

    five_plus_words: int = 18
    four_words: int = 22
    three_words: int = 20
    two_words: int = 8
    one_word: int = 2
    actionable_bonus: int = 12
    competitive_penalty: int = 10
    prefix_bonus: int = 5
    actionable_terms: tuple = (
        "template", "audit", "setup", "starter", "pack", "bundle",
        "for startups", "for small business",
    )
    competitive_terms: tuple = ("logo", "seo", "design", "website")

    def word_band(self, words: int) -> int:
        if words >= 5:
            return self.five_plus_words
        if words == 4:
            return self.four_words
        if words == 3:
            return self.three_words
        if words == 2:
            return self.two_words
        return self.one_word


DEFAULT_WEIGHTS = BestKeywordWeights()


@dataclass
class MarketAnalysis:
    competition: CompetitionAssessment
    market_insights: list[str]
    opportunity_keywords: list[OpportunityKeyword]
    best_keyword: str
    performance_metrics: PerformanceMetrics
    ai_insights: list[Insight] = field(default_factory=list)


# ─── price / rating statistics ───

def _prices(listings: list[Listing]) -> list[float]:
    return [l.price for l in listings if l.price is not None and l.price > 0]


def _ratings(listings: list[Listing]) -> list[float]:
    return [l.rating for l in listings if l.rating is not None and l.rating > 0]


def _round_half_up(value: float, digits: int = 0) -> float:
    scale = 10 ** digits
    return int(value * scale + 0.5) / scale


def average_price(listings: list[Listing]) -> float:
    prices = _prices(listings)
    if not prices:
        return 0
    return _round_half_up(sum(prices) / len(prices))


def average_rating(listings: list[Listing]) -> float:
    ratings = _ratings(listings)
    if not ratings:
        return 0
    return _round_half_up(sum(ratings) / len(ratings), 1)


def seller_distribution(listings: list[Listing]) -> dict[str, int]:
    counts = {level.value: 0 for level in SellerLevel}
    for l in listings:
        counts[SellerLevel(l.seller_level).value] += 1
    return counts


def calculate_performance_metrics(listings: list[Listing]) -> PerformanceMetrics:
    metrics = PerformanceMetrics(total_listings=len(listings))
    if not listings:
        return metrics

    prices = _prices(listings)
    if prices:
        metrics.avg_price = average_price(listings)
        metrics.price_min = min(prices)
        metrics.price_max = max(prices)

    ratings = _ratings(listings)
    if ratings:
        metrics.avg_rating = average_rating(listings)
        for rating in ratings:
            if rating >= 4.5:
                metrics.rating_distribution["4.5+"] += 1
            elif rating >= 4.0:
                metrics.rating_distribution["4.0-4.5"] += 1
            elif rating >= 3.5:
                metrics.rating_distribution["3.5-4.0"] += 1
            else:
                metrics.rating_distribution["<3.5"] += 1

    metrics.seller_distribution = seller_distribution(listings)
    return metrics


# ─── competition ───

def _points_above(value: float, ladder: tuple) -> int:
    for threshold, points in ladder:
        if value > threshold:
            return points
    return 0


def _points_below(value: float, ladder: tuple) -> int:
    for threshold, points in ladder:
        if value < threshold:
            return points
    return 0


def competition_level(score: int, table: CompetitionTable = COMPETITION_TABLE) -> CompetitionLevel:
    for threshold, level in table.levels:
        if score >= threshold:
            return level
    return CompetitionLevel.VERY_LOW


def assess_competition(
    listings: list[Listing], table: CompetitionTable = COMPETITION_TABLE
) -> CompetitionAssessment:
    """Score market crowding 0-100 from volume, price, Top Rated share and rating."""
    total = len(listings)
    avg_price = average_price(listings)
    avg_rating = average_rating(listings)
    top_rated = sum(1 for l in listings if l.seller_level == SellerLevel.TOP_RATED)
    top_rated_percentage = top_rated / total * 100 if total else 0

    score = 0
    score += _points_above(total, table.volume)
    score += _points_below(avg_price, table.price)
    score += _points_above(top_rated_percentage, table.top_rated)
    score += _points_above(avg_rating, table.rating)
    score = max(0, min(100, score))

    return CompetitionAssessment(
        level=competition_level(score, table),
        score=score,
        factors=CompetitionFactors(
            total_listings=total,
            avg_price=avg_price,
            top_rated_percentage=top_rated_percentage,
            avg_rating=avg_rating,
        ),
    )


# ─── keywords ───

def find_opportunity_keywords(keyword: str, limit: int = OPPORTUNITY_LIMIT) -> list[str]:
    """Long-tail variants of the keyword, in generation order."""
    lowered = keyword.lower()
    suggestions = []

    for modifier in MODIFIERS:
        if modifier not in lowered:
            suggestions.append(f"{modifier} {keyword}")
            suggestions.append(f"{keyword} {modifier}")

    for noun in SERVICE_NOUNS:
        if noun not in lowered:
            suggestions.append(f"{keyword} {noun}")

    suggestions.extend(template.format(kw=keyword) for template in LONG_TAIL_TEMPLATES)
    return suggestions[:limit]


def score_keyword(keyword: str, candidate: str, weights: BestKeywordWeights = DEFAULT_WEIGHTS) -> int:
    text = candidate.lower()
    words = len(candidate.split())
    score = weights.word_band(words)
    if any(term in text for term in weights.actionable_terms):
        score += weights.actionable_bonus
    if words <= 2 and any(term in text for term in weights.competitive_terms):
        score -= weights.competitive_penalty
    first_word = keyword.lower().split(" ")[0]
    if text.startswith(first_word):
        score += weights.prefix_bonus
    return score


def rank_keywords(
    keyword: str, candidates: list[str], weights: BestKeywordWeights = DEFAULT_WEIGHTS
) -> list[tuple[str, int]]:
    """(candidate, score) pairs, best first; ties keep first-seen order."""
    unique = [c for c in dict.fromkeys(candidates) if c]
    scored = [(c, score_keyword(keyword, c, weights)) for c in unique]
    scored.sort(key=lambda pair: -pair[1])
    return scored


def compute_best_keyword(
    keyword: str, candidates: list[str], weights: BestKeywordWeights = DEFAULT_WEIGHTS
) -> str:
    ranked = rank_keywords(keyword, candidates, weights)
    if not ranked:
        return keyword
    return ranked[0][0]


# ─── insights ───

def generate_market_insights(listings: list[Listing]) -> list[str]:
    if not listings:
        return ["No existing gigs found - this could be a blue ocean opportunity!"]

    insights = []
    avg_price = average_price(listings)
    avg_rating = average_rating(listings)

    if avg_price < 20:
        insights.append("Low average price suggests high competition or commoditized market")
    elif avg_price > 100:
        insights.append(
            "High average price indicates premium market with potential for quality differentiation"
        )

    if avg_rating < 4.0:
        insights.append("Low average ratings suggest market opportunity for quality improvement")
    elif avg_rating > 4.7:
        insights.append("High average ratings indicate quality expectations are high")

    top_rated = sum(1 for l in listings if l.seller_level == SellerLevel.TOP_RATED)
    if top_rated == 0:
        insights.append("No Top Rated sellers found - opportunity to become the first!")
    elif top_rated / len(listings) > 0.3:
        insights.append("High concentration of Top Rated sellers - focus on unique value proposition")

    return insights


def generate_ai_insights(
    keyword: str, best_keyword: Optional[str], metrics: PerformanceMetrics
) -> list[Insight]:
    """Template-filled recommendations with fixed confidence values."""
    insights = []
    avg_price = metrics.avg_price
    avg_rating = metrics.avg_rating
    total = metrics.total_listings

    if best_keyword:
        insights.append(
            Insight(
                icon="🏷️",
                title="Best Keyword",
                description=f'Recommended focus: "{best_keyword}" for lower competition and clear buyer intent.',
                confidence=92,
                category="Recommendation",
            )
        )

    if avg_price > 0:
        target = max(5, int(_round_half_up(avg_price * 0.8)))
        pricing = (
            f"Average starting price around ${avg_price:.0f}. "
            f'Trying ${target} may improve conversion for "{keyword}".'
        )
    else:
        pricing = f'Set a competitive entry price for "{keyword}" to attract first buyers.'
    insights.append(
        Insight(icon="💡", title="Pricing Opportunity", description=pricing, confidence=90, category="Pricing")
    )

    if total > 0:
        positioning = (
            f'There are {total} gigs. Consider long-tail angles like "{keyword} template" '
            f'or "{keyword} for startups".'
        )
    else:
        positioning = f'Few gigs detected. Create a detailed gig to dominate "{keyword}" early.'
    insights.append(
        Insight(
            icon="🎯",
            title="Niche Positioning",
            description=positioning,
            confidence=88,
            category="Positioning",
        )
    )

    if avg_rating > 0:
        quality = (
            f"Average rating ~{avg_rating:.1f}. Emphasize strong portfolio and fast response "
            f"to exceed expectations."
        )
    else:
        quality = "No ratings context found. Highlight guarantees and fast delivery to build trust."
    insights.append(
        Insight(icon="⭐", title="Quality Bar", description=quality, confidence=85, category="Quality")
    )

    return insights


# ─── entry points ───

def analyze(
    listings: list[Listing], keyword: str, weights: BestKeywordWeights = DEFAULT_WEIGHTS
) -> MarketAnalysis:
    """Competition, insights, opportunity keywords and best keyword for one keyword's listings."""
    listings = list(listings or [])
    metrics = calculate_performance_metrics(listings)
    candidates = find_opportunity_keywords(keyword)
    best_keyword = compute_best_keyword(keyword, candidates, weights)

    return MarketAnalysis(
        competition=assess_competition(listings),
        market_insights=generate_market_insights(listings),
        opportunity_keywords=[OpportunityKeyword(text=c) for c in candidates],
        best_keyword=best_keyword,
        performance_metrics=metrics,
        ai_insights=generate_ai_insights(keyword, best_keyword, metrics),
    )


def build_report(
    keyword: str,
    listings: list[Listing],
    source: DataSource = DataSource.LIVE,
    service_type: Optional[str] = None,
    error: Optional[str] = None,
) -> Report:
    """Assemble the full Report for a listing set."""
    listings = list(listings or [])
    analysis = analyze(listings, keyword)
    return Report(
        keyword=keyword,
        listings=listings,
        total_results=len(listings),
        competition=analysis.competition,
        market_insights=analysis.market_insights,
        opportunity_keywords=analysis.opportunity_keywords,
        performance_metrics=analysis.performance_metrics,
        best_keyword=analysis.best_keyword,
        ai_insights=analysis.ai_insights,
        source=source,
        keyword_stats=compute_frequency(listings),
        service_type=service_type,
        error=error,
    )
