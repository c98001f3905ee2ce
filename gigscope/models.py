from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class SellerLevel(str, Enum):
    NEW_SELLER = "New Seller"
    LEVEL_1 = "Level 1"
    LEVEL_2 = "Level 2"
    TOP_RATED = "Top Rated"


class CompetitionLevel(str, Enum):
    VERY_LOW = "Very Low"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"


class PageType(str, Enum):
    SEARCH = "search"
    LISTING = "listing"


class DataSource(str, Enum):
    LIVE = "live"
    MOCK = "mock"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


@dataclass
class Listing:
    title: str
    description: str = ""
    price: Optional[float] = None
    seller_level: SellerLevel = SellerLevel.NEW_SELLER
    rating: Optional[float] = None
    reviews: int = 0
    tags: list[str] = field(default_factory=list)
    seller: str = ""
    url: Optional[str] = None
    image_url: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Listing":
        return cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            price=data.get("price"),
            seller_level=SellerLevel(data.get("seller_level") or SellerLevel.NEW_SELLER),
            rating=data.get("rating"),
            reviews=int(data.get("reviews") or 0),
            tags=list(data.get("tags") or []),
            seller=data.get("seller", ""),
            url=data.get("url"),
            image_url=data.get("image_url"),
        )


@dataclass
class CompetitionFactors:
    total_listings: int
    avg_price: float
    top_rated_percentage: float
    avg_rating: float


@dataclass
class CompetitionAssessment:
    level: CompetitionLevel
    score: int
    factors: CompetitionFactors

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class OpportunityKeyword:
    text: str
    competition: str = "Low"
    potential: str = "High"


@dataclass
class Insight:
    title: str
    description: str
    confidence: int
    category: str
    icon: str = ""


@dataclass
class PerformanceMetrics:
    total_listings: int = 0
    avg_price: float = 0
    avg_rating: float = 0
    price_min: float = 0
    price_max: float = 0
    seller_distribution: dict[str, int] = field(
        default_factory=lambda: {level.value: 0 for level in SellerLevel}
    )
    rating_distribution: dict[str, int] = field(
        default_factory=lambda: {"4.5+": 0, "4.0-4.5": 0, "3.5-4.0": 0, "<3.5": 0}
    )


@dataclass
class KeywordStat:
    keyword: str
    count: int
    avg_price: float
    avg_rating: float


@dataclass
class PageInfo:
    url: str = ""
    title: str = ""
    has_search_results: bool = False
    has_pagination: bool = False


@dataclass
class ParseResult:
    page_type: PageType
    listings: list[Listing]
    page_info: PageInfo
    keyword: str = "unknown"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Report:
    keyword: str
    listings: list[Listing]
    total_results: int
    competition: CompetitionAssessment
    market_insights: list[str]
    opportunity_keywords: list[OpportunityKeyword]
    performance_metrics: PerformanceMetrics
    best_keyword: str
    ai_insights: list[Insight]
    source: DataSource
    keyword_stats: list[KeywordStat] = field(default_factory=list)
    service_type: Optional[str] = None
    fetched_at: str = field(default_factory=utc_now_iso)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Report":
        """Rebuild a report from its ``to_dict()`` form (cache and Convex payloads)."""
        competition = data["competition"]
        return cls(
            keyword=data["keyword"],
            listings=[Listing.from_dict(item) for item in data.get("listings", [])],
            total_results=data.get("total_results", 0),
            competition=CompetitionAssessment(
                level=CompetitionLevel(competition["level"]),
                score=competition["score"],
                factors=CompetitionFactors(**competition["factors"]),
            ),
            market_insights=list(data.get("market_insights", [])),
            opportunity_keywords=[
                OpportunityKeyword(**item) for item in data.get("opportunity_keywords", [])
            ],
            performance_metrics=PerformanceMetrics(**data.get("performance_metrics", {})),
            best_keyword=data.get("best_keyword", data["keyword"]),
            ai_insights=[Insight(**item) for item in data.get("ai_insights", [])],
            source=DataSource(data.get("source", DataSource.LIVE)),
            keyword_stats=[KeywordStat(**item) for item in data.get("keyword_stats", [])],
            service_type=data.get("service_type"),
            fetched_at=data.get("fetched_at") or utc_now_iso(),
            error=data.get("error"),
        )
