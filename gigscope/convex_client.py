"""Convex DB persistence for history, favorites, cached reports and saved analyses."""
import json
import os
from typing import Any

from dotenv import load_dotenv

from .models import Report

load_dotenv()

CONVEX_URL = os.getenv("CONVEX_URL", "")


def _get_client():
    from convex import ConvexClient

    if not CONVEX_URL:
        raise ValueError("CONVEX_URL must be set in .env to use Convex persistence.")
    return ConvexClient(CONVEX_URL)


class ConvexStore:
    """KeyValueStore over the kvStore table. Values are stored as JSON text."""

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = _get_client()
        return self._client

    def get(self, key: str, default: Any = None) -> Any:
        raw = self.client.query("kvStore:get", {"key": key})
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self.client.mutation("kvStore:set", {"key": key, "value": json.dumps(value, ensure_ascii=False)})

    def delete(self, key: str) -> None:
        self.client.mutation("kvStore:remove", {"key": key})


def save_report(report: Report, client=None) -> str:
    """Save an analysis report to Convex. Returns the report ID."""
    client = client or _get_client()
    metrics = report.performance_metrics

    return client.mutation("marketReports:insert", {
        "keyword": report.keyword,
        "source": report.source.value,
        "serviceType": report.service_type,
        "totalResults": report.total_results,
        "competitionLevel": report.competition.level.value,
        "competitionScore": report.competition.score,
        "avgPrice": metrics.avg_price,
        "avgRating": metrics.avg_rating,
        "minPrice": metrics.price_min,
        "maxPrice": metrics.price_max,
        "bestKeyword": report.best_keyword,
        "marketInsights": json.dumps(report.market_insights, ensure_ascii=False),
        "opportunityKeywords": json.dumps([o.text for o in report.opportunity_keywords], ensure_ascii=False),
        "listings": json.dumps([l.to_dict() for l in report.listings], ensure_ascii=False),
        "fetchedAt": report.fetched_at,
    })


def get_recent_reports(limit: int = 20, client=None) -> list:
    """Most recently saved reports."""
    client = client or _get_client()
    return client.query("marketReports:getRecent", {"limit": limit})
