"""Tests for synthetic listing generation."""

import random

import pytest

from gigscope.analyzer import analyze, assess_competition
from gigscope.mock_data import (
    DEFAULT_CATEGORY,
    MAX_LISTINGS,
    MIN_LISTINGS,
    SERVICE_CATEGORIES,
    TEMPLATES,
    classify_service,
    generate_listings,
    generate_mock,
)
from gigscope.models import DataSource, SellerLevel


class FixedRandom:
    """Always picks the top of the range and the midpoint of [0, 1)."""

    def randint(self, a, b):
        return b

    def random(self):
        return 0.5


@pytest.mark.parametrize(
    "keyword,category",
    [
        ("logo design", "design"),
        ("blog writing", "writing"),
        ("mobile app", "programming"),
        ("social media", "marketing"),
        ("video editing", "video"),
        ("podcast mixing", "music"),
        ("tax advice", DEFAULT_CATEGORY),
    ],
)
def test_classify_service(keyword, category):
    assert classify_service(keyword) == category


def test_classify_service_short_keyword_inside_term():
    """Test a keyword contained in a category term also matches."""
    assert classify_service("Logo") == "design"
    assert classify_service("sound") == "music"


def test_every_category_has_templates():
    assert set(SERVICE_CATEGORIES) <= set(TEMPLATES)


def test_generate_mock():
    """Test listing count, titles and report metadata."""
    report = generate_mock("logo design", random.Random(7))

    assert report.source == DataSource.MOCK
    assert report.service_type == "design"
    assert MIN_LISTINGS <= len(report.listings) <= MAX_LISTINGS
    assert report.total_results == len(report.listings)
    assert all("logo design" in l.title for l in report.listings)
    assert report.error is None


def test_generated_listing_fields():
    listings = generate_listings("logo design", "design", FixedRandom())

    assert len(listings) == MAX_LISTINGS
    first, second = listings[0], listings[1]
    assert first.title == "I will create a professional logo design for your business"
    assert first.price == 20
    assert first.rating == 4.2
    assert first.reviews == 156
    assert first.seller_level == SellerLevel.NEW_SELLER
    assert first.tags == ["logo", "professional", "modern", "business", "variation1"]
    assert first.seller == "seller_1"
    assert first.image_url.endswith("text=logo%20design")
    assert second.title == "I will design amazing logo design in 24 hours"
    assert second.seller_level == SellerLevel.LEVEL_1
    assert listings[3].seller_level == SellerLevel.TOP_RATED
    assert listings[4].seller_level == SellerLevel.NEW_SELLER


def test_general_keywords_use_design_templates():
    report = generate_mock("tax advice", FixedRandom())

    assert report.service_type == DEFAULT_CATEGORY
    assert report.listings[0].title == "I will create a professional tax advice for your business"


def test_same_seed_same_listings():
    first = generate_mock("podcast mixing", random.Random(3))
    second = generate_mock("podcast mixing", random.Random(3))

    assert [l.to_dict() for l in first.listings] == [l.to_dict() for l in second.listings]


def test_mock_report_is_analyzed():
    """Test mock listings flow through the same analysis as live ones."""
    report = generate_mock("video editing", FixedRandom())

    assert report.performance_metrics.total_listings == MAX_LISTINGS
    assert report.performance_metrics.avg_price > 0
    assert len(report.ai_insights) == 4
    assert report.keyword_stats


def test_mock_listings_count_in_competition_factors():
    """Test mock listings fed back into the analyzer are all counted."""
    listings = generate_mock("logo design", random.Random(11)).listings

    assert assess_competition(listings).factors.total_listings == len(listings)
    assert analyze(listings, "logo design").competition.factors.total_listings == len(listings)
