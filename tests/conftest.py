"""Pytest configuration and fixtures for gigscope tests."""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

SEARCH_URL = "https://www.fiverr.com/search/gigs?query=logo+design"
GIG_URL = "https://www.fiverr.com/gig/alice-minimalist-logo"


def card_html(title: str, price: str = "$25", level: str = "Level 1", rating: str = "4.8") -> str:
    slug = "-".join(title.lower().split())
    return f"""
    <div class="gig-card-layout">
      <div class="gig-media"><img src="/images/{slug}.jpg"></div>
      <h3 data-testid="gig-title"><a href="/gig/{slug}">{title}</a></h3>
      <span class="price">Starting at {price}</span>
      <span class="seller-level">{level}</span>
      <span class="rating-score">{rating}</span>
    </div>
    """


def search_page_html(cards: list[str], title: str = 'Results for "logo design"') -> str:
    return f"""
    <html>
      <head><title>{title} | Fiverr</title></head>
      <body>
        <h1>{title}</h1>
        <div class="search-results">{''.join(cards)}</div>
        <div class="pagination"><a href="?page=2">2</a></div>
      </body>
    </html>
    """


@pytest.fixture
def make_card():
    """Factory for a minimal search-result card."""
    return card_html


@pytest.fixture
def make_search_page():
    """Factory wrapping cards in a search-results page."""
    return search_page_html


@pytest.fixture
def full_card_html():
    """A card exposing every extractable field."""
    return """
    <div class="gig-card-layout">
      <div class="gig-media"><img src="/images/logo-1.jpg"></div>
      <h3 data-testid="gig-title"><a href="/gig/alice-logo">  I will design a modern
          minimalist logo  </a></h3>
      <div class="gig-card-description"><p>Clean vector logo with source files</p></div>
      <div class="price-wrapper"><span class="price">Starting at $1,250.00</span></div>
      <span class="seller-level-badge">Top Rated Seller</span>
      <span class="rating-score">4.9</span>
      <span class="rating-count">(1,234)</span>
      <div class="seller-info"><span class="name">alice</span></div>
      <div class="gig-tags">
        <span class="tag">logo</span><span class="tag">minimalist</span><span class="tag"> </span>
        <span class="tag">vector</span><span class="tag">brand</span><span class="tag">modern</span>
        <span class="tag">flat</span>
      </div>
    </div>
    """


@pytest.fixture
def search_html():
    """Search page with two valid cards and one card without a title."""
    cards = [
        card_html("I will design a modern minimalist logo", "$45", "Top Rated", "4.9"),
        card_html("I will create a vintage logo design", "$5", "Level 2", "4.6"),
        '<div class="gig-card-layout"><span class="price">$10</span></div>',
    ]
    return search_page_html(cards)


@pytest.fixture
def gig_page_html():
    return """
    <html>
      <head><title>Alice | Minimalist logo</title></head>
      <body>
        <h1 data-qa="gig-title">I will design a minimalist logo for your startup</h1>
        <a href="/seller/alice">alice</a>
        <span class="seller-level">Level 2 Seller</span>
        <span data-qa="gig-rating">4.7</span>
        <span data-qa="rating-count">(312)</span>
        <div data-qa="package-price">US$ $60</div>
        <div data-qa="gig-description">Three concepts, unlimited revisions and vector files.</div>
      </body>
    </html>
    """
