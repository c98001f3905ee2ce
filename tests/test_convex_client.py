"""Tests for Convex persistence against a recording fake client."""

import json

import pytest

from gigscope import convex_client
from gigscope.analyzer import build_report
from gigscope.convex_client import ConvexStore, get_recent_reports, save_report
from gigscope.models import Listing
from gigscope.storage import SearchHistory


class FakeConvexClient:
    def __init__(self):
        self.rows = {}
        self.calls = []

    def query(self, name, args):
        self.calls.append(("query", name, args))
        if name == "kvStore:get":
            return self.rows.get(args["key"])
        return [{"keyword": "logo"}]

    def mutation(self, name, args):
        self.calls.append(("mutation", name, args))
        if name == "kvStore:set":
            self.rows[args["key"]] = args["value"]
        elif name == "kvStore:remove":
            self.rows.pop(args["key"], None)
        return "report-id"


def test_convex_store_json_values():
    client = FakeConvexClient()
    store = ConvexStore(client)

    assert store.get("missing", []) == []
    store.set("favorites", [{"keyword": "logo"}])
    assert client.rows["favorites"] == '[{"keyword": "logo"}]'
    assert store.get("favorites") == [{"keyword": "logo"}]

    store.delete("favorites")
    assert store.get("favorites") is None


def test_convex_store_backs_history():
    """Test the Convex store works wherever a KeyValueStore is expected."""
    history = SearchHistory(ConvexStore(FakeConvexClient()), clock=lambda: 5.0)
    history.record("logo")

    assert history.entries() == [{"keyword": "logo", "date": 5.0}]


def test_save_report():
    client = FakeConvexClient()
    report = build_report("logo", [Listing(title="I will draw a logo", price=20, rating=4.8)])

    assert save_report(report, client) == "report-id"
    kind, name, payload = client.calls[-1]
    assert (kind, name) == ("mutation", "marketReports:insert")
    assert payload["keyword"] == "logo"
    assert payload["source"] == "live"
    assert payload["totalResults"] == 1
    assert payload["avgPrice"] == 20
    assert payload["bestKeyword"] == report.best_keyword
    assert json.loads(payload["listings"])[0]["title"] == "I will draw a logo"


def test_get_recent_reports():
    client = FakeConvexClient()

    assert get_recent_reports(5, client) == [{"keyword": "logo"}]
    assert client.calls[-1] == ("query", "marketReports:getRecent", {"limit": 5})


def test_missing_convex_url(monkeypatch):
    monkeypatch.setattr(convex_client, "CONVEX_URL", "")
    with pytest.raises(ValueError):
        ConvexStore().get("favorites")
