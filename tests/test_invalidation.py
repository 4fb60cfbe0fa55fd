"""Mutation to collection invalidation map."""
import pytest

from medibot.cache.invalidation import INVALIDATIONS, invalidate, invalidated_by


def test_sales_touch_inventory_collections():
    assert invalidated_by("record_sale") == [
        "locator", "medicine_suggestions", "medicines", "pharmacy_stats", "sales",
    ]


def test_every_mutation_reports_a_sorted_list():
    for mutation in INVALIDATIONS:
        collections = invalidated_by(mutation)
        assert collections == sorted(collections)
        assert collections


def test_unknown_mutation():
    with pytest.raises(ValueError):
        invalidated_by("launch_rocket")


async def test_invalidate_without_cache_returns_collections():
    assert await invalidate("approve_pharmacy") == invalidated_by("approve_pharmacy")
