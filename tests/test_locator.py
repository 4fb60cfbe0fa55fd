"""Pharmacy locator: distance maths, filtering and the public endpoints."""
import random
from types import SimpleNamespace

import pytest

from medibot.core.constants import LocatorSort
from medibot.services.locator_service import (
    LocatorFilters, directions_url, haversine_km, locate_pharmacies, tile_url,
)

from conftest import auth, make_pharmacy, make_user_with_session

KIGALI = (-1.9441, 30.0619)
HUYE = (-2.5967, 29.7394)


def _pharmacy(pid, lat, lng, status="approved", name=None):
    return SimpleNamespace(
        id=pid, name=name or f"Pharmacy {pid}", location=None, phone=None,
        latitude=lat, longitude=lng, status=status,
    )


def _medicine(mid, name, stock, pharmacy, price=1000.0):
    return SimpleNamespace(id=mid, name=name, stock=stock, price=price, pharmacy=pharmacy)


def test_haversine_zero_and_symmetric():
    rng = random.Random(7)
    for _ in range(50):
        a = (rng.uniform(-90, 90), rng.uniform(-180, 180))
        b = (rng.uniform(-90, 90), rng.uniform(-180, 180))
        assert haversine_km(*a, *a) == 0
        assert haversine_km(*a, *b) == pytest.approx(haversine_km(*b, *a))


def test_haversine_known_distance():
    # Kigali to Huye is roughly 81 km as the crow flies
    assert haversine_km(*KIGALI, *HUYE) == pytest.approx(81, abs=3)


def test_locate_filters_by_term_stock_radius_and_status():
    near = _pharmacy(1, -1.95, 30.06)
    far = _pharmacy(2, *HUYE)
    pending = _pharmacy(3, -1.95, 30.07, status="pending")
    no_coords = _pharmacy(4, None, None)
    medicines = [
        _medicine(1, "Paracetamol 500mg", 10, near),
        _medicine(2, "Ibuprofen", 10, near),
        _medicine(3, "paracetamol syrup", 10, far),
        _medicine(4, "Paracetamol", 10, pending),
        _medicine(5, "Paracetamol", 10, no_coords),
        _medicine(6, "PARACETAMOL", 0, _pharmacy(5, -1.94, 30.06)),
    ]

    results = locate_pharmacies(medicines, KIGALI, LocatorFilters(term="paracetamol", radius_km=50, min_stock=1))
    assert [r["id"] for r in results] == [1]
    assert [m["name"] for m in results[0]["medicines"]] == ["Paracetamol 500mg"]

    results = locate_pharmacies(medicines, KIGALI, LocatorFilters(term="paracetamol", radius_km=200, min_stock=1))
    assert [r["id"] for r in results] == [1, 2]


def test_every_result_satisfies_the_query():
    rng = random.Random(11)
    names = ["Amoxicillin", "Paracetamol", "Ibuprofen", "Cetirizine", "Metformin"]
    pharmacies = [_pharmacy(i, -1.9 + rng.uniform(-1, 1), 30.0 + rng.uniform(-1, 1)) for i in range(20)]
    medicines = [
        _medicine(i, rng.choice(names), rng.randint(0, 30), rng.choice(pharmacies))
        for i in range(200)
    ]
    filters = LocatorFilters(term="cet", radius_km=60, min_stock=5)

    for result in locate_pharmacies(medicines, KIGALI, filters):
        assert result["distance_km"] <= 60
        assert any("cet" in m["name"].lower() and m["stock"] >= 5 for m in result["medicines"])


def test_sort_by_availability_breaks_ties_by_distance():
    a = _pharmacy(1, -1.95, 30.06)
    b = _pharmacy(2, -1.99, 30.10)
    c = _pharmacy(3, -1.945, 30.062)
    medicines = [
        _medicine(1, "Vitamin C", 5, a),
        _medicine(2, "Vitamin D", 5, b),
        _medicine(3, "Vitamin B12", 5, b),
        _medicine(4, "Vitamin A", 5, c),
    ]

    by_distance = locate_pharmacies(medicines, KIGALI, LocatorFilters(term="vitamin"))
    assert [r["id"] for r in by_distance] == [3, 1, 2]

    by_stock = locate_pharmacies(medicines, KIGALI, LocatorFilters(term="vitamin", sort_by=LocatorSort.AVAILABILITY))
    assert [r["id"] for r in by_stock] == [2, 3, 1]


def test_missing_location_uses_default_centre():
    pharmacy = _pharmacy(1, *KIGALI)
    results = locate_pharmacies([_medicine(1, "Zinc", 3, pharmacy)], None, LocatorFilters(term="zinc"))
    assert results[0]["distance_km"] == 0


def test_tile_urls():
    assert tile_url("standard", 3, 4, 5) == "https://a.tile.openstreetmap.org/3/4/5.png"
    assert tile_url("satellite", 3, 4, 5).endswith("/tile/3/5/4")
    assert tile_url("terrain", 1, 2, 3, subdomain="b") == "https://b.tile.opentopomap.org/1/2/3.png"
    with pytest.raises(ValueError):
        tile_url("hybrid", 1, 1, 1)


def test_directions_url():
    pharmacy = _pharmacy(1, -1.95, 30.06)
    assert directions_url(pharmacy, (-1.9, 30.1)) == (
        "https://www.google.com/maps/dir/?api=1&origin=-1.9,30.1"
        "&destination=-1.95,30.06&travelmode=driving"
    )
    with pytest.raises(ValueError):
        directions_url(_pharmacy(2, None, None))


async def test_pending_pharmacy_hidden_until_approved(async_client, db_session):
    pharmacy = make_pharmacy(
        db_session, name="Remera Pharmacy", status="pending", medicines=[("Quinine Sulphate", 2500, 12)]
    )
    params = {"term": "quinine", "lat": KIGALI[0], "lng": KIGALI[1]}

    r = await async_client.get("/locator/search", params=params)
    assert r.status_code == 200, r.text
    assert pharmacy.id not in [p["id"] for p in r.json()["results"]]

    r = await async_client.get("/locator/pharmacies")
    assert pharmacy.id not in [p["id"] for p in r.json()]

    admin_token, _ = make_user_with_session(db_session, role="super_admin")
    r = await async_client.post(f"/admin/pharmacies/{pharmacy.id}/approve", headers=auth(admin_token))
    assert r.status_code == 200, r.text
    assert "locator" in r.json()["invalidates"]

    r = await async_client.get("/locator/search", params=params)
    found = [p for p in r.json()["results"] if p["id"] == pharmacy.id]
    assert found and found[0]["medicines"][0]["name"] == "Quinine Sulphate"
    assert r.json()["used_default_origin"] is False


async def test_search_defaults_origin_when_location_missing(async_client, db_session):
    make_pharmacy(db_session, name="Nyamirambo Pharmacy", medicines=[("Oral Rehydration Salts", 500, 40)])
    r = await async_client.get("/locator/search", params={"term": "rehydration"})
    body = r.json()
    assert body["used_default_origin"] is True
    assert body["origin"] == {"lat": KIGALI[0], "lng": KIGALI[1]}
    assert body["results"]


async def test_search_requires_both_coordinates(async_client):
    r = await async_client.get("/locator/search", params={"term": "x", "lat": 1.0})
    assert r.status_code == 400


async def test_suggestions(async_client, db_session):
    make_pharmacy(
        db_session,
        name="Kimironko Pharmacy",
        medicines=[("Loratadine 10mg", 800, 5), ("Loratadine syrup", 1200, 0), ("Lorazepam", 3000, 2)],
    )
    r = await async_client.get("/locator/suggestions", params={"q": "l"})
    assert r.json()["data"] == []

    r = await async_client.get("/locator/suggestions", params={"q": "lora"})
    names = r.json()["data"]
    assert "Loratadine 10mg" in names
    assert "Lorazepam" in names
    assert "Loratadine syrup" not in names
    assert len(names) <= 5


async def test_unknown_tile_mode_is_400(async_client):
    r = await async_client.get("/locator/tiles/hybrid/1/1/1")
    assert r.status_code == 400


def test_blank_term_matches_nothing():
    medicines = [_medicine(1, "Paracetamol", 10, _pharmacy(1, -1.95, 30.06))]
    assert locate_pharmacies(medicines, KIGALI, LocatorFilters(term="   ")) == []


async def test_search_rejects_blank_term(async_client, db_session):
    make_pharmacy(db_session, name="Kimironko Pharmacy", medicines=[("Zinc Tablets", 300, 15)])
    r = await async_client.get("/locator/search", params={"term": "   "})
    assert r.status_code == 400

    r = await async_client.get("/locator/search", params={"term": "  zinc  "})
    assert r.status_code == 200
    assert r.json()["results"]
