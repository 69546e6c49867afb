"""Tests for the parts-store directory and reliability ratings."""

from __future__ import annotations

import pytest

from models.store import StoreVote
from models.user import Role
from services import stores
from services.errors import DuplicateName, PermissionDenied, ValidationError


@pytest.fixture()
def mechanic(make_user):
    return make_user(Role.VERIFIED_MECHANIC)


@pytest.fixture()
def store(mechanic):
    return stores.submit_store(mechanic, "RockAuto", "https://www.rockauto.com", "OEM Parts")


def test_submission_is_gated_and_unique(make_user, mechanic, store):
    with pytest.raises(PermissionDenied):
        stores.submit_store(make_user(), "Parts Geek", "https://partsgeek.com")
    with pytest.raises(DuplicateName):
        stores.submit_store(mechanic, "rockauto", "https://rockauto.example")
    with pytest.raises(ValidationError):
        stores.submit_store(mechanic, "Sketchy", "ftp://parts.example")

    fallback = stores.submit_store(mechanic, "FCP Euro", "https://www.fcpeuro.com")
    assert fallback.category == stores.DEFAULT_CATEGORY


def test_rating_with_no_votes_is_none(store):
    """No ratings is distinct from a 0% rating."""

    assert stores.reliability_score(store) is None
    assert store.to_dict()["reliability"] == "no ratings"


def test_one_up_one_down_is_half(make_user, store):
    stores.rate_store(make_user(Role.VERIFIED_MECHANIC), store, True)
    score = stores.rate_store(make_user(Role.VERIFIED_MECHANIC), store, False)

    assert score == 0.5
    assert store.to_dict()["reliability"] == "50%"


def test_rerating_replaces_previous_vote(make_user, store):
    voter = make_user(Role.VERIFIED_MECHANIC)

    assert stores.rate_store(voter, store, False) == 0.0
    assert stores.rate_store(voter, store, True) == 1.0
    assert StoreVote.query.filter_by(store_id=store.id).count() == 1


def test_rating_requires_verified_member_and_boolean(make_user, store):
    with pytest.raises(PermissionDenied):
        stores.rate_store(make_user(), store, True)
    with pytest.raises(ValidationError):
        stores.rate_store(make_user(Role.MODERATOR), store, 1)


def test_listing_and_categories(mechanic, store):
    stores.submit_store(mechanic, "Harbor Freight", "https://harborfreight.com", "Tools")
    stores.submit_store(mechanic, "Boutique Bits", "https://bits.example", "Custom Label")

    assert [s.name for s in stores.list_stores()] == [
        "Boutique Bits",
        "Harbor Freight",
        "RockAuto",
    ]
    assert [s.name for s in stores.list_stores("Tools")] == ["Harbor Freight"]

    categories = stores.store_categories()
    assert "Custom Label" in categories
    assert "Fluids & Chemicals" in categories
    assert categories == sorted(categories)


def test_concurrent_duplicate_name_maps_to_conflict(mechanic, store, monkeypatch):
    """A name claimed between the check and the insert is still a DuplicateName."""

    monkeypatch.setattr(stores, "_name_taken", lambda name: False)

    with pytest.raises(DuplicateName):
        stores.submit_store(mechanic, "RockAuto", "https://rockauto.example")
    assert [s.name for s in stores.list_stores()] == ["RockAuto"]


def test_search_matches_names_case_insensitively(mechanic, store):
    stores.submit_store(mechanic, "Parts 100%", "https://parts100.example")

    assert stores.search_stores("rock") == [store]
    assert [s.name for s in stores.search_stores("%")] == ["Parts 100%"]
    with pytest.raises(ValidationError):
        stores.search_stores("   ")
