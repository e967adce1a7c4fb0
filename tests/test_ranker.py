from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from conftest import FIXED_NOW, make_profile
from nido.exceptions import InvalidInputError
from nido.matching import passes_hard_filters
from nido.models import AgeRange, BudgetRange, DiscoveryFilters


@pytest.fixture
def viewer():
    return make_profile(
        "viewer",
        age=28,
        location={"city": "Austin", "state": "TX"},
        interests=["Music", "Hiking"],
        roommate={"budget_range": {"min": 1000, "max": 1500}},
    )


def _ids(page):
    return [c.profile_id for c in page.candidates]


def test_viewer_is_never_in_own_feed(ranker, viewer):
    page = ranker.discover(viewer, [viewer, make_profile("a")])

    assert _ids(page) == ["a"]


@pytest.mark.parametrize(
    "filters,kept,dropped",
    [
        (
            DiscoveryFilters(age_range=AgeRange(min=25, max=30)),
            [make_profile("in", age=27), make_profile("unknown")],
            [make_profile("old", age=40), make_profile("young", age=20)],
        ),
        (
            DiscoveryFilters(budget_range=BudgetRange(min=1000, max=1500)),
            [make_profile("in", roommate={"budget_range": {"min": 1400, "max": 1800}})],
            [make_profile("out", roommate={"budget_range": {"min": 1600, "max": 2000}})],
        ),
        (
            DiscoveryFilters(genders={"female"}),
            [make_profile("in", gender="female"), make_profile("unknown")],
            [make_profile("out", gender="male")],
        ),
        (
            DiscoveryFilters(housing_types={"studio"}),
            [make_profile("in", roommate={"housing_types": ["studio", "house"]})],
            [make_profile("out", roommate={"housing_types": ["house"]})],
        ),
        (
            DiscoveryFilters(require_photos=True),
            [make_profile("in", photo_count=2)],
            [make_profile("out", photo_count=0)],
        ),
        (
            DiscoveryFilters(require_verified=True),
            [make_profile("in", is_verified=True)],
            [make_profile("out")],
        ),
    ],
)
def test_hard_filters(ranker, viewer, filters, kept, dropped):
    page = ranker.discover(viewer, kept + dropped, filters, limit=10)

    assert set(_ids(page)) == {p.id for p in kept}


def test_budget_filter_skips_other_currencies(ranker, viewer):
    filters = DiscoveryFilters(budget_range=BudgetRange(min=1000, max=1500, currency="USD"))
    pool = [
        make_profile("eur", roommate={"budget_range": {"min": 1600, "max": 2000, "currency": "EUR"}}),
        make_profile("usd_lower", roommate={"budget_range": {"min": 1200, "max": 1400, "currency": "usd"}}),
        make_profile("usd_out", roommate={"budget_range": {"min": 1600, "max": 2000}}),
    ]

    page = ranker.discover(viewer, pool, filters, limit=10)

    assert set(_ids(page)) == {"eur", "usd_lower"}
    eur = next(c for c in page.candidates if c.profile_id == "eur")
    assert eur.compatibility.budget == 50


def test_returned_candidates_satisfy_filters_and_min_score(ranker, viewer):
    pool = [
        make_profile(
            f"p{i}",
            age=18 + i * 3,
            gender=["male", "female", "non-binary"][i % 3],
            location={"city": ["Austin", "Dallas", "Boston"][i % 3], "state": "TX"},
            photo_count=i % 2,
            is_verified=i % 4 == 0,
            interests=["Music"] if i % 2 else ["Chess"],
            roommate={"budget_range": {"min": 800 + i * 50, "max": 1200 + i * 80}},
        )
        for i in range(20)
    ]
    filters = DiscoveryFilters(
        age_range=AgeRange(min=20, max=50),
        budget_range=BudgetRange(min=900, max=1600),
        genders={"female", "non-binary"},
        min_compatibility_score=60,
        require_photos=True,
    )

    page = ranker.discover(viewer, pool, filters, limit=50)

    assert page.candidates
    for candidate in page.candidates:
        assert passes_hard_filters(candidate.profile, filters, FIXED_NOW.date())
        assert candidate.score >= 60


def test_candidates_below_min_score_are_dropped(ranker, viewer):
    pool = [make_profile("a"), make_profile("b", location={"city": "Austin"})]

    # "a" no aporta datos y queda en 55; "b" comparte ciudad
    page = ranker.discover(viewer, pool, DiscoveryFilters(min_compatibility_score=60))

    assert _ids(page) == ["b"]
    assert page.total_eligible == 1


def test_feed_sorted_by_score_then_id(ranker, viewer):
    pool = [
        make_profile("c"),
        make_profile("a"),
        make_profile("best", location={"city": "Austin"}, interests=["Music"]),
        make_profile("b"),
    ]

    page = ranker.discover(viewer, pool, limit=10)

    assert _ids(page) == ["best", "a", "b", "c"]
    scores = [c.score for c in page.candidates]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.parametrize("limit,expected_len,expected_more", [(2, 2, True), (5, 5, False), (10, 5, False)])
def test_pagination_invariant(ranker, viewer, limit, expected_len, expected_more):
    pool = [make_profile(f"p{i}") for i in range(5)]

    page = ranker.discover(viewer, pool, limit=limit)

    assert page.total_eligible == 5
    assert len(page.candidates) == expected_len == min(page.total_eligible, limit)
    assert page.has_more is expected_more


def test_default_limit_comes_from_settings(ranker, viewer, settings):
    pool = [make_profile(f"p{i:02d}") for i in range(settings.discovery_default_limit + 3)]

    page = ranker.discover(viewer, pool)

    assert len(page.candidates) == settings.discovery_default_limit
    assert page.has_more


def test_invalid_limit_is_rejected(ranker, viewer):
    with pytest.raises(InvalidInputError):
        ranker.discover(viewer, [make_profile("a")], limit=0)


def test_malformed_filter_ranges_are_rejected():
    with pytest.raises(ValidationError):
        AgeRange(min=40, max=30)
    with pytest.raises(ValueError):
        DiscoveryFilters(budget_range={"min": 2000, "max": 1000})


def test_exclude_ids_and_duplicates(ranker, viewer):
    pool = [make_profile("a"), make_profile("b"), make_profile("a"), make_profile("c")]

    page = ranker.discover(viewer, pool, exclude_ids={"c"})

    assert _ids(page) == ["a", "b"]
    assert page.total_eligible == 2


def test_discover_is_deterministic(ranker, viewer):
    pool = [make_profile(f"p{i}", age=20 + i, interests=["Music"] * (i % 2)) for i in range(8)]

    assert ranker.discover(viewer, pool, limit=3) == ranker.discover(viewer, pool, limit=3)


# -- búsqueda -----------------------------------------------------------------


@pytest.fixture
def search_pool():
    return [
        make_profile("ana", age=30, bio="Chef y fan de la montaña", interests=["Cooking"],
                     updated_at=datetime(2026, 6, 1, tzinfo=timezone.utc)),
        make_profile("beto", age=22, occupation="Sous chef", interests=["Music"],
                     updated_at=datetime(2026, 6, 10, tzinfo=timezone.utc)),
        make_profile("caro", age=26, location={"city": "Chelsea"}, interests=["Art"]),
        make_profile("dani", age=40, bio="Ingeniero", interests=["Chess"],
                     updated_at=datetime(2026, 5, 1)),
    ]


def test_search_matches_text_fields(ranker, viewer, search_pool):
    results = ranker.search(viewer, search_pool, query="CHE")

    assert {c.profile_id for c in results.candidates} == {"ana", "beto", "caro", "dani"}

    results = ranker.search(viewer, search_pool, query="chef")

    assert {c.profile_id for c in results.candidates} == {"ana", "beto"}


def test_search_sorts_by_age(ranker, viewer, search_pool):
    results = ranker.search(viewer, search_pool, sort_by="age", sort_order="asc")

    assert [c.profile_id for c in results.candidates] == ["beto", "caro", "ana", "dani"]


def test_search_sorts_by_recent_with_missing_dates_last(ranker, viewer, search_pool):
    results = ranker.search(viewer, search_pool, sort_by="recent", sort_order="desc")

    assert [c.profile_id for c in results.candidates] == ["beto", "ana", "dani", "caro"]


def test_search_paginates(ranker, viewer, search_pool):
    first = ranker.search(viewer, search_pool, sort_by="age", page=1, page_size=3)
    second = ranker.search(viewer, search_pool, sort_by="age", page=2, page_size=3)

    assert first.total_count == second.total_count == 4
    assert first.has_more is True
    assert second.has_more is False
    assert [c.profile_id for c in second.candidates] == ["beto"]


@pytest.mark.parametrize(
    "kwargs",
    [{"sort_by": "distance"}, {"sort_order": "up"}, {"page": 0}, {"page_size": 0}],
)
def test_search_rejects_invalid_options(ranker, viewer, search_pool, kwargs):
    with pytest.raises(InvalidInputError):
        ranker.search(viewer, search_pool, **kwargs)
