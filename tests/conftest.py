from collections import defaultdict
from datetime import date, datetime, timezone

import pytest

from nido.config import Settings
from nido.database import InMemoryMatchStore, InMemoryProfileStore, InMemorySwipeStore
from nido.matching import CompatibilityScorer, DiscoveryRanker, ScoringConfig, SwipeTracker
from nido.models import Profile

FIXED_NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    return FIXED_NOW


def birth_date_for(age: int) -> date:
    # 1 de enero: el cumpleaños ya pasó respecto de FIXED_NOW
    return date(FIXED_NOW.year - age, 1, 1)


def make_profile(profile_id: str, age: int | None = None, **fields) -> Profile:
    data = {"id": profile_id, **fields}
    if age is not None:
        data["birth_date"] = birth_date_for(age)
    return Profile.model_validate(data)


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def config():
    return ScoringConfig()


@pytest.fixture
def scorer(config):
    return CompatibilityScorer(config, clock=fixed_clock)


@pytest.fixture
def ranker(scorer, settings):
    return DiscoveryRanker(scorer, settings)


@pytest.fixture
def profile_store():
    return InMemoryProfileStore()


@pytest.fixture
def tracker(scorer, profile_store):
    return SwipeTracker(
        scorer,
        profile_store,
        InMemorySwipeStore(),
        InMemoryMatchStore(),
        clock=fixed_clock,
    )


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Imitación mínima del query builder de PostgREST sobre listas de dicts."""

    def __init__(self, rows: list):
        self._rows = rows
        self._op = "select"
        self._payload = None
        self._filters = []
        self._limit = None
        self._order = None
        self._on_conflict = ""
        self._ignore_duplicates = False

    def select(self, *_columns):
        self._op = "select"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def insert(self, data):
        self._op, self._payload = "insert", data
        return self

    def upsert(self, data, on_conflict="", ignore_duplicates=False):
        self._op, self._payload = "upsert", data
        self._on_conflict = on_conflict
        self._ignore_duplicates = ignore_duplicates
        return self

    def update(self, data):
        self._op, self._payload = "update", data
        return self

    def _matching(self):
        return [row for row in self._rows if all(f(row) for f in self._filters)]

    def execute(self):
        if self._op == "insert":
            self._rows.append(dict(self._payload))
            return FakeResponse([dict(self._payload)])

        if self._op == "upsert":
            keys = [k for k in self._on_conflict.split(",") if k]
            for row in self._rows:
                if keys and all(row.get(k) == self._payload.get(k) for k in keys):
                    if self._ignore_duplicates:
                        return FakeResponse([])
                    row.update(self._payload)
                    return FakeResponse([dict(row)])
            self._rows.append(dict(self._payload))
            return FakeResponse([dict(self._payload)])

        if self._op == "update":
            matched = self._matching()
            for row in matched:
                row.update(self._payload)
            return FakeResponse([dict(row) for row in matched])

        rows = self._matching()
        if self._order is not None:
            column, desc = self._order
            rows = sorted(rows, key=lambda row: row.get(column), reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        return FakeResponse([dict(row) for row in rows])


class FakeSupabase:
    """Reemplaza a SupabaseClient en los tests de repositorios."""

    def __init__(self):
        self.tables = defaultdict(list)

    def table(self, name: str):
        return FakeQuery(self.tables[name])


@pytest.fixture
def fake_supabase():
    return FakeSupabase()
