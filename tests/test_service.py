import json
import sys

import pytest

from conftest import fixed_clock, make_profile
from nido.config import Settings, get_settings
from nido.database import InMemoryProfileStore
from nido.database.supabase_client import get_supabase_client
from nido.exceptions import InvalidInputError, ProfileNotFoundError
from nido.matching import MatchingService, ScoringConfig


@pytest.fixture
def service(settings):
    store = InMemoryProfileStore(
        [
            make_profile("a", age=25, location={"city": "Austin"}),
            make_profile("b", age=31, location={"city": "Austin"}),
            make_profile("c", age=26),
        ]
    )
    return MatchingService(profiles=store, clock=fixed_clock, settings=settings)


def test_end_to_end_like_then_like(service):
    first = service.swipe("a", "b", "like")
    second = service.swipe("b", "a", "like")

    assert first.is_mutual is False
    assert second.is_mutual is True
    assert {second.match.user_a_id, second.match.user_b_id} == {"a", "b"}


def test_discover_for_user_hides_already_swiped(service):
    service.swipe("a", "b", "pass")

    page = service.discover_for_user("a")
    everyone = service.discover_for_user("a", exclude_swiped=False)

    assert [c.profile_id for c in page.candidates] == ["c"]
    assert {c.profile_id for c in everyone.candidates} == {"b", "c"}


def test_discover_for_unknown_viewer(service):
    with pytest.raises(ProfileNotFoundError):
        service.discover_for_user("nobody")


def test_score_and_weights_are_exposed(service):
    a, b = service.profiles.get("a"), service.profiles.get("b")
    before = service.score(a, b)

    service.set_weights(location=0.30, budget=0.05)

    assert service.get_weights().location == 0.30
    assert service.score(a, b).overall > before.overall
    assert service.discover(a, [a, b], limit=1).candidates[0].profile_id == "b"


def test_settings_defaults(settings):
    assert settings.store_backend == "memory"
    assert settings.discovery_default_limit == 10
    assert ScoringConfig.from_settings(settings).get_weights().lifestyle == 0.25


def test_weights_from_settings_must_sum_to_one():
    settings = Settings(_env_file=None, weight_age=0.5)

    with pytest.raises(InvalidInputError):
        ScoringConfig.from_settings(settings)


def test_from_settings_memory_backend(settings):
    service = MatchingService.from_settings(settings)

    assert isinstance(service.profiles, InMemoryProfileStore)


def test_from_settings_rejects_unknown_backend():
    with pytest.raises(ValueError):
        MatchingService.from_settings(Settings(_env_file=None, store_backend="redis"))


def test_supabase_backend_requires_credentials(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_KEY", raising=False)
    monkeypatch.setenv("STORE_BACKEND", "supabase")
    get_settings.cache_clear()
    get_supabase_client.cache_clear()
    try:
        with pytest.raises(ValueError):
            MatchingService.from_settings(Settings(_env_file=None))
    finally:
        get_settings.cache_clear()
        get_supabase_client.cache_clear()


def test_run_discovery_script(tmp_path, monkeypatch, capsys):
    from nido.scripts import run_discovery

    profiles = [
        make_profile("a", age=25, location={"city": "Austin"}).model_dump(mode="json"),
        make_profile("b", age=31, location={"city": "Austin"}).model_dump(mode="json"),
        make_profile("c", age=40).model_dump(mode="json"),
    ]
    swipes = [
        {"actor_id": "a", "target_id": "c", "action": "like"},
        {"actor_id": "c", "target_id": "a", "action": "like"},
    ]
    profiles_path = tmp_path / "perfiles.json"
    swipes_path = tmp_path / "swipes.json"
    profiles_path.write_text(json.dumps(profiles), encoding="utf-8")
    swipes_path.write_text(json.dumps(swipes), encoding="utf-8")

    monkeypatch.setattr(
        sys,
        "argv",
        ["run_discovery", "--profiles", str(profiles_path), "--viewer", "a",
         "--swipes", str(swipes_path)],
    )

    with pytest.raises(SystemExit) as exc_info:
        run_discovery.main()

    out = capsys.readouterr().out
    assert exc_info.value.code == 0
    assert "match: a <-> c" in out
    assert "FEED (1 de 1)" in out
    assert " b " in out
