"""
Stores de perfiles, swipes y matches.

Define las interfaces que usa el tracker y sus implementaciones en
memoria. Las implementaciones sobre Supabase están en repositories.py.
"""

import threading
from collections import defaultdict
from typing import Iterable, Optional, Protocol

from nido.models import MutualMatch, Profile, SwipeRecord


class ProfileStore(Protocol):
    """Resuelve perfiles por id."""

    def get(self, profile_id: str) -> Optional[Profile]: ...

    def list_all(self) -> list[Profile]: ...


class SwipeStore(Protocol):
    """Historial append-only de swipes."""

    def append(self, record: SwipeRecord) -> SwipeRecord: ...

    def has_interest(self, actor_id: str, target_id: str) -> bool: ...

    def list_by_actor(self, actor_id: str) -> list[SwipeRecord]: ...

    def list_by_target(self, target_id: str) -> list[SwipeRecord]: ...


class MatchStore(Protocol):
    """Matches mutuos, a lo sumo uno por par."""

    def get(self, pair_key: str) -> Optional[MutualMatch]: ...

    def add_if_absent(self, match: MutualMatch) -> MutualMatch: ...

    def list_for_user(self, user_id: str) -> list[MutualMatch]: ...

    def set_active(self, pair_key: str, is_active: bool) -> Optional[MutualMatch]: ...


class InMemoryProfileStore:
    """Perfiles en un dict; útil para tests y para el script de discovery."""

    def __init__(self, profiles: Iterable[Profile] = ()):
        self._lock = threading.Lock()
        self._profiles: dict[str, Profile] = {}
        for profile in profiles:
            self.put(profile)

    def put(self, profile: Profile) -> None:
        with self._lock:
            self._profiles[profile.id] = profile

    def get(self, profile_id: str) -> Optional[Profile]:
        with self._lock:
            return self._profiles.get(profile_id)

    def list_all(self) -> list[Profile]:
        with self._lock:
            return list(self._profiles.values())


class InMemorySwipeStore:
    """
    Historial de swipes en memoria.

    Indexa por actor y por target; cada append es O(1) bajo un lock
    corto, así que pares distintos no se bloquean entre sí más allá
    de ese instante.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._by_actor: dict[str, list[SwipeRecord]] = defaultdict(list)
        self._by_target: dict[str, list[SwipeRecord]] = defaultdict(list)
        self._interest: set[tuple[str, str]] = set()

    def append(self, record: SwipeRecord) -> SwipeRecord:
        with self._lock:
            self._by_actor[record.actor_id].append(record)
            self._by_target[record.target_id].append(record)
            if record.action.is_interest:
                self._interest.add((record.actor_id, record.target_id))
        return record

    def has_interest(self, actor_id: str, target_id: str) -> bool:
        with self._lock:
            return (actor_id, target_id) in self._interest

    def list_by_actor(self, actor_id: str) -> list[SwipeRecord]:
        with self._lock:
            return list(self._by_actor.get(actor_id, []))

    def list_by_target(self, target_id: str) -> list[SwipeRecord]:
        with self._lock:
            return list(self._by_target.get(target_id, []))


class InMemoryMatchStore:
    """Matches mutuos indexados por pair_key."""

    def __init__(self):
        self._lock = threading.Lock()
        self._matches: dict[str, MutualMatch] = {}

    def get(self, pair_key: str) -> Optional[MutualMatch]:
        with self._lock:
            return self._matches.get(pair_key)

    def add_if_absent(self, match: MutualMatch) -> MutualMatch:
        """Inserta el match salvo que el par ya tenga uno; devuelve el almacenado."""
        with self._lock:
            existing = self._matches.get(match.pair_key)
            if existing is not None:
                return existing
            self._matches[match.pair_key] = match
            return match

    def list_for_user(self, user_id: str) -> list[MutualMatch]:
        with self._lock:
            matches = [m for m in self._matches.values() if user_id in m.participants]
        return sorted(matches, key=lambda m: m.matched_at)

    def set_active(self, pair_key: str, is_active: bool) -> Optional[MutualMatch]:
        with self._lock:
            existing = self._matches.get(pair_key)
            if existing is None:
                return None
            updated = existing.model_copy(update={"is_active": is_active})
            self._matches[pair_key] = updated
            return updated
