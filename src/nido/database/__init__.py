"""
Módulo de base de datos.

Provee los stores en memoria y sus equivalentes sobre Supabase.
"""

from nido.database.stores import (
    ProfileStore,
    SwipeStore,
    MatchStore,
    InMemoryProfileStore,
    InMemorySwipeStore,
    InMemoryMatchStore,
)
from nido.database.supabase_client import (
    build_supabase_client,
    get_supabase_client,
    SupabaseClient,
)
from nido.database.repositories import (
    ProfileRepository,
    SwipeRepository,
    MatchRepository,
)

__all__ = [
    # Interfaces
    "ProfileStore",
    "SwipeStore",
    "MatchStore",
    # En memoria
    "InMemoryProfileStore",
    "InMemorySwipeStore",
    "InMemoryMatchStore",
    # Supabase
    "build_supabase_client",
    "get_supabase_client",
    "SupabaseClient",
    "ProfileRepository",
    "SwipeRepository",
    "MatchRepository",
]
