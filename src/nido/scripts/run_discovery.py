"""
Script para armar el feed de discovery de un usuario.

Carga perfiles desde un JSON (o desde el backend configurado),
opcionalmente reproduce swipes y muestra el feed rankeado.

Uso:
    python -m nido.scripts.run_discovery --profiles perfiles.json --viewer u1
    python -m nido.scripts.run_discovery --profiles perfiles.json --viewer u1 \
        --swipes swipes.json --min-score 60 --limit 5
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
from pydantic import TypeAdapter

from nido.config import get_settings
from nido.database import InMemoryProfileStore
from nido.matching import MatchingService
from nido.models import DiscoveryFilters, DiscoveryPage, Profile

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

_PROFILES_ADAPTER = TypeAdapter(list[Profile])


def load_profiles(path: Path) -> list[Profile]:
    """Lee una lista de perfiles desde un archivo JSON."""
    return _PROFILES_ADAPTER.validate_json(path.read_bytes())


def build_service(profiles_path: Optional[Path]) -> MatchingService:
    if profiles_path is None:
        return MatchingService.from_settings(settings)
    store = InMemoryProfileStore(load_profiles(profiles_path))
    return MatchingService(profiles=store, settings=settings)


def replay_swipes(service: MatchingService, path: Path) -> int:
    """Reproduce swipes [{actor_id, target_id, action}]; devuelve la cantidad de matches."""
    matches = 0
    for entry in json.loads(path.read_text(encoding="utf-8")):
        result = service.swipe(entry["actor_id"], entry["target_id"], entry["action"])
        if result.is_mutual and result.match.matched_at == result.record.created_at:
            matches += 1
            print(f"  match: {result.match.user_a_id} <-> {result.match.user_b_id} "
                  f"({result.match.compatibility_score})")
    return matches


def print_feed(page: DiscoveryPage) -> None:
    print(f"\n=== FEED ({len(page.candidates)} de {page.total_eligible}) ===")
    for position, candidate in enumerate(page.candidates, start=1):
        c = candidate.compatibility
        print(
            f"{position:>2}. {candidate.profile_id:<20} overall={c.overall:>3} "
            f"lifestyle={c.lifestyle} budget={c.budget} location={c.location} "
            f"prefs={c.preferences} deal_breakers={c.deal_breakers} "
            f"interests={c.interests} age={c.age}"
        )
    if page.has_more:
        print("... hay más candidatos")


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Feed de discovery para un usuario")
    parser.add_argument("--viewer", required=True, help="ID del perfil que busca")
    parser.add_argument("--profiles", type=Path, help="JSON con la lista de perfiles")
    parser.add_argument("--swipes", type=Path, help="JSON con swipes a reproducir")
    parser.add_argument("--limit", type=int, default=None, help="Tamaño del feed")
    parser.add_argument("--min-score", type=int, default=0, help="Compatibilidad mínima")
    parser.add_argument(
        "--verified-only", action="store_true", help="Solo perfiles verificados"
    )
    args = parser.parse_args()

    try:
        service = build_service(args.profiles)

        if args.swipes:
            total = replay_swipes(service, args.swipes)
            logger.info("Swipes reproducidos", matches=total)

        filters = DiscoveryFilters(
            age_range=service.ranker.default_filters().age_range,
            min_compatibility_score=args.min_score,
            require_verified=args.verified_only,
        )
        page = service.discover_for_user(args.viewer, filters=filters, limit=args.limit)
        print_feed(page)
        sys.exit(0)

    except KeyboardInterrupt:
        logger.info("Discovery interrumpido por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en discovery", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
