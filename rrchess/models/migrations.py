"""
Record-shape migrations for data coming from the previous store.

The old store kept rows under two naming conventions at once (``game_link``
next to ``gameLink``, ``lichess_url`` next to ``lichessUrl``) and had no
notion of a tournament creator. Every legacy record goes through one of the
``upgrade_*`` functions below before it reaches the ORM, so the rest of the
code base only ever sees the current shape.

Version history:

1. camelCase/snake_case mix, no ``schema_version`` key.
2. snake_case only, explicit ``schema_version``, game links validated.
"""
import logging
from typing import Any, Dict, Optional

from rrchess.core.config import settings
from rrchess.core.constants import game_link_pattern

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2

Record = Dict[str, Any]


def _first(record: Record, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return default


def record_version(record: Record) -> int:
    return int(record.get("schema_version") or 1)


def _check_version(record: Record) -> int:
    version = record_version(record)
    if version > CURRENT_SCHEMA_VERSION:
        raise ValueError(f"Unsupported schema version {version} (newest known is {CURRENT_SCHEMA_VERSION})")
    return version


def _clean_game_link(link: Optional[str], match_id: Any) -> Optional[str]:
    if not link:
        return None
    if not game_link_pattern(settings.LICHESS_HOST).match(link):
        logger.warning("Dropping invalid game link %r on legacy match %s", link, match_id)
        return None
    return link


def _upgrade_challenge_settings(settings: Optional[Record]) -> Optional[Record]:
    if not settings:
        return None
    upgraded = dict(settings)
    if "timeControl" in upgraded:
        upgraded["time_control"] = upgraded.pop("timeControl")
    return upgraded


def upgrade_player_record(record: Record) -> Record:
    _check_version(record)
    player_id = str(_first(record, "id", "lichess_username", "lichessUsername", default="")).strip().lower()
    return {
        "id": player_id,
        "name": _first(record, "name", default=player_id),
        "lichess_url": _first(record, "lichess_url", "lichessUrl"),
        "schema_version": CURRENT_SCHEMA_VERSION,
    }


def upgrade_match_record(record: Record) -> Record:
    version = _check_version(record)
    game_link = _first(record, "game_link", "gameLink")
    if version < 2:
        game_link = _clean_game_link(game_link, record.get("id"))
    return {
        "id": record.get("id"),
        "tournament_id": _first(record, "tournament_id", "tournamentId"),
        "round": int(_first(record, "round", default=0)),
        "white": str(record["white"]).strip().lower(),
        "black": str(record["black"]).strip().lower(),
        "result": record.get("result") or None,
        "game_link": game_link,
        "schema_version": CURRENT_SCHEMA_VERSION,
    }


def upgrade_tournament_record(record: Record) -> Record:
    _check_version(record)
    player_ids = _first(record, "player_ids", "playerIds", "players", default=[])
    # v1 exports sometimes embedded whole player objects
    player_ids = [
        str(p["id"] if isinstance(p, dict) else p).strip().lower()
        for p in player_ids
    ]
    creator_id = _first(record, "creator_id", "creatorId")
    return {
        "id": str(record["id"]),
        "name": record.get("name") or "Untitled tournament",
        "creator_id": creator_id.lower() if creator_id else None,
        "created_at": _first(record, "created_at", "createdAt"),
        "rounds": int(_first(record, "rounds", default=1)),
        "player_ids": player_ids,
        "challenge_settings": _upgrade_challenge_settings(
            _first(record, "challenge_settings", "challengeSettings")
        ),
        "schema_version": CURRENT_SCHEMA_VERSION,
    }
