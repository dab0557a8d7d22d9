"""
Import and export of whole tournament stores as JSON.

An export is a single object ``{"players": [...], "tournaments": [...],
"matches": [...]}``. Records may use the legacy field names; they are
upgraded by ``rrchess.models.migrations`` before anything is written, and
the whole import is one transaction.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from rrchess.core.exceptions import ValidationError
from rrchess.json_utils import read_json_file, write_json_file
from rrchess.models import match as match_model
from rrchess.models import player as player_model
from rrchess.models import tournament as tournament_model
from rrchess.models.migrations import (
    CURRENT_SCHEMA_VERSION,
    upgrade_match_record,
    upgrade_player_record,
    upgrade_tournament_record,
)
from rrchess.schemas.challenge_schemas import ChallengeSettings
from rrchess.services import tournament_service
from rrchess.services.fixture_service import validate_roster
from rrchess.services.player_service import lichess_profile_url
from rrchess.services.tournament_state import validate_result

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    players: int = 0
    tournaments: int = 0
    matches: int = 0
    skipped: List[str] = field(default_factory=list)


def _parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _legacy_id_key(record: Dict):
    # the old store ordered matches by their numeric id
    try:
        return (0, int(record.get("id")))
    except (TypeError, ValueError):
        return (1, str(record.get("id")))


def _skip(report: ImportReport, reason: str) -> None:
    logger.warning("Import: skipping %s", reason)
    report.skipped.append(reason)


def _import_players(db: Session, records: List[Dict], report: ImportReport) -> None:
    for raw in records:
        try:
            record = upgrade_player_record(raw)
        except ValueError as e:
            _skip(report, f"unreadable player record {raw!r}: {e}")
            continue
        if not record["id"]:
            _skip(report, f"player without a username: {raw!r}")
            continue
        db_player = db.get(player_model.Player, record["id"])
        if db_player is None:
            db.add(player_model.Player(
                id=record["id"],
                name=record["name"],
                lichess_url=record["lichess_url"] or lichess_profile_url(record["id"]),
            ))
            db.flush()
            report.players += 1
        else:
            db_player.name = record["name"]


def _ensure_players(db: Session, player_ids: List[str], report: ImportReport) -> None:
    for player_id in player_ids:
        if db.get(player_model.Player, player_id) is None:
            db.add(player_model.Player(id=player_id, name=player_id, lichess_url=lichess_profile_url(player_id)))
            db.flush()
            report.players += 1


def _build_tournament(record: Dict, report: ImportReport) -> Optional[tournament_model.Tournament]:
    try:
        validate_roster(record["player_ids"], record["rounds"])
    except ValidationError as e:
        _skip(report, f"tournament {record['id']}: {e.detail}")
        return None

    challenge_settings = record["challenge_settings"]
    if challenge_settings is not None:
        try:
            challenge_settings = ChallengeSettings.model_validate(challenge_settings).model_dump(mode="json")
        except ValueError as e:
            logger.warning("Import: dropping invalid challenge settings of tournament %s: %s", record["id"], e)
            challenge_settings = None

    return tournament_model.Tournament(
        id=record["id"],
        name=record["name"],
        creator_id=record["creator_id"],
        created_at=_parse_timestamp(record["created_at"]) or tournament_model.utcnow(),
        rounds=record["rounds"],
        player_ids=record["player_ids"],
        challenge_settings=challenge_settings,
        is_complete=False,
        schema_version=CURRENT_SCHEMA_VERSION,
    )


def _build_match(record: Dict, db_tournament: tournament_model.Tournament,
                 report: ImportReport) -> Optional[match_model.Match]:
    if record["white"] == record["black"]:
        _skip(report, f"match {record['id']}: a player cannot play themselves")
        return None
    roster = set(db_tournament.player_ids)
    if record["white"] not in roster or record["black"] not in roster:
        _skip(report, f"match {record['id']}: player not registered in tournament {db_tournament.id}")
        return None
    result = record["result"]
    try:
        result = validate_result(result)
    except ValidationError:
        logger.warning("Import: clearing invalid result %r of match %s", result, record["id"])
        result = None
    return match_model.Match(
        round=record["round"],
        white=record["white"],
        black=record["black"],
        result=result,
        game_link=record["game_link"],
    )


def import_export(db: Session, filepath: str) -> ImportReport:
    data = read_json_file(filepath, default={})
    if not isinstance(data, dict):
        raise ValidationError(f"{filepath} must contain a JSON object")

    report = ImportReport()
    _import_players(db, data.get("players") or [], report)

    imported: Dict[str, tournament_model.Tournament] = {}
    for raw in data.get("tournaments") or []:
        try:
            record = upgrade_tournament_record(raw)
        except (KeyError, ValueError) as e:
            _skip(report, f"unreadable tournament record {raw!r}: {e}")
            continue
        if record["id"] in imported or db.get(tournament_model.Tournament, record["id"]) is not None:
            _skip(report, f"tournament {record['id']}: already exists")
            continue
        db_tournament = _build_tournament(record, report)
        if db_tournament is None:
            continue
        _ensure_players(db, db_tournament.player_ids, report)
        db.add(db_tournament)
        imported[db_tournament.id] = db_tournament
        report.tournaments += 1

    for raw in sorted(data.get("matches") or [], key=_legacy_id_key):
        try:
            record = upgrade_match_record(raw)
        except (KeyError, ValueError) as e:
            _skip(report, f"unreadable match record {raw!r}: {e}")
            continue
        db_tournament = imported.get(str(record["tournament_id"]))
        if db_tournament is None:
            _skip(report, f"match {record['id']}: no imported tournament {record['tournament_id']!r}")
            continue
        db_match = _build_match(record, db_tournament, report)
        if db_match is not None:
            db_tournament.matches.append(db_match)
            report.matches += 1

    for db_tournament in imported.values():
        tournament_service.refresh_completion(db, db_tournament)
    tournament_service.commit_or_rollback(db)

    logger.info(
        "Imported %d players, %d tournaments, %d matches from %s (%d records skipped)",
        report.players, report.tournaments, report.matches, filepath, len(report.skipped),
    )
    return report


def export_store(db: Session, filepath: str) -> None:
    """Writes every player, tournament and match in the current record shape."""
    players = [
        {"id": p.id, "name": p.name, "lichess_url": p.lichess_url, "schema_version": CURRENT_SCHEMA_VERSION}
        for p in db.query(player_model.Player).order_by(player_model.Player.id)
    ]
    tournaments = []
    matches = []
    for t in tournament_service.list_tournaments(db):
        tournaments.append({
            "id": t.id,
            "name": t.name,
            "creator_id": t.creator_id,
            "created_at": t.created_at.isoformat() if t.created_at else None,
            "rounds": t.rounds,
            "player_ids": list(t.player_ids),
            "challenge_settings": t.challenge_settings,
            "is_complete": t.is_complete,
            "schema_version": CURRENT_SCHEMA_VERSION,
        })
        for m in t.matches:
            matches.append({
                "id": m.id,
                "tournament_id": t.id,
                "round": m.round,
                "white": m.white,
                "black": m.black,
                "result": m.result,
                "game_link": m.game_link,
                "schema_version": CURRENT_SCHEMA_VERSION,
            })
    write_json_file(filepath, {"players": players, "tournaments": tournaments, "matches": matches})
    logger.info("Exported %d tournaments to %s", len(tournaments), filepath)
