import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rrchess.core.constants import TOURNAMENT_TYPE_ROUND_ROBIN
from rrchess.core.exceptions import ExternalDependencyError, NotFoundError, ValidationError
from rrchess.models import match as match_model
from rrchess.models import tournament as tournament_model
from rrchess.schemas import match_schemas, player_schemas, standings_schemas, tournament_schemas
from rrchess.services import player_service
from rrchess.services.fixture_service import generate_round_robin_fixtures, validate_roster
from rrchess.services.standings_service import PlayerStanding, calculate_standings
from rrchess.services.tournament_state import TournamentState, derive_state, ensure_can_delete

logger = logging.getLogger(__name__)


def commit_or_rollback(db: Session) -> None:
    """Commits the session; on failure nothing of the transaction is kept."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Database commit failed")
        raise ExternalDependencyError(f"Could not save changes: {e.__class__.__name__}")


def create_tournament(db: Session, tournament_in: tournament_schemas.TournamentCreate, creator_id: str) -> tournament_model.Tournament:
    name = tournament_in.name.strip()
    if not name:
        raise ValidationError("Tournament name is required")
    if tournament_in.type != TOURNAMENT_TYPE_ROUND_ROBIN:
        raise ValidationError("Only round-robin tournaments are supported")

    player_ids = [player_service.normalize_player_id(p.lichess_username) for p in tournament_in.players]
    validate_roster(player_ids, tournament_in.rounds)

    fixtures = generate_round_robin_fixtures(player_ids, tournament_in.rounds)
    player_service.upsert_players(db, tournament_in.players)

    challenge_settings = None
    if tournament_in.challenge_settings is not None:
        challenge_settings = tournament_in.challenge_settings.model_dump(mode="json")

    db_tournament = tournament_model.Tournament(
        name=name,
        creator_id=player_service.normalize_player_id(creator_id),
        rounds=tournament_in.rounds,
        player_ids=player_ids,
        challenge_settings=challenge_settings,
        is_complete=False,
        matches=[
            match_model.Match(round=f.round, white=f.white, black=f.black)
            for f in fixtures
        ],
    )
    db.add(db_tournament)
    # tournament row and its matches go in a single transaction
    commit_or_rollback(db)
    db.refresh(db_tournament)
    logger.info(
        "Created tournament %s (%r) by %s: %d players, %d rounds, %d matches",
        db_tournament.id, name, db_tournament.creator_id, len(player_ids), tournament_in.rounds, len(fixtures),
    )
    return db_tournament


def list_tournaments(db: Session) -> List[tournament_model.Tournament]:
    return (
        db.query(tournament_model.Tournament)
        .order_by(tournament_model.Tournament.created_at.desc())
        .all()
    )


def get_tournament(db: Session, tournament_id: str) -> tournament_model.Tournament:
    db_tournament = db.get(tournament_model.Tournament, tournament_id)
    if not db_tournament:
        raise NotFoundError("Tournament not found")
    return db_tournament


def get_tournament_for_update(db: Session, tournament_id: str) -> tournament_model.Tournament:
    """
    Loads the tournament holding its row lock until the transaction ends.
    Every match write takes this lock first, so completion is recomputed by
    one writer at a time and always sees the results committed before it.
    """
    db_tournament = (
        db.query(tournament_model.Tournament)
        .filter(tournament_model.Tournament.id == tournament_id)
        .with_for_update()
        .populate_existing()
        .one_or_none()
    )
    if not db_tournament:
        raise NotFoundError("Tournament not found")
    return db_tournament


def get_tournament_standings(db: Session, tournament_id: str) -> List[PlayerStanding]:
    db_tournament = get_tournament(db, tournament_id)
    return calculate_standings(db_tournament.player_ids, db_tournament.matches)


def build_tournament_read(db: Session, db_tournament: tournament_model.Tournament) -> tournament_schemas.TournamentRead:
    summary = tournament_schemas.TournamentSummary.model_validate(db_tournament)
    return tournament_schemas.TournamentRead(
        **summary.model_dump(),
        state=derive_state(db_tournament.matches),
        players=[
            player_schemas.PlayerRead.model_validate(p)
            for p in player_service.get_players(db, db_tournament.player_ids)
        ],
        matches=[match_schemas.MatchRead.model_validate(m) for m in db_tournament.matches],
        standings=[
            standings_schemas.PlayerStandingRead.model_validate(s)
            for s in calculate_standings(db_tournament.player_ids, db_tournament.matches)
        ],
    )


def refresh_completion(db: Session, db_tournament: tournament_model.Tournament) -> TournamentState:
    """
    Recomputes the cached ``is_complete`` flag from a fresh query of all the
    tournament's matches. Pending changes are flushed first so the query sees
    them; the caller commits.
    """
    db.flush()
    results = (
        db.query(match_model.Match.result)
        .filter(match_model.Match.tournament_id == db_tournament.id)
        .all()
    )
    state = derive_state(results)
    now_complete = state == TournamentState.COMPLETE
    if db_tournament.is_complete != now_complete:
        logger.info("Tournament %s is now %s", db_tournament.id, state.value)
    db_tournament.is_complete = now_complete
    return state


def delete_tournament(db: Session, tournament_id: str, current_user_id: str) -> None:
    db_tournament = get_tournament(db, tournament_id)
    ensure_can_delete(db_tournament, current_user_id)

    # matches go with it (cascade="all, delete-orphan")
    db.delete(db_tournament)
    commit_or_rollback(db)
    logger.info("Deleted tournament %s by %s", tournament_id, current_user_id)
