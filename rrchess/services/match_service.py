import logging

from sqlalchemy.orm import Session

from rrchess.core.exceptions import NotFoundError, ValidationError
from rrchess.models import match as match_model
from rrchess.schemas import challenge_schemas, match_schemas
from rrchess.services import tournament_service
from rrchess.services.lichess_service import ChallengeIssuer
from rrchess.services.player_service import normalize_player_id
from rrchess.services.tournament_state import (
    ensure_can_challenge,
    ensure_can_edit_matches,
    validate_game_link,
    validate_result,
)

logger = logging.getLogger(__name__)


def get_match(db: Session, match_id: int) -> match_model.Match:
    db_match = db.get(match_model.Match, match_id)
    if not db_match:
        raise NotFoundError("Match not found")
    return db_match


def update_match(db: Session, match_id: int, match_update: match_schemas.MatchUpdate, current_user_id: str) -> match_model.Match:
    """
    Sets the result and/or game link of a match and refreshes the tournament's
    completion flag in the same transaction.

    Checks run in order: the match exists (404), the caller may edit it (403),
    then the new values are valid (400).
    """
    db_match = get_match(db, match_id)
    # serializes all writes to this tournament's matches
    db_tournament = tournament_service.get_tournament_for_update(db, db_match.tournament_id)
    ensure_can_edit_matches(db_tournament, current_user_id)

    update_data = match_update.model_dump(exclude_unset=True)
    if not update_data:
        raise ValidationError("Nothing to update: provide a result and/or a game link")
    if "result" in update_data:
        update_data["result"] = validate_result(update_data["result"])
    if "game_link" in update_data:
        update_data["game_link"] = validate_game_link(update_data["game_link"])

    for key, value in update_data.items():
        setattr(db_match, key, value)
    tournament_service.refresh_completion(db, db_tournament)
    tournament_service.commit_or_rollback(db)
    db.refresh(db_match)

    logger.info(
        "Match %s (%s vs %s) updated by %s: %s",
        db_match.id, db_match.white, db_match.black, current_user_id, update_data,
    )
    return db_match


async def issue_challenge(db: Session, match_id: int, current_user_id: str, token: str,
                          challenger: ChallengeIssuer) -> challenge_schemas.ChallengeResponse:
    """
    Challenges the opponent of ``current_user_id`` in this match on Lichess,
    with the colours of the fixture and the tournament's challenge settings,
    then records the new game as the match's game link.
    """
    db_match = get_match(db, match_id)
    ensure_can_challenge(db_match, current_user_id)

    player_id = normalize_player_id(current_user_id)
    if player_id == db_match.white:
        color, opponent = "white", db_match.black
    else:
        color, opponent = "black", db_match.white

    raw_settings = db_match.tournament.challenge_settings
    settings = (
        challenge_schemas.ChallengeSettings.model_validate(raw_settings)
        if raw_settings
        else challenge_schemas.ChallengeSettings()
    )

    url = await challenger.create_challenge(token, opponent, color, settings)
    logger.info("Match %s: %s challenged %s as %s, game %s", db_match.id, player_id, opponent, color, url)

    update_match(db, match_id, match_schemas.MatchUpdate(game_link=url), current_user_id)
    return challenge_schemas.ChallengeResponse(url=url, opponent=opponent, color=color)
