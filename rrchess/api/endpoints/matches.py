from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rrchess.api.dependencies import get_challenge_issuer, get_db
from rrchess.core.security import get_bearer_token, get_current_account
from rrchess.schemas import challenge_schemas, match_schemas
from rrchess.schemas.auth_schemas import LichessAccount
from rrchess.services import match_service
from rrchess.services.lichess_service import ChallengeIssuer

router = APIRouter()


@router.get("/{match_id}", response_model=match_schemas.MatchRead)
async def get_match_endpoint(match_id: int, db: Session = Depends(get_db)):
    return match_service.get_match(db=db, match_id=match_id)


@router.put("/{match_id}", response_model=match_schemas.MatchRead, summary="Record a result or game link")
async def update_match_endpoint(
    match_id: int,
    match_in: match_schemas.MatchUpdate,
    db: Session = Depends(get_db),
    current_account: LichessAccount = Depends(get_current_account),
):
    """
    Any player registered in the tournament may update any of its matches.

    - **result**: "1-0", "0-1", "0.5-0.5", or null to clear it.
    - **game_link**: a Lichess game URL, or "" to clear it.
    """
    return match_service.update_match(db=db, match_id=match_id, match_update=match_in, current_user_id=current_account.id)


@router.post("/{match_id}/challenge", response_model=challenge_schemas.ChallengeResponse, summary="Challenge the opponent on Lichess")
async def challenge_match_endpoint(
    match_id: int,
    db: Session = Depends(get_db),
    token: str = Depends(get_bearer_token),
    current_account: LichessAccount = Depends(get_current_account),
    challenger: ChallengeIssuer = Depends(get_challenge_issuer),
):
    """
    Sends a Lichess challenge from the authenticated player to their opponent
    in this match, using the fixture's colours and the tournament's challenge
    settings. The new game becomes the match's game link.
    """
    return await match_service.issue_challenge(
        db=db, match_id=match_id, current_user_id=current_account.id, token=token, challenger=challenger,
    )
