from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from rrchess.api.dependencies import get_db
from rrchess.core.security import get_current_account
from rrchess.schemas import standings_schemas, tournament_schemas
from rrchess.schemas.auth_schemas import LichessAccount
from rrchess.services import tournament_service

router = APIRouter()


@router.get("", response_model=List[tournament_schemas.TournamentSummary], summary="List tournaments")
async def list_tournaments_endpoint(db: Session = Depends(get_db)):
    """Every tournament, newest first."""
    return tournament_service.list_tournaments(db=db)


@router.post("", response_model=tournament_schemas.TournamentRead, status_code=status.HTTP_201_CREATED, summary="Create a tournament")
async def create_tournament_endpoint(
    tournament_in: tournament_schemas.TournamentCreate,
    db: Session = Depends(get_db),
    current_account: LichessAccount = Depends(get_current_account),
):
    """
    Creates a round-robin tournament and its complete fixture list, with the
    authenticated Lichess user as its creator.

    - **name**: Name of the tournament.
    - **rounds**: How many times every pair of players meets (1-4).
    - **players**: 2 to 20 distinct Lichess usernames, with optional display names.
    - **challenge_settings** (optional): time control, variant and rules used for challenges.
    """
    tournament = tournament_service.create_tournament(db=db, tournament_in=tournament_in, creator_id=current_account.id)
    return tournament_service.build_tournament_read(db, tournament)


@router.get("/{tournament_id}", response_model=tournament_schemas.TournamentRead, summary="Get a tournament")
async def get_tournament_endpoint(tournament_id: str, db: Session = Depends(get_db)):
    """The tournament with its players, matches, standings and completion state."""
    tournament = tournament_service.get_tournament(db=db, tournament_id=tournament_id)
    return tournament_service.build_tournament_read(db, tournament)


@router.get("/{tournament_id}/standings", response_model=List[standings_schemas.PlayerStandingRead], summary="Get standings")
async def get_standings_endpoint(tournament_id: str, db: Session = Depends(get_db)):
    return tournament_service.get_tournament_standings(db=db, tournament_id=tournament_id)


@router.delete("/{tournament_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a tournament (creator only)")
async def delete_tournament_endpoint(
    tournament_id: str,
    db: Session = Depends(get_db),
    current_account: LichessAccount = Depends(get_current_account),
):
    """Deletes the tournament and all of its matches."""
    tournament_service.delete_tournament(db=db, tournament_id=tournament_id, current_user_id=current_account.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
