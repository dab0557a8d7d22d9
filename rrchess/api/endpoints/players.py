from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from rrchess.api.dependencies import get_db
from rrchess.schemas import player_schemas
from rrchess.services import player_service

router = APIRouter()


@router.get("", response_model=List[player_schemas.PlayerRead])
async def list_players_endpoint(db: Session = Depends(get_db)):
    return player_service.list_players(db=db)
