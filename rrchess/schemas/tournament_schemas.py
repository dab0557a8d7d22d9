from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from rrchess.core.constants import TOURNAMENT_TYPE_ROUND_ROBIN
from rrchess.schemas.challenge_schemas import ChallengeSettings
from rrchess.schemas.match_schemas import MatchRead
from rrchess.schemas.player_schemas import PlayerCreate, PlayerRead
from rrchess.schemas.standings_schemas import PlayerStandingRead
from rrchess.services.tournament_state import TournamentState


class TournamentCreate(BaseModel):
    # Player count, round count and duplicates are checked by the service so
    # that they are reported as validation errors rather than schema errors.
    name: str = Field(..., description="Name of the tournament")
    type: str = Field(TOURNAMENT_TYPE_ROUND_ROBIN, description="Only round-robin is supported")
    rounds: int = Field(..., description="How many times every pair meets (1-4)")
    players: List[PlayerCreate]
    challenge_settings: Optional[ChallengeSettings] = None


class TournamentSummary(BaseModel):
    id: str
    name: str
    creator_id: Optional[str] = None
    created_at: datetime
    rounds: int
    player_ids: List[str]
    challenge_settings: Optional[ChallengeSettings] = None
    is_complete: bool

    class Config:
        from_attributes = True


class TournamentRead(TournamentSummary):
    state: TournamentState
    players: List[PlayerRead]
    matches: List[MatchRead]
    standings: List[PlayerStandingRead]
