from typing import Optional

from pydantic import BaseModel


class MatchRead(BaseModel):
    id: int
    tournament_id: str
    round: int
    white: str
    black: str
    result: Optional[str] = None
    game_link: Optional[str] = None

    class Config:
        from_attributes = True


class MatchUpdate(BaseModel):
    # Only the fields present in the request body are applied, so an explicit
    # null result clears it while an omitted one leaves it untouched.
    result: Optional[str] = None
    game_link: Optional[str] = None
