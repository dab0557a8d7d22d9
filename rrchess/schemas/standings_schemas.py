from pydantic import BaseModel


class PlayerStandingRead(BaseModel):
    player_id: str
    played: int
    won: int
    drawn: int
    lost: int
    points: float

    class Config:
        from_attributes = True
