from typing import Optional

from pydantic import BaseModel, Field


class PlayerCreate(BaseModel):
    lichess_username: str = Field(..., min_length=1, description="Lichess username, case-insensitive")
    name: Optional[str] = Field(None, description="Display name, defaults to the username")


class PlayerRead(BaseModel):
    id: str
    name: str
    lichess_url: str

    class Config:
        from_attributes = True
