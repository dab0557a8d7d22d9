from pydantic import BaseModel


class LichessAccount(BaseModel):
    id: str # lower-case, stable
    username: str # as displayed on Lichess
