from sqlalchemy import Column, String

from rrchess.core.database import Base


class Player(Base):
    __tablename__ = "players"

    # Lower-cased Lichess username
    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    lichess_url = Column(String, nullable=False)
