import datetime
import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String
from sqlalchemy.orm import relationship

from rrchess.core.database import Base
from rrchess.models.migrations import CURRENT_SCHEMA_VERSION


def utcnow() -> datetime.datetime:
    # stored naive, in UTC
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    creator_id = Column(String, nullable=True, index=True) # NULL for tournaments imported from the old store
    created_at = Column(DateTime, default=utcnow)
    rounds = Column(Integer, nullable=False)
    player_ids = Column(JSON, nullable=False, default=list) # ordered, registration order
    challenge_settings = Column(JSON, nullable=True)
    is_complete = Column(Boolean, nullable=False, default=False) # cache of the match results, see tournament_state
    schema_version = Column(Integer, nullable=False, default=CURRENT_SCHEMA_VERSION)

    matches = relationship(
        "Match",
        back_populates="tournament",
        cascade="all, delete-orphan",
        order_by="Match.id",
    )
