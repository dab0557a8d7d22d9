from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from rrchess.core.database import Base


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint("white <> black", name="ck_matches_distinct_players"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tournament_id = Column(String, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    round = Column(Integer, nullable=False, default=0) # 0-based
    white = Column(String, nullable=False)
    black = Column(String, nullable=False)
    result = Column(String, nullable=True) # "1-0", "0-1", "0.5-0.5" or NULL when not played yet
    game_link = Column(String, nullable=True)

    tournament = relationship("Tournament", back_populates="matches")
