from rrchess.core.database import Base, engine

# Import all models here to ensure they are registered with Base
from .player import Player
from .tournament import Tournament
from .match import Match


def create_tables():
    Base.metadata.create_all(bind=engine)
