from typing import Iterable, List

from sqlalchemy.orm import Session

from rrchess.core.config import settings
from rrchess.models import player as player_model
from rrchess.schemas import player_schemas


def normalize_player_id(username: str) -> str:
    """Lichess usernames are case-insensitive; players are keyed on the lower-cased form."""
    return username.strip().lower()


def lichess_profile_url(username: str) -> str:
    return f"{settings.LICHESS_HOST}/@/{username}"


def list_players(db: Session) -> List[player_model.Player]:
    return db.query(player_model.Player).order_by(player_model.Player.id).all()


def get_players(db: Session, player_ids: Iterable[str]) -> List[player_model.Player]:
    """Returns the known players among ``player_ids``, in the order given."""
    player_ids = list(player_ids)
    if not player_ids:
        return []
    found = db.query(player_model.Player).filter(player_model.Player.id.in_(player_ids)).all()
    by_id = {p.id: p for p in found}
    return [by_id[player_id] for player_id in player_ids if player_id in by_id]


def upsert_players(db: Session, players: List[player_schemas.PlayerCreate]) -> List[str]:
    """
    Registers the given players, refreshing the display name of known ones.
    Does not commit; the caller owns the transaction.
    Returns the normalized player ids in input order.
    """
    player_ids = []
    for player_in in players:
        player_id = normalize_player_id(player_in.lichess_username)
        name = (player_in.name or "").strip() or player_in.lichess_username.strip()
        db_player = db.get(player_model.Player, player_id)
        if db_player is None:
            db_player = player_model.Player(
                id=player_id,
                name=name,
                lichess_url=lichess_profile_url(player_id),
            )
            db.add(db_player)
        elif player_in.name:
            db_player.name = name
        player_ids.append(player_id)
    return player_ids
