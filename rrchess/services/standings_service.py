from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from rrchess.core.constants import MatchResult
from rrchess.core.exceptions import ValidationError

_RESULT_SCORES = {
    MatchResult.WHITE_WINS.value: (1.0, 0.0),
    MatchResult.BLACK_WINS.value: (0.0, 1.0),
    MatchResult.DRAW.value: (0.5, 0.5),
}


@dataclass
class PlayerStanding:
    player_id: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    points: float = 0.0


def parse_result(result: Optional[str]) -> Tuple[float, float]:
    """Splits a result string into ``(white_score, black_score)``."""
    try:
        return _RESULT_SCORES[result]
    except (KeyError, TypeError):
        raise ValidationError(f"Invalid result {result!r}, expected one of {', '.join(_RESULT_SCORES)}")


def calculate_standings(player_ids: Sequence[str], matches: Iterable) -> List[PlayerStanding]:
    """
    Folds the decided matches into one standing per player.

    ``matches`` may be ORM matches or anything else exposing ``white``,
    ``black`` and ``result``. Unplayed matches (``result`` is None) are
    ignored. Standings are sorted by points, highest first; players on equal
    points are ordered by id so the table is stable between reads.
    """
    stats = {player_id: PlayerStanding(player_id=player_id) for player_id in player_ids}

    for match in matches:
        if match.result is None:
            continue
        white_score, black_score = parse_result(match.result)
        try:
            white, black = stats[match.white], stats[match.black]
        except KeyError as e:
            raise ValidationError(f"Match between {match.white} and {match.black} involves unknown player {e.args[0]}")

        white.played += 1
        black.played += 1
        if white_score > black_score:
            white.won += 1
            white.points += 1
            black.lost += 1
        elif black_score > white_score:
            black.won += 1
            black.points += 1
            white.lost += 1
        else:
            white.drawn += 1
            white.points += 0.5
            black.drawn += 1
            black.points += 0.5

    return sorted(stats.values(), key=lambda s: (-s.points, s.player_id))
