from collections import Counter
from dataclasses import dataclass
from typing import List, Sequence

from rrchess.core.constants import LICHESS_USERNAME_RE, MAX_PLAYERS, MAX_ROUNDS, MIN_PLAYERS, MIN_ROUNDS
from rrchess.core.exceptions import ValidationError


@dataclass(frozen=True)
class Fixture:
    round: int # 0-based
    white: str
    black: str


def validate_roster(player_ids: Sequence[str], rounds: int) -> None:
    if not MIN_PLAYERS <= len(player_ids) <= MAX_PLAYERS:
        raise ValidationError(
            f"A tournament needs between {MIN_PLAYERS} and {MAX_PLAYERS} players, got {len(player_ids)}"
        )
    invalid = [p for p in player_ids if not isinstance(p, str) or not LICHESS_USERNAME_RE.fullmatch(p)]
    if invalid:
        raise ValidationError(f"Invalid Lichess username(s): {', '.join(repr(p) for p in invalid)}")
    if len(set(player_ids)) != len(player_ids):
        duplicates = sorted(p for p, count in Counter(player_ids).items() if count > 1)
        raise ValidationError(f"Players must be distinct, duplicated: {', '.join(duplicates)}")
    if isinstance(rounds, bool) or not isinstance(rounds, int) or not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
        raise ValidationError(f"Rounds must be between {MIN_ROUNDS} and {MAX_ROUNDS}, got {rounds}")


def generate_round_robin_fixtures(player_ids: Sequence[str], rounds: int) -> List[Fixture]:
    """
    Builds the complete fixture list of a round-robin tournament.

    Every unordered pair of players meets once per round, so the result holds
    ``rounds * n * (n - 1) / 2`` fixtures. Fixtures are ordered by round, then
    by pair ``(i, j)`` with ``i < j`` in the order of ``player_ids``.

    On even rounds the player listed first takes white, on odd rounds the
    colours are swapped, so over two consecutive rounds each pair plays one
    game with each colour.
    """
    validate_roster(player_ids, rounds)

    fixtures = []
    for round_index in range(rounds):
        for i in range(len(player_ids)):
            for j in range(i + 1, len(player_ids)):
                if round_index % 2 == 0:
                    white, black = player_ids[i], player_ids[j]
                else:
                    white, black = player_ids[j], player_ids[i]
                fixtures.append(Fixture(round=round_index, white=white, black=black))
    return fixtures
