import re
from enum import Enum

MIN_PLAYERS = 2
MAX_PLAYERS = 20
MIN_ROUNDS = 1
MAX_ROUNDS = 4

TOURNAMENT_TYPE_ROUND_ROBIN = "round-robin"

LICHESS_USERNAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{1,29}$")


def game_link_pattern(host: str) -> "re.Pattern[str]":
    """``<host>/<8-character game id>``, optionally followed by the side the link is viewed from."""
    return re.compile(rf"^{re.escape(host.rstrip('/'))}/[A-Za-z0-9]{{8}}(/(white|black))?$")


class MatchResult(str, Enum):
    WHITE_WINS = "1-0"
    BLACK_WINS = "0-1"
    DRAW = "0.5-0.5"


class Variant(str, Enum):
    STANDARD = "standard"
    CHESS960 = "chess960"
    CRAZYHOUSE = "crazyhouse"
    ANTICHESS = "antichess"
    ATOMIC = "atomic"
    HORDE = "horde"
    KING_OF_THE_HILL = "kingOfTheHill"
    RACING_KINGS = "racingKings"
    THREE_CHECK = "threeCheck"


class GameRule(str, Enum):
    NO_ABORT = "noAbort"
    NO_REMATCH = "noRematch"
    NO_GIVE_TIME = "noGiveTime"
    NO_CLAIM_WIN = "noClaimWin"
    NO_EARLY_DRAW = "noEarlyDraw"


CORRESPONDENCE_DAYS = (1, 2, 3, 5, 7, 10, 14)
MAX_CLOCK_LIMIT_SECONDS = 10800
MAX_CLOCK_INCREMENT_SECONDS = 60
