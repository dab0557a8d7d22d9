"""
Completion state and permission checks for a tournament.

A tournament is COMPLETE when it has at least one match and every match has
a result; otherwise it is OPEN. Clearing a result moves a COMPLETE
tournament back to OPEN, so the state is always derived from the full match
set and never updated incrementally.
"""
from enum import Enum
from typing import Iterable, Optional

from rrchess.core.config import settings
from rrchess.core.constants import MatchResult, game_link_pattern
from rrchess.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from rrchess.services.player_service import normalize_player_id

VALID_RESULTS = tuple(r.value for r in MatchResult)


class TournamentState(str, Enum):
    OPEN = "OPEN"
    COMPLETE = "COMPLETE"


def derive_state(matches: Iterable) -> TournamentState:
    has_matches = False
    for match in matches:
        has_matches = True
        if match.result is None:
            return TournamentState.OPEN
    return TournamentState.COMPLETE if has_matches else TournamentState.OPEN


def is_complete(matches: Iterable) -> bool:
    return derive_state(matches) == TournamentState.COMPLETE


def _require_identity(identity: Optional[str]) -> str:
    if not identity or not identity.strip():
        raise AuthenticationError("Authentication required")
    return normalize_player_id(identity)


def ensure_can_edit_matches(tournament, identity: Optional[str]) -> None:
    """Any registered player may edit any match of the tournament, not only their own."""
    player_id = _require_identity(identity)
    if player_id not in {normalize_player_id(p) for p in tournament.player_ids}:
        raise AuthorizationError("Only players registered in this tournament can update its matches")


def ensure_can_delete(tournament, identity: Optional[str]) -> None:
    player_id = _require_identity(identity)
    if not tournament.creator_id or normalize_player_id(tournament.creator_id) != player_id:
        raise AuthorizationError("Only the creator can delete this tournament")


def ensure_can_challenge(match, identity: Optional[str]) -> None:
    player_id = _require_identity(identity)
    if player_id not in (match.white, match.black):
        raise AuthorizationError("Only the two players of a match can challenge each other")
    if match.result is not None:
        raise ValidationError("This match already has a result")


def validate_result(result: Optional[str]) -> Optional[str]:
    if result is None:
        return None
    if result not in VALID_RESULTS:
        raise ValidationError(f"Invalid result {result!r}, expected one of {', '.join(VALID_RESULTS)} or null")
    return result


def is_valid_game_link(link: Optional[str], host: Optional[str] = None) -> bool:
    return bool(link) and game_link_pattern(host or settings.LICHESS_HOST).match(link) is not None


def validate_game_link(link: Optional[str]) -> Optional[str]:
    """
    Returns the link to store. None and the empty string clear the link;
    anything that is not a Lichess game URL is rejected.
    """
    if link is None:
        return None
    link = link.strip()
    if link == "":
        return None
    if not is_valid_game_link(link):
        raise ValidationError(
            f"Invalid game link {link!r}, expected {settings.LICHESS_HOST.rstrip('/')}/<8-character game id>[/white|/black]"
        )
    return link
