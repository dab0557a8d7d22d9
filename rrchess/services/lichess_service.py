"""
Lichess HTTP API client.

Covers the three calls the service needs: resolving a bearer token to an
account, creating a challenge between two players and the public player
search used when registering players. A ``LichessClient`` is built once by
the application factory and handed to the endpoints as a dependency.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import quote

import httpx

from rrchess.core.config import settings
from rrchess.core.exceptions import AuthenticationError, ExternalDependencyError, ValidationError
from rrchess.schemas.auth_schemas import LichessAccount
from rrchess.schemas.challenge_schemas import ChallengeSettings
from rrchess.services.tournament_state import is_valid_game_link

logger = logging.getLogger(__name__)

MIN_AUTOCOMPLETE_TERM = 2


class IdentityProvider(Protocol):
    async def verify_token(self, token: str) -> LichessAccount:
        ...


class ChallengeIssuer(Protocol):
    async def create_challenge(self, token: str, opponent: str, color: str, settings: ChallengeSettings) -> str:
        ...


def _enum_value(value) -> str:
    return getattr(value, "value", value)


def build_challenge_form(color: Optional[str], challenge_settings: ChallengeSettings) -> Dict[str, str]:
    """Encodes challenge settings as the form fields of ``POST /api/challenge/{username}``."""
    form = {}
    time_control = challenge_settings.time_control
    if time_control.type == "clock":
        form["clock.limit"] = str(time_control.limit)
        form["clock.increment"] = str(time_control.increment)
    elif time_control.type == "correspondence":
        form["days"] = str(time_control.days)
    # unlimited: no time fields

    if color:
        form["color"] = color
    form["rated"] = "true" if challenge_settings.rated else "false"
    form["variant"] = _enum_value(challenge_settings.variant)
    if challenge_settings.rules:
        form["rules"] = ",".join(_enum_value(rule) for rule in challenge_settings.rules)
    return form


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(data, dict) and data.get("error"):
        error = data["error"]
        return error if isinstance(error, str) else str(error)
    return response.reason_phrase


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        raise ExternalDependencyError("Lichess returned a malformed response")
    if not isinstance(data, dict):
        raise ExternalDependencyError("Lichess returned a malformed response")
    return data


class LichessClient:
    def __init__(self, host: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.host = (host or settings.LICHESS_HOST).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.LICHESS_TIMEOUT
        self.transport = transport

    def _client(self, token: Optional[str] = None) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return httpx.AsyncClient(
            base_url=self.host,
            headers=headers,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def verify_token(self, token: str) -> LichessAccount:
        try:
            async with self._client(token) as client:
                response = await client.get("/api/account")
        except httpx.HTTPError as e:
            logger.warning("Lichess account lookup failed: %s", e)
            raise ExternalDependencyError("Could not reach Lichess to verify the token")

        if response.status_code == 401:
            raise AuthenticationError("Invalid or expired token")
        if response.is_error:
            logger.warning("Lichess account lookup returned %s", response.status_code)
            raise ExternalDependencyError(f"Lichess account lookup failed ({response.status_code})")

        data = _json_body(response)
        if data.get("error") or not data.get("id"):
            raise AuthenticationError("Invalid or expired token")
        return LichessAccount(id=data["id"].lower(), username=data.get("username") or data["id"])

    async def create_challenge(self, token: str, opponent: str, color: str, settings: ChallengeSettings) -> str:
        """Challenges ``opponent`` on behalf of the token owner and returns the game URL."""
        form = build_challenge_form(color, settings)
        try:
            async with self._client(token) as client:
                response = await client.post(f"/api/challenge/{quote(opponent, safe='')}", data=form)
        except httpx.HTTPError as e:
            logger.warning("Lichess challenge to %s failed: %s", opponent, e)
            raise ExternalDependencyError("Could not reach Lichess to create the challenge")

        if response.status_code == 401:
            raise AuthenticationError("Invalid or expired token")
        if response.status_code == 400:
            # e.g. the opponent does not accept challenges with these settings
            raise ValidationError(f"Lichess rejected the challenge: {_error_message(response)}")
        if response.is_error:
            logger.warning("Lichess challenge to %s returned %s", opponent, response.status_code)
            raise ExternalDependencyError(f"Lichess challenge failed ({response.status_code}): {_error_message(response)}")

        data = _json_body(response)
        url = data.get("url") or (data.get("challenge") or {}).get("url")
        if not is_valid_game_link(url, self.host):
            logger.warning("Unexpected challenge URL from Lichess: %r", url)
            raise ExternalDependencyError("Lichess returned an unexpected challenge URL")
        return url

    async def autocomplete_players(self, term: str) -> List[Dict[str, Any]]:
        """Player search; errors are logged and yield no suggestions."""
        term = (term or "").strip()
        if len(term) < MIN_AUTOCOMPLETE_TERM:
            return []
        try:
            async with self._client() as client:
                response = await client.get(
                    "/api/player/autocomplete",
                    params={"term": term, "object": 1},
                )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Lichess autocomplete for %r failed: %s", term, e)
            return []
        return data.get("result", []) if isinstance(data, dict) else []
