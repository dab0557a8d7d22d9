"""
Domain errors raised by the service layer.

Each category maps to one HTTP status in ``rrchess.main`` so callers can tell
"fix your input" (ValidationError) from "you may not do this"
(AuthorizationError), "it does not exist" (NotFoundError) and "try again
later" (ExternalDependencyError).
"""


class TournamentError(Exception):
    """Base class for every error the service layer raises on purpose."""

    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(TournamentError):
    status_code = 400


class AuthorizationError(TournamentError):
    status_code = 403


class AuthenticationError(AuthorizationError):
    """Missing or invalid bearer token."""

    status_code = 401


class NotFoundError(TournamentError):
    status_code = 404


class ExternalDependencyError(TournamentError):
    """The database or Lichess failed; the request may be retried."""

    status_code = 502
