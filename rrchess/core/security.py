from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rrchess.api.dependencies import get_identity_provider
from rrchess.core.exceptions import AuthenticationError
from rrchess.schemas.auth_schemas import LichessAccount
from rrchess.services.lichess_service import IdentityProvider

# auto_error=False: a missing header is reported as AuthenticationError (401) like a bad token
bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return credentials.credentials


async def get_current_account(
    token: str = Depends(get_bearer_token),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> LichessAccount:
    """Resolves the request's Lichess bearer token to the account it belongs to."""
    return await identity_provider.verify_token(token)
