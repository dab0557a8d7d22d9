from fastapi import Request

from rrchess.core.database import SessionLocal
from rrchess.services.lichess_service import ChallengeIssuer, IdentityProvider, LichessClient


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_lichess_client(request: Request) -> LichessClient:
    return request.app.state.lichess_client


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.lichess_client


def get_challenge_issuer(request: Request) -> ChallengeIssuer:
    return request.app.state.lichess_client
