import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import rrchess.models # registers the tables on Base
from rrchess.api.dependencies import get_challenge_issuer, get_db, get_identity_provider, get_lichess_client
from rrchess.core.database import Base
from rrchess.core.exceptions import AuthenticationError
from rrchess.main import app
from rrchess.schemas.auth_schemas import LichessAccount
from rrchess.schemas.player_schemas import PlayerCreate
from rrchess.schemas.tournament_schemas import TournamentCreate

GAME_URL = "https://lichess.org/AbCd1234"


class FakeIdentityProvider:
    """Accepts "<username>-token" for every known username."""

    def __init__(self, usernames):
        self.accounts = {
            f"{username.lower()}-token": LichessAccount(id=username.lower(), username=username)
            for username in usernames
        }

    async def verify_token(self, token):
        if token not in self.accounts:
            raise AuthenticationError("Invalid or expired token")
        return self.accounts[token]


class FakeChallengeIssuer:
    def __init__(self, url=GAME_URL):
        self.url = url
        self.calls = []

    async def create_challenge(self, token, opponent, color, settings):
        self.calls.append({"token": token, "opponent": opponent, "color": color, "settings": settings})
        return self.url


class FakeLichessClient:
    def __init__(self, suggestions=None):
        self.suggestions = suggestions or []
        self.terms = []

    async def autocomplete_players(self, term):
        self.terms.append(term)
        return self.suggestions if len(term) >= 2 else []


def auth_headers(username):
    return {"Authorization": f"Bearer {username.lower()}-token"}


def make_tournament_in(players=("alice", "bob", "carol"), rounds=2, name="Club Championship", **kwargs):
    return TournamentCreate(
        name=name,
        rounds=rounds,
        players=[PlayerCreate(lichess_username=p) for p in players],
        **kwargs,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def challenge_issuer():
    return FakeChallengeIssuer()


@pytest.fixture
def lichess_client():
    return FakeLichessClient(suggestions=[{"id": "alice", "name": "Alice"}])


@pytest.fixture
def client(session_factory, challenge_issuer, lichess_client):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    identity_provider = FakeIdentityProvider(["Alice", "Bob", "Carol", "Dave"])
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_challenge_issuer] = lambda: challenge_issuer
    app.dependency_overrides[get_lichess_client] = lambda: lichess_client
    yield TestClient(app)
    app.dependency_overrides = {}
