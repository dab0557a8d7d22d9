from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from conftest import make_tournament_in
from rrchess.core.exceptions import AuthorizationError, ExternalDependencyError, NotFoundError, ValidationError
from rrchess.models.match import Match
from rrchess.models.player import Player
from rrchess.models.tournament import Tournament
from rrchess.schemas.challenge_schemas import ChallengeSettings, ClockTimeControl
from rrchess.schemas.player_schemas import PlayerCreate
from rrchess.services import tournament_service
from rrchess.services.tournament_state import TournamentState


class TestTournamentService:

    def test_create_tournament_success(self, db):
        created = tournament_service.create_tournament(db, make_tournament_in(), creator_id="Alice")

        assert created.id is not None
        assert created.name == "Club Championship"
        assert created.creator_id == "alice"
        assert created.rounds == 2
        assert created.player_ids == ["alice", "bob", "carol"]
        assert created.is_complete is False
        assert created.created_at is not None
        assert len(created.matches) == 6
        assert [(m.round, m.white, m.black) for m in created.matches] == [
            (0, "alice", "bob"),
            (0, "alice", "carol"),
            (0, "bob", "carol"),
            (1, "bob", "alice"),
            (1, "carol", "alice"),
            (1, "carol", "bob"),
        ]
        assert all(m.result is None and m.game_link is None for m in created.matches)

    def test_created_at_is_current_utc_time(self, db):
        before = datetime.now(timezone.utc).replace(tzinfo=None)

        created = tournament_service.create_tournament(db, make_tournament_in(), creator_id="alice")

        after = datetime.now(timezone.utc).replace(tzinfo=None)
        assert created.created_at.tzinfo is None
        assert before - timedelta(seconds=1) <= created.created_at <= after + timedelta(seconds=1)

    def test_create_tournament_normalizes_and_registers_players(self, db):
        tournament_in = make_tournament_in(players=())
        tournament_in.players = [
            PlayerCreate(lichess_username="DrNykterstein", name="Magnus"),
            PlayerCreate(lichess_username="Hikaru"),
        ]

        created = tournament_service.create_tournament(db, tournament_in, creator_id="hikaru")

        assert created.player_ids == ["drnykterstein", "hikaru"]
        magnus = db.get(Player, "drnykterstein")
        assert magnus.name == "Magnus"
        assert magnus.lichess_url == "https://lichess.org/@/drnykterstein"
        assert db.get(Player, "hikaru").name == "Hikaru"

    def test_create_tournament_stores_challenge_settings(self, db):
        settings = ChallengeSettings(
            time_control=ClockTimeControl(limit=300, increment=3),
            rated=True,
            variant="chess960",
            rules=["noRematch", "noAbort", "noRematch"],
        )

        created = tournament_service.create_tournament(db, make_tournament_in(challenge_settings=settings), "alice")

        assert created.challenge_settings == {
            "time_control": {"type": "clock", "limit": 300, "increment": 3},
            "rated": True,
            "variant": "chess960",
            "rules": ["noAbort", "noRematch"],
        }

    @pytest.mark.parametrize("kwargs,message", [
        ({"players": ("alice",)}, "between 2 and 20 players"),
        ({"players": tuple(f"p{i}" for i in range(21))}, "between 2 and 20 players"),
        ({"rounds": 0}, "Rounds must be between 1 and 4"),
        ({"rounds": 5}, "Rounds must be between 1 and 4"),
        ({"players": ("alice", "bob", "ALICE")}, "distinct"),
        ({"players": ("alice", "   ")}, "Invalid Lichess username"),
        ({"players": ("alice", "../../api/team/foo/quit")}, "Invalid Lichess username"),
        ({"name": "   "}, "name is required"),
        ({"type": "swiss"}, "Only round-robin"),
    ])
    def test_create_tournament_rejects_invalid_input(self, db, kwargs, message):
        with pytest.raises(ValidationError, match=message):
            tournament_service.create_tournament(db, make_tournament_in(**kwargs), creator_id="alice")

        assert db.query(Tournament).count() == 0
        assert db.query(Match).count() == 0
        assert db.query(Player).count() == 0

    def test_create_tournament_commit_failure_leaves_nothing(self, db, monkeypatch):
        def failing_commit():
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", failing_commit)

        with pytest.raises(ExternalDependencyError):
            tournament_service.create_tournament(db, make_tournament_in(), creator_id="alice")

        monkeypatch.undo()
        assert db.query(Tournament).count() == 0
        assert db.query(Match).count() == 0

    def test_get_tournament_found(self, db):
        created = tournament_service.create_tournament(db, make_tournament_in(name="FindMe"), "alice")

        found = tournament_service.get_tournament(db, created.id)

        assert found.id == created.id
        assert found.name == "FindMe"

    def test_get_tournament_not_found(self, db):
        with pytest.raises(NotFoundError, match="Tournament not found"):
            tournament_service.get_tournament(db, "nonexistent_id")

    def test_get_tournament_for_update(self, db):
        created = tournament_service.create_tournament(db, make_tournament_in(), "alice")

        assert tournament_service.get_tournament_for_update(db, created.id) is created

        with pytest.raises(NotFoundError, match="Tournament not found"):
            tournament_service.get_tournament_for_update(db, "nonexistent_id")

    def test_get_tournament_for_update_sees_committed_results(self, db, session_factory):
        created = tournament_service.create_tournament(db, make_tournament_in(players=("alice", "bob"), rounds=1), "alice")
        assert created.is_complete is False

        other = session_factory()
        try:
            other.get(Tournament, created.id).is_complete = True
            other.commit()
        finally:
            other.close()

        assert tournament_service.get_tournament_for_update(db, created.id).is_complete is True

    def test_list_tournaments_newest_first(self, db):
        first = tournament_service.create_tournament(db, make_tournament_in(name="First"), "alice")
        second = tournament_service.create_tournament(db, make_tournament_in(name="Second"), "alice")
        first.created_at = second.created_at.replace(year=second.created_at.year - 1)
        db.commit()

        assert [t.name for t in tournament_service.list_tournaments(db)] == ["Second", "First"]

    def test_build_tournament_read(self, db):
        created = tournament_service.create_tournament(db, make_tournament_in(), "alice")
        created.matches[0].result = "1-0"
        db.commit()

        read = tournament_service.build_tournament_read(db, created)

        assert read.state == TournamentState.OPEN
        assert [p.id for p in read.players] == ["alice", "bob", "carol"]
        assert len(read.matches) == 6
        assert read.standings[0].player_id == "alice"
        assert read.standings[0].points == 1.0

    def test_refresh_completion(self, db):
        created = tournament_service.create_tournament(db, make_tournament_in(players=("alice", "bob"), rounds=1), "alice")
        created.matches[0].result = "0-1"

        assert tournament_service.refresh_completion(db, created) == TournamentState.COMPLETE
        assert created.is_complete is True

        created.matches[0].result = None
        assert tournament_service.refresh_completion(db, created) == TournamentState.OPEN
        assert created.is_complete is False

    def test_refresh_completion_ignores_stale_flag(self, db):
        created = tournament_service.create_tournament(db, make_tournament_in(players=("alice", "bob"), rounds=1), "alice")
        created.is_complete = True # stale cache

        assert tournament_service.refresh_completion(db, created) == TournamentState.OPEN
        assert created.is_complete is False

    def test_delete_tournament_success(self, db):
        created = tournament_service.create_tournament(db, make_tournament_in(), "alice")
        tournament_id = created.id

        tournament_service.delete_tournament(db, tournament_id, "alice")

        assert db.get(Tournament, tournament_id) is None
        assert db.query(Match).filter(Match.tournament_id == tournament_id).count() == 0
        # players outlive the tournament
        assert db.query(Player).count() == 3

    def test_delete_tournament_unauthorized(self, db):
        created = tournament_service.create_tournament(db, make_tournament_in(), "alice")

        with pytest.raises(AuthorizationError, match="Only the creator can delete this tournament"):
            tournament_service.delete_tournament(db, created.id, "bob")

        assert db.get(Tournament, created.id) is not None
        assert db.query(Match).count() == 6

    def test_delete_tournament_not_found(self, db):
        with pytest.raises(NotFoundError, match="Tournament not found"):
            tournament_service.delete_tournament(db, "fake_id_no_delete", "alice")
