"""
Tests for match-event ingestion: action parsing and the points update.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from fplbotola.models import MatchAction
from fplbotola.persistence.db import get_connection, init_db, set_db_path
from fplbotola.persistence.repositories import PlayerRepository
from fplbotola.services.errors import PlayerNotFoundError
from fplbotola.services.match_events import (
    UnknownActionError,
    UnscoredActionError,
    apply_match_event,
    parse_action,
    points_for_action,
)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


@pytest.fixture
def db_conn(tmp_path):
    db_path = tmp_path / "events_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path, players_path=PROJECT_ROOT / "data" / "players.json")
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


class TestParseAction:
    def test_known(self):
        assert parse_action("goal") is MatchAction.GOAL
        assert parse_action("clean_sheet_full") is MatchAction.CLEAN_SHEET_FULL

    def test_unknown(self):
        with pytest.raises(UnknownActionError):
            parse_action("own_goal")

    def test_case_sensitive(self):
        with pytest.raises(UnknownActionError):
            parse_action("GOAL")

    def test_unscored(self):
        with pytest.raises(UnscoredActionError):
            points_for_action(MatchAction.CLEAN_SHEET_HALF)


class TestApplyMatchEvent:
    def test_goal_adds_five(self, db_conn):
        result = apply_match_event(db_conn, "rca-fwd-11", "goal")
        assert result.points_added == 5
        assert result.previous_points == 0
        assert result.new_points == 5
        assert PlayerRepository().get_points(db_conn, "rca-fwd-11") == 5

    def test_events_accumulate(self, db_conn):
        for action in ("appearance", "goal", "assist", "yellow_card"):
            apply_match_event(db_conn, "rca-fwd-11", action)
        assert PlayerRepository().get_points(db_conn, "rca-fwd-11") == 8

    def test_points_can_go_negative(self, db_conn):
        apply_match_event(db_conn, "far-def-3", MatchAction.RED_CARD)
        assert PlayerRepository().get_points(db_conn, "far-def-3") == -3

    def test_unknown_action_leaves_points(self, db_conn):
        apply_match_event(db_conn, "rca-fwd-11", "goal")
        with pytest.raises(UnknownActionError):
            apply_match_event(db_conn, "rca-fwd-11", "hat_trick")
        assert PlayerRepository().get_points(db_conn, "rca-fwd-11") == 5

    def test_unscored_action_leaves_points(self, db_conn):
        with pytest.raises(UnscoredActionError):
            apply_match_event(db_conn, "fus-gk-16", "clean_sheet_full")
        assert PlayerRepository().get_points(db_conn, "fus-gk-16") == 0

    def test_unknown_player(self, db_conn):
        with pytest.raises(PlayerNotFoundError):
            apply_match_event(db_conn, "nobody", "goal")
        assert not db_conn.in_transaction

    def test_missing_player_id(self, db_conn):
        with pytest.raises(ValueError):
            apply_match_event(db_conn, "", "goal")

    def test_reload_keeps_points(self, db_conn):
        apply_match_event(db_conn, "rca-fwd-11", "goal")
        init_db(players_path=PROJECT_ROOT / "data" / "players.json")
        assert PlayerRepository().get_points(db_conn, "rca-fwd-11") == 5

    def test_concurrent_updates_to_one_player_are_not_lost(self, db_conn):
        workers, goals_each = 8, 25

        def score_goals() -> None:
            conn = get_connection()
            try:
                for _ in range(goals_each):
                    apply_match_event(conn, "rca-fwd-11", "goal")
            finally:
                conn.close()

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(score_goals) for _ in range(workers)]
        for f in futures:
            f.result()
        assert PlayerRepository().get_points(db_conn, "rca-fwd-11") == workers * goals_each * 5
