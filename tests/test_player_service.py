"""
tests/test_player_service.py — Profiles, Badges & Progression
==============================================================
"""

from __future__ import annotations

import pytest

from boardgame.constants import BADGE_DONOR
from boardgame.services import player_service
from boardgame.services.settings_service import upsert_setting
from conftest import make_player


class TestAccounts:
    def test_email_is_normalised(self, db_engine):
        player = make_player(db_engine, "Ada", email="  Ada@Example.ORG ")
        assert player.email == "ada@example.org"
        assert player_service.get_player_by_email(db_engine, "ADA@example.org").id == player.id

    def test_duplicate_email_rejected(self, db_engine):
        make_player(db_engine, "Ada")
        with pytest.raises(ValueError, match="already registered"):
            make_player(db_engine, "Ada")

    def test_blank_name_rejected(self, db_engine):
        with pytest.raises(ValueError, match="Name is required"):
            player_service.create_player(
                db_engine, email="x@example.org", name="   ", password_hash="h"
            )

    def test_get_or_create_returns_existing(self, db_engine):
        first = make_player(db_engine, "Ada")
        again = player_service.get_or_create_player(
            db_engine, email="ada@example.org", name="Someone Else", password_hash="h"
        )
        assert again.id == first.id
        assert again.name == "Ada"

    def test_new_player_defaults(self, db_engine):
        player = make_player(db_engine, "Ada")
        assert player.score == 0
        assert player.level == 1
        assert player.role is None


class TestRole:
    def test_update_role(self, db_engine):
        player = make_player(db_engine, "Ada")
        updated = player_service.update_player_role(db_engine, player.id, "treasurer")
        assert updated.role == "treasurer"
        assert player_service.get_player(db_engine, player.id).role == "treasurer"

    def test_unknown_role(self, db_engine):
        player = make_player(db_engine, "Ada")
        with pytest.raises(ValueError, match="Unknown role"):
            player_service.update_player_role(db_engine, player.id, "mascot")

    def test_unknown_player(self, db_engine):
        with pytest.raises(LookupError):
            player_service.update_player_role(db_engine, 999, "treasurer")


class TestBadges:
    def test_award_is_idempotent(self, db_engine):
        player = make_player(db_engine, "Ada")
        assert player_service.award_badge(db_engine, player.id, BADGE_DONOR) is True
        assert player_service.award_badge(db_engine, player.id, BADGE_DONOR) is False

        profile = player_service.get_profile(db_engine, player.id)
        assert [b.badge for b in profile["badges"]] == [BADGE_DONOR]


class TestProgression:
    def test_completion_grants_xp_and_records_scenario(self, db_engine):
        player = make_player(db_engine, "Ada", role="treasurer")
        player_service.complete_scenario(db_engine, player.id, "annual-budget", "treasurer", 4.0)

        reloaded = player_service.get_player(db_engine, player.id)
        assert reloaded.experience == 80
        assert reloaded.level == 1
        assert reloaded.progress["completed_scenarios"] == ["annual-budget"]

        profile = player_service.get_profile(db_engine, player.id)
        assert [c.scenario_id for c in profile["completed"]] == ["annual-budget"]

    def test_level_up_uses_settings(self, db_engine):
        upsert_setting(db_engine, key="progression.xp_per_level", value=100, category="progression")
        player = make_player(db_engine, "Ada")
        player_service.complete_scenario(db_engine, player.id, "annual-budget", "treasurer", 5.0)

        assert player_service.get_player(db_engine, player.id).level == 2

    def test_repeat_completion_listed_once(self, db_engine):
        player = make_player(db_engine, "Ada")
        for _ in range(2):
            player_service.complete_scenario(db_engine, player.id, "annual-budget", "treasurer", 3.0)

        reloaded = player_service.get_player(db_engine, player.id)
        assert reloaded.progress["completed_scenarios"] == ["annual-budget"]
        assert reloaded.experience == 120


class TestLeaderboard:
    def test_ordered_by_score(self, db_engine):
        low = make_player(db_engine, "Low")
        high = make_player(db_engine, "High")
        player_service.update_player_score(db_engine, high.id, 10)
        player_service.update_player_score(db_engine, low.id, 3)

        board = player_service.leaderboard(db_engine)
        assert [p.id for p in board] == [high.id, low.id]

    def test_limit(self, db_engine):
        for i in range(3):
            make_player(db_engine, f"P{i}")
        assert len(player_service.leaderboard(db_engine, limit=2)) == 2
