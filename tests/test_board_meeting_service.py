"""
tests/test_board_meeting_service.py — Standalone Meetings & Reflections
========================================================================
"""

from __future__ import annotations

import pytest

from boardgame.database.models import BoardMeetingStatus
from boardgame.services import board_meeting_service as bms
from conftest import make_player


class TestMeetings:
    def test_create(self, db_engine):
        meeting = bms.create_board_meeting(db_engine, " March Board ", ["Budget", "Hiring"])
        assert meeting.title == "March Board"
        assert meeting.agenda == ["Budget", "Hiring"]
        assert meeting.minutes == {}
        assert meeting.status == BoardMeetingStatus.ACTIVE.value

    def test_title_required(self, db_engine):
        with pytest.raises(ValueError):
            bms.create_board_meeting(db_engine, "  ")

    def test_current_is_newest_active(self, db_engine):
        older = bms.create_board_meeting(db_engine, "January")
        newer = bms.create_board_meeting(db_engine, "February")
        bms.complete_board_meeting(db_engine, newer.id)

        meetings = bms.list_board_meetings(db_engine)
        assert [m.id for m in meetings] == [newer.id, older.id]
        assert bms.current_board_meeting(meetings).id == older.id

    def test_no_current_when_all_completed(self, db_engine):
        meeting = bms.create_board_meeting(db_engine, "Only")
        bms.complete_board_meeting(db_engine, meeting.id)
        assert bms.current_board_meeting(bms.list_board_meetings(db_engine)) is None

    def test_minutes_locked_after_completion(self, db_engine):
        meeting = bms.create_board_meeting(db_engine, "March")
        updated = bms.update_meeting_minutes(db_engine, meeting.id, {"decisions": ["Adopt budget"]})
        assert updated.minutes == {"decisions": ["Adopt budget"]}

        bms.complete_board_meeting(db_engine, meeting.id)
        with pytest.raises(ValueError, match="completed"):
            bms.update_meeting_minutes(db_engine, meeting.id, {"decisions": []})

    def test_unknown_meeting(self, db_engine):
        with pytest.raises(LookupError):
            bms.complete_board_meeting(db_engine, 404)


class TestReflections:
    def test_upsert(self, db_engine):
        player = make_player(db_engine, "Ada")
        meeting = bms.create_board_meeting(db_engine, "March")

        first = bms.submit_reflection(db_engine, meeting.id, player.id, "Too long.")
        second = bms.submit_reflection(db_engine, meeting.id, player.id, "Productive.")

        assert second.id == first.id
        stored = bms.get_user_reflection(db_engine, meeting.id, player.id)
        assert stored.reflection_text == "Productive."

    def test_none_before_submitting(self, db_engine):
        player = make_player(db_engine, "Ada")
        meeting = bms.create_board_meeting(db_engine, "March")
        assert bms.get_user_reflection(db_engine, meeting.id, player.id) is None

    def test_blank_reflection(self, db_engine):
        player = make_player(db_engine, "Ada")
        meeting = bms.create_board_meeting(db_engine, "March")
        with pytest.raises(ValueError):
            bms.submit_reflection(db_engine, meeting.id, player.id, " ")
