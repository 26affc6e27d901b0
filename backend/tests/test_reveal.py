"""
Tests for pick reveal rules.
"""

from datetime import datetime, timedelta, timezone

from app.core.positions import Slot
from app.simulator import Pick, calculate_pick_reveal_status, can_view_picks, filter_picks_by_reveal_status


KICKOFF = datetime(2026, 1, 10, 21, 30, tzinfo=timezone.utc)
BEFORE = KICKOFF - timedelta(hours=2)


def picks_for(member_id, slots, first_player_id):
    return [
        Pick(member_id, 1, slot, first_player_id + i, BEFORE - timedelta(days=1))
        for i, slot in enumerate(slots)
    ]


COMPLETE = picks_for("a", [Slot.QB, Slot.RB, Slot.FLEX], 10)
PARTIAL = picks_for("b", [Slot.QB], 20)


class TestCalculatePickRevealStatus:
    """Tests for calculate_pick_reveal_status()."""

    def test_complete_submission_before_deadline(self):
        reveal = calculate_pick_reveal_status(COMPLETE + PARTIAL, "a", KICKOFF, BEFORE)

        assert reveal.current_member_submitted
        assert not reveal.past_deadline
        assert reveal.submitted_member_ids == ["a"]

    def test_partial_submission_is_not_submitted(self):
        reveal = calculate_pick_reveal_status(COMPLETE + PARTIAL, "b", KICKOFF, BEFORE)
        assert not reveal.current_member_submitted

    def test_deadline_is_first_kickoff(self):
        reveal = calculate_pick_reveal_status(PARTIAL, "b", KICKOFF, KICKOFF)
        assert reveal.past_deadline

    def test_no_kickoff_scheduled(self):
        reveal = calculate_pick_reveal_status(PARTIAL, "b", None, KICKOFF + timedelta(days=1))
        assert not reveal.past_deadline


class TestVisibility:
    """Tests for what a viewer may see."""

    def test_can_view_picks(self):
        assert can_view_picks(True, False)
        assert can_view_picks(False, True)
        assert not can_view_picks(False, False)

    def test_only_complete_submissions_before_deadline(self):
        visible = filter_picks_by_reveal_status(COMPLETE + PARTIAL, ["a"], past_deadline=False)
        assert {p.member_id for p in visible} == {"a"}

    def test_everything_after_deadline(self):
        visible = filter_picks_by_reveal_status(COMPLETE + PARTIAL, ["a"], past_deadline=True)
        assert len(visible) == 4
