"""Tests for the contest registry and its per-contest serialization."""

from unittest.mock import patch

import pytest

from uesrpg.errors import AlreadyExists, ContestBusy, InvalidState
from uesrpg.records import Roll
from uesrpg.registry import ContestRegistry
from uesrpg.types import ContestState


def ready(registry: ContestRegistry, contest_id: str = "m1", a_roll: int = 45, b_roll: int = 25):
    c = registry.create(contest_id)
    c.record_roll("a", Roll(a_roll, 50))
    c.record_roll("b", Roll(b_roll, 50))
    return c


class TestLookup:
    def test_create_then_get(self) -> None:
        r = ContestRegistry()
        c = r.create("m1")
        assert r.get("m1") is c
        assert "m1" in r
        assert len(r) == 1

    def test_create_twice(self) -> None:
        r = ContestRegistry()
        r.create("m1")
        with pytest.raises(AlreadyExists):
            r.create("m1")

    def test_remove_then_get(self) -> None:
        r = ContestRegistry()
        r.create("m1")
        r.remove("m1")
        assert r.get("m1") is None
        assert "m1" not in r

    def test_remove_unknown_is_quiet(self) -> None:
        ContestRegistry().remove("nope")

    def test_contests_share_negotiator(self) -> None:
        r = ContestRegistry()
        assert r.create("m1").negotiator is r.negotiator


class TestOperations:
    def test_resolve_and_choose(self) -> None:
        r = ContestRegistry()
        c = ready(r)
        r.resolve("m1")
        assert c.state is ContestState.AWAITING_ADVANTAGE
        result = r.choose_advantage("m1", "precision", hit_location="Head")
        assert result.hit_location == "Head"
        assert c.state is ContestState.RESOLVED

    def test_skip(self) -> None:
        r = ContestRegistry()
        c = ready(r)
        r.resolve("m1")
        r.skip_advantage("m1")
        assert c.state is ContestState.RESOLVED

    def test_second_resolve_is_busy(self) -> None:
        r = ContestRegistry()
        ready(r)
        r.resolve("m1")
        with pytest.raises(ContestBusy):
            r.resolve("m1")

    def test_unknown_contest(self) -> None:
        with pytest.raises(InvalidState):
            ContestRegistry().resolve("ghost")

    def test_close_evicts(self) -> None:
        r = ContestRegistry()
        c = ready(r)
        r.resolve("m1")
        r.close("m1")
        assert c.state is ContestState.CLOSED
        assert r.get("m1") is None

    def test_closed_id_can_be_reused(self) -> None:
        r = ContestRegistry()
        old = ready(r)
        r.close("m1")
        assert r.create("m1") is not old

    def test_removing_last_participant_evicts(self) -> None:
        r = ContestRegistry()
        ready(r)
        r.remove_participant("m1", "a")
        assert "m1" in r
        r.remove_participant("m1", "b")
        assert "m1" not in r

    def test_lock_released_after_error(self) -> None:
        r = ContestRegistry()
        r.create("m1")
        with pytest.raises(InvalidState):
            r.remove_participant("m1", "nobody")
        with r.operation("m1") as c:
            assert c is r.get("m1")


class TestSerialization:
    def test_overlapping_operation_is_busy(self) -> None:
        """A click that arrives mid-operation is rejected, not queued."""
        r = ContestRegistry()
        ready(r)
        with r.operation("m1"):
            with pytest.raises(ContestBusy):
                r.resolve("m1")
            with pytest.raises(ContestBusy):
                r.close("m1")
        assert r.resolve("m1").winner.actor_id == "a"

    def test_other_contests_unaffected(self) -> None:
        r = ContestRegistry()
        ready(r, "m1")
        ready(r, "m2")
        with r.operation("m1"):
            assert r.resolve("m2").winner.actor_id == "a"


class TestLatestOpen:
    def test_newest_open_contest(self) -> None:
        r = ContestRegistry()
        with patch("uesrpg.contest.time.time", return_value=1000.0):
            r.create("old")
        with patch("uesrpg.contest.time.time", return_value=2000.0):
            r.create("new")
        with patch("uesrpg.registry.time.time", return_value=2500.0):
            assert r.latest_open().contest_id == "new"

    def test_skips_contests_past_open(self) -> None:
        r = ContestRegistry()
        ready(r, "m1")
        r.resolve("m1")
        assert r.latest_open() is None

    def test_too_old(self) -> None:
        r = ContestRegistry()
        with patch("uesrpg.contest.time.time", return_value=0.0):
            r.create("ancient")
        with patch("uesrpg.registry.time.time", return_value=2 * 24 * 60 * 60.0):
            assert r.latest_open() is None

    def test_empty(self) -> None:
        assert ContestRegistry().latest_open() is None
