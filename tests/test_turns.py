"""Tests for the turn scheduler and action point automation."""

import pytest

from uesrpg.errors import InvalidState
from uesrpg.settings import Settings
from uesrpg.turns import ActionPoints, Combatant, TurnScheduler
from uesrpg.types import APAutomation


def make(name: str, current: int = 0, max_ap: int = 3, **kw) -> Combatant:
    return Combatant(name, ActionPoints(current=current, max=max_ap), **kw)


def scheduler(n: int = 3, automate: bool = True, mode: APAutomation = APAutomation.TURN) -> TurnScheduler:
    combatants = [make(f"C{i}") for i in range(n)]
    return TurnScheduler(combatants, Settings(automate_action_points=automate, action_point_automation=mode))


def ap(s: TurnScheduler) -> list[int]:
    return [c.action_points.current for c in s.combatants]


class TestStartEncounter:
    def test_fills_everyone_when_automated(self) -> None:
        s = scheduler()
        s.start_encounter()
        assert ap(s) == [3, 3, 3]
        assert s.round == 1
        assert s.turn == 0
        assert s.started is True

    def test_leaves_pools_alone_without_automation(self) -> None:
        s = scheduler(automate=False)
        s.start_encounter()
        assert ap(s) == [0, 0, 0]

    def test_empty_encounter_rejected(self) -> None:
        with pytest.raises(InvalidState):
            TurnScheduler([], Settings(automate_action_points=True)).start_encounter()

    def test_round_mode_also_fills_at_start(self) -> None:
        s = scheduler(mode=APAutomation.ROUND)
        s.start_encounter()
        assert ap(s) == [3, 3, 3]


class TestAdvanceTurn:
    def test_no_refresh_mid_round_one(self) -> None:
        """Reactions taken before your first turn cost AP from that turn."""
        s = scheduler()
        s.start_encounter()
        s.combatants[1].action_points.current = 1
        s.advance_turn()
        assert s.turn == 1
        assert s.round == 1
        assert s.combatants[1].action_points.current == 1

    def test_wrap_refreshes_first_combatant(self) -> None:
        s = scheduler()
        s.start_encounter()
        s.advance_turn()
        s.advance_turn()
        s.combatants[0].action_points.current = 0
        s.advance_turn()
        assert s.turn == 0
        assert s.round == 2
        assert s.combatants[0].action_points.current == 3

    def test_every_turn_refreshes_after_round_one(self) -> None:
        s = scheduler()
        s.start_encounter()
        for _ in range(3):
            s.advance_turn()
        assert s.round == 2
        for expected_turn in (1, 2):
            s.combatants[expected_turn].action_points.current = 0
            s.advance_turn()
            assert s.turn == expected_turn
            assert s.combatants[expected_turn].action_points.current == 3

    def test_refreshes_only_the_upcoming_combatant(self) -> None:
        s = scheduler()
        s.start_encounter()
        for _ in range(3):
            s.advance_turn()
        for c in s.combatants:
            c.action_points.current = 0
        s.advance_turn()
        assert ap(s) == [0, 3, 0]

    def test_no_refresh_without_automation(self) -> None:
        s = scheduler(automate=False)
        s.start_encounter()
        for _ in range(5):
            s.advance_turn()
        assert ap(s) == [0, 0, 0]
        assert s.round == 2
        assert s.turn == 2

    def test_single_combatant_wraps_every_turn(self) -> None:
        s = scheduler(n=1)
        s.start_encounter()
        s.combatants[0].action_points.current = 0
        s.advance_turn()
        assert s.round == 2
        assert s.combatants[0].action_points.current == 3

    def test_requires_start(self) -> None:
        with pytest.raises(InvalidState):
            scheduler().advance_turn()

    def test_empty_encounter_rejected(self) -> None:
        s = TurnScheduler([])
        with pytest.raises(InvalidState):
            s.advance_turn()


class TestRoundMode:
    def test_no_per_turn_refresh(self) -> None:
        s = scheduler(mode=APAutomation.ROUND)
        s.start_encounter()
        for _ in range(3):
            s.advance_turn()
        s.combatants[1].action_points.current = 0
        s.advance_turn()
        assert s.combatants[1].action_points.current == 0

    def test_everyone_refreshes_on_new_round(self) -> None:
        s = scheduler(mode=APAutomation.ROUND)
        s.start_encounter()
        for c in s.combatants:
            c.action_points.current = 0
        for _ in range(3):
            s.advance_turn()
        assert s.round == 2
        assert ap(s) == [3, 3, 3]


class TestNextRound:
    def test_jumps_to_turn_zero(self) -> None:
        s = scheduler()
        s.start_encounter()
        s.advance_turn()
        s.next_round()
        assert s.round == 2
        assert s.turn == 0

    def test_refreshes_first_combatant_in_turn_mode(self) -> None:
        s = scheduler()
        s.start_encounter()
        s.combatants[0].action_points.current = 0
        s.next_round()
        assert s.combatants[0].action_points.current == 3

    def test_refreshes_everyone_in_round_mode(self) -> None:
        s = scheduler(mode=APAutomation.ROUND)
        s.start_encounter()
        for c in s.combatants:
            c.action_points.current = 1
        s.next_round()
        assert ap(s) == [3, 3, 3]


class TestRefreshRules:
    def test_dazed_gets_at_least_one(self) -> None:
        c = make("Dazed", max_ap=0, dazed=True)
        assert c.refresh_action_points() == 1

    def test_debt_reduces_refresh_and_is_consumed(self) -> None:
        c = make("Wounded", ap_debt=1)
        assert c.refresh_action_points() == 2
        assert c.ap_debt == 0
        assert c.refresh_action_points() == 3

    def test_debt_never_goes_below_floor(self) -> None:
        assert make("A", max_ap=1, ap_debt=5).refresh_action_points() == 0
        assert make("B", max_ap=1, ap_debt=5, dazed=True).refresh_action_points() == 1


class TestSpendAndAttack:
    def test_spend(self) -> None:
        s = scheduler()
        c = make("A", current=3)
        assert s.spend_action_points(c, 2) is True
        assert c.action_points.current == 1

    def test_insufficient(self) -> None:
        s = scheduler()
        c = make("A", current=1)
        assert s.spend_action_points(c, 2) is False
        assert c.action_points.current == 1

    def test_free_cost(self) -> None:
        s = scheduler()
        c = make("A", current=0)
        assert s.spend_action_points(c, 0) is True

    def test_can_attack(self) -> None:
        s = scheduler()
        assert s.can_attack(make("A", current=1)) is True
        assert s.can_attack(make("B", current=0)) is False
        assert s.can_attack(make("C", current=2, defensive_stance=True)) is False


class TestEncounterLifecycle:
    def test_current_and_next(self) -> None:
        s = scheduler()
        s.start_encounter()
        assert s.current.name == "C0"
        assert s.next_combatant.name == "C1"
        s.advance_turn()
        s.advance_turn()
        assert s.next_combatant.name == "C0"

    def test_end_encounter(self) -> None:
        s = scheduler()
        s.start_encounter()
        s.advance_turn()
        s.end_encounter()
        assert s.combatants == []
        assert s.started is False
        with pytest.raises(InvalidState):
            s.advance_turn()
