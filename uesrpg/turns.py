"""
Turn order and the action point economy.

An encounter is an ordered list of combatants. The scheduler walks that
list one turn at a time; every time it wraps back to the first combatant a
new round begins.

Each combatant has a pool of action points (AP). With automation enabled
the scheduler refills pools to their maximum, and when it does so matters:

Characters who haven't acted yet in the first round may still take
reactions, but each reaction costs them an AP from their first turn. So in
round 1 nobody is refilled as their turn comes up; they start their turn
with whatever they have left. From round 2 on, every combatant is refilled
just before their turn begins. The one exception inside round 1 is the
wrap into round 2, which refills the first combatant of the new round.

Two conditions change a refill: a dazed combatant always gets at least 1
AP, and a combatant carrying AP debt (from a body wound taken while already
at 0) refills that many points short. The debt is consumed by the refill.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from uesrpg.errors import InvalidState
from uesrpg.settings import Settings
from uesrpg.types import APAutomation

logger = logging.getLogger(__name__)


@dataclass
class ActionPoints:
    current: int = 0
    max: int = 3


@dataclass
class Combatant:
    """An actor's slot in the turn order."""

    name: str
    action_points: ActionPoints = field(default_factory=ActionPoints)
    dazed: bool = False
    ap_debt: int = 0
    """AP withheld from the next refill."""

    defensive_stance: bool = False
    """While in a defensive stance the combatant cannot attack."""

    def refresh_action_points(self) -> int:
        """Refill the AP pool and return the new current value."""
        floor = 1 if self.dazed else 0
        refreshed = max(floor, self.action_points.max)
        if self.ap_debt > 0:
            refreshed = max(floor, refreshed - self.ap_debt)
            self.ap_debt = 0
        self.action_points.current = refreshed
        return refreshed


class TurnScheduler:
    """Owns the turn order of one combat encounter.

    Only start_encounter(), advance_turn() and next_round() move the turn
    pointer. The scheduler is created with the encounter and dropped with
    it; nothing else should mutate its state.
    """

    def __init__(self, combatants: list[Combatant] | tuple[Combatant, ...], settings: Settings | None = None) -> None:
        self.combatants: list[Combatant] = list(combatants)
        self.settings = settings or Settings()
        self.round: int = 1
        self.turn: int = 0
        self.started: bool = False

    @property
    def automation(self) -> APAutomation | None:
        """The active refresh mode, or None when automation is off."""
        if not self.settings.automate_action_points:
            return None
        return self.settings.action_point_automation

    @property
    def current(self) -> Combatant:
        self._require_combatants()
        return self.combatants[self.turn]

    @property
    def next_combatant(self) -> Combatant:
        """The combatant whose turn comes after the current one."""
        self._require_combatants()
        return self.combatants[(self.turn + 1) % len(self.combatants)]

    def start_encounter(self) -> None:
        """Begin round 1 at the first combatant, filling everyone's AP if
        automation is on."""
        self._require_combatants()
        if self.automation is not None:
            self._refresh_all()
        self.round = 1
        self.turn = 0
        self.started = True
        logger.debug("Encounter started with %d combatants", len(self.combatants))

    def advance_turn(self) -> None:
        """Move to the next combatant, refreshing their AP first when the
        rules call for it, and start a new round on wrap-around."""
        self._require_started()
        next_index = (self.turn + 1) % len(self.combatants)
        wraps = next_index == 0

        if self.automation is APAutomation.TURN and (self.round != 1 or wraps):
            self.combatants[next_index].refresh_action_points()

        self.turn = next_index
        if wraps:
            self._begin_round(self.round + 1)

    def next_round(self) -> None:
        """Skip the rest of this round and start the next one at turn 0."""
        self._require_started()
        if self.automation is APAutomation.TURN:
            self.combatants[0].refresh_action_points()
        self.turn = 0
        self._begin_round(self.round + 1)

    def end_encounter(self) -> None:
        """Drop every combatant; the scheduler can't be used until it is
        given a new turn order and started again."""
        self.combatants = []
        self.round = 1
        self.turn = 0
        self.started = False

    def spend_action_points(self, combatant: Combatant, cost: int) -> bool:
        """Spend AP from a combatant's pool.

        Returns False, leaving the pool untouched, when there isn't enough.
        A zero or negative cost is free.
        """
        if cost <= 0:
            return True
        pool = combatant.action_points
        if pool.current < cost:
            logger.warning(
                "%s does not have enough Action Points (%d/%d)",
                combatant.name, pool.current, cost,
            )
            return False
        pool.current -= cost
        return True

    def can_attack(self, combatant: Combatant) -> bool:
        """Attacks need at least 1 AP and no defensive stance."""
        return combatant.action_points.current > 0 and not combatant.defensive_stance

    def _begin_round(self, round_num: int) -> None:
        self.round = round_num
        if self.automation is APAutomation.ROUND:
            self._refresh_all()
        logger.debug("Round %d begins", round_num)

    def _refresh_all(self) -> None:
        for c in self.combatants:
            c.refresh_action_points()

    def _require_combatants(self) -> None:
        if not self.combatants:
            raise InvalidState("the encounter has no combatants")

    def _require_started(self) -> None:
        self._require_combatants()
        if not self.started:
            raise InvalidState("the encounter has not started")
