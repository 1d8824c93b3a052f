"""Structured records for opposed tests, damage and contest results.

These dataclasses are the data model shared by the dice resolver, the
armor model and the contest state machine. Rolls, outcomes and armor are
frozen: once a die has been read it never changes, and penetration
derives a new armor value instead of editing the old one.
"""

from __future__ import annotations

from dataclasses import dataclass

from uesrpg.types import ArmorClass, HitLocation


@dataclass(frozen=True)
class Roll:
    """A recorded percentile roll against a target number."""

    value: int
    """The d100 result (1-100, or higher after bonuses)."""

    target: int
    """The test's target number. May exceed 100."""

    critical_success: bool = False
    """Rolled one of the actor's lucky numbers (or <= 3 for NPCs)."""

    critical_failure: bool = False
    """Rolled one of the actor's unlucky numbers (or >= 98 for NPCs)."""


@dataclass(frozen=True)
class Outcome:
    """Success or failure of a Roll, with its degree magnitude.

    Exactly one of degrees_of_success / degrees_of_failure is nonzero.
    """

    roll: int
    target: int
    is_success: bool
    degrees_of_success: int
    degrees_of_failure: int
    critical_success: bool = False
    critical_failure: bool = False

    @property
    def degree(self) -> int:
        """DoS on a success, DoF on a failure."""
        return self.degrees_of_success if self.is_success else self.degrees_of_failure

    @property
    def textual(self) -> str:
        return f"{self.degree} DoS" if self.is_success else f"{self.degree} DoF"


@dataclass(frozen=True)
class ArmorState:
    """Armor rating and tier at the location being struck."""

    rating: int = 0
    armor_class: ArmorClass = "unarmored"


@dataclass(frozen=True)
class DamageResult:
    """Damage after armor. final_damage is never negative."""

    raw_damage: int
    effective_armor_rating: int
    final_damage: int
    armor_penetrated: bool
    hit_location: HitLocation = "Body"


@dataclass(frozen=True)
class AdvantageOption:
    """One way the winner of an opposed test may spend their advantage."""

    id: str
    name: str
    description: str = ""


@dataclass
class Participant:
    """One actor taking part in an opposed contest."""

    actor_id: str
    name: str = ""
    roll: Roll | None = None
    outcome: Outcome | None = None
    """Filled in by OpposedContest.resolve()."""

    damage: int | None = None
    """Raw damage this actor deals if they win (None for pure defense)."""

    armor: ArmorState | None = None
    """Armor this actor wears where they would be struck."""

    hit_location: HitLocation | None = None
    """Location rolled alongside the test, if the host rolls one."""

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.actor_id


@dataclass
class ContestResult:
    """Everything a resolved contest decided.

    winner and runner_up are None when nobody won (both failed, or tied).
    advantage stays None until the winner spends it, and also when they
    skip it.
    """

    winner: Participant | None = None
    runner_up: Participant | None = None
    margin: int = 0
    advantage: str | None = None
    damage: DamageResult | None = None
    hit_location: HitLocation | None = None
    press_bonus: int = 0
