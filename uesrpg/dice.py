"""
Percentile test resolution.

Every test in this game is a roll-under: roll a d100 and compare it with
the target number (TN). Rolling at or under the TN succeeds. How well you
succeed or how badly you fail is measured in degrees:

- Degrees of Success (DoS) are the tens digit of the roll itself, with a
  minimum of 1. A high roll that still succeeds is a better success than a
  low one. Target numbers above 100 add their tens count as bonus DoS.
- Degrees of Failure (DoF) are 1 plus the tens digit of how far the roll
  overshot the TN.

Rolling the dice is kept separate from reading them: d100() produces a
number, resolve() is a pure function of that number and the TN.
"""

from __future__ import annotations

from collections.abc import Iterable
from random import randrange

from uesrpg.errors import InvalidState
from uesrpg.records import Outcome

NPC_CRITICAL_SUCCESS = 3
"""NPCs have no lucky numbers; any roll at or below this is a critical."""

NPC_CRITICAL_FAILURE = 98
"""NPCs have no unlucky numbers; any roll at or above this fumbles."""


def d100() -> int:
    """Roll a single percentile die (1-100)."""
    return randrange(1, 101)


def resolve(
    roll: int,
    target: int,
    *,
    critical_success: bool = False,
    critical_failure: bool = False,
) -> Outcome:
    """Turn a roll and a target number into an Outcome.

    A roll equal to the target is a success. Non-positive rolls or targets
    are a caller error and raise InvalidState.
    """
    if roll < 1:
        raise InvalidState(f"roll must be at least 1, got {roll}")
    if target < 1:
        raise InvalidState(f"target must be at least 1, got {target}")

    if roll <= target:
        dos = max(1, roll // 10)
        if target > 100:
            dos += target // 10
        return Outcome(
            roll=roll, target=target, is_success=True,
            degrees_of_success=dos, degrees_of_failure=0,
            critical_success=critical_success, critical_failure=critical_failure,
        )

    dof = 1 + (roll - target) // 10
    return Outcome(
        roll=roll, target=target, is_success=False,
        degrees_of_success=0, degrees_of_failure=dof,
        critical_success=critical_success, critical_failure=critical_failure,
    )


def critical_flags(
    value: int,
    *,
    lucky_numbers: Iterable[int] = (),
    unlucky_numbers: Iterable[int] = (),
    is_npc: bool = False,
) -> tuple[bool, bool]:
    """Return (critical_success, critical_failure) for a rolled value.

    Player characters crit on their personal lucky and unlucky numbers.
    NPCs use the fixed thresholds instead. If a value is somehow both lucky
    and unlucky, lucky wins.
    """
    if is_npc:
        crit_success = value <= NPC_CRITICAL_SUCCESS
        crit_failure = value >= NPC_CRITICAL_FAILURE
    else:
        crit_success = value in set(lucky_numbers)
        crit_failure = value in set(unlucky_numbers)
    return crit_success, crit_failure and not crit_success


def format_degree(outcome: Outcome | None) -> str:
    """Format an outcome as "3 DoS" / "2 DoF", or a dash if there is none."""
    if outcome is None:
        return "—"
    return outcome.textual
