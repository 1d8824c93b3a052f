"""
Spending the advantage won in an opposed test.

The winner of an opposed test earns an advantage and picks one way to use
it. Everybody can choose from the three base options:

- precision: choose where the blow lands instead of using the rolled
  hit location;
- penetrate: shift the defender's armor down a tier for this hit;
- press: +10 on the winner's next attack.

On top of that, the winner's active combat style may teach special
actions (disarm, trip, ...) that can also be bought with an advantage.
Which ones a style knows is host data, so the negotiator takes a lookup
callable instead of reading actors itself.

Choosing is the one place the engine waits on a human. open_choice()
returns a PendingChoice: a future that the host completes when the player
clicks, or cancels if the contest is torn down first. There is no timeout.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import Future
from dataclasses import dataclass

from uesrpg.errors import InvalidSelection
from uesrpg.records import AdvantageOption, Participant
from uesrpg.types import SpecialActionType

PRESS_BONUS = 10
"""Bonus to the winner's next attack from the press advantage."""

BASE_ADVANTAGES: tuple[AdvantageOption, ...] = (
    AdvantageOption("precision", "Precision Strike", "Choose hit location"),
    AdvantageOption("penetrate", "Penetrate Armor", "Full→Partial, Partial→None"),
    AdvantageOption("press", "Press Advantage", f"+{PRESS_BONUS} next attack"),
)


@dataclass(frozen=True)
class SpecialAction:
    id: str
    name: str
    action_type: SpecialActionType


SPECIAL_ACTIONS: tuple[SpecialAction, ...] = (
    SpecialAction("arise", "Arise", "secondary"),
    SpecialAction("bash", "Bash", "primary"),
    SpecialAction("blindOpponent", "Blind Opponent", "secondary"),
    SpecialAction("disarm", "Disarm", "primary"),
    SpecialAction("feint", "Feint", "primary"),
    SpecialAction("forceMovement", "Force Movement", "primary"),
    SpecialAction("resist", "Resist", "secondary"),
    SpecialAction("trip", "Trip", "secondary"),
)

StyleLookup = Callable[[str], Iterable[AdvantageOption]]
"""Given an actor id, return the special advantages their style knows."""


def get_special_action(action_id: str) -> SpecialAction | None:
    key = str(action_id or "").strip()
    return next((sa for sa in SPECIAL_ACTIONS if sa.id == key), None)


def special_advantages(known: Mapping[str, bool]) -> list[AdvantageOption]:
    """Advantage options for the special actions marked known in a
    combat style's ``{id: bool}`` map, in registry order.

    Keys are matched the way get_special_action matches them; ids that are
    not special actions are ignored.
    """
    marked = {get_special_action(action_id) for action_id, value in known.items() if value is True}
    return [
        AdvantageOption(sa.id, sa.name, f"Special action ({sa.action_type})")
        for sa in SPECIAL_ACTIONS
        if sa in marked
    ]


class PendingChoice:
    """An advantage choice the engine is waiting on.

    Wraps a concurrent.futures.Future so it can be completed from a plain
    callback and awaited from an event loop alike.
    """

    def __init__(self, options: Sequence[AdvantageOption]) -> None:
        self.options: list[AdvantageOption] = list(options)
        self._future: Future[str | None] = Future()

    @property
    def done(self) -> bool:
        return self._future.done()

    @property
    def cancelled(self) -> bool:
        return self._future.cancelled()

    def resolve(self, option_id: str | None) -> None:
        """Complete the choice; None means the winner skipped it."""
        self._future.set_result(option_id)

    def cancel(self) -> bool:
        return self._future.cancel()

    def result(self) -> str | None:
        """The chosen id. Raises CancelledError if the choice was
        abandoned; blocks if nobody has chosen yet."""
        return self._future.result()

    def add_done_callback(self, fn: Callable[[PendingChoice], object]) -> None:
        self._future.add_done_callback(lambda _f: fn(self))

    async def wait(self) -> str | None:
        """Suspend until the choice is made.

        Returns None if it was skipped or had already been cancelled. A
        cancellation that happens while waiting propagates as
        asyncio.CancelledError.
        """
        if self._future.cancelled():
            return None
        return await asyncio.wrap_future(self._future)


class AdvantageNegotiator:
    """Offers the winner their advantage options and validates the pick."""

    def __init__(self, style_lookup: StyleLookup | None = None) -> None:
        self.style_lookup = style_lookup

    def present_options(self, winner: Participant) -> list[AdvantageOption]:
        """Base options first, then any specials from the winner's style.

        Style options that reuse an id already offered are dropped.
        """
        options = list(BASE_ADVANTAGES)
        if self.style_lookup is None:
            return options
        seen = {o.id for o in options}
        for option in self.style_lookup(winner.actor_id):
            if option.id not in seen:
                seen.add(option.id)
                options.append(option)
        return options

    def capture_choice(self, options: Sequence[AdvantageOption], selection: str) -> str:
        """Return the selected option id, or raise InvalidSelection."""
        if not any(o.id == selection for o in options):
            raise InvalidSelection(f"{selection!r} is not an available advantage")
        return selection

    def open_choice(self, options: Sequence[AdvantageOption]) -> PendingChoice:
        return PendingChoice(options)
