"""
Opposed contests: two or more actors roll against each other.

A contest starts Open. Actors join (or are pre-added as targets), each
records a roll, and once at least two have rolled someone resolves the
contest. Resolution reads every roll with the dice resolver and compares
them:

- a single critical success wins outright;
- otherwise the highest Degrees of Success wins, with failures (and
  critical failures) counting as 0 DoS;
- if nobody succeeded, or the best successes tie, there is no winner.

A unique winner earns an advantage to spend, and the contest waits in
AwaitingAdvantage until they choose (or skip). The choice feeds the armor
model: the winner's damage is applied against the runner-up's armor,
penetrated or not. Then the contest is Resolved, and finally Closed when
the card is dismissed.

    Open -> AwaitingAdvantage -> Resolved -> Closed

A card can be closed from any state. Participants can only join while
Open. Removing one while the winner is still choosing abandons the choice
and reopens the contest, since the result no longer describes the people
left in it.
"""

from __future__ import annotations

import logging
import time

from uesrpg import dice
from uesrpg.advantages import PRESS_BONUS, AdvantageNegotiator, PendingChoice
from uesrpg.armor import compute_damage, normalize_hit_location
from uesrpg.errors import ContestBusy, ContestClosed, DuplicateParticipant, IncompleteContest, InvalidState
from uesrpg.records import AdvantageOption, ArmorState, ContestResult, Participant, Roll
from uesrpg.types import ContestState

logger = logging.getLogger(__name__)


def contest_score(p: Participant) -> int:
    """The number compared to pick a winner: DoS, or 0 for any failure."""
    outcome = p.outcome
    if outcome is None or not outcome.is_success or outcome.critical_failure:
        return 0
    return outcome.degrees_of_success


def pick_winner(participants: list[Participant]) -> tuple[Participant | None, Participant | None]:
    """Return (winner, runner_up) among resolved participants.

    Both are None when there is no winner. The runner-up is the best of
    the rest, and is whoever the winner's damage lands on.
    """
    crits = [p for p in participants if p.outcome is not None and p.outcome.critical_success]
    if len(crits) == 1:
        winner = crits[0]
        rest = [p for p in participants if p is not winner]
        return winner, max(rest, key=contest_score)

    ranked = sorted(participants, key=contest_score, reverse=True)
    best, second = ranked[0], ranked[1]
    if contest_score(best) == 0 or contest_score(best) == contest_score(second):
        return None, None
    return best, second


class OpposedContest:
    """State machine for one opposed-test card.

    The contest_id is the host's chat message id; it is stable for the
    lifetime of the card and is what the registry keys on.
    """

    def __init__(self, contest_id: str, negotiator: AdvantageNegotiator | None = None) -> None:
        self.contest_id = contest_id
        self.negotiator = negotiator or AdvantageNegotiator()
        self.state: ContestState = ContestState.OPEN
        self.participants: list[Participant] = []
        self.result: ContestResult | None = None
        self.options: list[AdvantageOption] = []
        self.pending: PendingChoice | None = None
        self.created_at: float = time.time()

    def __repr__(self) -> str:
        return f"<OpposedContest {self.contest_id} {self.state.value} ({len(self.participants)} participants)>"

    @property
    def winner(self) -> Participant | None:
        return self.result.winner if self.result else None

    @property
    def is_empty(self) -> bool:
        return not self.participants

    def participant(self, actor_id: str) -> Participant | None:
        return next((p for p in self.participants if p.actor_id == actor_id), None)

    # --- Open ---------------------------------------------------------

    def add_participant(
        self,
        actor_id: str,
        name: str = "",
        *,
        damage: int | None = None,
        armor: ArmorState | None = None,
    ) -> Participant:
        """Add an actor who has not rolled yet."""
        self._require_open()
        if self.participant(actor_id) is not None:
            raise DuplicateParticipant(f"{actor_id} is already in contest {self.contest_id}")
        p = Participant(actor_id=actor_id, name=name, damage=damage, armor=armor)
        self.participants.append(p)
        self._invalidate()
        return p

    def record_roll(self, actor_id: str, roll: Roll, *, hit_location: str | None = None) -> Participant:
        """Record an actor's roll, adding them to the contest if needed."""
        self._require_open()
        p = self.participant(actor_id)
        if p is None:
            p = self.add_participant(actor_id)
        p.roll = roll
        if hit_location is not None:
            p.hit_location = normalize_hit_location(hit_location)
        self._invalidate()
        return p

    def remove_participant(self, actor_id: str) -> None:
        """Take an actor out of the contest.

        Allowed while Open, and while the winner is choosing (which cancels
        the choice and reopens the contest). Locked once resolved.
        """
        self._require_not_closed()
        if self.state is ContestState.RESOLVED:
            raise InvalidState(f"contest {self.contest_id} is resolved; participants are locked")
        p = self.participant(actor_id)
        if p is None:
            raise InvalidState(f"{actor_id} is not in contest {self.contest_id}")

        if self.state is ContestState.AWAITING_ADVANTAGE:
            self._cancel_pending()
            self.state = ContestState.OPEN
            logger.debug("Contest %s reopened: %s left mid-choice", self.contest_id, actor_id)

        self.participants.remove(p)
        self._invalidate()

    # --- Resolution -----------------------------------------------------

    def resolve(self) -> ContestResult:
        """Compare everybody's rolls and decide the winner.

        Moves to AwaitingAdvantage when there is a winner with options to
        choose from, or straight to Resolved otherwise.
        """
        self._require_not_closed()
        if self.state is ContestState.AWAITING_ADVANTAGE:
            raise ContestBusy(f"contest {self.contest_id} is waiting on an advantage choice")
        if self.state is ContestState.RESOLVED:
            raise InvalidState(f"contest {self.contest_id} is already resolved")
        if len(self.participants) < 2:
            raise IncompleteContest("need at least 2 participants to resolve")
        unrolled = [p.name for p in self.participants if p.roll is None]
        if unrolled:
            raise IncompleteContest(f"still waiting on rolls from {', '.join(unrolled)}")

        for p in self.participants:
            roll = p.roll
            p.outcome = dice.resolve(
                roll.value, roll.target,
                critical_success=roll.critical_success,
                critical_failure=roll.critical_failure,
            )

        winner, runner_up = pick_winner(self.participants)
        margin = max(0, contest_score(winner) - contest_score(runner_up)) if winner and runner_up else 0
        self.result = ContestResult(winner=winner, runner_up=runner_up, margin=margin)

        if winner is not None:
            self.options = self.negotiator.present_options(winner)
            if self.options:
                self.pending = self.negotiator.open_choice(self.options)
                self.state = ContestState.AWAITING_ADVANTAGE
                logger.debug("Contest %s: %s won by %d, awaiting advantage", self.contest_id, winner.name, margin)
                return self.result

        self._finish(None)
        return self.result

    def choose_advantage(self, option_id: str, *, hit_location: str | None = None) -> ContestResult:
        """Spend the winner's advantage and finish resolving.

        hit_location only matters for the precision advantage.
        """
        self._require_awaiting()
        choice = self.negotiator.capture_choice(self.options, option_id)
        self._finish(choice, hit_location)
        self._complete_pending(choice)
        return self.result

    def skip_advantage(self) -> ContestResult:
        """Finish resolving without spending the advantage."""
        self._require_awaiting()
        self._finish(None)
        self._complete_pending(None)
        return self.result

    def close(self) -> None:
        """Dismiss the card. Works from any state; Closed is final."""
        self._require_not_closed()
        self._cancel_pending()
        self.state = ContestState.CLOSED
        logger.debug("Contest %s closed", self.contest_id)

    # --- Internals ------------------------------------------------------

    def _finish(self, advantage: str | None, hit_location: str | None = None) -> None:
        result = self.result
        result.advantage = advantage
        winner, runner_up = result.winner, result.runner_up
        if winner is not None:
            location = winner.hit_location or "Body"
            if advantage == "precision" and hit_location:
                location = hit_location
            result.hit_location = normalize_hit_location(location)
            if advantage == "press":
                result.press_bonus = PRESS_BONUS
            if winner.damage is not None:
                armor = (runner_up.armor if runner_up else None) or ArmorState()
                result.damage = compute_damage(
                    winner.damage, armor, advantage == "penetrate",
                    hit_location=result.hit_location,
                )
        self.state = ContestState.RESOLVED
        logger.debug("Contest %s resolved (advantage=%s)", self.contest_id, advantage)

    def _invalidate(self) -> None:
        self.result = None
        self.options = []
        for p in self.participants:
            p.outcome = None

    def _complete_pending(self, choice: str | None) -> None:
        pending, self.pending = self.pending, None
        if pending is not None and not pending.done:
            pending.resolve(choice)

    def _cancel_pending(self) -> None:
        pending, self.pending = self.pending, None
        if pending is not None:
            pending.cancel()

    def _require_not_closed(self) -> None:
        if self.state is ContestState.CLOSED:
            raise ContestClosed(f"contest {self.contest_id} is closed")

    def _require_open(self) -> None:
        self._require_not_closed()
        if self.state is not ContestState.OPEN:
            raise InvalidState(f"contest {self.contest_id} is {self.state.value}; participants are locked")

    def _require_awaiting(self) -> None:
        self._require_not_closed()
        if self.state is not ContestState.AWAITING_ADVANTAGE:
            raise InvalidState(f"contest {self.contest_id} is not waiting on an advantage choice")
