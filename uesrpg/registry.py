"""
The process-wide table of live contests.

Every button on every opposed-test card goes through the registry: it is
the single place that knows which OpposedContest belongs to which chat
message. It also keeps operations on one card from overlapping. Each
contest id has its own lock, taken without waiting; if a click arrives
while another operation on the same card is still running, the second one
is rejected with ContestBusy instead of being queued behind it.

Contests leave the registry when they are closed, or when their last
participant is removed.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

from uesrpg.advantages import AdvantageNegotiator
from uesrpg.contest import OpposedContest
from uesrpg.errors import AlreadyExists, ContestBusy, InvalidState
from uesrpg.records import ContestResult
from uesrpg.types import ContestState

logger = logging.getLogger(__name__)

OPEN_CARD_MAX_AGE = 24 * 60 * 60
"""Open cards older than a day are not offered for joining."""


class ContestRegistry:
    """Maps contest ids to their one live OpposedContest."""

    def __init__(self, negotiator: AdvantageNegotiator | None = None) -> None:
        self.negotiator = negotiator or AdvantageNegotiator()
        self._contests: dict[str, OpposedContest] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def __contains__(self, contest_id: str) -> bool:
        return contest_id in self._contests

    def __len__(self) -> int:
        return len(self._contests)

    def get(self, contest_id: str) -> OpposedContest | None:
        return self._contests.get(contest_id)

    def create(self, contest_id: str) -> OpposedContest:
        with self._guard:
            if contest_id in self._contests:
                raise AlreadyExists(f"contest {contest_id} already exists")
            contest = OpposedContest(contest_id, self.negotiator)
            self._contests[contest_id] = contest
            self._locks[contest_id] = threading.Lock()
        logger.debug("Registered contest %s", contest_id)
        return contest

    def remove(self, contest_id: str) -> None:
        """Forget a contest. Removing an unknown id does nothing."""
        with self._guard:
            self._contests.pop(contest_id, None)
            self._locks.pop(contest_id, None)

    def latest_open(self, max_age: float = OPEN_CARD_MAX_AGE) -> OpposedContest | None:
        """The newest contest still open for joining, if it is recent."""
        now = time.time()
        candidates = [
            c for c in self._contests.values()
            if c.state is ContestState.OPEN and now - c.created_at < max_age
        ]
        return max(candidates, key=lambda c: c.created_at, default=None)

    @contextmanager
    def operation(self, contest_id: str) -> Iterator[OpposedContest]:
        """Hold the contest's lock for the duration of one operation."""
        contest = self._contests.get(contest_id)
        lock = self._locks.get(contest_id)
        if contest is None or lock is None:
            raise InvalidState(f"no contest with id {contest_id}")
        if not lock.acquire(blocking=False):
            raise ContestBusy(f"contest {contest_id} is busy")
        try:
            yield contest
        finally:
            lock.release()

    def resolve(self, contest_id: str) -> ContestResult:
        with self.operation(contest_id) as contest:
            return contest.resolve()

    def choose_advantage(self, contest_id: str, option_id: str, *, hit_location: str | None = None) -> ContestResult:
        with self.operation(contest_id) as contest:
            return contest.choose_advantage(option_id, hit_location=hit_location)

    def skip_advantage(self, contest_id: str) -> ContestResult:
        with self.operation(contest_id) as contest:
            return contest.skip_advantage()

    def remove_participant(self, contest_id: str, actor_id: str) -> None:
        """Remove an actor; a contest left with nobody in it is evicted."""
        with self.operation(contest_id) as contest:
            contest.remove_participant(actor_id)
            empty = contest.is_empty
        if empty:
            logger.debug("Contest %s has no participants left", contest_id)
            self.remove(contest_id)

    def close(self, contest_id: str) -> None:
        """Close a contest and evict it."""
        with self.operation(contest_id) as contest:
            contest.close()
        self.remove(contest_id)
