"""Exceptions raised by the rules engine.

Core code raises these synchronously and never retries. The interaction
handlers in ``uesrpg.handlers`` are the only place they are caught, and
they turn them into user-visible notices.
"""

from __future__ import annotations


class RulesError(RuntimeError):
    """Base class for every rules-engine error."""


class InvalidState(RulesError):
    """An operation was attempted that the current state does not allow,
    or a caller passed malformed input (negative rolls, empty turn order)."""


class DuplicateParticipant(RulesError):
    """The actor is already taking part in this contest."""


class IncompleteContest(RulesError):
    """The contest needs at least two participants, all of them rolled."""


class InvalidSelection(RulesError):
    """The chosen advantage was not among the options offered."""


class ContestClosed(RulesError):
    """The contest has been closed and can no longer change."""


class AlreadyExists(RulesError):
    """A contest with this identifier is already registered."""


class ContestBusy(RulesError):
    """Another operation on this contest is still in progress."""
