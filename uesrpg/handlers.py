"""
Glue between the host's chat-card buttons and the contest registry.

The host renders the card and wires its buttons; when one is clicked it
calls OpposedCardHandlers.dispatch() with the button's action name and the
card's message id. This is the only layer that catches RulesError: a
rejected action is logged and shown to the user through the host's
notification callback, and dispatch() returns None. Anything else is a bug
and propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from uesrpg.errors import RulesError
from uesrpg.registry import ContestRegistry
from uesrpg.types import ActionName

logger = logging.getLogger(__name__)

Notify = Callable[[str], None]


class OpposedCardHandlers:
    """Dispatches card actions to the registry and reports failures."""

    def __init__(self, registry: ContestRegistry, notify: Notify | None = None) -> None:
        self.registry = registry
        self.notify: Notify = notify or (lambda message: None)
        self._actions: dict[ActionName, Callable[..., Any]] = {
            "resolve-opposed": self.registry.resolve,
            "close-card": self.registry.close,
            "remove-participant": self.registry.remove_participant,
            "choose-advantage": self.registry.choose_advantage,
            "skip-advantage": self.registry.skip_advantage,
        }

    def dispatch(self, action: ActionName, contest_id: str, *args: Any, **kwargs: Any) -> Any:
        """Run a card action, returning its result or None if it was
        rejected."""
        handler = self._actions.get(action)
        if handler is None:
            raise ValueError(f"unknown card action: {action!r}")
        try:
            return handler(contest_id, *args, **kwargs)
        except RulesError as e:
            logger.warning("Card action %s on %s rejected: %s", action, contest_id, e)
            self.notify(str(e))
            return None
