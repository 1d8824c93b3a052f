"""Engine configuration supplied by the host's settings store.

The engine never looks settings up on its own. The host reads its store
once, builds a Settings and hands it to whatever needs it (the turn
scheduler, the UI).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from uesrpg.errors import InvalidState
from uesrpg.types import APAutomation


@dataclass(frozen=True)
class Settings:
    """Options that change how the engine automates bookkeeping."""

    automate_action_points: bool = False
    """Refresh combatants' action points automatically as turns pass."""

    action_point_automation: APAutomation = APAutomation.TURN
    """Whether automation refreshes per turn or once per round. Only
    consulted when automate_action_points is on."""

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> Settings:
        """Build Settings from a host settings dictionary.

        Accepts the host's camelCase keys. Unknown keys are ignored so the
        host can pass its whole store.
        """
        automate = bool(values.get("automateActionPoints", False))
        mode = values.get("actionPointAutomation", APAutomation.TURN.value)
        # Older stores keep the mode only; "none" means automation is off.
        if mode == "none":
            return cls(automate_action_points=False)
        if "automateActionPoints" not in values and "actionPointAutomation" in values:
            automate = True
        try:
            automation = APAutomation(mode)
        except ValueError:
            raise InvalidState(f"unknown action point automation mode: {mode!r}") from None
        return cls(automate_action_points=automate, action_point_automation=automation)
