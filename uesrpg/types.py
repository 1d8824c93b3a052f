"""
Domain-specific type aliases for the opposed-test rules engine.

Like most aliases in this package these aren't checked at runtime; they
exist so that signatures say what kind of string is expected. When you see
a parameter typed as ArmorClass instead of str, you know it's one of the
three armor tiers and not an arbitrary label.

The two enums are the exception: contest state and action point
automation are compared and switched on throughout the engine, so they get
real enum members.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, TypeAlias

# Armor tier of the defender at the struck location. Penetrating armor
# shifts the tier down by one (full -> partial, partial -> none).
ArmorClass: TypeAlias = Literal["unarmored", "partial", "full"]

# Canonical hit locations. Host data sometimes spells the limbs without a
# space ("RightArm"); armor.normalize_hit_location maps both onto these.
HitLocation: TypeAlias = Literal[
    "Head",
    "Body",
    "Right Arm",
    "Left Arm",
    "Right Leg",
    "Left Leg",
]

# Primary special actions can only be used on the actor's own turn.
# Secondary ones can also be taken as a reaction.
SpecialActionType: TypeAlias = Literal["primary", "secondary"]

# Buttons on the opposed-test chat card. The host's click dispatch hands
# one of these to handlers.OpposedCardHandlers.
ActionName: TypeAlias = Literal[
    "resolve-opposed",
    "close-card",
    "remove-participant",
    "choose-advantage",
    "skip-advantage",
]


class ContestState(str, Enum):
    """Lifecycle of an opposed contest. Closed is terminal."""

    OPEN = "open"
    AWAITING_ADVANTAGE = "awaiting_advantage"
    RESOLVED = "resolved"
    CLOSED = "closed"


class APAutomation(str, Enum):
    """When automated action points are refreshed.

    TURN refreshes the combatant whose turn is about to begin (with the
    first-round reaction exception). ROUND refreshes everybody at the top
    of each round.
    """

    TURN = "turn"
    ROUND = "round"
