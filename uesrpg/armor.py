"""
Armor and damage reduction.

Armor subtracts its rating from incoming damage. Winning an opposed attack
can buy the "penetrate" advantage, which drops the defender's armor a
tier for that hit: full armor counts as partial (half rating, rounded
down) and partial armor counts as none. Unarmored stays unarmored.

Penetration never changes the ArmorState itself; it only produces the
effective rating used for this one calculation.
"""

from __future__ import annotations

from uesrpg.errors import InvalidState
from uesrpg.records import ArmorState, DamageResult
from uesrpg.types import HitLocation

_LOCATIONS: dict[str, HitLocation] = {
    "Head": "Head",
    "Body": "Body",
    "Right Arm": "Right Arm",
    "Left Arm": "Left Arm",
    "Right Leg": "Right Leg",
    "Left Leg": "Left Leg",
    "RightArm": "Right Arm",
    "LeftArm": "Left Arm",
    "RightLeg": "Right Leg",
    "LeftLeg": "Left Leg",
}


def normalize_hit_location(name: str | None) -> HitLocation:
    """Map a host hit location label onto a canonical one (default Body)."""
    return _LOCATIONS.get(str(name or "Body").strip(), "Body")


def apply_penetration(armor: ArmorState, penetrate: bool) -> int:
    """Return the armor rating that applies to this hit."""
    if armor.rating < 0:
        raise InvalidState(f"armor rating must not be negative, got {armor.rating}")
    if not penetrate:
        return armor.rating
    if armor.armor_class == "full":
        return armor.rating // 2
    if armor.armor_class == "partial":
        return 0
    return armor.rating


def compute_damage(
    raw_damage: int,
    armor: ArmorState,
    penetrate: bool,
    *,
    hit_location: str | None = None,
) -> DamageResult:
    """Reduce raw damage by (possibly penetrated) armor, never below 0."""
    if raw_damage < 0:
        raise InvalidState(f"raw damage must not be negative, got {raw_damage}")
    effective = apply_penetration(armor, penetrate)
    return DamageResult(
        raw_damage=raw_damage,
        effective_armor_rating=effective,
        final_damage=max(0, raw_damage - effective),
        armor_penetrated=penetrate,
        hit_location=normalize_hit_location(hit_location),
    )
