#!/usr/bin/env python3
"""Run a quick demo opposed test: a sellsword attacks an armored guard."""

import logging

from uesrpg.dice import d100
from uesrpg.records import ArmorState, Roll
from uesrpg.registry import ContestRegistry
from uesrpg.renderers import TextRenderer
from uesrpg.types import ContestState

logging.basicConfig(level=logging.DEBUG)

registry = ContestRegistry()
renderer = TextRenderer()

contest = registry.create("demo")
contest.add_participant("sellsword", "Sellsword", damage=14)
contest.add_participant("guard", "Guard", damage=9, armor=ArmorState(8, "full"))
contest.record_roll("sellsword", Roll(d100(), 65))
contest.record_roll("guard", Roll(d100(), 55))

registry.resolve("demo")
if contest.state is ContestState.AWAITING_ADVANTAGE:
    print("\n".join(renderer.render_contest(contest)))
    registry.choose_advantage("demo", "penetrate")

print("\n".join(renderer.render_contest(contest)))
registry.close("demo")
