"""Renderers that turn contests and encounters into text.

The TextRenderer produces terminal-friendly lines for the demo script and
for the Streamlit card preview. The host's own HTML chat cards consume the
same records directly.
"""

from __future__ import annotations

from uesrpg.contest import OpposedContest
from uesrpg.dice import format_degree
from uesrpg.records import ContestResult, DamageResult, Participant
from uesrpg.turns import TurnScheduler
from uesrpg.types import ContestState


class TextRenderer:
    """Renders engine state to lists of strings (one per line)."""

    def render_contest(self, contest: OpposedContest) -> list[str]:
        lines: list[str] = []
        lines.append(f"Opposed test {contest.contest_id} [{contest.state.value}]")
        for p in contest.participants:
            lines.append("  " + self.render_participant(p))
        if contest.state is ContestState.AWAITING_ADVANTAGE:
            winner = contest.winner
            lines.append(f"  {winner.name} may spend an advantage:")
            for option in contest.options:
                lines.append(f"    - {option.name}: {option.description}")
        if contest.result is not None and contest.state is not ContestState.AWAITING_ADVANTAGE:
            lines.extend(self.render_result(contest.result))
        return lines

    def render_participant(self, p: Participant) -> str:
        if p.roll is None:
            return f"{p.name}: waiting to roll"
        line = f"{p.name}: {p.roll.value} vs {p.roll.target}"
        if p.outcome is not None:
            line += f" ({format_degree(p.outcome)})"
            if p.outcome.critical_success:
                line += " critical success"
            elif p.outcome.critical_failure:
                line += " critical failure"
        return line

    def render_result(self, result: ContestResult) -> list[str]:
        if result.winner is None:
            return ["  No winner"]
        lines = [f"  Winner: {result.winner.name} by {result.margin}"]
        if result.advantage:
            lines.append(f"  Advantage: {result.advantage}")
        if result.press_bonus:
            lines.append(f"  +{result.press_bonus} to {result.winner.name}'s next attack")
        if result.damage is not None:
            lines.append("  " + self.render_damage(result.damage))
        return lines

    def render_damage(self, record: DamageResult) -> str:
        pen = " (penetrated)" if record.armor_penetrated else ""
        return (
            f"{record.raw_damage} damage to {record.hit_location} - "
            f"{record.effective_armor_rating} armor{pen} = {record.final_damage}"
        )

    def render_encounter(self, scheduler: TurnScheduler) -> list[str]:
        lines = [f"Round {scheduler.round}"]
        for i, c in enumerate(scheduler.combatants):
            marker = ">" if scheduler.started and i == scheduler.turn else " "
            ap = c.action_points
            lines.append(f"{marker} {c.name}: {ap.current}/{ap.max} AP")
        return lines
