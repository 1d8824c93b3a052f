"""Streamlit front end standing in for the virtual tabletop host.

Plays the part of the chat card: create an opposed test, add rolls,
press the card's buttons, and spend the winner's advantage. A second tab
runs an encounter's turn order with action point automation.

Run with: PYTHONPATH=. streamlit run ui/app.py
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any

import streamlit as st

from uesrpg.advantages import AdvantageNegotiator, StyleLookup, special_advantages
from uesrpg.contest import OpposedContest
from uesrpg.dice import critical_flags, d100
from uesrpg.errors import RulesError
from uesrpg.handlers import OpposedCardHandlers
from uesrpg.records import AdvantageOption, ArmorState, Participant, Roll
from uesrpg.registry import ContestRegistry
from uesrpg.renderers import TextRenderer
from uesrpg.settings import Settings
from uesrpg.turns import ActionPoints, Combatant, TurnScheduler
from uesrpg.types import APAutomation, ContestState

ARMOR_CLASSES = ("unarmored", "partial", "full")
HIT_LOCATIONS = ("Body", "Head", "Right Arm", "Left Arm", "Right Leg", "Left Leg")

# Session state keys. Streamlit shares this module between browser
# sessions, so anything per-user lives under these instead of globals.
REGISTRY_KEY = "registry"
STYLES_KEY = "style_knowledge"
NOTICES_KEY = "notices"
SCHEDULER_KEY = "scheduler"


def style_table(state: MutableMapping[str, Any]) -> dict[str, dict[str, bool]]:
    """The session's map of actor id to the special actions their style knows."""
    if STYLES_KEY not in state:
        state[STYLES_KEY] = {}
    return state[STYLES_KEY]


def make_style_lookup(styles: Mapping[str, Mapping[str, bool]]) -> StyleLookup:
    def lookup(actor_id: str) -> list[AdvantageOption]:
        return special_advantages(styles.get(actor_id, {}))
    return lookup


def get_registry(state: MutableMapping[str, Any]) -> ContestRegistry:
    """Return the session's registry, creating it on first use."""
    if REGISTRY_KEY not in state:
        lookup = make_style_lookup(style_table(state))
        state[REGISTRY_KEY] = ContestRegistry(AdvantageNegotiator(lookup))
    return state[REGISTRY_KEY]


def notice_queue(state: MutableMapping[str, Any]) -> Callable[[str], None]:
    """A notify callback that keeps messages in session state.

    Buttons rerun the script right after dispatching, which would wipe a
    warning drawn in the same run; queued notices are drawn on the next one.
    """
    def notify(message: str) -> None:
        if NOTICES_KEY not in state:
            state[NOTICES_KEY] = []
        state[NOTICES_KEY].append(message)
    return notify


def pop_notices(state: MutableMapping[str, Any]) -> list[str]:
    if NOTICES_KEY not in state:
        return []
    notices = state[NOTICES_KEY]
    del state[NOTICES_KEY]
    return notices


def make_roll(config: dict) -> Roll:
    """Build a Roll from a participant config dict, rolling d100 when no
    value was entered."""
    value = config.get("roll") or d100()
    crit_success, crit_failure = critical_flags(
        value,
        lucky_numbers=config.get("lucky_numbers", ()),
        unlucky_numbers=config.get("unlucky_numbers", ()),
        is_npc=config.get("is_npc", False),
    )
    return Roll(
        value=value,
        target=config["target"],
        critical_success=crit_success,
        critical_failure=crit_failure,
    )


def add_participant(
    contest: OpposedContest,
    config: dict,
    styles: MutableMapping[str, dict[str, bool]],
) -> Participant:
    """Join a contest from a participant config dict and record the roll.

    The participant's style specials are written to the session's style
    table so the advantage lookup can find them.
    """
    styles[config["actor_id"]] = {k: True for k in config.get("specials", ())}
    contest.add_participant(
        config["actor_id"],
        config.get("name", ""),
        damage=config.get("damage"),
        armor=ArmorState(config.get("armor_rating", 0), config.get("armor_class", "unarmored")),
    )
    return contest.record_roll(
        config["actor_id"], make_roll(config),
        hit_location=config.get("hit_location"),
    )


def settings_from_config(config: dict) -> Settings:
    return Settings(
        automate_action_points=config.get("automate", False),
        action_point_automation=APAutomation(config.get("mode", "turn")),
    )


def build_scheduler(names: list[str], max_ap: int, settings: Settings) -> TurnScheduler:
    return TurnScheduler(
        [Combatant(name, ActionPoints(current=0, max=max_ap)) for name in names if name],
        settings,
    )


def start_encounter(
    state: MutableMapping[str, Any],
    names: list[str],
    max_ap: int,
    settings: Settings,
) -> TurnScheduler | None:
    """Start an encounter and keep it in session state.

    A rejected start (nobody to fight) becomes a notice and leaves any
    running encounter in place.
    """
    scheduler = build_scheduler(names, max_ap, settings)
    try:
        scheduler.start_encounter()
    except RulesError as e:
        notice_queue(state)(str(e))
        return None
    state[SCHEDULER_KEY] = scheduler
    return scheduler


def participant_config(label: str) -> dict:
    """Render controls for one participant and return their config dict."""
    st.subheader(label)
    name = st.text_input("Name", label, key=f"{label}_name")
    target = st.number_input("Target number", 1, 200, 50, key=f"{label}_tn")
    roll = st.number_input("Roll (0 = roll for me)", 0, 100, 0, key=f"{label}_roll")
    damage = st.number_input("Damage if they win", 0, 100, 0, key=f"{label}_dmg")
    armor_rating = st.number_input("Armor rating", 0, 30, 0, key=f"{label}_ar")
    armor_class = st.selectbox("Armor class", ARMOR_CLASSES, key=f"{label}_ac")
    hit_location = st.selectbox("Hit location", HIT_LOCATIONS, key=f"{label}_loc")
    specials = st.multiselect("Style special actions", ["disarm", "trip", "feint", "bash"], key=f"{label}_sa")
    is_npc = st.checkbox("NPC", key=f"{label}_npc")
    return {
        "actor_id": label.lower().replace(" ", "_"),
        "name": name,
        "target": int(target),
        "roll": int(roll),
        "damage": int(damage) or None,
        "armor_rating": int(armor_rating),
        "armor_class": armor_class,
        "hit_location": hit_location,
        "specials": specials,
        "is_npc": is_npc,
    }


def show_notices(state: MutableMapping[str, Any]) -> None:
    for message in pop_notices(state):
        st.warning(message)


def contest_tab(state: MutableMapping[str, Any], renderer: TextRenderer) -> None:
    show_notices(state)
    registry = get_registry(state)
    handlers = OpposedCardHandlers(registry, notify=notice_queue(state))
    contest_id = "card-1"
    contest = registry.get(contest_id)

    if contest is None:
        col_a, col_b = st.columns(2)
        with col_a:
            config_a = participant_config("Attacker")
        with col_b:
            config_b = participant_config("Defender")
        if st.button("Post opposed test", type="primary"):
            contest = registry.create(contest_id)
            add_participant(contest, config_a, style_table(state))
            add_participant(contest, config_b, style_table(state))
            st.rerun()
        return

    st.code("\n".join(renderer.render_contest(contest)))

    cols = st.columns(3)
    if contest.state is ContestState.OPEN and cols[0].button("Resolve"):
        handlers.dispatch("resolve-opposed", contest_id)
        st.rerun()
    if contest.state is ContestState.AWAITING_ADVANTAGE:
        choice = st.radio("Advantage", [o.id for o in contest.options])
        location = st.selectbox("Precision location", HIT_LOCATIONS)
        if cols[0].button("Apply"):
            handlers.dispatch("choose-advantage", contest_id, choice, hit_location=location)
            st.rerun()
        if cols[1].button("Skip"):
            handlers.dispatch("skip-advantage", contest_id)
            st.rerun()
    for p in list(contest.participants):
        if contest.state is not ContestState.RESOLVED and st.button(f"Remove {p.name}", key=f"rm_{p.actor_id}"):
            handlers.dispatch("remove-participant", contest_id, p.actor_id)
            st.rerun()
    if cols[2].button("Close card"):
        handlers.dispatch("close-card", contest_id)
        st.rerun()


def encounter_tab(state: MutableMapping[str, Any], renderer: TextRenderer) -> None:
    config = {
        "automate": st.checkbox("Automate action points", value=True),
        "mode": st.radio("Refresh", [m.value for m in APAutomation], horizontal=True),
    }
    names = st.text_input("Combatants (comma separated)", "Aela, Brynjolf, Cicero")
    max_ap = st.number_input("Max AP", 1, 6, 3)

    if st.button("Start encounter", type="primary"):
        start_encounter(
            state, [n.strip() for n in names.split(",")], int(max_ap),
            settings_from_config(config),
        )
    show_notices(state)

    scheduler: TurnScheduler | None = state.get(SCHEDULER_KEY)
    if scheduler is None:
        return
    cols = st.columns(3)
    if cols[0].button("Spend 1 AP"):
        scheduler.spend_action_points(scheduler.current, 1)
    if cols[1].button("Next turn"):
        scheduler.advance_turn()
    if cols[2].button("Next round"):
        scheduler.next_round()
    st.code("\n".join(renderer.render_encounter(scheduler)))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    st.set_page_config(page_title="Opposed Tests", layout="wide")
    st.title("Opposed Tests")

    renderer = TextRenderer()
    contest, encounter = st.tabs(["Opposed test", "Encounter"])
    with contest:
        contest_tab(st.session_state, renderer)
    with encounter:
        encounter_tab(st.session_state, renderer)


if __name__ == "__main__":
    main()
