"""Two-actor turn-based combat.

A CombatState is created by the ATTACK verb and holds a private snapshot of
the enemy template, so neither the catalog nor the room's live instance is
touched while the fight runs. Once resolved, the owner of the GameState calls
resolve_combat() exactly once to apply the outcome and clear the record.
"""

import random

from ..logging import get_logger
from .state import (
    GALE_FRUIT,
    RIVAL_PIRATE,
    SPARK_FRUIT,
    STONE_FRUIT,
    TREASURE_CORE,
    CombatOutcome,
    CombatState,
    EnemySnapshot,
    Flag,
    GameState,
    complete_quest,
    has_item,
)
from .world import World

logger = get_logger(__name__)

BASE_ACCURACY = 0.65
GALE_ACCURACY = 0.80
ENEMY_ACCURACY = 0.5
PLAYER_DAMAGE = (3, 6)
SPARK_BONUS = 2
STONE_REDUCTION = 2


def start_combat(world: World, enemy_id: str) -> CombatState:
    enemy = world.enemies[enemy_id]
    return CombatState(
        enemy_id=enemy_id,
        enemy=EnemySnapshot(
            name=enemy.name,
            hp=enemy.hp,
            min_damage=enemy.min_damage,
            max_damage=enemy.max_damage,
            wanted_gain=enemy.wanted_gain,
            flee_chance=enemy.flee_chance,
        ),
    )


def player_attack(combat: CombatState, state: GameState, rng: random.Random) -> str:
    if combat.resolved:
        return "Combat already resolved."

    accuracy = GALE_ACCURACY if state.player.active_fruit == GALE_FRUIT else BASE_ACCURACY
    if rng.random() >= accuracy:
        return "You miss and stumble."

    damage = rng.randint(*PLAYER_DAMAGE) + state.player.grit
    if state.player.active_fruit == SPARK_FRUIT:
        damage += SPARK_BONUS
    combat.enemy.hp -= damage
    if combat.enemy.hp <= 0:
        combat.resolved = True
        combat.outcome = CombatOutcome.ENEMY_DOWN
        state.wanted += combat.enemy.wanted_gain
        return f"You strike true for {damage} damage. {combat.enemy.name} collapses."
    return f"You hit for {damage} damage."


def enemy_attack(combat: CombatState, state: GameState, rng: random.Random) -> str:
    if combat.resolved:
        return ""

    if rng.random() < combat.enemy.flee_chance:
        combat.resolved = True
        combat.outcome = CombatOutcome.ENEMY_FLED
        return f"{combat.enemy.name} flees into the shadows."

    if rng.random() >= ENEMY_ACCURACY:
        return f"{combat.enemy.name} swings wide."

    damage = rng.randint(combat.enemy.min_damage, combat.enemy.max_damage)
    if state.player.active_fruit == STONE_FRUIT:
        damage = max(1, damage - STONE_REDUCTION)
    state.player.hp -= damage
    return f"{combat.enemy.name} hits you for {damage} damage. (HP {state.player.hp})"


def exchange(combat: CombatState, state: GameState, rng: random.Random) -> list[str]:
    """Run one round: the player swings, then the enemy answers if still up."""
    if combat.resolved:
        return []
    lines = [player_attack(combat, state, rng)]
    if not combat.resolved:
        lines.append(enemy_attack(combat, state, rng))
    combat.turn += 1
    return lines


def _boss_down(state: GameState, enemy_id: str) -> list[str]:
    """Aftermath of a boss falling. Only the rival has a showdown to settle."""
    logger.info("boss_defeated", enemy=enemy_id, room=state.player.location)
    if enemy_id != RIVAL_PIRATE:
        return []
    if has_item(state, TREASURE_CORE):
        state.flags.add(Flag.TREASURE_LOST)
        return ["In the chaos, the rival's crew snatches the treasure core."]
    if complete_quest(state, "rival", "The rival pirate was defeated in the ruins."):
        logger.info("quest_completed", quest="rival")
        return ["The rival pirate will not trouble the Wild Current again."]
    return []


def resolve_combat(world: World, state: GameState) -> list[str]:
    """Apply a resolved combat's outcome to the world and discard the record."""
    combat = state.combat
    if combat is None or not combat.resolved:
        return []

    lines: list[str] = []
    if combat.outcome == CombatOutcome.ENEMY_DOWN:
        live = state.room_enemies.get(state.player.location, [])
        if combat.enemy_id in live:
            live.remove(combat.enemy_id)
        if world.enemies[combat.enemy_id].is_boss:
            lines.extend(_boss_down(state, combat.enemy_id))

    logger.info(
        "combat_resolved",
        enemy=combat.enemy_id,
        outcome=combat.outcome.value if combat.outcome else None,
        turns=combat.turn,
    )
    state.combat = None
    return lines
