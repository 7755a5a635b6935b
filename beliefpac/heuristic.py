"""Scoring of belief states for the planner's frontier.

Lower scores are better: pellet terms are distances to shrink, an unfeared
ghost adds ``repulsion / distance`` and a feared ghost subtracts
``attraction * timer / distance``.
"""

from beliefpac.belief import PELLET, POWER_PELLET, manhattan
from beliefpac.config import GRID_COLS, GRID_ROWS, HeuristicConfig

DEFAULT_CONFIG = HeuristicConfig()


def nearest_distance(belief, marker, config=DEFAULT_CONFIG):
    """Manhattan distance from Pac-Man to the closest cell holding ``marker``."""
    pac = belief.pacman_position()
    best = config.far_distance
    for row in range(GRID_ROWS):
        for col in range(GRID_COLS):
            if belief.cell_at(row, col) == marker:
                d = manhattan(pac, (row, col))
                if d < best:
                    best = d
    return float(max(best, config.min_distance))


def representative_position(candidates):
    # optimistic: the first candidate in row-major order stands for the ghost
    return min(candidates)


def ghost_distance(belief, index, config=DEFAULT_CONFIG, pick=representative_position):
    target = pick(belief.ghost_positions(index))
    return float(max(manhattan(belief.pacman_position(), target), config.min_distance))


def ghost_weight(belief, index, config=DEFAULT_CONFIG):
    timer = belief.fear_timer(index)
    if timer > 0:
        return -config.fear_attraction * timer
    if belief.life_count() <= config.emergency_life_threshold:
        return config.ghost_repulsion * config.emergency_multiplier
    return config.ghost_repulsion


def is_endgame(belief, config=DEFAULT_CONFIG):
    return (belief.power_pellet_count() == 0
            and belief.pellet_count() <= config.endgame_pellet_threshold)


def evaluate(belief, config=DEFAULT_CONFIG, pick=representative_position):
    endgame = is_endgame(belief, config)
    pellets = belief.pellet_count()

    score = config.remaining_pellet_weight * pellets
    if pellets:
        weight = config.endgame_pellet_weight if endgame else config.pellet_weight
        score += weight * nearest_distance(belief, PELLET, config)
    if belief.power_pellet_count():
        score += config.power_pellet_weight * nearest_distance(belief, POWER_PELLET, config)

    for i in range(belief.ghost_count()):
        score += ghost_weight(belief, i, config) / ghost_distance(belief, i, config, pick)

    life = config.life_weight
    if endgame:
        life *= config.endgame_life_multiplier
    score += life if belief.life_count() == 0 else -life
    return score
