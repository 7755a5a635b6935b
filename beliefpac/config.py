"""Tunable constants for the planner, its heuristic and the simulated game.

Every weight and threshold lives in a frozen dataclass so that a tuning
experiment only has to build a new config object.
"""

from dataclasses import dataclass
from typing import Optional

GRID_ROWS = 25
GRID_COLS = 25


@dataclass(frozen=True)
class HeuristicConfig:
    """Weights of the belief-state scoring function. Smaller scores win."""

    # pellets
    pellet_weight: float = 1.0
    endgame_pellet_weight: float = 25.0
    endgame_pellet_threshold: int = 10
    remaining_pellet_weight: float = 2.0
    power_pellet_weight: float = 10.0

    # ghosts
    ghost_repulsion: float = 60.0
    fear_attraction: float = 2.0
    emergency_life_threshold: int = 1
    emergency_multiplier: float = 3.0

    # life
    life_weight: float = 10000.0
    endgame_life_multiplier: float = 2.0

    # distances
    far_distance: float = 50.0
    min_distance: float = 0.5

    def __post_init__(self):
        if self.min_distance <= 0:
            raise ValueError("min_distance must be > 0")
        if self.far_distance < self.min_distance:
            raise ValueError("far_distance must be >= min_distance")
        if self.endgame_pellet_threshold < 0:
            raise ValueError("endgame_pellet_threshold must be >= 0")
        if self.emergency_life_threshold < 0:
            raise ValueError("emergency_life_threshold must be >= 0")
        if self.ghost_repulsion < 0 or self.fear_attraction < 0:
            raise ValueError("ghost weights are magnitudes and must be >= 0")


@dataclass(frozen=True)
class SearchConfig:
    expansion_budget: int = 2
    # wall-clock cutoff in seconds, None disables it
    time_budget: Optional[float] = None
    fallback_action: str = "STAY"

    def __post_init__(self):
        if self.expansion_budget < 1:
            raise ValueError("expansion_budget must be >= 1")
        if self.time_budget is not None and self.time_budget <= 0:
            raise ValueError("time_budget must be > 0 when set")
        if self.fallback_action not in ("UP", "DOWN", "LEFT", "RIGHT", "STAY"):
            raise ValueError(f"unknown fallback_action {self.fallback_action!r}")


@dataclass(frozen=True)
class RulesConfig:
    """Game mechanics shared by the simulated world and the belief model."""

    fear_duration: int = 40
    step_cost: float = 1.0
    death_cost: float = 500.0
    ghost_reward: float = 200.0

    def __post_init__(self):
        if self.fear_duration < 1:
            raise ValueError("fear_duration must be >= 1")
        if self.step_cost < 0:
            raise ValueError("step_cost must be >= 0")


@dataclass(frozen=True)
class GameConfig:
    tile: int = 28
    fps: int = 8
    max_steps: int = 3000
    lives: int = 3
    ghost_wander: float = 0.2
    pellet_score: int = 50
    power_score: int = 500
    ghost_score: int = 750
    death_score: int = -200

    def __post_init__(self):
        if self.max_steps < 1:
            raise ValueError("max_steps must be >= 1")
        if self.lives < 1:
            raise ValueError("lives must be >= 1")
        if not 0.0 <= self.ghost_wander <= 1.0:
            raise ValueError("ghost_wander must be within [0, 1]")
        if self.fps < 1 or self.tile < 4:
            raise ValueError("fps must be >= 1 and tile >= 4")
