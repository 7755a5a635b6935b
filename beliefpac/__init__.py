"""Best-first belief-state search for a Pac-Man agent that cannot see every ghost."""

from beliefpac.belief import (
    Action,
    BeliefState,
    GridBeliefState,
    InvalidBeliefStateError,
    Position,
)
from beliefpac.config import GameConfig, HeuristicConfig, RulesConfig, SearchConfig
from beliefpac.heuristic import evaluate
from beliefpac.planner import Plan, Planner, Result, SearchOutcome, find_next_move

__all__ = [
    "Action",
    "BeliefState",
    "GameConfig",
    "GridBeliefState",
    "HeuristicConfig",
    "InvalidBeliefStateError",
    "Plan",
    "Planner",
    "Position",
    "Result",
    "RulesConfig",
    "SearchConfig",
    "SearchOutcome",
    "evaluate",
    "find_next_move",
]
