"""Belief states: what Pac-Man believes about the board.

The planner only talks to the abstract :class:`BeliefState`. The
:class:`GridBeliefState` below is the implementation used by the bundled
game; ghosts are tracked as sets of candidate cells rather than exact
positions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, NamedTuple, Optional, Sequence, Tuple

from beliefpac.config import GRID_COLS, GRID_ROWS, RulesConfig

WALL = "#"
PELLET = "."
POWER_PELLET = "o"
EMPTY = " "


class InvalidBeliefStateError(ValueError):
    """A belief state that cannot describe a real board."""


class Position(NamedTuple):
    row: int
    col: int


class Action(str, Enum):
    UP = "UP"
    DOWN = "DOWN"
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    STAY = "STAY"


MOVES = (Action.UP, Action.DOWN, Action.LEFT, Action.RIGHT)

DELTAS = {
    Action.UP: (-1, 0),
    Action.DOWN: (1, 0),
    Action.LEFT: (0, -1),
    Action.RIGHT: (0, 1),
    Action.STAY: (0, 0),
}


def manhattan(a, b):
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def in_grid(pos):
    return 0 <= pos[0] < GRID_ROWS and 0 <= pos[1] < GRID_COLS


def check_position(pos, what="position"):
    if not in_grid(pos):
        raise InvalidBeliefStateError(
            f"{what} {tuple(pos)} is outside the {GRID_ROWS}x{GRID_COLS} grid")


def step(pos, action, walls=frozenset()):
    """Cell reached by moving once; blocked moves stay in place."""
    dr, dc = DELTAS[action]
    nxt = Position(pos[0] + dr, pos[1] + dc)
    if not in_grid(nxt) or nxt in walls:
        return Position(*pos)
    return nxt


def open_neighbors(pos, walls):
    for action in MOVES:
        nxt = step(pos, action, walls)
        if nxt != pos:
            yield nxt


def spread(candidates, walls):
    """One tick of the ghost motion model: each candidate may stay or move."""
    grown = set(candidates)
    for pos in candidates:
        grown.update(open_neighbors(pos, walls))
    return frozenset(grown)


class BeliefState(ABC):
    """Capabilities the planner and the heuristic rely on.

    Implementations must be immutable and define ``__eq__``/``__hash__``
    over the full world configuration so explored-set lookups work.
    """

    @abstractmethod
    def expand(self) -> Sequence[Tuple[Sequence[Action], Sequence["BeliefState"]]]:
        """Successors as ``(equivalent actions, possible outcomes)`` pairs."""

    @abstractmethod
    def cell_at(self, row: int, col: int) -> str:
        ...

    @abstractmethod
    def ghost_count(self) -> int:
        ...

    @abstractmethod
    def ghost_positions(self, index: int) -> FrozenSet[Position]:
        ...

    @abstractmethod
    def pellet_count(self) -> int:
        ...

    @abstractmethod
    def power_pellet_count(self) -> int:
        ...

    @abstractmethod
    def fear_timer(self, index: int) -> int:
        ...

    @abstractmethod
    def life_count(self) -> int:
        ...

    @abstractmethod
    def pacman_position(self) -> Position:
        ...

    @abstractmethod
    def compare_to(self, other: "BeliefState") -> float:
        """Accumulated path cost relative to ``other``."""


@dataclass(frozen=True)
class GridBeliefState(BeliefState):
    pac: Position
    ghosts: Tuple[FrozenSet[Position], ...] = ()
    fear: Tuple[int, ...] = ()
    pellets: FrozenSet[Position] = frozenset()
    power: FrozenSet[Position] = frozenset()
    life: int = 3
    # level constants and bookkeeping, not part of the state identity
    walls: FrozenSet[Position] = field(default=frozenset(), compare=False, repr=False)
    cost: float = field(default=0.0, compare=False)
    pac_home: Optional[Position] = field(default=None, compare=False, repr=False)
    ghost_homes: Tuple[Position, ...] = field(default=(), compare=False, repr=False)
    rules: RulesConfig = field(default=RulesConfig(), compare=False, repr=False)

    def __post_init__(self):
        set_ = object.__setattr__
        set_(self, "pac", Position(*self.pac))
        set_(self, "ghosts", tuple(frozenset(Position(*p) for p in g) for g in self.ghosts))
        set_(self, "pellets", frozenset(Position(*p) for p in self.pellets))
        set_(self, "power", frozenset(Position(*p) for p in self.power))
        set_(self, "walls", frozenset(Position(*p) for p in self.walls))
        if not self.fear:
            set_(self, "fear", (0,) * len(self.ghosts))
        set_(self, "fear", tuple(self.fear))
        set_(self, "pac_home", Position(*(self.pac_home or self.pac)))
        if not self.ghost_homes:
            set_(self, "ghost_homes", tuple(min(g) for g in self.ghosts if g))
        set_(self, "ghost_homes", tuple(Position(*p) for p in self.ghost_homes))
        self._validate()

    def _validate(self):
        check_position(self.pac, "pacman")
        if self.pac in self.walls:
            raise InvalidBeliefStateError(f"pacman {tuple(self.pac)} is on a wall")
        if self.life < 0:
            raise InvalidBeliefStateError(f"life must be >= 0, got {self.life}")
        if len(self.fear) != len(self.ghosts):
            raise InvalidBeliefStateError(
                f"{len(self.fear)} fear timers for {len(self.ghosts)} ghosts")
        for i, (cands, timer) in enumerate(zip(self.ghosts, self.fear)):
            if not cands:
                raise InvalidBeliefStateError(f"ghost {i} has no candidate position")
            if timer < 0:
                raise InvalidBeliefStateError(f"ghost {i} has a negative fear timer")
            for pos in cands:
                check_position(pos, f"ghost {i}")
        if len(self.ghost_homes) != len(self.ghosts):
            raise InvalidBeliefStateError(
                f"{len(self.ghost_homes)} ghost homes for {len(self.ghosts)} ghosts")
        for pos in self.ghost_homes:
            check_position(pos, "ghost home")
        for pos in self.pellets | self.power:
            check_position(pos, "pellet")
            if pos in self.walls:
                raise InvalidBeliefStateError(f"pellet {tuple(pos)} is on a wall")
        both = self.pellets & self.power
        if both:
            raise InvalidBeliefStateError(
                f"cells hold both a pellet and a power pellet: {sorted(both)}")

    def cell_at(self, row, col):
        pos = (row, col)
        check_position(pos, "cell")
        if pos in self.walls:
            return WALL
        if pos in self.power:
            return POWER_PELLET
        if pos in self.pellets:
            return PELLET
        return EMPTY

    def ghost_count(self):
        return len(self.ghosts)

    def ghost_positions(self, index):
        return self.ghosts[index]

    def pellet_count(self):
        return len(self.pellets)

    def power_pellet_count(self):
        return len(self.power)

    def fear_timer(self, index):
        return self.fear[index]

    def life_count(self):
        return self.life

    def pacman_position(self):
        return self.pac

    def compare_to(self, other):
        return self.cost - other.cost

    def expand(self):
        grouped = []
        for action in MOVES:
            outcomes = self.outcomes(action)
            for actions, known in grouped:
                if known == outcomes:
                    actions.append(action)
                    break
            else:
                grouped.append(([action], outcomes))
        return [(tuple(actions), list(outcomes)) for actions, outcomes in grouped]

    def outcomes(self, action):
        """Every belief state that may follow ``action``, caught branches first.

        Collisions see the fear timers of the current tick; every timer then
        counts down once, as in the game loop.
        """
        rules = self.rules
        pac = step(self.pac, action, self.walls)
        pellets, power = self.pellets, self.power
        fear = self.fear
        if pac in power:
            power = power - {pac}
            fear = (rules.fear_duration,) * len(self.ghosts)
        elif pac in pellets:
            pellets = pellets - {pac}

        branches = [(pac, (), fear, self.life, self.cost + rules.step_cost)]
        for i, cands in enumerate(self.ghosts):
            moved = spread(cands, self.walls)
            nxt = []
            for p, ghosts, timers, life, cost in branches:
                # at most one life is lost per tick
                if p not in moved or (timers[i] == 0 and life < self.life):
                    nxt.append((p, ghosts + (moved,), timers, life, cost))
                    continue
                if timers[i] > 0:
                    home = frozenset({self.ghost_homes[i]})
                    eaten = timers[:i] + (0,) + timers[i + 1:]
                    nxt.append((p, ghosts + (home,), eaten, life, cost - rules.ghost_reward))
                else:
                    nxt.append((self.pac_home, ghosts + (frozenset({p}),), timers,
                                max(0, life - 1), cost + rules.death_cost))
                if len(moved) > 1:
                    nxt.append((p, ghosts + (moved - {p},), timers, life, cost))
            branches = nxt

        return tuple(
            GridBeliefState(
                pac=p, ghosts=ghosts, fear=tuple(max(0, t - 1) for t in timers),
                pellets=pellets, power=power, life=life, walls=self.walls, cost=cost,
                pac_home=self.pac_home, ghost_homes=self.ghost_homes, rules=rules)
            for p, ghosts, timers, life, cost in branches)
