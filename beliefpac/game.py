"""The simulated game the planner plays: levels, true world state and rules.

Pac-Man never sees the true ghost positions. Each tick the
:class:`BeliefTracker` turns what is in his sight lines into a
:class:`GridBeliefState` and the planner decides from that.
"""

import logging
import random
from dataclasses import dataclass, replace
from functools import partial

from beliefpac.belief import (
    DELTAS,
    MOVES,
    POWER_PELLET,
    PELLET,
    WALL,
    Action,
    GridBeliefState,
    Position,
    in_grid,
    manhattan,
    open_neighbors,
    spread,
    step,
)
from beliefpac.config import GRID_COLS, GRID_ROWS, GameConfig, HeuristicConfig, RulesConfig
from beliefpac.ghosts import GhostAgent
from beliefpac.heuristic import evaluate
from beliefpac.planner import Planner

logger = logging.getLogger(__name__)

PACMAN_SPAWN = "P"
GHOST_SPAWN = "G"
LEVEL_CHARS = {WALL, PELLET, POWER_PELLET, " ", PACMAN_SPAWN, GHOST_SPAWN}

DIRS = [(0, 1), (0, -1), (1, 0), (-1, 0)]


def _odd(n):
    return n if n % 2 else n - 1


def generate_random_maze(rows=GRID_ROWS, cols=GRID_COLS, n_ghosts=2, rng=None):
    rng = rng or random.Random()
    maze = [['#'] * cols for _ in range(rows)]

    def carve_passages(r, c):
        directions = [(0, 2), (2, 0), (0, -2), (-2, 0)]
        rng.shuffle(directions)
        maze[r][c] = '.'
        for dr, dc in directions:
            nr, nc = r + dr, c + dc
            if 0 < nr < rows - 1 and 0 < nc < cols - 1 and maze[nr][nc] == '#':
                maze[r + dr // 2][c + dc // 2] = '.'
                carve_passages(nr, nc)

    carve_passages(_odd(rows // 2), _odd(cols // 2))

    # knock out extra walls so the maze has loops to escape through
    for _ in range(rows * cols // 4):
        r = rng.randrange(1, rows - 1)
        c = rng.randrange(1, cols - 1)
        if maze[r][c] == '#':
            nb = sum(1 for dr, dc in DIRS if maze[r + dr][c + dc] == '.')
            if nb >= 2:
                maze[r][c] = '.'

    for r in (rows // 4, rows // 2, 3 * rows // 4):
        for c in range(1, cols - 1):
            maze[r][c] = '.'

    for r, c in [(1, 1), (1, cols - 2), (rows - 2, 1), (rows - 2, cols - 2)]:
        maze[r][c] = 'o'

    open_spots = [(r, c) for r in range(1, rows - 1) for c in range(1, cols - 1)
                  if maze[r][c] == '.']
    crossings = [(r, c) for r, c in open_spots
                 if sum(1 for dr, dc in DIRS if maze[r + dr][c + dc] != '#') >= 3]
    pac_pos = rng.choice(crossings or open_spots)
    maze[pac_pos[0]][pac_pos[1]] = PACMAN_SPAWN
    open_spots.remove(pac_pos)

    far = [pos for pos in open_spots if manhattan(pos, pac_pos) >= 8]
    for r, c in rng.sample(far if len(far) >= n_ghosts else open_spots, n_ghosts):
        maze[r][c] = GHOST_SPAWN

    return [''.join(row) for row in maze]


@dataclass(frozen=True)
class Level:
    walls: frozenset
    pellets: frozenset
    power: frozenset
    pac_spawn: Position
    ghost_spawns: tuple

    @classmethod
    def parse(cls, rows):
        rows = list(rows)
        if len(rows) != GRID_ROWS or any(len(row) != GRID_COLS for row in rows):
            raise ValueError(f"a level must be {GRID_ROWS}x{GRID_COLS} cells")
        walls, pellets, power, pacs, ghosts = set(), set(), set(), [], []
        for r, row in enumerate(rows):
            for c, ch in enumerate(row):
                pos = Position(r, c)
                if ch not in LEVEL_CHARS:
                    raise ValueError(f"unknown level character {ch!r} at {tuple(pos)}")
                if ch == WALL:
                    walls.add(pos)
                elif ch == PELLET:
                    pellets.add(pos)
                elif ch == POWER_PELLET:
                    power.add(pos)
                elif ch == PACMAN_SPAWN:
                    pacs.append(pos)
                elif ch == GHOST_SPAWN:
                    ghosts.append(pos)
        if len(pacs) != 1:
            raise ValueError(f"a level needs exactly one Pac-Man spawn, found {len(pacs)}")
        if not ghosts:
            raise ValueError("a level needs at least one ghost spawn")
        return cls(frozenset(walls), frozenset(pellets), frozenset(power), pacs[0], tuple(ghosts))

    def neighbors(self, pos):
        return list(open_neighbors(pos, self.walls))

    def open_cells(self):
        return frozenset(Position(r, c) for r in range(GRID_ROWS) for c in range(GRID_COLS)
                         if (r, c) not in self.walls)


@dataclass(frozen=True)
class World:
    pac: Position
    ghosts: tuple
    pellets: frozenset
    power: frozenset
    fear: tuple
    lives: int
    score: int = 0


def visible_cells(pac, walls):
    """Pac-Man's own cell plus his four straight sight lines up to a wall."""
    seen = {Position(*pac)}
    for action in MOVES:
        dr, dc = DELTAS[action]
        pos = Position(pac[0] + dr, pac[1] + dc)
        while in_grid(pos) and pos not in walls:
            seen.add(pos)
            pos = Position(pos.row + dr, pos.col + dc)
    return frozenset(seen)


class BeliefTracker:
    """Keeps a candidate cell set per ghost from Pac-Man's observations."""

    def __init__(self, level, rules=None):
        self.level = level
        self.rules = rules or RulesConfig()
        self.candidates = [frozenset({home}) for home in level.ghost_spawns]

    def reset_ghost(self, index):
        self.candidates[index] = frozenset({self.level.ghost_spawns[index]})

    def observe(self, world):
        walls = self.level.walls
        seen = visible_cells(world.pac, walls)
        for i, ghost in enumerate(world.ghosts):
            if ghost in seen:
                cands = frozenset({ghost})
            else:
                cands = spread(self.candidates[i], walls) - seen
                if not cands:
                    cands = self.level.open_cells() - seen
            self.candidates[i] = cands
        return GridBeliefState(
            pac=world.pac, ghosts=tuple(self.candidates), fear=world.fear,
            pellets=world.pellets, power=world.power, life=world.lives,
            walls=walls, pac_home=self.level.pac_spawn,
            ghost_homes=self.level.ghost_spawns, rules=self.rules)


class Simulation:
    """Headless game loop: the planner drives Pac-Man, ghost agents the rest."""

    def __init__(self, level, config=None, search_config=None, heuristic_config=None,
                 rules=None, rng=None):
        self.level = level
        self.config = config or GameConfig()
        self.rules = rules or RulesConfig()
        self.rng = rng or random.Random()
        self.planner = Planner(search_config,
                               partial(evaluate, config=heuristic_config or HeuristicConfig()))
        self.tracker = BeliefTracker(level, self.rules)
        self.ghost_agents = [GhostAgent(i, level.neighbors, self.config.ghost_wander, self.rng)
                             for i in range(len(level.ghost_spawns))]
        self.world = World(
            pac=level.pac_spawn, ghosts=level.ghost_spawns, pellets=level.pellets,
            power=level.power, fear=(0,) * len(level.ghost_spawns), lives=self.config.lives)
        self.steps = 0
        self.belief = None
        self.last_action = None
        self.last_reason = None

    @property
    def won(self):
        return not self.world.pellets and self.world.lives > 0

    @property
    def over(self):
        return (not self.world.pellets or self.world.lives <= 0
                or self.steps >= self.config.max_steps)

    def choose_action(self):
        self.belief = self.tracker.observe(self.world)
        outcome = self.planner.search(self.belief)
        action = outcome.action
        if action is None:
            action = Action(self.planner.config.fallback_action)
            logger.warning("step %d: no decision after %d expansions (%s), playing %s",
                           self.steps, outcome.expansions, outcome.reason, action.value)
        self.last_action, self.last_reason = action, outcome.reason
        return action

    def step(self):
        if self.over:
            return self.world
        action = self.choose_action()
        lives = self.world.lives
        world = self.apply_pac_move(self.world, step(self.world.pac, action, self.level.walls))
        for agent in self.ghost_agents:
            # at most one life is lost per tick
            world = self.apply_ghost_move(world, agent.index, agent.choose_action(world),
                                          lethal=world.lives == lives)
        self.world = replace(world, fear=tuple(max(0, t - 1) for t in world.fear))
        self.steps += 1
        return self.world

    def run(self):
        while not self.over:
            self.step()
        logger.info("game over after %d steps: %s, score %d, lives %d",
                    self.steps, "won" if self.won else "lost",
                    self.world.score, self.world.lives)
        return self.world

    def apply_pac_move(self, world, pac):
        pellets, power, fear, score = world.pellets, world.power, world.fear, world.score
        if pac in pellets:
            pellets = pellets - {pac}
            score += self.config.pellet_score
        if pac in power:
            power = power - {pac}
            fear = (self.rules.fear_duration,) * len(world.ghosts)
            score += self.config.power_score
        world = replace(world, pac=pac, pellets=pellets, power=power, fear=fear, score=score)
        for i, ghost in enumerate(world.ghosts):
            if ghost == pac:
                return self._collide(world, i)
        return world

    def apply_ghost_move(self, world, index, mv, lethal=True):
        ghosts = list(world.ghosts)
        ghosts[index] = mv
        world = replace(world, ghosts=tuple(ghosts))
        if mv == world.pac and (lethal or world.fear[index] > 0):
            return self._collide(world, index)
        return world

    def _collide(self, world, index):
        if world.fear[index] > 0:
            ghosts = list(world.ghosts)
            ghosts[index] = self.level.ghost_spawns[index]
            fear = list(world.fear)
            fear[index] = 0
            self.tracker.reset_ghost(index)
            logger.info("step %d: ghost %d eaten", self.steps, index)
            return replace(world, ghosts=tuple(ghosts), fear=tuple(fear),
                           score=world.score + self.config.ghost_score)
        logger.info("step %d: caught by ghost %d, %d lives left",
                    self.steps, index, max(0, world.lives - 1))
        return replace(world, pac=self.level.pac_spawn, lives=max(0, world.lives - 1),
                       score=world.score + self.config.death_score)
