"""Best-first search over belief states.

The frontier is ordered by ``f = g + h`` where ``g`` is the state's path cost
relative to the root (:meth:`BeliefState.compare_to`) and ``h`` is the
heuristic score. ``h`` is a behavioural score rather than an admissible
estimate, so the result is a good move, not an optimal one.
"""

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from beliefpac.belief import Action, check_position
from beliefpac.config import SearchConfig
from beliefpac.heuristic import evaluate

logger = logging.getLogger(__name__)


class Result:
    """The belief states one action choice may lead to. Never empty."""

    __slots__ = ("_states",)

    def __init__(self, states):
        states = tuple(states)
        if not states:
            raise ValueError("a Result needs at least one belief state")
        self._states = states

    def __len__(self):
        return len(self._states)

    def __iter__(self):
        return iter(self._states)

    def __getitem__(self, index):
        return self._states[index]

    def __contains__(self, belief):
        return belief in self._states

    def __repr__(self):
        return f"Result({list(self._states)!r})"


class Plan:
    """Results paired with the equivalent actions that produce them."""

    def __init__(self):
        self._results: List[Result] = []
        self._actions: List[tuple] = []

    def add(self, result, actions):
        actions = tuple(actions)
        if not actions:
            raise ValueError("a plan entry needs at least one action")
        self._results.append(result)
        self._actions.append(actions)

    def __len__(self):
        return len(self._results)

    def __iter__(self):
        return zip(self._results, self._actions)

    @property
    def results(self):
        return tuple(self._results)

    @property
    def actions(self):
        return tuple(self._actions)

    def actions_for(self, belief):
        """Actions of the first entry (discovery order) whose result holds ``belief``."""
        for result, actions in self:
            if belief in result:
                return actions
        return None


class Frontier:
    """Min-heap of belief states with a membership index."""

    def __init__(self, key):
        self._key = key
        self._heap = []
        self._members = set()
        self._counter = itertools.count()

    def push(self, belief):
        heapq.heappush(self._heap, (self._key(belief), next(self._counter), belief))
        self._members.add(belief)

    def pop(self):
        _, _, belief = heapq.heappop(self._heap)
        self._members.discard(belief)
        return belief

    def __contains__(self, belief):
        return belief in self._members

    def __len__(self):
        return len(self._heap)

    def __bool__(self):
        return bool(self._heap)


@dataclass
class SearchOutcome:
    action: Optional[Action]
    final_state: Any
    expansions: int
    reason: str
    plan: Plan = field(repr=False, default_factory=Plan)


class Planner:
    def __init__(self, config: SearchConfig = None,
                 heuristic: Callable[[Any], float] = evaluate,
                 clock: Callable[[], float] = time.perf_counter):
        self.config = config or SearchConfig()
        self.heuristic = heuristic
        self.clock = clock

    def choose_next_move(self, initial) -> Optional[Action]:
        return self.search(initial).action

    def search(self, initial) -> SearchOutcome:
        check_position(initial.pacman_position(), "pacman")
        config = self.config
        deadline = None
        if config.time_budget is not None:
            deadline = self.clock() + config.time_budget

        frontier = Frontier(lambda b: b.compare_to(initial) + self.heuristic(b))
        explored = set()
        solution = Plan()
        origin = {}

        frontier.push(initial)
        current = initial
        budget = config.expansion_budget
        expansions = 0
        reason = "budget"

        while budget > 0:
            if not frontier:
                reason = "exhausted"
                break
            if deadline is not None and self.clock() >= deadline:
                reason = "timeout"
                break
            budget -= 1
            current = frontier.pop()

            if current in explored:
                continue
            if current.pellet_count() == 0:
                reason = "goal"
                break

            explored.add(current)
            expansions += 1
            pushed = 0
            for actions, states in current.expand():
                result = Result(states)
                for belief in result:
                    if belief in explored or belief in frontier:
                        continue
                    frontier.push(belief)
                    solution.add(result, actions)
                    origin[belief] = current
                    pushed += 1
            logger.debug("expanded %r: %d new states, frontier %d",
                         current, pushed, len(frontier))

        action = self._recover(initial, current, solution, origin)
        return SearchOutcome(action, current, expansions, reason, solution)

    def _recover(self, initial, current, solution, origin):
        target = current
        while target in origin and origin[target] != initial:
            target = origin[target]
        if origin.get(target) != initial:
            return None
        actions = solution.actions_for(target)
        return actions[-1] if actions else None


def find_next_move(initial, config: SearchConfig = None,
                   heuristic: Callable[[Any], float] = evaluate) -> Action:
    """Move to play from ``initial``; the configured fallback when undecided."""
    planner = Planner(config, heuristic)
    outcome = planner.search(initial)
    if outcome.action is None:
        fallback = Action(planner.config.fallback_action)
        logger.warning("no decision after %d expansions (%s), playing %s",
                       outcome.expansions, outcome.reason, fallback.value)
        return fallback
    return outcome.action

