import heapq
import itertools
import random

from beliefpac.belief import manhattan


class _Pathfinder:
    """A* over open cells, stopping at the first goal reached."""

    def __init__(self, neighbors_func):
        self.neighbors = neighbors_func

    def astar(self, start, goals):
        if not goals:
            return []
        tie = itertools.count()
        frontier = [(self._h(start, goals), next(tie), start)]
        parent = {start: None}
        cost = {start: 0}

        while frontier:
            _, _, node = heapq.heappop(frontier)
            if node in goals:
                return self._walk_back(parent, node)
            for nxt in self.neighbors(node):
                ng = cost[node] + 1
                if nxt not in cost or ng < cost[nxt]:
                    cost[nxt] = ng
                    parent[nxt] = node
                    heapq.heappush(frontier, (ng + self._h(nxt, goals), next(tie), nxt))
        return []

    @staticmethod
    def _walk_back(parent, node):
        path = []
        while node is not None:
            path.append(node)
            node = parent[node]
        return path[::-1]

    @staticmethod
    def _h(node, goals):
        return min(manhattan(node, g) for g in goals)


class GhostAgent:
    """Chases Pac-Man along A* paths, runs away while feared."""

    def __init__(self, index, neighbors_func, wander=0.2, rng=None):
        self.index = index
        self.neighbors = neighbors_func
        self.wander = wander
        self.rng = rng or random.Random()
        self.pathfinder = _Pathfinder(neighbors_func)
        self.mode = 'CHASE'

    def legal_moves_from(self, pos):
        return list(self.neighbors(pos))

    def choose_action(self, world):
        pos = world.ghosts[self.index]
        moves = self.legal_moves_from(pos)
        if not moves:
            return pos

        if self.rng.random() < self.wander:
            self.mode = 'WANDER'
            return self.rng.choice(moves)

        if world.fear[self.index] > 0:
            self.mode = 'FLEE'
            best = max(manhattan(m, world.pac) for m in moves)
            return self.rng.choice([m for m in moves if manhattan(m, world.pac) == best])

        self.mode = 'CHASE'
        path = self.pathfinder.astar(pos, {world.pac})
        if len(path) > 1:
            return path[1]
        return pos
