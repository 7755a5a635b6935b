import argparse
import logging
import math
import random
import sys

import pygame

from beliefpac.config import GRID_COLS, GRID_ROWS, GameConfig, SearchConfig
from beliefpac.game import Level, Simulation, generate_random_maze

logger = logging.getLogger(__name__)

HUD_HEIGHT = 90

BLACK = (0, 0, 0)
GRAY = (40, 40, 48)
WHITE = (240, 240, 240)
YELLOW = (255, 214, 10)
RED = (255, 64, 64)
BLUE = (72, 132, 255)
GREEN = (80, 200, 120)
WALL_COL = (30, 30, 60)
FLOOR_COL = (16, 16, 22)
PELLET_COL = (230, 230, 230)
POWER_COL = (255, 120, 200)
BELIEF_COLS = [(90, 30, 30), (30, 45, 90)]
GHOST_COLS = [RED, BLUE]


def setup_logging(level="INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
        force=True,
    )


class Renderer:
    def __init__(self, screen, tile):
        self.screen = screen
        self.tile = tile
        self.font = pygame.font.SysFont("consolas", max(14, tile // 2))
        self.big = pygame.font.SysFont("consolas", max(24, tile), bold=True)

    def cell_rect(self, pos):
        return (pos[1] * self.tile, pos[0] * self.tile, self.tile, self.tile)

    def cell_center(self, pos):
        return (pos[1] * self.tile + self.tile // 2, pos[0] * self.tile + self.tile // 2)

    def draw_grid(self, sim):
        self.screen.fill(BLACK)
        world, level, tile = sim.world, sim.level, self.tile
        for r in range(GRID_ROWS):
            for c in range(GRID_COLS):
                pos = (r, c)
                color = WALL_COL if pos in level.walls else FLOOR_COL
                pygame.draw.rect(self.screen, color, self.cell_rect(pos))

        # where Pac-Man thinks the ghosts may be
        if sim.belief is not None:
            for i in range(sim.belief.ghost_count()):
                col = BELIEF_COLS[i % len(BELIEF_COLS)]
                for pos in sim.belief.ghost_positions(i):
                    pygame.draw.rect(self.screen, col, self.cell_rect(pos))

        for pos in world.pellets:
            pygame.draw.circle(self.screen, PELLET_COL, self.cell_center(pos), max(2, tile // 8))
        for pos in world.power:
            pygame.draw.circle(self.screen, POWER_COL, self.cell_center(pos), max(4, tile // 4), width=2)

        cx, cy = self.cell_center(world.pac)
        self.draw_pacman(cx, cy, max(6, tile // 2 - 2), YELLOW, sim.last_action, sim.steps)

        for i, g in enumerate(world.ghosts):
            col = GREEN if world.fear[i] > 0 else GHOST_COLS[i % len(GHOST_COLS)]
            gx, gy = self.cell_center(g)
            self.draw_ghost(gx, gy, max(6, tile // 2 - 2), col, sim.steps)

    def draw_hud(self, sim):
        top = GRID_ROWS * self.tile
        width = self.screen.get_width()
        pygame.draw.rect(self.screen, (20, 20, 30), (0, top, width, HUD_HEIGHT))
        action = sim.last_action.value if sim.last_action else "-"
        line1 = self.font.render(
            f"Steps: {sim.steps}/{sim.config.max_steps}   Score: {sim.world.score:,}   "
            f"Lives: {'♥' * sim.world.lives}", True, WHITE)
        line2 = self.font.render(
            f"Move: {action}   Search: {sim.last_reason or '-'}   "
            f"Pellets left: {len(sim.world.pellets)}", True, YELLOW)
        self.screen.blit(line1, (10, top + 10))
        self.screen.blit(line2, (10, top + 40))

    def draw_game_over(self, sim):
        width, height = self.screen.get_width(), self.screen.get_height()
        overlay = pygame.Surface((width, height))
        overlay.fill(BLACK)
        overlay.set_alpha(180)
        self.screen.blit(overlay, (0, 0))

        color = YELLOW if sim.won else RED
        title = self.big.render("PACMAN WINS!" if sim.won else "GHOSTS WIN!", True, color)
        score = self.font.render(f"Final Score: {sim.world.score:,}", True, YELLOW)
        hint = self.font.render("Press SPACE or ESC to close", True, (160, 160, 160))
        self.screen.blit(title, title.get_rect(center=(width // 2, height // 2 - 50)))
        self.screen.blit(score, score.get_rect(center=(width // 2, height // 2 + 10)))
        self.screen.blit(hint, hint.get_rect(center=(width // 2, height // 2 + 50)))

    def draw_pacman(self, cx, cy, size, color, action, frame):
        if (frame // 2) % 2:
            pygame.draw.circle(self.screen, color, (cx, cy), size)
            return
        # mouth faces the last move
        facing = {"RIGHT": 0.0, "DOWN": math.pi / 2, "LEFT": math.pi, "UP": 3 * math.pi / 2}
        angle = facing.get(action.value if action else "RIGHT", 0.0)
        points = [(cx, cy)]
        for k in range(13):
            a = angle + 0.4 + k * (2 * math.pi - 0.8) / 12
            points.append((cx + size * math.cos(a), cy + size * math.sin(a)))
        pygame.draw.polygon(self.screen, color, points)

    def draw_ghost(self, cx, cy, size, color, frame):
        bob = int(2 * math.sin(frame * 0.3))
        ay = cy + bob
        pygame.draw.circle(self.screen, color, (cx, ay - size // 4), size)
        pygame.draw.rect(self.screen, color, (cx - size, ay - size // 4, 2 * size, size))
        eye = max(2, size // 6)
        for dx in (-size // 3, size // 3):
            pygame.draw.circle(self.screen, WHITE, (cx + dx, ay - size // 4), eye)
            pygame.draw.circle(self.screen, BLACK, (cx + dx, ay - size // 4), max(1, eye // 2))


class Game:
    def __init__(self, sim):
        pygame.init()
        self.sim = sim
        tile = sim.config.tile
        self.screen = pygame.display.set_mode((GRID_COLS * tile, GRID_ROWS * tile + HUD_HEIGHT))
        pygame.display.set_caption("Pacman: belief-state best-first search vs ghosts")
        self.clock = pygame.time.Clock()
        self.renderer = Renderer(self.screen, tile)

    def run(self):
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif self.sim.over and event.key == pygame.K_SPACE:
                        running = False

            if not self.sim.over:
                self.sim.step()
                if self.sim.over:
                    logger.info("game over after %d steps: %s, score %d",
                                self.sim.steps, "won" if self.sim.won else "lost",
                                self.sim.world.score)
            self.renderer.draw_grid(self.sim)
            self.renderer.draw_hud(self.sim)
            if self.sim.over:
                self.renderer.draw_game_over(self.sim)
            pygame.display.flip()
            self.clock.tick(self.sim.config.fps)
        pygame.quit()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Pac-Man driven by a belief-state planner")
    parser.add_argument("--seed", type=int, default=None, help="maze and ghost RNG seed")
    parser.add_argument("--max-steps", type=int, default=GameConfig.max_steps)
    parser.add_argument("--budget", type=int, default=SearchConfig.expansion_budget,
                        help="frontier pops per move decision")
    parser.add_argument("--fps", type=int, default=GameConfig.fps)
    parser.add_argument("--headless", action="store_true", help="simulate without a window")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.log_level)
    rng = random.Random(args.seed)
    level = Level.parse(generate_random_maze(rng=rng))
    sim = Simulation(
        level,
        config=GameConfig(max_steps=args.max_steps, fps=args.fps),
        search_config=SearchConfig(expansion_budget=args.budget),
        rng=rng,
    )
    logger.info("level ready: %d pellets, %d power pellets, %d ghosts",
                len(level.pellets), len(level.power), len(level.ghost_spawns))
    if args.headless:
        world = sim.run()
        print(f"{'won' if sim.won else 'lost'} after {sim.steps} steps, "
              f"score {world.score}, lives {world.lives}")
        return 0
    Game(sim).run()
    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except ValueError as e:
        print("Error:", e)
        pygame.quit()
        sys.exit(1)
