"""Tests for the command line front end in beliefpac.pacman."""

from random import Random

import pygame
import pytest

from beliefpac import pacman
from beliefpac.config import GameConfig, SearchConfig
from beliefpac.game import Level, Simulation, generate_random_maze


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(pacman, "setup_logging", lambda level="INFO": None)


class TestParseArgs:
    def test_defaults(self) -> None:
        args = pacman.parse_args([])
        assert args.seed is None
        assert args.max_steps == GameConfig.max_steps
        assert args.budget == SearchConfig.expansion_budget
        assert not args.headless
        assert args.log_level == "INFO"

    def test_overrides(self) -> None:
        args = pacman.parse_args(["--seed", "7", "--budget", "4", "--headless"])
        assert args.seed == 7
        assert args.budget == 4
        assert args.headless


class TestMain:
    def test_headless_run(self, capsys) -> None:
        assert pacman.main(["--headless", "--max-steps", "2", "--seed", "1"]) == 0
        out = capsys.readouterr().out
        assert "after 2 steps" in out

    def test_bad_budget_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            pacman.main(["--headless", "--budget", "0", "--seed", "1"])


class TestRenderer:
    def test_draws_a_frame(self) -> None:
        pygame.font.init()
        rng = Random(2)
        sim = Simulation(Level.parse(generate_random_maze(rng=rng)),
                         config=GameConfig(max_steps=1, tile=8), rng=rng)
        sim.step()
        screen = pygame.Surface((25 * 8, 25 * 8 + pacman.HUD_HEIGHT))
        renderer = pacman.Renderer(screen, 8)
        renderer.draw_grid(sim)
        assert tuple(screen.get_at((0, 0)))[:3] == pacman.WALL_COL
        renderer.draw_hud(sim)
        renderer.draw_game_over(sim)
