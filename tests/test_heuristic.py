"""Tests for beliefpac.heuristic and the config dataclasses."""

import pytest

from beliefpac.belief import PELLET, POWER_PELLET, GridBeliefState
from beliefpac.config import GameConfig, HeuristicConfig, RulesConfig, SearchConfig
from beliefpac.heuristic import (
    evaluate,
    ghost_distance,
    ghost_weight,
    is_endgame,
    nearest_distance,
    representative_position,
)

CONFIG = HeuristicConfig()


class TestNearestDistance:
    def test_no_matching_cell_gives_far_sentinel(self) -> None:
        b = GridBeliefState(pac=(1, 1))
        assert nearest_distance(b, PELLET) == CONFIG.far_distance
        assert nearest_distance(b, POWER_PELLET) == CONFIG.far_distance

    def test_picks_closest_cell_of_the_right_kind(self) -> None:
        b = GridBeliefState(pac=(1, 1), pellets={(1, 4), (8, 8)}, power={(1, 2)})
        assert nearest_distance(b, PELLET) == 3.0
        assert nearest_distance(b, POWER_PELLET) == 1.0

    def test_non_increasing_as_closer_pellets_appear(self) -> None:
        pellets = set()
        distances = []
        for cell in [(20, 20), (10, 1), (3, 1), (1, 2)]:
            pellets.add(cell)
            distances.append(nearest_distance(GridBeliefState(pac=(1, 1), pellets=pellets), PELLET))
        assert distances == sorted(distances, reverse=True)
        assert distances[-1] == 1.0

    def test_floored_at_min_distance(self) -> None:
        b = GridBeliefState(pac=(3, 3), pellets={(3, 3)})
        assert nearest_distance(b, PELLET) == CONFIG.min_distance

    def test_capped_at_far_distance(self) -> None:
        config = HeuristicConfig(far_distance=5.0)
        b = GridBeliefState(pac=(1, 1), pellets={(20, 20)})
        assert nearest_distance(b, PELLET, config) == 5.0


class TestGhostTerms:
    def test_representative_is_row_major_minimum(self) -> None:
        assert representative_position({(3, 1), (2, 9), (2, 4)}) == (2, 4)

    def test_distance_uses_representative(self) -> None:
        b = GridBeliefState(pac=(1, 1), ghosts=({(4, 4), (1, 3)},))
        assert ghost_distance(b, 0) == 2.0

    def test_distance_accepts_another_picker(self) -> None:
        b = GridBeliefState(pac=(1, 1), ghosts=({(4, 4), (1, 3)},))
        assert ghost_distance(b, 0, pick=max) == 6.0

    def test_distance_floored(self) -> None:
        b = GridBeliefState(pac=(1, 1), ghosts=({(1, 1)},))
        assert ghost_distance(b, 0) == CONFIG.min_distance

    def test_feared_ghost_attracts_by_remaining_time(self) -> None:
        b = GridBeliefState(pac=(1, 1), ghosts=({(5, 5)},), fear=(10,))
        assert ghost_weight(b, 0) == -CONFIG.fear_attraction * 10

    def test_unfeared_ghost_repels(self) -> None:
        b = GridBeliefState(pac=(1, 1), ghosts=({(5, 5)},), life=3)
        assert ghost_weight(b, 0) == CONFIG.ghost_repulsion

    def test_low_life_emergency(self) -> None:
        b = GridBeliefState(pac=(1, 1), ghosts=({(5, 5)},), life=1)
        assert ghost_weight(b, 0) == CONFIG.ghost_repulsion * CONFIG.emergency_multiplier


class TestEvaluate:
    def test_invariant_under_ghost_reordering(self) -> None:
        a = GridBeliefState(
            pac=(4, 4), ghosts=({(3, 3)}, {(8, 2), (9, 9)}), fear=(0, 7), pellets={(10, 10)})
        b = GridBeliefState(
            pac=(4, 4), ghosts=({(8, 2), (9, 9)}, {(3, 3)}), fear=(7, 0), pellets={(10, 10)})
        assert evaluate(a) == pytest.approx(evaluate(b))

    def test_closer_threatening_ghost_scores_worse(self) -> None:
        near = GridBeliefState(pac=(1, 1), ghosts=({(1, 2)},), pellets={(10, 10)})
        far = GridBeliefState(pac=(1, 1), ghosts=({(1, 9)},), pellets={(10, 10)})
        assert evaluate(near) > evaluate(far)

    def test_feared_ghost_scores_better_than_threatening(self) -> None:
        feared = GridBeliefState(pac=(1, 1), ghosts=({(1, 3)},), fear=(10,), pellets={(10, 10)})
        lethal = GridBeliefState(pac=(1, 1), ghosts=({(1, 3)},), fear=(0,), pellets={(10, 10)})
        assert evaluate(feared) < evaluate(lethal)

    def test_zero_life_is_heavily_penalised(self) -> None:
        dead = GridBeliefState(pac=(1, 1), pellets={(5, 5)}, life=0)
        alive = GridBeliefState(pac=(1, 1), pellets={(5, 5)}, life=1)
        diff = 2 * CONFIG.life_weight * CONFIG.endgame_life_multiplier
        assert evaluate(dead) - evaluate(alive) == pytest.approx(diff)

    def test_pellet_weight_outside_endgame(self) -> None:
        b = GridBeliefState(pac=(1, 1), pellets={(1, 5)}, power={(20, 20)})
        assert not is_endgame(b)
        expected = (CONFIG.remaining_pellet_weight * 1 + CONFIG.pellet_weight * 4
                    + CONFIG.power_pellet_weight * 38 - CONFIG.life_weight)
        assert evaluate(b) == pytest.approx(expected)

    def test_pellet_weight_in_endgame(self) -> None:
        b = GridBeliefState(pac=(1, 1), pellets={(1, 5)})
        assert is_endgame(b)
        expected = (CONFIG.remaining_pellet_weight * 1 + CONFIG.endgame_pellet_weight * 4
                    - CONFIG.life_weight * CONFIG.endgame_life_multiplier)
        assert evaluate(b) == pytest.approx(expected)

    def test_many_pellets_is_not_endgame(self) -> None:
        pellets = {(10, c) for c in range(1, 20)}
        assert not is_endgame(GridBeliefState(pac=(1, 1), pellets=pellets))

    def test_eating_last_pellet_improves_score(self) -> None:
        before = GridBeliefState(pac=(1, 1), pellets={(1, 2)})
        after = GridBeliefState(pac=(1, 2))
        assert evaluate(after) < evaluate(before)

    def test_eating_power_pellet_improves_score(self) -> None:
        before = GridBeliefState(pac=(1, 1), pellets={(9, 9)}, power={(1, 2)})
        after = GridBeliefState(pac=(1, 2), pellets={(9, 9)})
        assert evaluate(after) < evaluate(before)

    def test_custom_config(self) -> None:
        b = GridBeliefState(pac=(1, 1), pellets={(1, 5)})
        config = HeuristicConfig(life_weight=0.0, remaining_pellet_weight=0.0,
                                 endgame_pellet_weight=1.0)
        assert evaluate(b, config) == pytest.approx(4.0)


class TestConfigValidation:
    @pytest.mark.parametrize("kwargs", [
        {"min_distance": 0.0},
        {"far_distance": 0.1, "min_distance": 0.5},
        {"endgame_pellet_threshold": -1},
        {"ghost_repulsion": -1.0},
    ])
    def test_heuristic_config_rejects(self, kwargs) -> None:
        with pytest.raises(ValueError):
            HeuristicConfig(**kwargs)

    def test_search_config_rejects(self) -> None:
        with pytest.raises(ValueError):
            SearchConfig(expansion_budget=0)
        with pytest.raises(ValueError):
            SearchConfig(time_budget=0.0)
        with pytest.raises(ValueError):
            SearchConfig(fallback_action="JUMP")

    def test_rules_and_game_config_reject(self) -> None:
        with pytest.raises(ValueError):
            RulesConfig(fear_duration=0)
        with pytest.raises(ValueError):
            GameConfig(ghost_wander=1.5)
        with pytest.raises(ValueError):
            GameConfig(max_steps=0)

    def test_defaults(self) -> None:
        assert SearchConfig().expansion_budget == 2
        assert SearchConfig().fallback_action == "STAY"
