"""
End-to-end tests for the simulation driver.
"""

from dataclasses import replace

import pytest

from rockfall import highest_point as package_highest_point
from rockfall.core.config_loader import load_config
from rockfall.core.push_sequence import parse_pushes, PushDirection
from rockfall.core.period_extrapolator import CycleInfo
from rockfall.core.simulation import Simulation, highest_point
from tools.benchmark_speed import random_pushes


EXAMPLE_JETS = ">>><<><>><<<>><>>><<<>>><<<><<<>><>><<>>"
TRILLION = 1_000_000_000_000


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def pushes():
    return parse_pushes(EXAMPLE_JETS)


class TestExamplePattern:
    """Known heights for the example jet pattern."""

    @pytest.mark.parametrize("total_drops,expected", [
        (0, 0),
        (1, 1),
        (2, 4),
        (10, 17),
        (2022, 3068),
    ])
    def test_small_counts(self, pushes, config, total_drops, expected):
        """Heights after a few rocks match the worked example."""
        assert highest_point(pushes, total_drops, config=config) == expected

    def test_trillion(self, pushes, config):
        """One trillion rocks reach 1514285714288 rows."""
        assert highest_point(pushes, TRILLION, config=config) == 1_514_285_714_288

    def test_package_entry_point(self, pushes):
        """The package-level entry point gives the same answer."""
        assert package_highest_point(pushes, 2022) == 3068

    def test_accepts_plain_directions(self, config):
        """A plain list of directions works as a push sequence."""
        directions = list(parse_pushes(EXAMPLE_JETS))
        assert all(isinstance(d, PushDirection) for d in directions)
        assert highest_point(directions, 2022, config=config) == 3068


class TestExtrapolation:
    """Cycle skipping against full simulation."""

    def test_cycle_found(self, pushes, config):
        """The example repeats every 35 rocks, adding 53 rows."""
        result = Simulation(pushes, config=config).run(TRILLION)
        assert result.cycle == CycleInfo(rounds=35, height=53, confirmed_at=55)
        assert result.skipped_drops % 35 == 0
        assert result.simulated_drops + result.skipped_drops == TRILLION
        assert result.simulated_drops == 85
        assert result.extrapolated_height == (result.skipped_drops // 35) * 53

    @pytest.mark.parametrize("total_drops", [1, 50, 55, 56, 100, 500, 1000, 2022, 2500])
    def test_matches_naive(self, pushes, config, total_drops):
        """Extrapolated and fully simulated heights agree."""
        fast = highest_point(pushes, total_drops, config=config, extrapolate=True)
        naive = highest_point(pushes, total_drops, config=config, extrapolate=False)
        assert fast == naive

    def test_naive_simulates_everything(self, pushes, config):
        """With extrapolation off every rock is dropped."""
        result = Simulation(pushes, config=config, extrapolate=False).run(2022)
        assert result.height == 3068
        assert result.simulated_drops == 2022
        assert result.skipped_drops == 0
        assert result.cycle is None

    def test_disabled_in_config(self, pushes, config):
        """cycle.enabled=false turns extrapolation off by default."""
        config = replace(config, cycle=replace(config.cycle, enabled=False))
        result = Simulation(pushes, config=config).run(300)
        assert result.cycle is None
        assert result.simulated_drops == 300

    def test_surface_key(self, pushes, config):
        """Keying on the surface profile gives the same answers."""
        config = replace(config, cycle=replace(config.cycle, surface_key=True))
        assert highest_point(pushes, 2022, config=config) == 3068
        assert highest_point(pushes, TRILLION, config=config) == 1_514_285_714_288

    @pytest.mark.parametrize("seed,length,total_drops,naive_height,false_height", [
        (0, 255, 2022, 3465, 3381),
        (3, 244, 3000, 4558, 4539),
    ])
    def test_surface_key_rejects_false_cycle(
        self, config, seed, length, total_drops, naive_height, false_height
    ):
        """On some random patterns only the surface key finds the true cycle."""
        jets = random_pushes(length, seed=seed)
        naive = highest_point(jets, total_drops, config=config, extrapolate=False)
        assert naive == naive_height

        # Slot signatures repeat here before the surface does
        assert highest_point(jets, total_drops, config=config) == false_height

        surface = replace(config, cycle=replace(config.cycle, surface_key=True))
        assert highest_point(jets, total_drops, config=surface) == naive

    def test_single_match_on_example(self, pushes, config):
        """The example is clean enough for a single confirming match."""
        config = replace(config, cycle=replace(config.cycle, required_matches=1))
        assert highest_point(pushes, TRILLION, config=config) == 1_514_285_714_288


class TestInvariants:
    """Properties that hold for any run."""

    def test_monotonic(self, pushes, config):
        """More rocks never make a shorter tower."""
        sim = Simulation(pushes, config=config, extrapolate=False)
        heights = [sim.run(n).height for n in range(0, 60)]
        assert heights == sorted(heights)
        assert highest_point(pushes, 2022, config=config) <= highest_point(pushes, 5000, config=config)

    def test_rock_count_matches_cells(self, pushes, config):
        """No two settled rocks share a cell."""
        sim = Simulation(pushes, config=config, extrapolate=False)
        sim.run(500)
        # 100 rounds of dash, plus, el, stick, block
        assert sim.chamber.rock_count == 100 * (4 + 5 + 5 + 4 + 4)

    def test_moves_stay_in_bounds(self, pushes, config):
        """Every observed rock position lies inside the chamber."""
        positions = []

        def record(dropper):
            piece = dropper.current_piece
            if piece is not None:
                positions.extend(piece.cells())

        sim = Simulation(pushes, config=config, extrapolate=False, render_callback=record)
        sim.run(200)
        assert positions
        assert all(0 <= col < 7 and row >= 0 for col, row in positions)

    def test_run_resets(self, pushes, config):
        """Repeated runs start from an empty chamber."""
        sim = Simulation(pushes, config=config)
        first = sim.run(2022).height
        second = sim.run(2022).height
        assert first == second == 3068

    def test_negative_drops(self, pushes, config):
        """Negative drop counts are rejected."""
        with pytest.raises(ValueError):
            Simulation(pushes, config=config).run(-1)

    def test_debug_output(self, pushes, config, capsys):
        """Debug mode prints the detected cycle."""
        Simulation(pushes, config=config, debug=True).run(TRILLION)
        out = capsys.readouterr().out
        assert "[DEBUG] Simulation initialized" in out
        assert "35 rocks add 53 rows" in out
