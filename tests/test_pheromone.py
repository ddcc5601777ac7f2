"""
Unit tests for road_aco/model/pheromone.py

Evaporation: tau(t+1) = rate * tau(t) on graph edges only.
Reinforcement: tau += amount on both directions along a path.
"""

import pytest
import numpy as np
from road_aco.model.graph import GraphModel
from road_aco.model.pheromone import PheromoneField, TRAIL_MIN


@pytest.fixture
def square(square_nodes, square_edges):
    return GraphModel(square_nodes, required_edges=square_edges)


@pytest.fixture
def field(square):
    return PheromoneField(square, floor=0.1)


class TestInitialization:

    def test_edges_start_at_inverse_distance(self, field):
        assert field.level_of(0, 1) == pytest.approx(0.1)  # 1 / 10
        assert field.level_of(3, 0) == pytest.approx(0.1)

    def test_non_edges_start_at_floor(self, square):
        field = PheromoneField(square, floor=0.05)
        assert field.level_of(0, 2) == 0.05
        assert field.level_of(1, 1) == 0.05

    def test_invalid_floor(self, square):
        with pytest.raises(ValueError):
            PheromoneField(square, floor=0.0)

    def test_initialize_restores_exact_values(self, square, field):
        fresh = PheromoneField(square, floor=0.1)
        field.evaporate(0.9)
        field.reinforce([0, 1, 2], 3.0)
        field.initialize()
        assert np.array_equal(field.field, fresh.field)


class TestEvaporation:

    def test_multiplies_edges(self, field):
        field.evaporate(0.5)
        assert field.level_of(0, 1) == pytest.approx(0.05)
        assert field.level_of(1, 0) == pytest.approx(0.05)

    def test_non_edges_untouched(self, field):
        field.evaporate(0.5)
        assert field.level_of(0, 2) == 0.1

    @pytest.mark.parametrize("rate", [0.0, 1.0, -0.2, 1.5])
    def test_rate_outside_unit_interval(self, field, rate):
        with pytest.raises(ValueError):
            field.evaporate(rate)

    def test_positive_after_many_cycles(self, field):
        for _ in range(5000):
            field.evaporate(0.95)
        assert np.all(field.field > 0)

    def test_fast_decay_never_reaches_zero(self, field):
        """Halving more than 1,100 times would underflow without the lower bound"""
        for _ in range(1200):
            field.evaporate(0.5)
        assert np.all(field.field > 0)
        assert field.level_of(0, 1) == TRAIL_MIN
        assert np.array_equal(field.field, field.field.T)

    def test_reinforce_after_decay_floor(self, field):
        for _ in range(1200):
            field.evaporate(0.5)
        field.reinforce([0, 1], 1.0)
        assert field.level_of(1, 0) == pytest.approx(1.0)


class TestReinforcement:

    def test_adds_along_path(self, field):
        field.reinforce([0, 1, 2], 2.0)
        assert field.level_of(0, 1) == pytest.approx(2.1)
        assert field.level_of(2, 1) == pytest.approx(2.1)
        assert field.level_of(2, 3) == pytest.approx(0.1)

    def test_revisited_edge_reinforced_each_time(self, field):
        field.reinforce([0, 1, 0], 1.0)
        assert field.level_of(0, 1) == pytest.approx(2.1)

    def test_singleton_path_is_noop(self, field):
        before = field.field.copy()
        field.reinforce([2], 5.0)
        assert np.array_equal(before, field.field)


class TestInvariants:

    def test_symmetric_after_mixed_updates(self, field, rng):
        for _ in range(200):
            if rng.random() < 0.5:
                field.evaporate(float(rng.uniform(0.5, 0.99)))
            else:
                path = [0, 1, 2, 3, 0][:int(rng.integers(2, 6))]
                field.reinforce(path, float(rng.uniform(0, 5)))
        assert np.array_equal(field.field, field.field.T)
        assert np.all(field.field > 0)

    def test_edge_levels_follow_edge_order(self, square, field):
        field.reinforce([1, 2], 1.0)
        levels = field.edge_levels()
        assert len(levels) == len(square.edges)
        idx = square.edges.index((1, 2))
        assert levels[idx] == pytest.approx(1.1)
