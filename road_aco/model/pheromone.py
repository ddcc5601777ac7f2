"""Pheromone trail field for the road ACO simulation."""

import numpy as np
from typing import Sequence

from .graph import GraphModel

# Smallest positive normal double
TRAIL_MIN = np.finfo(np.float64).tiny


class PheromoneField:
    """
    Symmetric node-by-node matrix of trail strengths.

    Every pair starts at a small positive floor; actual edges start at
    1/distance. Evaporation multiplies edge entries by a retention factor
    in (0, 1) and reinforcement only adds, so the matrix stays symmetric
    and strictly positive.
    """

    def __init__(self, graph: GraphModel, floor: float = 0.1):
        if floor <= 0:
            raise ValueError(f"Pheromone floor must be positive, got {floor}")
        self.graph = graph
        self.floor = floor
        self.field = np.empty((graph.node_count, graph.node_count), dtype=np.float64)
        self.initialize()

    def initialize(self) -> None:
        """Reset to the floor, then 1/distance on every edge."""
        self.field.fill(self.floor)
        rows, cols = self.graph.edge_rows, self.graph.edge_cols
        initial = 1.0 / self.graph.distances[rows, cols]
        self.field[rows, cols] = initial
        self.field[cols, rows] = initial

    def evaporate(self, rate: float) -> None:
        """
        Multiply both directions of every edge by rate.

        Non-edge entries are left untouched. Levels never drop below
        TRAIL_MIN, so repeated decay cannot underflow to zero.
        """
        if not 0.0 < rate < 1.0:
            raise ValueError(f"Evaporation rate must be in (0, 1), got {rate}")
        rows, cols = self.graph.edge_rows, self.graph.edge_cols
        decayed = np.maximum(self.field[rows, cols] * rate, TRAIL_MIN)
        self.field[rows, cols] = decayed
        self.field[cols, rows] = decayed

    def reinforce(self, path: Sequence[int], amount: float) -> None:
        """Add amount to both directions of each consecutive pair in path."""
        for u, v in zip(path[:-1], path[1:]):
            self.field[u, v] += amount
            if u != v:
                self.field[v, u] += amount

    def level_of(self, i: int, j: int) -> float:
        """Return pheromone level between two nodes."""
        return float(self.field[i, j])

    def edge_levels(self) -> np.ndarray:
        """Levels of every graph edge, in edge order."""
        return self.field[self.graph.edge_rows, self.graph.edge_cols].copy()
