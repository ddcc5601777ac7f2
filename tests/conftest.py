"""
Pytest configuration and shared fixtures for road ACO tests.
"""

import pytest
import numpy as np

from road_aco.config import (
    SimulationConfig, GraphConfig, TrafficConfig, SignalSpec,
    TimingConfig, ACOConfig, AgentConfig, ColonyConfig
)


def build_config(nodes, colonies, required_edges=(), blocked=(), one_way=(),
                 signaled=(), timing=None, aco=None, agents=None,
                 max_time=60000.0, seed=None):
    """Assemble a SimulationConfig from plain Python values."""
    return SimulationConfig(
        graph=GraphConfig(nodes=list(nodes), required_edges=list(required_edges)),
        colonies=[ColonyConfig(name=name, origin=o, destination=d,
                               color=color, quota=quota)
                  for name, o, d, color, quota in colonies],
        traffic=TrafficConfig(
            blocked=list(blocked),
            one_way=list(one_way),
            signaled=[s if isinstance(s, SignalSpec) else SignalSpec(edge=tuple(s))
                      for s in signaled]
        ),
        timing=timing or TimingConfig(),
        aco=aco or ACOConfig(),
        agents=agents or AgentConfig(),
        max_time=max_time,
        seed=seed
    )


@pytest.fixture
def make_config():
    """Factory for small hand-built configurations"""
    return build_config


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests"""
    return np.random.default_rng(42)


@pytest.fixture
def line_nodes():
    """Three collinear nodes 10 apart: edges 0-1 and 1-2 only"""
    return [(0.0, 0.0), (10.0, 0.0), (20.0, 0.0)]


@pytest.fixture
def star_nodes():
    """Hub 0 with spokes of length 10 (node 1), 20 (node 2) and 15 (node 3)"""
    return [(0.0, 0.0), (10.0, 0.0), (0.0, 20.0), (-15.0, 0.0)]


@pytest.fixture
def square_nodes():
    """Unit-10 square; all four sides become edges when required"""
    return [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]


@pytest.fixture
def square_edges():
    return [(0, 1), (1, 2), (2, 3), (3, 0)]


@pytest.fixture
def exact_timing():
    """Deterministic timing: no jitter, unit speed, unit duration factor"""
    return TimingConfig(jitter=0.0, speed_range=(1.0, 1.0), duration_factor=1.0,
                        spawn_interval=100.0, cycle_interval=30.0,
                        traffic_toggle_interval=10000.0)


@pytest.fixture
def no_stuck():
    return AgentConfig(stuck_threshold=0)
