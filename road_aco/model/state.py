"""State snapshot dataclasses for the road ACO simulation."""

from dataclasses import dataclass
from typing import List, Dict
import numpy as np


@dataclass(frozen=True)
class AgentSnapshot:
    """Immutable snapshot of an agent's state at a given time."""
    agent_id: int
    colony: str
    color: str
    node: int
    x: float
    y: float
    state: str  # "idle", "moving", "arrived", "stuck"


@dataclass(frozen=True)
class ColonySnapshot:
    name: str
    color: str
    spawned: int
    arrived: int
    active: int
    quota: int


@dataclass
class SimulationState:
    """Everything the rendering side reads after a cycle."""
    time: float
    cycle: int
    agents: List[AgentSnapshot]
    colonies: List[ColonySnapshot]
    edge_pheromone: np.ndarray   # Levels aligned with GraphModel.edges
    signals: Dict[tuple, bool]   # Edge key -> open flag
    metrics: Dict[str, float]

    def to_csv_rows(self) -> List[Dict]:
        """One row per agent for the agent log."""
        return [
            {
                "time": self.time,
                "cycle": self.cycle,
                "agent_id": a.agent_id,
                "colony": a.colony,
                "node": a.node,
                "x": round(a.x, 3),
                "y": round(a.y, 3),
                "state": a.state
            }
            for a in self.agents
        ]

    def colony_csv_rows(self) -> List[Dict]:
        """One row per colony for the colony log."""
        return [
            {
                "time": self.time,
                "cycle": self.cycle,
                "colony": c.name,
                "spawned": c.spawned,
                "arrived": c.arrived,
                "active": c.active,
                "quota": c.quota
            }
            for c in self.colonies
        ]
