"""Model package for the road ACO simulation."""

from .state import AgentSnapshot, ColonySnapshot, SimulationState
from .graph import GraphModel, edge_key
from .traffic import TrafficRules
from .pheromone import PheromoneField
from .agent import Agent, AgentState
from .colony import Colony
from .scheduler import Scheduler, ScheduledTask
from .engine import SimulationEngine

__all__ = [
    'AgentSnapshot',
    'ColonySnapshot',
    'SimulationState',
    'GraphModel',
    'edge_key',
    'TrafficRules',
    'PheromoneField',
    'Agent',
    'AgentState',
    'Colony',
    'Scheduler',
    'ScheduledTask',
    'SimulationEngine',
]
