"""Simulation engine for the road ACO simulation."""

import logging
from functools import partial
import numpy as np
from typing import List, Dict, Tuple, Optional, TYPE_CHECKING, Any

from .graph import GraphModel, EdgeKey
from .traffic import TrafficRules
from .pheromone import PheromoneField
from .agent import Agent, AgentState
from .colony import Colony
from .scheduler import Scheduler, ScheduledTask
from .state import SimulationState, AgentSnapshot, ColonySnapshot

if TYPE_CHECKING:
    from ..config import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Orchestrates the tick-driven simulation on one virtual clock.

    Periodic activities:
    1. Spawning, one agent per colony every spawn interval until quota
    2. Signal toggling, each signaled edge on its own interval
    3. Cycle: move all agents, then evaporate and reinforce pheromones
    Transition completions are one-shot tasks on the same clock, so a
    reset can cancel them along with everything else.
    """

    def __init__(self, config: "SimulationConfig",
                 rng: Optional[np.random.Generator] = None):
        config.validate()
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.scheduler = Scheduler()
        self.cycle_count = 0

        self.graph = GraphModel(
            config.graph.nodes,
            config.graph.required_edges,
            config.graph.node_classes
        )
        self.rules = TrafficRules(
            self.graph,
            blocked=config.traffic.blocked,
            one_way=config.traffic.one_way,
            signaled={s.edge: s.interval for s in config.traffic.signaled},
            default_interval=config.timing.traffic_toggle_interval
        )
        self.pheromones = PheromoneField(self.graph, config.aco.pheromone_floor)

        self.colonies: List[Colony] = [
            Colony(c.name, c.origin, c.destination,
                   quota=config.quota_for(c), color=c.color)
            for c in config.colonies
        ]
        self._colony_by_origin: Dict[int, Colony] = {c.origin: c for c in self.colonies}

        self.agents: List[Agent] = []
        self._next_agent_id = 1

        self.cycle_task: Optional[ScheduledTask] = None
        self.signal_tasks: Dict[EdgeKey, ScheduledTask] = {}
        self._start_timers()

    @property
    def now(self) -> float:
        return self.scheduler.now

    def _start_timers(self) -> None:
        """Queue spawn, cycle and signal tasks."""
        timing = self.config.timing
        for colony in self.colonies:
            if colony.quota > 0:
                colony.spawn_task = self.scheduler.schedule(
                    timing.spawn_interval,
                    partial(self.spawn_agent, colony),
                    repeat=colony.quota - 1
                )
        self.cycle_task = self.scheduler.schedule(
            timing.cycle_interval, self.run_cycle, loop=True)
        for key in self.rules.signaled:
            self.signal_tasks[key] = self.scheduler.schedule(
                self.rules.signal_interval(key),
                partial(self.toggle_signal, key),
                loop=True
            )

    # Scheduled activities

    def spawn_agent(self, colony: Colony) -> Optional[Agent]:
        """Create one agent at the colony's origin."""
        if colony.quota_exhausted:
            return None
        timing = self.config.timing
        jitter = timing.jitter
        if jitter > 0:
            dx, dy = self.rng.uniform(-jitter, jitter, size=2)
            offset = (float(dx), float(dy))
        else:
            offset = (0.0, 0.0)
        speed = float(self.rng.uniform(*timing.speed_range))

        agent = Agent(
            agent_id=self._next_agent_id,
            colony=colony.name,
            origin=colony.origin,
            destination=colony.destination,
            speed=speed,
            origin_xy=self.graph.position(colony.origin),
            offset=offset,
            color=colony.color
        )
        self._next_agent_id += 1
        self.agents.append(agent)
        colony.register(agent)
        logger.debug("Spawned %r (speed %.2f)", agent, speed)
        if colony.quota_exhausted:
            logger.info("Colony %s spawned all %d agents", colony.name, colony.quota)
        return agent

    def toggle_signal(self, key: EdgeKey) -> None:
        is_open = self.rules.toggle(key)
        logger.debug("Signal %s now %s", key, "open" if is_open else "closed")

    def run_cycle(self) -> None:
        """One tick: move every agent, then update the pheromone field."""
        self.cycle_count += 1
        self.move_agents()
        self.update_pheromones()

    def move_agents(self) -> None:
        elapsed = self.config.timing.cycle_interval
        for agent in self.agents:
            agent.attempt_move(self, elapsed)

    def update_pheromones(self) -> None:
        """
        Evaporate, count first arrivals, then reinforce arrived paths.

        In "continuous" mode every arrived agent deposits
        K / total_distance on each cycle; in "once" mode only on the cycle
        its arrival is first counted.
        """
        aco = self.config.aco
        self.pheromones.evaporate(aco.evaporation_rate)

        for agent in self.agents:
            first_arrival = agent.mark_counted()
            if first_arrival:
                self._colony_by_origin[agent.origin].record_arrival()
            if agent.is_arrived and (aco.reinforcement == "continuous" or first_arrival):
                self.pheromones.reinforce(agent.path,
                                          aco.deposit_constant / agent.total_distance)

    # Selection policy

    def selection_probabilities(self, agent: Agent,
                                candidates: List[int]) -> Tuple[List[int], np.ndarray]:
        """
        Filter candidates and compute the ACO transition distribution.

        P(n) proportional to tau(current, n)^alpha * (1 / d(current, n))^beta
        """
        valid = [n for n in candidates if agent.can_move_to(n, self)]
        if not valid:
            return valid, np.empty(0)

        current = agent.current
        tau = np.array([self.pheromones.level_of(current, n) for n in valid])
        eta = 1.0 / np.array([self.graph.distance(current, n) for n in valid])
        desirability = tau ** self.config.aco.alpha * eta ** self.config.aco.beta
        total = desirability.sum()
        if not np.isfinite(total) or total <= 0.0:
            # Trails too faint to rank the candidates
            logger.debug("Agent %d: degenerate desirability, choosing uniformly", agent.id)
            return valid, np.full(len(valid), 1.0 / len(valid))
        return valid, desirability / total

    def select_next_node(self, agent: Agent, candidates: List[int]) -> Optional[int]:
        """Roulette-wheel choice among the legal candidates."""
        valid, probs = self.selection_probabilities(agent, candidates)
        if not valid:
            return None

        draw = self.rng.random()
        idx = int(np.searchsorted(np.cumsum(probs), draw, side='left'))
        # Rounding can leave the cumulative sum just short of the draw
        return valid[min(idx, len(valid) - 1)]

    # Control

    def reset(self) -> None:
        """Drop all agents, restore pheromones and restart spawning."""
        for agent in self.agents:
            agent.cancel_transition()
        self.agents = []
        self._next_agent_id = 1
        self.pheromones.initialize()

        spawn_interval = self.config.timing.spawn_interval
        for colony in self.colonies:
            colony.reset()
            if colony.spawn_task is not None:
                colony.spawn_task.reset(delay=spawn_interval, repeat=colony.quota - 1)
        logger.info("Simulation reset at t=%.0f", self.now)

    def advance(self, duration: float) -> None:
        self.scheduler.advance(duration)

    def step(self) -> SimulationState:
        """Advance by one cycle interval and return the resulting state."""
        self.scheduler.advance(self.config.timing.cycle_interval)
        return self.snapshot()

    def run(self) -> Optional[SimulationState]:
        """Step until finished; return the final state."""
        state = None
        while not self.is_finished():
            state = self.step()
        return state

    def is_finished(self) -> bool:
        """Check if simulation should terminate."""
        if self.now >= self.config.max_time:
            return True
        return (all(c.quota_exhausted for c in self.colonies) and
                all(a.is_arrived for a in self.agents))

    # Reporting

    def snapshot(self) -> SimulationState:
        """Create immutable snapshot of current simulation state."""
        now = self.now
        agent_snapshots = []
        for a in self.agents:
            x, y = a.position_at(now)
            agent_snapshots.append(AgentSnapshot(
                agent_id=a.id,
                colony=a.colony,
                color=a.color,
                node=a.current,
                x=x,
                y=y,
                state=a.state.value
            ))

        colony_snapshots = [
            ColonySnapshot(name=c.name, color=c.color, spawned=c.spawn_count,
                           arrived=c.arrived_count, active=c.active_count,
                           quota=c.quota)
            for c in self.colonies
        ]

        edge_levels = self.pheromones.edge_levels()
        arrived = [a for a in self.agents if a.is_arrived]
        metrics = {
            'spawned': len(self.agents),
            'arrived': len(arrived),
            'active_agents': len(self.agents) - len(arrived),
            'stuck_agents': sum(1 for a in self.agents if a.state == AgentState.STUCK),
            'mean_route_length': (float(np.mean([a.total_distance for a in arrived]))
                                  if arrived else 0.0),
            'max_pheromone': float(edge_levels.max()) if len(edge_levels) else 0.0
        }

        return SimulationState(
            time=now,
            cycle=self.cycle_count,
            agents=agent_snapshots,
            colonies=colony_snapshots,
            edge_pheromone=edge_levels,
            signals=dict(self.rules.signaled),
            metrics=metrics
        )

    def best_routes(self) -> Dict[str, Dict[str, Any]]:
        """Shortest completed route per colony."""
        routes = {}
        for a in self.agents:
            if not a.is_arrived:
                continue
            best = routes.get(a.colony)
            if best is None or a.total_distance < best['distance']:
                routes[a.colony] = {'distance': a.total_distance, 'path': list(a.path)}
        return routes

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics for the simulation."""
        return {
            'time': self.now,
            'cycles': self.cycle_count,
            'agents_spawned': len(self.agents),
            'agents_arrived': sum(c.arrived_count for c in self.colonies),
            'stuck_episodes': sum(a.stuck_episodes for a in self.agents),
            'colonies': {
                c.name: {'spawned': c.spawn_count, 'arrived': c.arrived_count,
                         'active': c.active_count, 'quota': c.quota}
                for c in self.colonies
            },
            'best_routes': self.best_routes()
        }
