"""Ant agent implementing the ACO movement state machine."""

import logging
from enum import Enum
from typing import Tuple, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .engine import SimulationEngine
    from .scheduler import ScheduledTask

logger = logging.getLogger(__name__)


class AgentState(Enum):
    """Possible states for an agent."""
    IDLE = "idle"
    MOVING = "moving"
    ARRIVED = "arrived"
    STUCK = "stuck"


class Agent:
    """
    A single ant walking from its colony's origin to its destination.

    Each cycle the agent either waits (ARRIVED, MOVING, STUCK) or picks a
    legal neighbor of its current node. Moves to a non-destination node
    start a timed transition on the scheduler and the agent stays MOVING
    until it completes; reaching the destination is immediate.

    Legal neighbor test (shared with the engine's selection policy):
    - node exists
    - node is not the one the agent just came from (unless rerouting)
    - traffic rules allow current -> node
    """

    def __init__(self, agent_id: int,
                 colony: str,
                 origin: int,
                 destination: int,
                 speed: float,
                 origin_xy: Tuple[float, float],
                 offset: Tuple[float, float] = (0.0, 0.0),
                 color: str = "#3498DB"):
        self.id = agent_id
        self.colony = colony
        self.origin = origin
        self.destination = destination
        self.speed = speed
        self.offset = offset
        self.color = color

        self.current = origin
        self.path: List[int] = [origin]
        self.total_distance = 0.0
        self.state = AgentState.IDLE
        self.counted = False

        self.idle_ticks = 0
        self.stuck_timer = 0.0
        self.stuck_episodes = 0
        self.rerouting = False

        self.transition: Optional["ScheduledTask"] = None
        self._place(origin_xy)

    # Position interpolation for the rendering side

    def _place(self, node_xy: Tuple[float, float]) -> None:
        x, y = node_xy[0] + self.offset[0], node_xy[1] + self.offset[1]
        self._segment = ((x, y), (x, y), 0.0, 0.0)

    def position_at(self, now: float) -> Tuple[float, float]:
        """Linearly interpolated position along the current transition."""
        (x0, y0), (x1, y1), start, duration = self._segment
        if duration <= 0:
            return x1, y1
        frac = min(max((now - start) / duration, 0.0), 1.0)
        return x0 + (x1 - x0) * frac, y0 + (y1 - y0) * frac

    # Movement

    @property
    def previous_node(self) -> Optional[int]:
        return self.path[-2] if len(self.path) > 1 else None

    def can_move_to(self, node: int, ctx: "SimulationEngine") -> bool:
        """Single rule evaluation used by both the agent and the selector."""
        if not ctx.graph.has_node(node):
            return False
        if node == self.previous_node and not self.rerouting:
            return False
        return ctx.rules.is_traversable(self.current, node)

    def attempt_move(self, ctx: "SimulationEngine", elapsed: float) -> None:
        """Try to move one edge onward; called once per cycle."""
        if self.state in (AgentState.ARRIVED, AgentState.MOVING):
            return
        if self.state == AgentState.STUCK:
            self.stuck_timer -= elapsed
            if self.stuck_timer <= 0:
                self.state = AgentState.IDLE
                self.rerouting = True
            return

        candidates = [n for n in ctx.graph.neighbors(self.current)
                      if self.can_move_to(n, ctx)]
        logger.debug("Agent %d at %d (prev %s): candidates %s",
                     self.id, self.current, self.previous_node, candidates)

        if not candidates:
            self._idle(ctx)
            return

        if len(candidates) == 1:
            next_node = candidates[0]
        else:
            next_node = ctx.select_next_node(self, candidates)
            if next_node is None:
                self._idle(ctx)
                return

        if not ctx.graph.has_node(next_node):
            logger.error("Agent %d chose unknown node %r, respawning at %d",
                         self.id, next_node, self.origin)
            self.respawn(ctx)
            return

        self.commit_move(next_node, ctx)

    def _idle(self, ctx: "SimulationEngine") -> None:
        self.idle_ticks += 1
        threshold = ctx.config.agents.stuck_threshold
        if threshold and self.idle_ticks >= threshold:
            self.state = AgentState.STUCK
            self.stuck_timer = ctx.config.agents.stuck_cooldown
            self.stuck_episodes += 1
            self.idle_ticks = 0
            logger.warning("Agent %d stuck at node %d after %d idle cycles",
                           self.id, self.current, threshold)

    def commit_move(self, next_node: int, ctx: "SimulationEngine") -> None:
        """Record the move and start the transition towards next_node."""
        now = ctx.scheduler.now
        distance = ctx.graph.distance(self.current, next_node)
        start_xy = self.position_at(now)

        self.state = AgentState.MOVING
        self.current = next_node
        self.path.append(next_node)
        self.total_distance += distance
        self.idle_ticks = 0
        self.rerouting = False

        if next_node == self.destination:
            self.state = AgentState.ARRIVED
            self._place(ctx.graph.position(next_node))
            logger.debug("Agent %d arrived after %.1f", self.id, self.total_distance)
            return

        duration = distance * ctx.config.timing.duration_factor * self.speed
        x, y = ctx.graph.position(next_node)
        target_xy = (x + self.offset[0], y + self.offset[1])
        self._segment = (start_xy, target_xy, now, duration)
        self.transition = ctx.scheduler.schedule(duration, self._finish_transition)

    def _finish_transition(self) -> None:
        self.transition = None
        if self.state == AgentState.MOVING:
            self.state = AgentState.IDLE

    def cancel_transition(self) -> None:
        if self.transition is not None:
            self.transition.cancel()
            self.transition = None

    def respawn(self, ctx: "SimulationEngine") -> None:
        """Put the agent back at its origin with a fresh path."""
        self.cancel_transition()
        self.current = self.origin
        self.path = [self.origin]
        self.total_distance = 0.0
        self.state = AgentState.IDLE
        self.idle_ticks = 0
        self.stuck_timer = 0.0
        self.rerouting = False
        self._place(ctx.graph.position(self.origin))

    def mark_counted(self) -> bool:
        """Flag a first arrival; True only the first time it is seen."""
        if self.state != AgentState.ARRIVED or self.counted:
            return False
        self.counted = True
        return True

    @property
    def is_arrived(self) -> bool:
        return self.state == AgentState.ARRIVED

    def __repr__(self) -> str:
        return (f"Agent(id={self.id}, colony={self.colony}, node={self.current}, "
                f"state={self.state.value})")
