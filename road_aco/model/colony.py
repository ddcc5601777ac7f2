"""Colony bookkeeping for the road ACO simulation."""

from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .agent import Agent
    from .scheduler import ScheduledTask


class Colony:
    """A named group of agents sharing an origin and a destination."""

    def __init__(self, name: str, origin: int, destination: int,
                 quota: int, color: str = "#3498DB"):
        self.name = name
        self.origin = origin
        self.destination = destination
        self.quota = quota
        self.color = color

        self.spawn_count = 0
        self.arrived_count = 0
        self.agents: List["Agent"] = []
        self.spawn_task: Optional["ScheduledTask"] = None

    @property
    def quota_exhausted(self) -> bool:
        return self.spawn_count >= self.quota

    @property
    def active_count(self) -> int:
        """Agents of this colony still on the road."""
        return sum(1 for a in self.agents if not a.is_arrived)

    def register(self, agent: "Agent") -> None:
        self.agents.append(agent)
        self.spawn_count += 1

    def record_arrival(self) -> None:
        self.arrived_count += 1

    def reset(self) -> None:
        self.spawn_count = 0
        self.arrived_count = 0
        self.agents = []

    def __repr__(self) -> str:
        return (f"Colony({self.name!r}, {self.origin}->{self.destination}, "
                f"{self.arrived_count}/{self.spawn_count})")
