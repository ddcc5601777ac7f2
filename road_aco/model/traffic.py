"""Traffic rules: blocked streets, one-way streets and signals."""

import logging
from typing import Dict, Iterable, Optional, Set, Tuple

from .graph import EdgeKey, GraphModel, edge_key

logger = logging.getLogger(__name__)


class TrafficRules:
    """
    Classifies edges and answers whether a directed move is allowed.

    Precedence: blocked > one-way > signal > default-open. Signal flags
    are the only mutable part and are flipped by the scheduler.
    """

    def __init__(self, graph: GraphModel,
                 blocked: Iterable[Tuple[int, int]] = (),
                 one_way: Iterable[Tuple[int, int]] = (),
                 signaled: Optional[Dict[Tuple[int, int], float]] = None,
                 default_interval: float = 10000.0):
        self.graph = graph
        self.blocked: Set[EdgeKey] = {self._known(a, b, "Blocked") for a, b in blocked}

        # Edge key -> allowed (from, to)
        self.one_way: Dict[EdgeKey, Tuple[int, int]] = {}
        for a, b in one_way:
            key = self._known(a, b, "One-way")
            if key in self.one_way:
                raise ValueError(f"One-way street {key} declared more than once "
                                 f"(as {self.one_way[key]} and {(a, b)})")
            self.one_way[key] = (a, b)

        # Edge key -> open flag / toggle interval
        self.signaled: Dict[EdgeKey, bool] = {}
        self.intervals: Dict[EdgeKey, float] = {}
        for (a, b), interval in (signaled or {}).items():
            key = self._known(a, b, "Signaled")
            self.signaled[key] = True
            self.intervals[key] = interval if interval is not None else default_interval

    def _known(self, a: int, b: int, kind: str) -> EdgeKey:
        if not self.graph.has_edge(a, b):
            raise ValueError(f"{kind} street ({a}, {b}) is not an edge of the road network")
        return edge_key(a, b)

    def is_traversable(self, src: int, dst: int) -> bool:
        """Whether an agent may move from src to dst right now."""
        key = edge_key(src, dst)
        if key in self.blocked:
            logger.debug("Street %s is blocked", key)
            return False
        allowed = self.one_way.get(key)
        if allowed is not None:
            if allowed != (src, dst):
                logger.debug("Street %s is one-way %s", key, allowed)
                return False
            return True
        if key in self.signaled:
            if not self.signaled[key]:
                logger.debug("Signal on %s is red", key)
            return self.signaled[key]
        return True

    def is_open(self, a: int, b: int) -> bool:
        """Current signal state; edges without a signal count as open."""
        return self.signaled.get(edge_key(a, b), True)

    def toggle(self, key: EdgeKey) -> bool:
        """Flip one signal and return its new state."""
        self.signaled[key] = not self.signaled[key]
        return self.signaled[key]

    def signal_interval(self, key: EdgeKey) -> float:
        return self.intervals[key]
