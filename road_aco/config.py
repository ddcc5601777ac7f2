"""Configuration dataclasses and YAML loader for the road ACO simulation."""

from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any, Optional
from pathlib import Path
import yaml


REINFORCEMENT_MODES = ("continuous", "once")


@dataclass
class TimingConfig:
    jitter: float = 4.0                # spawn scatter around the origin node
    speed_range: Tuple[float, float] = (0.3, 1.0)
    duration_factor: float = 25.0      # time units per unit of distance
    spawn_interval: float = 1500.0
    cycle_interval: float = 150.0
    traffic_toggle_interval: float = 10000.0


@dataclass
class ACOConfig:
    alpha: float = 0.5                 # pheromone exponent
    beta: float = 2.0                  # heuristic exponent
    evaporation_rate: float = 0.95     # retention factor, 0 < rate < 1
    ants_per_colony: int = 35
    deposit_constant: float = 100.0    # K in K / total_distance
    pheromone_floor: float = 0.1
    reinforcement: str = "continuous"  # "continuous" or "once"


@dataclass
class AgentConfig:
    stuck_threshold: int = 20          # idle attempts before STUCK, 0 = never
    stuck_cooldown: float = 2000.0


@dataclass
class GraphConfig:
    nodes: List[Tuple[float, float]]
    required_edges: List[Tuple[int, int]] = field(default_factory=list)
    node_classes: Dict[int, str] = field(default_factory=dict)


@dataclass
class SignalSpec:
    edge: Tuple[int, int]
    interval: Optional[float] = None   # falls back to traffic_toggle_interval


@dataclass
class TrafficConfig:
    blocked: List[Tuple[int, int]] = field(default_factory=list)
    one_way: List[Tuple[int, int]] = field(default_factory=list)  # allowed (from, to)
    signaled: List[SignalSpec] = field(default_factory=list)


@dataclass
class ColonyConfig:
    name: str
    origin: int
    destination: int
    color: str = "#3498DB"
    quota: Optional[int] = None        # falls back to aco.ants_per_colony


@dataclass
class SimulationConfig:
    graph: GraphConfig
    colonies: List[ColonyConfig]
    traffic: TrafficConfig = field(default_factory=TrafficConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    aco: ACOConfig = field(default_factory=ACOConfig)
    agents: AgentConfig = field(default_factory=AgentConfig)
    max_time: float = 60000.0

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))

    def quota_for(self, colony: ColonyConfig) -> int:
        if colony.quota is not None:
            return colony.quota
        return self.aco.ants_per_colony

    def validate(self) -> None:
        """Fail fast on configuration the engine cannot run with."""
        timing = self.timing
        for name in ("spawn_interval", "cycle_interval",
                     "traffic_toggle_interval", "duration_factor"):
            if getattr(timing, name) <= 0:
                raise ValueError(f"timing.{name} must be positive")
        low, high = timing.speed_range
        if not 0 < low <= high:
            raise ValueError(f"Invalid speed range: {timing.speed_range}")
        if timing.jitter < 0:
            raise ValueError("timing.jitter must be non-negative")

        aco = self.aco
        if not 0.0 < aco.evaporation_rate < 1.0:
            raise ValueError(
                f"aco.evaporation_rate must be in (0, 1), got {aco.evaporation_rate}")
        if aco.pheromone_floor <= 0:
            raise ValueError("aco.pheromone_floor must be positive")
        if aco.deposit_constant < 0:
            raise ValueError("aco.deposit_constant must be non-negative")
        if aco.reinforcement not in REINFORCEMENT_MODES:
            raise ValueError(f"Unknown reinforcement mode: {aco.reinforcement}")

        if self.agents.stuck_threshold < 0 or self.agents.stuck_cooldown < 0:
            raise ValueError("agents.stuck_threshold and stuck_cooldown must be >= 0")
        for spec in self.traffic.signaled:
            if spec.interval is not None and spec.interval <= 0:
                raise ValueError(f"Signal interval for {spec.edge} must be positive")

        if not self.colonies:
            raise ValueError("At least one colony is required")
        node_count = len(self.graph.nodes)
        origins = set()
        for colony in self.colonies:
            for node in (colony.origin, colony.destination):
                if not 0 <= node < node_count:
                    raise ValueError(
                        f"Colony {colony.name!r} references unknown node {node}")
            if colony.origin == colony.destination:
                raise ValueError(
                    f"Colony {colony.name!r} has identical origin and destination")
            if colony.origin in origins:
                raise ValueError(f"Duplicate colony origin: {colony.origin}")
            if self.quota_for(colony) < 0:
                raise ValueError(f"Colony {colony.name!r} has a negative quota")
            origins.add(colony.origin)


def _parse_pairs(pairs_raw: List) -> List[Tuple[int, int]]:
    """Parse a list of two-element node pairs."""
    pairs = []
    for p in pairs_raw:
        if len(p) != 2:
            raise ValueError(f"Expected a node pair, got {p!r}")
        pairs.append((int(p[0]), int(p[1])))
    return pairs


def _parse_signals(signals_raw: List) -> List[SignalSpec]:
    """Parse signaled edges given either as bare pairs or as mappings."""
    signals = []
    for s in signals_raw:
        if isinstance(s, dict):
            a, b = s['edge']
            signals.append(SignalSpec(edge=(int(a), int(b)),
                                      interval=s.get('interval')))
        else:
            signals.append(SignalSpec(edge=_parse_pairs([s])[0]))
    return signals


def _parse_colonies(colonies_raw: List[Dict]) -> List[ColonyConfig]:
    """Parse colony definitions from raw YAML data."""
    return [
        ColonyConfig(
            name=str(c['name']),
            origin=int(c['origin']),
            destination=int(c['destination']),
            color=c.get('color', "#3498DB"),
            quota=c.get('quota')
        )
        for c in colonies_raw
    ]


def parse_config(raw: Dict[str, Any]) -> SimulationConfig:
    """Build and validate a configuration from already-parsed YAML data."""
    graph_raw = raw['graph']
    graph = GraphConfig(
        nodes=[(float(x), float(y)) for x, y in graph_raw['nodes']],
        required_edges=_parse_pairs(graph_raw.get('required_edges', [])),
        node_classes={int(k): str(v)
                      for k, v in (graph_raw.get('node_classes') or {}).items()}
    )

    traffic_raw = raw.get('traffic') or {}
    traffic = TrafficConfig(
        blocked=_parse_pairs(traffic_raw.get('blocked', [])),
        one_way=_parse_pairs(traffic_raw.get('one_way', [])),
        signaled=_parse_signals(traffic_raw.get('signaled', []))
    )

    timing_raw = dict(raw.get('timing') or {})
    if 'speed_range' in timing_raw:
        timing_raw['speed_range'] = tuple(timing_raw['speed_range'])
    timing = TimingConfig(**timing_raw)

    aco = ACOConfig(**(raw.get('aco') or {}))
    agents = AgentConfig(**(raw.get('agents') or {}))

    sim_raw = raw.get('simulation') or {}
    export_raw = raw.get('export') or {}

    config = SimulationConfig(
        graph=graph,
        colonies=_parse_colonies(raw['colonies']),
        traffic=traffic,
        timing=timing,
        aco=aco,
        agents=agents,
        max_time=sim_raw.get('max_time', 60000.0),
        seed=sim_raw.get('seed'),
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False)
    )
    config.validate()
    return config


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} is empty or malformed")
    return parse_config(raw)
