"""Summary report generation for the road ACO simulation."""

from typing import Dict, Any, Optional, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Reporter:
    """Tracks run-wide extremes per cycle and formats the final text report."""

    def __init__(self, config_path: str, seed: Optional[int]):
        self.config_path = config_path
        self.seed = seed
        self.peak_stuck = 0
        self.peak_pheromone = 0.0
        self.peak_pheromone_time: Optional[float] = None
        self.first_arrival_time: Optional[float] = None

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per cycle."""
        level = float(state.metrics.get('max_pheromone', 0.0))
        if level > self.peak_pheromone:
            self.peak_pheromone = level
            self.peak_pheromone_time = state.time
        self.peak_stuck = max(self.peak_stuck, int(state.metrics.get('stuck_agents', 0)))
        if self.first_arrival_time is None and state.metrics.get('arrived', 0) > 0:
            self.first_arrival_time = state.time

    def generate_summary(self, final_state: "SimulationState",
                         summary: Dict[str, Any],
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        spawned = int(summary.get('agents_spawned', 0))
        arrived = int(summary.get('agents_arrived', 0))
        arrival_pct = (arrived / spawned * 100) if spawned > 0 else 0
        first_arrival = (f"{self.first_arrival_time:.0f}"
                         if self.first_arrival_time is not None else "never")
        peak_at = (f" at t={self.peak_pheromone_time:.0f}"
                   if self.peak_pheromone_time is not None else "")

        lines = [
            "",
            "=" * 80,
            "                     ROAD ACO SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            "SIMULATION METRICS",
            "-" * 40,
            f"Simulated Time:        {final_state.time:.0f}",
            f"Cycles:                {final_state.cycle}",
            f"Agents Arrived:        {arrived} / {spawned} ({arrival_pct:.1f}%)",
            f"First Arrival At:      {first_arrival}",
            f"Mean Route Length:     {final_state.metrics.get('mean_route_length', 0):.1f}",
            f"Final Max Pheromone:   {final_state.metrics.get('max_pheromone', 0):.4f}",
            f"Peak Pheromone:        {self.peak_pheromone:.4f}{peak_at}",
            "",
            "COLONIES",
            "-" * 40,
        ]

        best_routes = summary.get('best_routes', {})
        for name, counts in summary.get('colonies', {}).items():
            lines.append(f"{name:<12} arrived {counts['arrived']:>4} / "
                         f"spawned {counts['spawned']:>4} (quota {counts['quota']}, "
                         f"{counts.get('active', 0)} on the road)")
            best = best_routes.get(name)
            if best:
                route = " -> ".join(str(n) for n in best['path'])
                lines.append(f"{'':<12} best route {best['distance']:.1f}: {route}")

        stuck_episodes = int(summary.get('stuck_episodes', 0))
        lines += [
            "",
            "STUCK DETECTION",
            "-" * 40,
            f"[{'X' if stuck_episodes > 0 else ' '}] Stuck Episodes: {stuck_episodes} "
            f"(peak {self.peak_stuck} agents at once)",
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'simulation_log.csv'}")
            lines.append(f"Colony Log: {output_dir / 'simulation_log_colonies.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
