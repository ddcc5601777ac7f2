"""Visualization and export for the road ACO simulation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
from pathlib import Path
from typing import List, TYPE_CHECKING
from PIL import Image
import io

if TYPE_CHECKING:
    from ..model.graph import GraphModel
    from ..model.traffic import TrafficRules
    from ..model.state import SimulationState


class Visualizer:
    """
    Draws the road network with pheromone-weighted edges and agents.

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation
    """

    # Color scheme
    COLORS = {
        'background': '#2C3E50',  # Dark blue-gray
        'road': '#F39C12',        # Orange
        'blocked': '#7F8C8D',     # Gray
        'signal_open': '#27AE60',   # Green
        'signal_closed': '#E74C3C',  # Red
        'node': '#ECF0F1',        # Light gray
    }

    NODE_CLASS_COLORS = {
        'origin': '#3498DB',
        'destination': '#9B59B6',
        'station': '#F1C40F',
    }

    def __init__(self, graph: "GraphModel", rules: "TrafficRules"):
        self.graph = graph
        self.rules = rules
        self.segments = np.array([[graph.nodes[i], graph.nodes[j]]
                                  for i, j in graph.edges])
        self.frames: List[Image.Image] = []

    def _edge_styles(self, state: "SimulationState"):
        colors, styles = [], []
        for key in self.graph.edges:
            if key in self.rules.blocked:
                colors.append(self.COLORS['blocked'])
                styles.append('dashed')
            elif key in state.signals:
                colors.append(self.COLORS['signal_open'] if state.signals[key]
                              else self.COLORS['signal_closed'])
                styles.append('solid')
            else:
                colors.append(self.COLORS['road'])
                styles.append('solid')
        return colors, styles

    def _create_figure(self, state: "SimulationState") -> plt.Figure:
        """Create matplotlib figure for state visualization."""
        xs, ys = self.graph.nodes[:, 0], self.graph.nodes[:, 1]
        span_x = max(np.ptp(xs), 1.0)
        span_y = max(np.ptp(ys), 1.0)
        fig_height = 6
        fig_width = max(8, fig_height * span_x / span_y)
        fig, ax = plt.subplots(figsize=(fig_width, fig_height))
        ax.set_facecolor(self.COLORS['background'])

        # Edge width follows normalized pheromone level
        levels = state.edge_pheromone
        peak = levels.max() if len(levels) and levels.max() > 0 else 1.0
        widths = 1.0 + 5.0 * levels / peak
        colors, styles = self._edge_styles(state)
        ax.add_collection(LineCollection(self.segments, colors=colors,
                                         linewidths=widths, linestyles=styles,
                                         alpha=0.8, zorder=1))

        # Nodes
        node_colors = [self.NODE_CLASS_COLORS.get(self.graph.node_classes.get(i),
                                                  self.COLORS['node'])
                       for i in range(self.graph.node_count)]
        ax.scatter(xs, ys, s=60, c=node_colors, edgecolors='black',
                   linewidths=0.5, zorder=2)
        for i, (x, y) in enumerate(self.graph.nodes):
            ax.annotate(str(i), (x, y), fontsize=6, ha='center', va='center', zorder=3)

        # Agents
        if state.agents:
            ax.scatter([a.x for a in state.agents], [a.y for a in state.agents],
                       s=18, c=[a.color for a in state.agents],
                       edgecolors='white', linewidths=0.3, zorder=4)

        counters = " | ".join(f"{c.name}: {c.arrived}/{c.spawned}"
                              for c in state.colonies)
        ax.set_title(f't={state.time:.0f} | Cycle {state.cycle} | {counters}')
        ax.set_xlabel('X')
        ax.set_ylabel('Y')

        margin = 0.05 * max(span_x, span_y)
        ax.set_xlim(xs.min() - margin, xs.max() + margin)
        # Screen coordinates: y grows downward
        ax.set_ylim(ys.max() + margin, ys.min() - margin)
        ax.set_aspect('equal')

        legend_elements = [
            plt.Line2D([0], [0], color=self.COLORS['road'], lw=3, label='Road'),
            plt.Line2D([0], [0], color=self.COLORS['blocked'], lw=2,
                       linestyle='--', label='Blocked'),
            plt.Line2D([0], [0], color=self.COLORS['signal_open'], lw=3,
                       label='Signal (open)'),
            plt.Line2D([0], [0], color=self.COLORS['signal_closed'], lw=3,
                       label='Signal (closed)'),
        ]
        legend_elements += [
            plt.Line2D([0], [0], marker='o', color='w', label=c.name,
                       markerfacecolor=c.color, markersize=8)
            for c in state.colonies
        ]
        ax.legend(handles=legend_elements, loc='upper right', fontsize=7)

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "SimulationState") -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(state)

        # Convert to PIL Image
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: "SimulationState", output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )
