"""
Road ACO Simulation

Multiple ant colonies searching a road network with blocked streets,
one-way streets and traffic signals, using Ant Colony Optimization.

Usage:
    road-aco --config configs/city.yaml [options]

Examples:
    road-aco --config configs/city.yaml
    road-aco --config configs/city.yaml --gif --out-dir results/
    road-aco --config configs/city.yaml --no-csv --no-snapshot --quiet
    road-aco --config configs/city.yaml --seed 42 --time 120000
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .config import load_config
from .model.engine import SimulationEngine
from .export.csv_writer import CSVWriter
from .export.visualizer import Visualizer
from .export.reporter import Reporter

GIF_FRAME_EVERY = 5  # cycles between buffered GIF frames


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Multi-colony ACO on a road network',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    road-aco --config configs/city.yaml
    road-aco --config configs/city.yaml --gif --out-dir results/
    road-aco --config configs/city.yaml --no-csv --no-snapshot --quiet
    road-aco --config configs/city.yaml --seed 42 --time 120000
        """
    )

    # Required arguments
    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML configuration file')

    # Optional overrides
    parser.add_argument('--time', type=float, default=None,
                        help='Override simulated time limit')
    parser.add_argument('--out-dir', type=Path, default=Path('./output'),
                        help='Output directory for exports (default: ./output)')

    # Export toggles
    parser.add_argument('--csv', dest='csv', action='store_true', default=None,
                        help='Enable CSV export (default)')
    parser.add_argument('--no-csv', dest='csv', action='store_false',
                        help='Disable CSV export')

    parser.add_argument('--snapshot', dest='snapshot', action='store_true', default=None,
                        help='Enable final snapshot (default)')
    parser.add_argument('--no-snapshot', dest='snapshot', action='store_false',
                        help='Disable final snapshot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--verbose', '-v', action='store_true', default=False,
                        help='Log per-agent decisions')

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except (KeyError, TypeError, ValueError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.time is not None:
        config.max_time = args.time
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.gif:
        config.gif_enabled = True
    config.quiet = args.quiet
    if args.seed is not None:
        config.seed = args.seed
    config.out_dir = args.out_dir

    if not config.quiet:
        print("Initializing simulation...")
        print(f"  Nodes: {len(config.graph.nodes)}")
        print(f"  Colonies: {len(config.colonies)}")
        print(f"  Time limit: {config.max_time:.0f}")

    try:
        engine = SimulationEngine(config)
    except ValueError as e:
        print(f"Error building simulation: {e}", file=sys.stderr)
        return 1

    if not config.quiet:
        print(f"  Edges: {len(engine.graph.edges)} "
              f"({len(engine.rules.blocked)} blocked, {len(engine.rules.one_way)} one-way, "
              f"{len(engine.rules.signaled)} signaled)")

    # Initialize exporters
    visualizer = Visualizer(engine.graph, engine.rules)
    reporter = Reporter(str(args.config), config.seed)
    csv_writer = None
    if config.csv_enabled:
        csv_writer = CSVWriter(config.out_dir / 'simulation_log.csv')
        csv_writer.open()

    if not config.quiet:
        print("\nRunning simulation...")

    final_state = None
    try:
        while not engine.is_finished():
            state = engine.step()
            final_state = state

            if csv_writer:
                csv_writer.append(state)

            if config.gif_enabled:
                if state.cycle % GIF_FRAME_EVERY == 0 or engine.is_finished():
                    visualizer.buffer_frame(state)

            reporter.update(state)

            if not config.quiet and state.cycle % 100 == 0:
                counters = ", ".join(f"{c.name} {c.arrived}/{c.spawned}"
                                     for c in state.colonies)
                print(f"  t={state.time:.0f}: {counters}")

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")
    finally:
        if csv_writer:
            csv_writer.close()

    if csv_writer and not config.quiet:
        print(f"\nCSV saved: {csv_writer.output_path}, {csv_writer.colony_path}")

    if config.snapshot_enabled and final_state:
        snapshot_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, snapshot_path)
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path, fps=10)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    if not config.quiet and final_state:
        report = reporter.generate_summary(
            final_state,
            engine.get_summary(),
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
