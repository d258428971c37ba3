#!/usr/bin/env python3
"""
Epidemic Cellular Automata Simulation

Agents wander a toroidal grid, infect their neighbours, recover or die, while
masks, distancing, curfew, lockdown and isolation change how they move and
how likely they are to catch the virus. One tick is one hour.

Usage:
    python -m epidemic_ca.main --config configs/baseline.yaml [options]

Examples:
    python -m epidemic_ca.main --config configs/baseline.yaml
    python -m epidemic_ca.main --config configs/lockdown.yaml --gif --out-dir results/
    python -m epidemic_ca.main --config configs/baseline.yaml --no-csv --no-snapshot --quiet
    python -m epidemic_ca.main --config configs/baseline.yaml --seed 42
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from epidemic_ca.config import load_config
from epidemic_ca.model.engine import SimulationEngine
from epidemic_ca.export.csv_writer import AgentLogWriter, TimeSeriesWriter
from epidemic_ca.export.visualizer import Visualizer
from epidemic_ca.export.reporter import Reporter


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Epidemic Cellular Automata Simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    epidemic-ca --config configs/baseline.yaml
    epidemic-ca --config configs/lockdown.yaml --gif --out-dir results/
    epidemic-ca --config configs/baseline.yaml --no-csv --no-snapshot --quiet
    epidemic-ca --config configs/baseline.yaml --seed 42
        """
    )

    # Required arguments
    parser.add_argument('--config', type=Path, required=True,
                        help='Path to YAML configuration file')

    # Optional overrides
    parser.add_argument('--steps', type=int, default=None,
                        help='Override max simulation ticks')
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

    parser.add_argument('--curve', dest='curve', action='store_true', default=None,
                        help='Enable epidemic curve plot (default)')
    parser.add_argument('--no-curve', dest='curve', action='store_false',
                        help='Disable epidemic curve plot')

    parser.add_argument('--gif', action='store_true', default=False,
                        help='Enable GIF animation export')

    parser.add_argument('--quiet', action='store_true', default=False,
                        help='Suppress stdout output')
    parser.add_argument('--verbose', action='store_true', default=False,
                        help='Log every status transition')

    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(level=level,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # Load configuration
    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.steps is not None:
        config.max_steps = args.steps
    if args.csv is not None:
        config.csv_enabled = args.csv
    if args.snapshot is not None:
        config.snapshot_enabled = args.snapshot
    if args.curve is not None:
        config.curve_enabled = args.curve
    if args.gif:
        config.gif_enabled = True
    config.quiet = args.quiet
    if args.seed is not None:
        config.seed = args.seed
    config.out_dir = args.out_dir

    if not config.quiet:
        print("Initializing simulation...")
        print(f"  Grid: {config.grid.width}x{config.grid.height}")
        print(f"  Agents: {config.population.susceptible} susceptible, "
              f"{config.population.infected} infected")
        print(f"  Max ticks: {config.max_steps}")

    try:
        engine = SimulationEngine(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not config.quiet:
        print(f"  Placed: {len(engine.agents)} agents")

    # Initialize exporters
    agent_log = None
    timeline = None
    if config.csv_enabled:
        agent_log = AgentLogWriter(config.out_dir / 'simulation_log.csv')
        agent_log.open()
        timeline = TimeSeriesWriter(config.out_dir / 'timeline.csv')
        timeline.open()

    visualizer = Visualizer(config.grid.width, config.grid.height)
    reporter = Reporter(str(args.config), config.seed, engine.policy)

    initial_state = engine.snapshot()
    reporter.update(initial_state)

    if not config.quiet:
        print("\nRunning simulation...")

    final_state = initial_state
    try:
        while not engine.is_finished():
            state = engine.step()
            final_state = state

            if agent_log:
                agent_log.append(state)
                timeline.append(state)

            # Buffer one GIF frame per simulated day
            if config.gif_enabled:
                if state.step % 24 == 0 or engine.is_finished():
                    visualizer.buffer_frame(state)

            reporter.update(state)

            if not config.quiet and state.step % 100 == 0:
                infected = int(state.metrics.get('infected', 0))
                deaths = int(state.metrics.get('total_deaths', 0))
                print(f"  Tick {state.step}: {infected} infected, {deaths} deaths")

    except KeyboardInterrupt:
        if not config.quiet:
            print("\nSimulation interrupted by user.")

    if agent_log:
        agent_log.close()
        timeline.close()
        if not config.quiet:
            print(f"\nCSV saved: {config.out_dir / 'simulation_log.csv'}")

    if config.snapshot_enabled:
        snapshot_path = config.out_dir / 'final_state.png'
        visualizer.save_snapshot(final_state, snapshot_path)
        if not config.quiet:
            print(f"Snapshot saved: {snapshot_path}")

    if config.curve_enabled:
        curve_path = config.out_dir / 'epidemic_curve.png'
        visualizer.save_epidemic_curve(reporter.step_metrics, curve_path)
        if not config.quiet:
            print(f"Epidemic curve saved: {curve_path}")

    if config.gif_enabled:
        gif_path = config.out_dir / 'simulation.gif'
        if not config.quiet:
            print(f"Generating GIF ({len(visualizer.frames)} frames)...")
        visualizer.generate_gif(gif_path, fps=10)
        if not config.quiet:
            print(f"Animation saved: {gif_path}")

    if not config.quiet:
        report = reporter.generate_summary(
            final_state,
            config.out_dir,
            config.csv_enabled,
            config.snapshot_enabled,
            config.gif_enabled,
            config.curve_enabled
        )
        print(report)

    return 0


if __name__ == '__main__':
    sys.exit(main())
