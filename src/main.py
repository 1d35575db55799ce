"""
Host loop for the predator/prey engine.
Runs the world either with a live pygame viewer or headless, and saves
statistics on exit.
"""

import argparse
import logging
import sys

from agent import AgentKind
from config import WorldParameters
from exceptions import ConfigurationError
from utils import BoundaryMode
from world import World


def build_parameters(args) -> WorldParameters:
    """Turn command line arguments into WorldParameters."""
    params = WorldParameters.load(args.config) if args.config else WorldParameters()
    if args.width is not None:
        params.width = args.width
    if args.height is not None:
        params.height = args.height
    if args.bounded:
        params.boundary_mode = BoundaryMode.BOUNDED
    if args.predators is not None:
        params.predator.initial_count = args.predators
    if args.prey is not None:
        params.prey.initial_count = args.prey
    if args.max_agents is not None:
        params.max_agents = args.max_agents
    params.validate()
    return params


def run_headless(world: World, max_timesteps: int = 1000, print_interval: int = 100) -> int:
    """
    Advance the world without a display.

    Stops early when either kind dies out.

    Returns:
        Number of ticks run
    """
    ticks = 0
    while ticks < max_timesteps:
        world.advance_tick()
        ticks += 1

        if print_interval and world.tick_count() % print_interval == 0:
            world.print_stats()

        if world.predator_count() == 0 or world.prey_count() == 0:
            print("\n!!! ECOSYSTEM COLLAPSED !!!")
            print(f"Final state: {world.prey_count()} prey, {world.predator_count()} predators")
            break

    return ticks


def run_visual(world: World, max_timesteps=None, steps_per_frame=1, print_interval=100, stats_file='stats.npz'):
    """Run the world with the pygame viewer until the window closes."""
    from renderer import Renderer, RenderConfig

    renderer = Renderer(RenderConfig(width=int(world.parameters.width), height=int(world.parameters.height)))

    print("\n" + "="*60)
    print("Predator-Prey Ecosystem")
    print("="*60)
    print(f"Initial Population: {world.prey_count()} prey, {world.predator_count()} predators")
    print("Controls:")
    print("  SPACE - Pause/Resume")
    print("  P / O - Spawn predators / prey")
    print("  R - Reset   C - Clear all")
    print("  S - Save statistics")
    print("  ESC - Quit")
    print("="*60 + "\n")

    running = True
    try:
        while running:
            frame = renderer.render(world, world.collector)
            running = frame.running

            # Apply host requests between ticks
            if frame.reset_requested:
                world.reset()
            if frame.clear_requested:
                world.clear_all()
            if frame.spawn_predators:
                added = world.spawn(AgentKind.PREDATOR, frame.spawn_predators)
                print(f"Spawned {added} predators")
            if frame.spawn_prey:
                added = world.spawn(AgentKind.PREY, frame.spawn_prey)
                print(f"Spawned {added} prey")
            if frame.save_requested:
                world.collector.save(stats_file)

            if not running or frame.paused:
                continue

            for _ in range(steps_per_frame):
                world.advance_tick()

                # Print stats periodically
                if print_interval and world.tick_count() % print_interval == 0:
                    world.print_stats()

                # Check termination condition
                if max_timesteps and world.tick_count() >= max_timesteps:
                    running = False
                    break

    except KeyboardInterrupt:
        print("\n\nSimulation interrupted by user.")

    finally:
        renderer.close()


def build_parser() -> argparse.ArgumentParser:
    """Command line options for the host."""
    parser = argparse.ArgumentParser(
        description='Predator-prey ecosystem on a toroidal world',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Controls (during simulation):
  SPACE       - Pause/Resume
  P / O       - Spawn 10 predators / prey
  R           - Reset world
  C           - Clear all agents
  S           - Save statistics
  ESC         - Quit (auto-saves stats)

Examples:
  python run.py
  python run.py --bounded --prey 200 --predators 20
  python run.py --headless --max-timesteps 5000 --seed 7
  python analyze_stats.py stats.npz --output ecosystem_stats.png
        """
    )
    parser.add_argument('--config', type=str, default=None, help='JSON preset with WorldParameters')
    parser.add_argument('--width', type=float, default=None, help='World width')
    parser.add_argument('--height', type=float, default=None, help='World height')
    parser.add_argument('--bounded', action='store_true', help='Walled world instead of toroidal')
    parser.add_argument('--predators', type=int, default=None, help='Initial predator count')
    parser.add_argument('--prey', type=int, default=None, help='Initial prey count')
    parser.add_argument('--max-agents', type=int, default=None, help='Population cap')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible runs')
    parser.add_argument('--max-timesteps', type=int, default=None, help='Stop after this many ticks')
    parser.add_argument('--headless', action='store_true', help='Run without a window')
    parser.add_argument('--steps-per-frame', type=int, default=1, help='Ticks per rendered frame')
    parser.add_argument('--print-interval', type=int, default=100, help='Ticks between console reports')
    parser.add_argument('--stats-file', type=str, default='stats.npz', help='Where to save statistics')
    parser.add_argument('--log-level', type=str.upper, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='Logging level')
    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        params = build_parameters(args)
        world = World(params, seed=args.seed)
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}")
        return 2

    try:
        if args.headless:
            run_headless(world, max_timesteps=args.max_timesteps or 1000, print_interval=args.print_interval)
        else:
            run_visual(world, max_timesteps=args.max_timesteps, steps_per_frame=args.steps_per_frame,
                       print_interval=args.print_interval, stats_file=args.stats_file)
    finally:
        # Final statistics
        print("\n" + "="*60)
        print("SIMULATION COMPLETE")
        print("="*60)
        world.print_stats()
        print(f"\nTotal timesteps: {world.tick_count()}")
        world.collector.save(args.stats_file)

    return 0


if __name__ == "__main__":
    sys.exit(main())
