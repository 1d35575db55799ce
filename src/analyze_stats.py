"""Analyze the saved statistics from a simulation run."""

import argparse
from pathlib import Path

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt


def load_stats(filename='stats.npz'):
    """Load statistics from file (None if it does not exist)."""
    if not Path(filename).exists():
        print(f"Error: {filename} not found. Run a simulation first!")
        return None

    with np.load(filename) as data:
        return {key: data[key] for key in data.files}


def summarize(stats):
    """Population ranges and final state of a run."""
    predators = stats['predator_count']
    prey = stats['prey_count']
    if len(prey) == 0:
        return {'data_points': 0}
    return {
        'data_points': len(prey),
        'first_tick': int(stats['tick'][0]),
        'last_tick': int(stats['tick'][-1]),
        'prey_range': (int(prey.min()), int(prey.max())),
        'predator_range': (int(predators.min()), int(predators.max())),
        'final_prey': int(prey[-1]),
        'final_predators': int(predators[-1]),
    }


def plot_stats(stats, title='Predator-Prey Statistics'):
    """Create a 2x2 figure of populations, energy and predator/prey ratio."""
    ticks = stats['tick']

    fig, axes = plt.subplots(2, 2, figsize=(12, 8))
    fig.suptitle(title, fontsize=14, fontweight='bold')

    # Population counts
    ax = axes[0, 0]
    ax.plot(ticks, stats['prey_count'], color='green', label='Prey', linewidth=2)
    ax.plot(ticks, stats['predator_count'], color='red', label='Predators', linewidth=2)
    ax.set_xlabel('Tick')
    ax.set_ylabel('Population')
    ax.set_title('Population Dynamics')
    ax.legend()
    ax.grid(True, alpha=0.3)

    # Average energy
    ax = axes[0, 1]
    ax.plot(ticks, stats['average_prey_energy'], color='green', label='Prey', linewidth=2)
    ax.plot(ticks, stats['average_predator_energy'], color='red', label='Predators', linewidth=2)
    ax.set_xlabel('Tick')
    ax.set_ylabel('Average Energy')
    ax.set_title('Average Energy Over Time')
    ax.legend()
    ax.grid(True, alpha=0.3)

    # Phase portrait
    ax = axes[1, 0]
    ax.plot(stats['prey_count'], stats['predator_count'], color='purple', linewidth=1)
    ax.set_xlabel('Prey')
    ax.set_ylabel('Predators')
    ax.set_title('Phase Portrait')
    ax.grid(True, alpha=0.3)

    # Predator/Prey ratio
    ax = axes[1, 1]
    ratio = np.asarray(stats['predator_count']) / (np.asarray(stats['prey_count']) + 1)  # +1 to avoid div by 0
    ax.plot(ticks, ratio, color='purple', linewidth=2)
    ax.axhline(y=1.0, color='gray', linestyle='--', alpha=0.5, label='Equal populations')
    ax.set_xlabel('Tick')
    ax.set_ylabel('Predator/Prey Ratio')
    ax.set_title('Predator/Prey Ratio')
    ax.legend()
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    return fig


def main(argv=None):
    parser = argparse.ArgumentParser(description='Plot statistics saved by a simulation run')
    parser.add_argument('stats_file', nargs='?', default='stats.npz', help='Statistics archive (.npz)')
    parser.add_argument('--title', type=str, default='Predator-Prey Statistics', help='Figure title')
    parser.add_argument('--output', type=str, default='ecosystem_stats.png', help='Output image')
    args = parser.parse_args(argv)

    print("=== SIMULATION ANALYSIS ===\n")
    stats = load_stats(args.stats_file)
    if stats is None:
        return 1

    summary = summarize(stats)
    print(f"Data points: {summary['data_points']}")
    if summary['data_points']:
        print(f"Ticks: {summary['first_tick']} to {summary['last_tick']}")
        print("\nPopulation ranges:")
        print(f"  Prey: {summary['prey_range'][0]} - {summary['prey_range'][1]}")
        print(f"  Predators: {summary['predator_range'][0]} - {summary['predator_range'][1]}")
        print("\nFinal state:")
        print(f"  Prey: {summary['final_prey']}")
        print(f"  Predators: {summary['final_predators']}")

    fig = plot_stats(stats, title=args.title)
    fig.savefig(args.output, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"\n✓ Visualization saved to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
