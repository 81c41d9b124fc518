"""
Command Line Interface for PyRFMap.

This module provides a command-line interface for running simulated
PRF mapping experiments and generating trial designs from the terminal.
"""

import argparse
import sys
import numpy as np

from . import __version__
from .core.data_structures import ExperimentConfig
from .simulation.trial_design import generate_trial_design
from .simulation.experiment import run_experiment
from .analysis.statistics import summarize_sensitivity


def _add_design_arguments(parser):
    parser.add_argument('--rows', type=int, default=4, help='Grid rows')
    parser.add_argument('--cols', type=int, default=6, help='Grid columns')
    parser.add_argument('--repetitions', type=int, default=10,
                        help='Times each location is shown')
    parser.add_argument('--targets-per-trial', type=int, default=3,
                        help='Locations shown per trial')
    parser.add_argument('--seed', type=int, help='Random seed')


def main(argv=None):
    """Main entry point for PyRFMap CLI."""
    parser = argparse.ArgumentParser(
        description="PyRFMap: Population Receptive Field Mapping Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pyrfmap simulate --seed 1 --plot prf_heatmap.png
  pyrfmap simulate --rows 6 --cols 6 --channels 50 --peak-location 15
  pyrfmap design --repetitions 4 --seed 3
        """
    )

    parser.add_argument('--version', action='version', version=f'PyRFMap {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Simulation command
    sim_parser = subparsers.add_parser('simulate', help='Simulate a mapping experiment')
    _add_design_arguments(sim_parser)
    sim_parser.add_argument('--baseline', type=int, default=300,
                            help='Baseline duration (ms)')
    sim_parser.add_argument('--stimulus', type=int, default=500,
                            help='Stimulus duration (ms)')
    sim_parser.add_argument('--isi', type=int, default=100,
                            help='Inter-stimulus interval (ms)')
    sim_parser.add_argument('--channels', type=int, default=100,
                            help='Number of channels')
    sim_parser.add_argument('--peak-location', type=int,
                            help='Population peak location (random if omitted)')
    sim_parser.add_argument('--noise', type=float, default=0.1,
                            help='Baseline noise amplitude')
    sim_parser.add_argument('--no-interpolation', action='store_true',
                            help='Plot the raw grid instead of the smoothed one')
    sim_parser.add_argument('--colormap', default='hot', help='Heatmap colormap')
    sim_parser.add_argument('--plot', help='Save the heatmap to this image file')
    sim_parser.add_argument('--animate', action='store_true',
                            help='Show trial progress while simulating')
    sim_parser.add_argument('--verbose', '-v', action='store_true',
                            help='Verbose output')

    # Design command
    design_parser = subparsers.add_parser('design', help='Generate and verify a trial design')
    _add_design_arguments(design_parser)
    design_parser.add_argument('--show-trials', action='store_true',
                               help='Print every trial')

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == 'simulate':
            return cmd_simulate(args)
        elif args.command == 'design':
            return cmd_design(args)
        else:
            print(f"Unknown command: {args.command}")
            return 1

    except Exception as e:
        print(f"Error: {e}")
        if getattr(args, 'verbose', False):
            import traceback
            traceback.print_exc()
        return 1


def cmd_simulate(args):
    """Handle simulation command."""
    print(f"PyRFMap v{__version__} - PRF Mapping Simulation")
    print("=" * 40)

    config = ExperimentConfig(
        grid_shape=(args.rows, args.cols),
        repetitions_per_location=args.repetitions,
        targets_per_trial=args.targets_per_trial,
        baseline_duration=args.baseline,
        stimulus_duration=args.stimulus,
        isi_duration=args.isi,
        num_channels=args.channels,
        peak_sensitivity_location=args.peak_location,
        noise_amplitude=args.noise,
        interpolation=not args.no_interpolation,
        colormap=args.colormap
    )

    if args.seed is not None:
        print(f"Random seed: {args.seed}")
    print(f"Grid: {config.grid_shape[0]}x{config.grid_shape[1]}, "
          f"{config.total_trials} trials, {config.num_channels} channels")

    callback = None
    if args.animate:
        from .analysis.plotting import TrialAnimator
        callback = TrialAnimator(config.grid_shape, config.num_channels,
                                 config.timing.recording_duration)

    results = run_experiment(config, seed=args.seed, callback=callback)

    print(f"The total number of trials matches the required {config.total_trials} trials.")
    print(f"Each trial has exactly {config.targets_per_trial} unique targets.")
    print(f"Each location is repeated exactly {config.repetitions_per_location} "
          f"times across all trials.")

    stats = summarize_sensitivity(results.sensitivity, results.peak_location)
    if args.verbose:
        np.set_printoptions(precision=3, suppress=True)
        print("\nSensitivity grid:")
        print(results.sensitivity)

    row, col = stats['true_peak_coords']
    print(f"\nPopulation's preferred location: row = {row}; column = {col}.")
    row, col = stats['peak_coords']
    print(f"Estimated peak: row = {row}; column = {col} (response {stats['peak_value']:.3f})")

    if args.plot:
        import matplotlib
        if not args.animate:
            matplotlib.use('Agg')
        import matplotlib.pyplot as plt
        from .analysis.plotting import plot_sensitivity_grid

        fig, ax = plt.subplots(figsize=(8, 6))
        plot_sensitivity_grid(results.sensitivity, colormap=config.colormap,
                              interpolation=config.interpolation,
                              factor=config.upsampling_factor, ax=ax)
        plt.savefig(args.plot, dpi=150, bbox_inches='tight')
        plt.close(fig)
        print(f"Heatmap saved: {args.plot}")

    if callback is not None:
        callback.close()

    print("Simulation completed!")
    return 0


def cmd_design(args):
    """Handle design command."""
    print(f"PyRFMap v{__version__} - Trial Design")
    print("=" * 40)

    rng = np.random.default_rng(args.seed)
    design = generate_trial_design(args.rows * args.cols, args.repetitions,
                                   args.targets_per_trial, rng)

    print(f"Generated {design.n_trials} trials of {design.targets_per_trial} targets")
    counts = design.location_counts()
    print(f"Location counts: min = {counts.min() if counts.size else 0}, "
          f"max = {counts.max() if counts.size else 0}")

    if args.show_trials:
        for i, trial in enumerate(design.locations):
            print(f"  Trial {i + 1:3d}: {' '.join(str(loc) for loc in trial)}")

    print("Design verified!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
