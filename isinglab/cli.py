"""
Command-line interface for isinglab.
"""

import argparse
import logging
import sys
from pathlib import Path
import numpy as np

from . import (
    Configuration,
    ConfigurationError,
    IsingError,
    MonteCarloHost,
    SpinVisualizer,
    ThermodynamicsAnalyzer,
)
from .utils import io

logger = logging.getLogger("isinglab")


def add_parameter_arguments(parser: argparse.ArgumentParser):
    """Lattice and model options shared by all subcommands."""
    parser.add_argument('--config', help='JSON parameter file; explicit options override it')
    parser.add_argument('-W', '--width', type=int, help='Lattice width (default: 32)')
    parser.add_argument('-H', '--height', type=int, help='Lattice height (default: 32)')
    parser.add_argument('-J', '--interaction', type=float, help='Coupling J (default: 1.0)')
    parser.add_argument('-B', '--magnetic', type=float, help='Magnetic field B (default: 0.0)')
    parser.add_argument('--constrained', action='store_true', default=None,
                        help='Spin-exchange (Kawasaki) dynamics')
    parser.add_argument('--ratio', type=float, help='Down-spin ratio for constrained runs (default: 0.5)')
    parser.add_argument('--print-freq', type=int, dest='print_freq',
                        help='Steps between recorded samples (default: 100)')
    parser.add_argument('--wavelength', type=int,
                        help='Start from a cosine stripe pattern of this wavelength')
    parser.add_argument('-o', '--output', dest='file_key', help='Output file key (default: ising)')
    parser.add_argument('-d', '--directory', default='.', help='Output directory (default: .)')
    parser.add_argument('-e', '--equilibration', type=int, default=10000,
                        help='Equilibration steps (default: 10000)')
    parser.add_argument('-n', '--steps', type=int, default=100000,
                        help='Production steps (default: 100000)')
    parser.add_argument('-s', '--seed', type=int, help='Random seed')


def build_configuration(args) -> Configuration:
    """Merge a parameter file (if any) with explicit command-line options."""
    config = io.load_parameters(args.config) if args.config else Configuration()

    overrides = {}
    for name in ('width', 'height', 'interaction', 'magnetic', 'constrained',
                 'ratio', 'print_freq', 'file_key'):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if getattr(args, 'temperature', None) is not None:
        overrides['temperature'] = args.temperature
    if args.wavelength is not None:
        overrides['wavelength_pattern'] = True
        overrides['wavelength'] = args.wavelength

    return config.replace(**overrides).validate()


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="isinglab: Metropolis Monte Carlo for the 2D Ising model",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase log output (-v info, -vv debug)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Single temperature
    run_parser = subparsers.add_parser('run', help='Equilibrate and sample at one temperature')
    add_parameter_arguments(run_parser)
    run_parser.add_argument('-T', '--temperature', type=float, help='Temperature (default: 2.0)')
    run_parser.add_argument('--correlate', action='store_true',
                            help='Write G(r) and S(k) of the final configuration')
    run_parser.add_argument('--results', help='Also save a .h5/.npz result bundle')
    run_parser.add_argument('--plot', action='store_true', help='Save PNG figures')

    # Temperature sweep
    sweep_parser = subparsers.add_parser('sweep', help='Run a temperature sweep')
    add_parameter_arguments(sweep_parser)
    sweep_parser.add_argument('-T', '--temperatures', nargs=3, type=float,
                              default=[1.0, 4.0, 0.25],
                              help='Temperature range: min max step (default: 1.0 4.0 0.25)')
    sweep_parser.add_argument('--plot', action='store_true', help='Save a PNG of the sweep')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=[logging.WARNING, logging.INFO, logging.DEBUG][min(args.verbose, 2)],
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == 'run':
            run_single(args)
        elif args.command == 'sweep':
            run_sweep(args)
    except (IsingError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def log_move(event, payload):
    logger.debug("step %d %s: spins %s, H %g -> %g", payload["step"], event,
                 payload["spins"], payload["energy_old"], payload["hamiltonian"])


def run_single(args):
    """Equilibrate, sample and export one temperature."""
    config = build_configuration(args)
    paths = io.output_paths(config, args.directory)
    Path(args.directory).mkdir(parents=True, exist_ok=True)

    print(f"Running {config.width}x{config.height} "
          f"{'spin-exchange' if config.constrained else 'spin-flip'} simulation")
    print(f"J = {config.interaction}, B = {config.magnetic}, T = {config.temperature}")

    observer = log_move if args.verbose >= 2 else None
    host = MonteCarloHost(config, random_seed=args.seed, observer=observer)
    host.setup()
    host.equilibrate(args.equilibration, verbose=True)

    initial = host.spin_system.hamiltonian
    host.produce(args.steps, verbose=True)

    io.save_trajectory(paths['trajectory'], [initial] + host.energies, config.print_freq)
    io.save_data(paths['data'], config, host.energies, host.magnetisations)
    averages = host.averages()
    io.append_averages(paths['averaged_data'], config, averages)

    if args.correlate:
        correlation = host.spin_system.correlate()
        structure = host.spin_system.compute_structure_function(correlation)
        io.save_correlation(paths['correlation'], correlation)
        io.save_structure_function(paths['structure_function'], structure)

    if args.results:
        io.save_simulation_results(args.results, io.host_results(host))

    if args.plot:
        base = Path(args.directory) / config.filekey_base
        visualizer = SpinVisualizer()
        visualizer.plot_lattice(host.spin_system.lattice(), save_path=f"{base}_lattice.png")
        visualizer.plot_time_series(host.energies, host.magnetisations,
                                    config.print_freq, save_path=f"{base}_series.png")
        if args.correlate:
            visualizer.plot_correlation(correlation, save_path=f"{base}_correlation.png")
            visualizer.plot_structure_function(structure, save_path=f"{base}_structure.png")

    # Print summary
    print(f"\nSamples: {averages['n_samples']}")
    print(f"<H> = {averages['mean_energy']:.4f}")
    print(f"<M> = {averages['mean_magnetisation']:.6f}")
    print(f"chi = {averages['susceptibility']:.6g}")
    print(f"Cv  = {averages['heat_capacity']:.6g}")
    print(f"Results saved with key {paths['data'].with_suffix('')}")


def run_sweep(args):
    """Temperature sweep appending one averaged row per temperature."""
    T_min, T_max, T_step = args.temperatures
    if T_step <= 0 or T_min > T_max:
        raise ConfigurationError(
            f"temperature range needs min <= max and step > 0, got {T_min} {T_max} {T_step}"
        )
    temperatures = np.arange(T_min, T_max + T_step / 2, T_step)
    args.temperature = float(temperatures[0])
    config = build_configuration(args)
    paths = io.output_paths(config, args.directory)
    Path(args.directory).mkdir(parents=True, exist_ok=True)

    print(f"Temperature range: {T_min} - {T_max} ({len(temperatures)} points)")

    def write_point(host, result):
        io.append_averages(paths['averaged_data'], host.config, result)

    analyzer = ThermodynamicsAnalyzer()
    sweep = analyzer.run_sweep(
        config, temperatures,
        equilibration_steps=args.equilibration,
        production_steps=args.steps,
        random_seed=args.seed,
        on_point=write_point,
    )

    peak = analyzer.peak_temperature()
    if peak is not None:
        print(f"\nHeat capacity peak at T = {peak:.3f}")
    print(f"Averages appended to {paths['averaged_data']}")

    if args.plot:
        SpinVisualizer().plot_sweep(
            sweep, save_path=str(Path(args.directory) / f"{config.filekey_base}_sweep.png")
        )


if __name__ == "__main__":
    sys.exit(main())
