#!/usr/bin/env python3
"""
Basic Monte Carlo simulation example using isinglab.

Runs the ferromagnetic 2D Ising model with spin-flip dynamics at a few
temperatures around the Onsager point and plots the averaged
observables.
"""

import numpy as np
import matplotlib.pyplot as plt

from isinglab import Configuration, MonteCarloHost, SpinVisualizer, ThermodynamicsAnalyzer


def main():
    """Run basic Monte Carlo simulation."""

    print("isinglab: Basic Monte Carlo Example")
    print("=" * 40)

    config = Configuration(width=24, height=24, interaction=1.0, magnetic=0.0,
                           print_freq=576, file_key="basic")
    print(f"Lattice: {config.width}x{config.height}, J = {config.interaction}")

    # Exact critical temperature of the square lattice (k_B = 1)
    Tc_exact = 2.0 * config.interaction / np.log(1 + np.sqrt(2))
    print(f"Onsager critical temperature: {Tc_exact:.4f}")

    temperatures = [1.5, 2.0, 2.25, 2.5, 3.0, 3.5]
    analyzer = ThermodynamicsAnalyzer()

    print("\nRunning Monte Carlo simulations...")
    for temperature in temperatures:
        host = MonteCarloHost(config.replace(temperature=temperature), random_seed=42)
        host.setup()
        host.equilibrate(200 * config.n_spins)
        host.produce(400 * config.n_spins, verbose=True)

        result = analyzer.add_data_point(
            temperature, host.energies, host.magnetisations, config.n_spins
        )
        print(f"T = {temperature:4.2f}: <H>/N = {result['mean_energy'] / config.n_spins:+.4f}, "
              f"<|M|> = {np.mean(np.abs(host.magnetisations)):.4f}, "
              f"Cv = {result['heat_capacity']:.5f}")

    Tc = analyzer.peak_temperature()
    print(f"\nHeat capacity peaks at T = {Tc}")

    print("\nCreating plots...")
    visualizer = SpinVisualizer()
    visualizer.plot_sweep(analyzer.to_arrays(), save_path="monte_carlo_results.png")
    print("Saved plots to 'monte_carlo_results.png'")

    visualizer.plot_lattice(host.spin_system.lattice(),
                            title=f"T = {temperatures[-1]}",
                            save_path="final_lattice.png")
    print("Saved final configuration to 'final_lattice.png'")

    plt.show()


if __name__ == "__main__":
    main()
