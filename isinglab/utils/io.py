"""Input/output: exported data tables, parameter files and result bundles."""

import json
import logging
import numpy as np
import h5py
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Union

from ..core.config import Configuration
from ..core.histogram import Histogram

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

SUFFIXES = {
    "data": ".data",
    "averaged_data": ".averaged_data",
    "correlation": ".correlation",
    "structure_function": ".structureFunction",
    "trajectory": ".trajectory",
}


def output_paths(config: Configuration, directory: PathLike = ".") -> Dict[str, Path]:
    """File names derived from the configuration's file key."""
    base = Path(directory) / config.filekey_base
    return {kind: base.with_name(base.name + suffix) for kind, suffix in SUFFIXES.items()}


def save_trajectory(filename: PathLike, trajectory: Sequence[float], print_freq: int):
    """
    Write a (time, Hamiltonian) table; entry t is written at time t*print_freq.
    """
    with open(filename, "w") as f:
        f.write(f"{'# time':>10}{'Hamiltonian':>6}\n")
        for t, value in enumerate(trajectory):
            f.write(f"{t * print_freq:>10d}{value:>6g}\n")


def save_data(
    filename: PathLike,
    config: Configuration,
    energies: Sequence[float],
    magnetisations: Sequence[float],
):
    """
    Write one row per recorded sample: step J T B H M.

    Raises:
        ValueError: if the two series differ in length
    """
    if len(energies) != len(magnetisations):
        raise ValueError("energies and magnetisations must have the same length")

    with open(filename, "w") as f:
        f.write(f"{'# step':>14}{'J':>8}{'T':>8}{'B':>8}{'H':>14}{'M':>14}\n")
        for i, (energy, magnetisation) in enumerate(zip(energies, magnetisations)):
            f.write(
                f"{(i + 1) * config.print_freq:>14d}"
                f"{config.interaction:>8.2f}"
                f"{config.temperature:>8.2f}"
                f"{config.magnetic:>8.2f}"
                f"{energy:>14.2f}"
                f"{magnetisation:>14.6f}\n"
            )
    logger.info("Saved %d samples to %s", len(energies), filename)


def append_averages(filename: PathLike, config: Configuration, averages: Dict[str, float]):
    """
    Append one averaged row; the header is written only for a new file.

    Args:
        filename: Output path
        config: Parameters of the run
        averages: Output of ``thermodynamic_averages``
    """
    path = Path(filename)
    new_file = not path.exists()
    with open(path, "a") as f:
        if new_file:
            f.write(
                f"{'J':>8}{'T':>8}{'B':>8}{'<H>':>14}{'<M>':>14}"
                f"{'<chi>':>18}{'<Cv>':>18}{'# of samples':>14}\n"
            )
        f.write(
            f"{config.interaction:>8.2f}"
            f"{config.temperature:>8.2f}"
            f"{config.magnetic:>8.2f}"
            f"{averages['mean_energy']:>14.2f}"
            f"{averages['mean_magnetisation']:>14.6f}"
            f"{averages['susceptibility']:>18.10f}"
            f"{averages['heat_capacity']:>18.10f}"
            f"{averages['n_samples']:>14d}\n"
        )
    logger.info("Appended averages to %s", path)


def save_correlation(filename: PathLike, correlation: Histogram):
    with open(filename, "w") as f:
        f.write("# correlation G(r) = <S(0) S(r)> - <S>^2\n")
        f.write(correlation.formatted_string())


def save_structure_function(filename: PathLike, structure: Histogram):
    with open(filename, "w") as f:
        f.write("# structure function S(k) = FT( G(r) )\n")
        f.write(structure.formatted_string())


def load_histogram(filename: PathLike) -> Histogram:
    """Read a file written by ``save_correlation`` or ``save_structure_function``."""
    data = np.loadtxt(filename, comments="#", ndmin=2)
    histogram = Histogram()
    for key, value in data:
        histogram.set_data(key, value)
    return histogram


def save_parameters(filename: PathLike, config: Configuration):
    """Save a configuration as JSON."""
    with open(filename, "w") as f:
        json.dump(config.to_dict(), f, indent=2)


def load_parameters(filename: PathLike) -> Configuration:
    with open(filename, "r") as f:
        return Configuration.from_dict(json.load(f))


def save_lattice(filename: PathLike, lattice: np.ndarray, config: Optional[Configuration] = None):
    """
    Save a (height, width) state array as text; parameters go in the header.
    """
    header = json.dumps(config.to_dict()) if config is not None else ""
    np.savetxt(filename, np.asarray(lattice), fmt="%d", header=header)


def load_lattice(filename: PathLike):
    """
    Returns:
        Tuple of (lattice, configuration or None)
    """
    config = None
    with open(filename, "r") as f:
        first = f.readline()
    if first.startswith("#"):
        header = first[1:].strip()
        if header:
            config = Configuration.from_dict(json.loads(header))
    lattice = np.loadtxt(filename, dtype=np.int8, ndmin=2)
    return lattice, config


def save_simulation_results(filename: PathLike, results: Dict[str, Any], format: str = "auto"):
    """
    Save simulation results to file.

    Arrays become datasets, scalars become attributes; a nested
    ``parameters`` dictionary is stored as a group (HDF5) or flattened
    with a ``parameters_`` prefix (NPZ).

    Args:
        filename: Output filename
        results: Results dictionary
        format: "hdf5", "npz" or "auto" (from the suffix)
    """
    format = _resolve_format(filename, format)

    if format == "hdf5":
        with h5py.File(filename, "w") as f:
            for key, value in results.items():
                if isinstance(value, dict):
                    group = f.create_group(key)
                    for subkey, subvalue in value.items():
                        group.attrs[subkey] = subvalue
                elif np.ndim(value) > 0:
                    f.create_dataset(key, data=np.asarray(value))
                else:
                    f.attrs[key] = value
    else:
        flat = {}
        for key, value in results.items():
            if isinstance(value, dict):
                for subkey, subvalue in value.items():
                    flat[f"{key}_{subkey}"] = subvalue
            else:
                flat[key] = value
        np.savez_compressed(filename, **flat)


def load_simulation_results(filename: PathLike, format: str = "auto") -> Dict[str, Any]:
    """Load a file written by ``save_simulation_results``."""
    format = _resolve_format(filename, format)

    if format == "npz":
        with np.load(filename) as data:
            return {key: data[key] for key in data.files}

    results: Dict[str, Any] = {}
    with h5py.File(filename, "r") as f:
        results.update(f.attrs.items())
        for key, item in f.items():
            if isinstance(item, h5py.Dataset):
                results[key] = item[()]
            else:
                results[key] = dict(item.attrs.items())
    return results


def _resolve_format(filename: PathLike, format: str) -> str:
    if format == "auto":
        suffix = Path(filename).suffix
        if suffix in (".h5", ".hdf5"):
            return "hdf5"
        if suffix == ".npz":
            return "npz"
        raise ValueError(f"Cannot determine format from filename: {filename}")
    if format not in ("hdf5", "npz"):
        raise ValueError(f"Unknown format: {format}")
    return format


def host_results(host) -> Dict[str, Any]:
    """Collect the records and current state of a MonteCarloHost."""
    snapshot = host.snapshot()
    return {
        "energies": np.asarray(host.energies, dtype=float),
        "magnetisations": np.asarray(host.magnetisations, dtype=float),
        "lattice": snapshot.lattice(),
        "final_energy": snapshot.hamiltonian,
        "final_magnetisation": snapshot.magnetisation,
        "steps_done": snapshot.steps_done,
        "parameters": host.config.to_dict(),
    }
