"""
Tests for the isinglab command-line interface.
"""

import json
import logging

from isinglab.cli import main

SMALL = ["-W", "4", "-H", "4", "-e", "50", "-n", "200", "--print-freq", "20", "-s", "1"]


def test_run_writes_outputs(tmp_path, capsys):
    results = tmp_path / "bundle.h5"
    code = main(["run", *SMALL, "-T", "1.5", "-d", str(tmp_path), "-o", "demo",
                 "--correlate", "--results", str(results)])
    assert code == 0

    for suffix in (".data", ".averaged_data", ".correlation", ".structureFunction", ".trajectory"):
        assert (tmp_path / f"demo{suffix}").exists()
    assert results.exists()

    data_rows = (tmp_path / "demo.data").read_text().splitlines()[1:]
    assert len(data_rows) == 10
    # initial energy plus one entry per sample
    assert len((tmp_path / "demo.trajectory").read_text().splitlines()) == 12
    assert "Samples: 10" in capsys.readouterr().out


def test_run_appends_averages(tmp_path):
    for _ in range(2):
        assert main(["run", *SMALL, "-d", str(tmp_path)]) == 0
    lines = (tmp_path / "ising.averaged_data").read_text().splitlines()
    assert len(lines) == 3


def test_run_with_plots(tmp_path):
    assert main(["run", *SMALL, "-d", str(tmp_path), "--correlate", "--plot"]) == 0
    assert (tmp_path / "ising_lattice.png").exists()
    assert (tmp_path / "ising_structure.png").exists()


def test_odd_constrained_lattice_fails(tmp_path, capsys):
    code = main(["run", "-W", "3", "-H", "3", "--constrained", "-d", str(tmp_path)])
    assert code == 1
    assert "even number" in capsys.readouterr().err


def test_parameter_file_with_override(tmp_path):
    params = tmp_path / "params.json"
    params.write_text(json.dumps({"width": 6, "height": 4, "temperature": 3.0,
                                  "print_freq": 20, "file_key": "fromfile"}))
    assert main(["run", "--config", str(params), "-W", "4",
                 "-e", "10", "-n", "40", "-d", str(tmp_path)]) == 0

    rows = (tmp_path / "fromfile.data").read_text().splitlines()[1:]
    assert len(rows) == 2
    assert rows[0].split()[2] == "3.00"


def test_sweep_appends_one_row_per_temperature(tmp_path, capsys):
    code = main(["sweep", *SMALL, "-T", "1.0", "2.0", "0.5", "-d", str(tmp_path)])
    assert code == 0
    lines = (tmp_path / "ising.averaged_data").read_text().splitlines()
    assert len(lines) == 4
    assert [line.split()[1] for line in lines[1:]] == ["1.00", "1.50", "2.00"]
    assert "Heat capacity peak" in capsys.readouterr().out


def test_sweep_rejects_empty_temperature_range(tmp_path, capsys):
    assert main(["sweep", *SMALL, "-T", "3", "1", "0.5", "-d", str(tmp_path)]) == 1
    assert main(["sweep", *SMALL, "-T", "1", "3", "0", "-d", str(tmp_path)]) == 1
    assert "temperature range" in capsys.readouterr().err
    assert not (tmp_path / "ising.averaged_data").exists()


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage" in capsys.readouterr().out


def test_debug_verbosity_traces_moves(tmp_path, caplog):
    caplog.set_level(logging.DEBUG, logger="isinglab")
    assert main(["-vv", "run", *SMALL, "-d", str(tmp_path)]) == 0
    traced = [r for r in caplog.records if r.name == "isinglab" and "spins" in r.getMessage()]
    assert len(traced) == 250
