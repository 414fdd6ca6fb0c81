"""
End-to-end tests of the scenario driver.
"""

import io
import re
from datetime import timedelta
from pathlib import Path

import pytest
import yaml

from routeopt import (
    build_model_description,
    execute_simulation,
    report_results,
    run,
)
from routeopt.engine.layers import TravelerLayer
from routeopt.engine.simulation import Model, SimulationState
from routeopt.engine.starter import SimulationStarter
from routeopt.runner import main
from routeopt.scenarios import config_to_dict
from routeopt.scenarios.config import OutputTargetType

PROJECT_ROOT = Path(__file__).parent.parent
SUMMARY = re.compile(r"^Executed iterations \d+ lasted \d{2}:\d{2}:\d{2}(\.\d{6})?$")


# =============================================================================
# Reporting
# =============================================================================


class TestReportResults:
    def test_summary_only_without_traveler_layer(self):
        stream = io.StringIO()
        state = SimulationState(model=Model(), iterations=10_800)

        report_results(state, timedelta(seconds=2, microseconds=5), stream=stream)

        assert stream.getvalue() == "Executed iterations 10800 lasted 00:00:02.000005\n"

    def test_one_line_per_traveler_then_summary(self, make_config):
        container = SimulationStarter.build_application(
            build_model_description(), make_config(), show_progress=False
        )
        stream = io.StringIO()
        with container:
            state, elapsed = execute_simulation(container)
            report_results(state, elapsed, stream=stream)

        lines = stream.getvalue().splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("Traveler walker | reached")
        assert lines[1].startswith("Traveler driver | reached")
        assert SUMMARY.match(lines[2])
        assert "Executed iterations 60 " in lines[2]


# =============================================================================
# Full runs
# =============================================================================


def test_default_run(monkeypatch, quiet_settings):
    monkeypatch.chdir(PROJECT_ROOT)
    stream = io.StringIO()

    state = run([], quiet_settings, stream=stream)

    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("Traveler 1 | reached")
    assert "CarDriving(" in lines[0]
    assert "Walking(" in lines[0]
    assert SUMMARY.match(lines[1])
    assert state.iterations == 10_800
    # Layers are released once the run is over
    assert state.model.get_layer(TravelerLayer).travelers == {}


def test_default_run_fails_outside_project(tmp_path, monkeypatch, quiet_settings):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        run([], quiet_settings, stream=io.StringIO())


def test_config_run_with_csv_output(make_config, tmp_path, quiet_settings):
    config = make_config(output_target=OutputTargetType.CSV)
    path = tmp_path / "run.yaml"
    path.write_text(yaml.safe_dump(config_to_dict(config)))
    output_dir = tmp_path / "out"
    stream = io.StringIO()

    state = run(
        ["--config", str(path), "--output-dir", str(output_dir)],
        quiet_settings,
        stream=stream,
    )

    assert state.iterations == 60
    assert len(stream.getvalue().splitlines()) == 3
    exported = list(output_dir.glob("Test_Traveler_*.csv"))
    assert len(exported) == 1
    assert re.fullmatch(r"Test_Traveler_\d{12}\.csv", exported[0].name)


def test_no_csv_without_output_dir(make_config, tmp_path, quiet_settings, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = make_config(output_target=OutputTargetType.CSV)
    path = tmp_path / "run.yaml"
    path.write_text(yaml.safe_dump(config_to_dict(config)))

    run(["-c", str(path)], quiet_settings, stream=io.StringIO())

    assert sorted(p.name for p in tmp_path.rglob("*.csv")) == [
        "cars.csv",
        "travelers.csv",
    ]


def test_main_exit_code(make_config, tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("ROUTEOPT_PROGRESS", "0")
    path = tmp_path / "run.yaml"
    path.write_text(yaml.safe_dump(config_to_dict(make_config())))

    assert main(["--config", str(path)]) == 0

    out = capsys.readouterr().out.splitlines()
    assert SUMMARY.match(out[-1])


def test_main_bad_args(monkeypatch):
    monkeypatch.setenv("ROUTEOPT_PROGRESS", "0")
    with pytest.raises(SystemExit) as excinfo:
        main(["--unknown"])
    assert excinfo.value.code == 2
