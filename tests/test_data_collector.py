"""Tests for CSV run logging"""

import csv

import pytest

from motion_control.data_collector import DataCollector
from motion_control.robot import CycleInputs


def read_rows(path):
    with open(path, newline="") as f:
        return list(csv.reader(f))


@pytest.fixture
def run_dir(tmp_path):
    return tmp_path / "run_test"


def test_files_created_with_headers(run_dir):
    """Setup creates every CSV with its header row"""
    with DataCollector(run_dir=str(run_dir)):
        pass

    assert read_rows(run_dir / "pose.csv") == [["timestamp", "x", "y", "heading"]]
    assert read_rows(run_dir / "arm.csv")[0] == ["timestamp", "mode", "position", "setpoint", "output_volts"]
    module_header = read_rows(run_dir / "modules.csv")[0]
    assert module_header[0] == "timestamp"
    assert len(module_header) == 1 + 4 * 5
    assert "back_right_degraded" in module_header
    assert (run_dir / "gripper.csv").exists()
    assert (run_dir / "faults.csv").exists()


def test_timestamped_run_directory(tmp_path, monkeypatch):
    """Without an explicit run directory a timestamped one is created under results/"""
    monkeypatch.delenv("RUN_DIR", raising=False)
    collector = DataCollector(output_dir=str(tmp_path))

    assert collector.run_dir.parent == tmp_path / "results"
    assert collector.run_dir.name.startswith("run_")


def test_output_dir_must_be_directory(tmp_path):
    """A file passed as the output directory is rejected"""
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("")

    with pytest.raises(ValueError):
        DataCollector(output_dir=str(not_a_dir))


def test_log_cycle_rows(run_dir, run_cycles):
    """Every cycle writes one row per mechanism and one per fault event"""
    with DataCollector(run_dir=str(run_dir)) as collector:
        collector.log_cycle(run_cycles(CycleInputs(gripper="open")))
        collector.log_cycle(run_cycles(CycleInputs(x=0.5)))

    pose_rows = read_rows(run_dir / "pose.csv")
    assert len(pose_rows) == 3
    assert float(pose_rows[2][0]) == pytest.approx(0.02)

    arm_rows = read_rows(run_dir / "arm.csv")
    assert arm_rows[1][1] == "idle"

    gripper_rows = read_rows(run_dir / "gripper.csv")
    assert float(gripper_rows[1][2]) == pytest.approx(-40.0)

    fault_rows = read_rows(run_dir / "faults.csv")
    assert len(fault_rows) == 2
    assert fault_rows[1][2] == "limit_violation"
    assert fault_rows[1][3] == "gripper"

    module_rows = read_rows(run_dir / "modules.csv")
    assert len(module_rows[2]) == 1 + 4 * 5
    assert float(module_rows[2][1]) > 0.0
