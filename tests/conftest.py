"""Shared fixtures: default configuration, simulated robot and motion core."""

import pytest

from motion_control.config import default_config
from motion_control.faults import FaultLog
from motion_control.robot import RobotCore
from motion_control.sim import SimulatedRobot


@pytest.fixture
def config():
    """Competition robot configuration"""
    return default_config()


@pytest.fixture
def sim(config):
    """Simulated devices for the default robot"""
    return SimulatedRobot(config)


@pytest.fixture
def fault_log():
    return FaultLog()


@pytest.fixture
def core(config, sim, fault_log):
    """Motion core wired to the simulated robot"""
    return RobotCore(config, sim.hardware, fault_log=fault_log)


@pytest.fixture
def run_cycles(config, sim, core):
    """Step the simulation and the core together, one loop period per cycle.

    Returns the report of the last cycle run.
    """
    clock = {"now": None}

    def _run(inputs=None, cycles=1):
        report = None
        for _ in range(cycles):
            if clock["now"] is None:
                clock["now"] = 0.0
            else:
                sim.step(config.loop_period)
                clock["now"] += config.loop_period
            report = core.step(clock["now"], inputs)
        return report

    return _run
