"""Tests for component isolation flags"""

from motion_control.component_modes import ComponentMode, parse_component_flags


def test_defaults():
    """With no flags every component is active"""
    mode, remaining = parse_component_flags([])

    assert mode == ComponentMode()
    assert remaining == []


def test_flags_disable_components():
    """Each flag switches off its component and leaves other arguments alone"""
    mode, remaining = parse_component_flags(
        ["--no-vision", "--robot-relative", "--closed-loop", "--verbose"]
    )

    assert not mode.use_vision
    assert not mode.use_field_relative
    assert mode.use_closed_loop_drive
    assert mode.use_cosine_compensation
    assert remaining == ["--verbose"]


def test_description():
    """The description names the active components"""
    text = str(ComponentMode(use_vision=False, use_arm_feedforward=False))

    assert "Odometry" in text
    assert "Vision" not in text
    assert "Arm(PID)" in text


def test_to_dict():
    """Every flag appears in the dictionary form"""
    flags = ComponentMode(use_cosine_compensation=False).to_dict()

    assert flags["use_cosine_compensation"] is False
    assert len(flags) == 5
