"""
Visualization utilities for recorded motion control runs.

This module loads the CSV files written by DataCollector and draws:
- The estimated field trajectory
- Commanded versus measured swerve module speeds
- Arm profile set point versus measured position
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from .config import MODULE_NAMES
from .plot_styles import (
    MODULE_COLORS,
    PLOT_BLUE,
    PLOT_CMAP,
    PLOT_ORANGE,
    PLOT_YELLOW_ORANGE,
    add_legend,
    create_figure,
    load_csv_data,
    load_csv_to_dict,
    save_figure,
    style_axis,
)

SUMMARY_FILES = ("pose.csv", "modules.csv", "arm.csv")
"""Files a run directory must contain to be summarised."""


def plot_trajectory(
    pose: Dict[str, np.ndarray],
    title: str = "Estimated Trajectory",
    save_path: Optional[Path] = None,
    dark_mode: bool = True,
) -> Figure:
    """Plot the estimated field trajectory (x vs y), coloured by time.

    Args:
        pose: Dictionary with 'timestamp', 'x', 'y' arrays (from pose.csv).
        title: Plot title.
        save_path: Optional path to save the figure.
        dark_mode: Whether to use dark mode styling.

    Returns:
        Matplotlib figure object.
    """
    fig, ax = create_figure(figsize=(10, 8), dark_mode=dark_mode)

    x = pose["x"]
    y = pose["y"]
    t = pose["timestamp"]
    valid = ~(np.isnan(x) | np.isnan(y))
    x, y, t = x[valid], y[valid], t[valid]

    if len(t) > 0:
        ax.plot(x, y, "-", color=PLOT_ORANGE, linewidth=1.5, alpha=0.6, label="Trajectory")
        scatter = ax.scatter(x, y, c=t, cmap=PLOT_CMAP, s=12, alpha=0.8, zorder=3)
        fig.colorbar(scatter, ax=ax, label="Time (s)")
        ax.plot(x[0], y[0], "o", color=PLOT_BLUE, markersize=8, label="Start", zorder=5)
        ax.plot(x[-1], y[-1], "o", color=PLOT_ORANGE, markersize=8, label="End", zorder=5)

    style_axis(ax, title=title, xlabel="X Position (m)", ylabel="Y Position (m)", dark_mode=dark_mode)
    ax.set_aspect("equal", adjustable="datalim")
    if len(t) > 0:
        add_legend(ax, dark_mode=dark_mode)

    fig.tight_layout()
    if save_path:
        save_figure(fig, save_path)
    return fig


def plot_module_speeds(
    modules: Dict[str, np.ndarray],
    module_names: Sequence[str] = MODULE_NAMES,
    title: str = "Swerve Module Speeds",
    save_path: Optional[Path] = None,
    dark_mode: bool = True,
) -> Figure:
    """Plot commanded (dashed) and measured (solid) speed for each module.

    Args:
        modules: Dictionary of arrays from modules.csv.
        module_names: Module names used in the column headers.
        title: Plot title.
        save_path: Optional path to save the figure.
        dark_mode: Whether to use dark mode styling.

    Returns:
        Matplotlib figure object.
    """
    fig, ax = create_figure(figsize=(12, 6), dark_mode=dark_mode)
    t = modules["timestamp"]

    for name, color in zip(module_names, MODULE_COLORS):
        ax.plot(t, modules[f"{name}_speed_cmd"], "--", color=color, alpha=0.8, label=f"{name} cmd")
        ax.plot(t, modules[f"{name}_speed"], "-", color=color, alpha=0.6, label=f"{name}")
        degraded = modules[f"{name}_degraded"] > 0.5
        if np.any(degraded):
            ax.plot(t[degraded], modules[f"{name}_speed"][degraded], "x", color=color)

    style_axis(ax, title=title, xlabel="Time (s)", ylabel="Speed (m/s)", dark_mode=dark_mode)
    add_legend(ax, dark_mode=dark_mode, ncol=2, fontsize="small")

    fig.tight_layout()
    if save_path:
        save_figure(fig, save_path)
    return fig


def plot_arm(
    arm: Dict[str, np.ndarray],
    modes: Optional[List[str]] = None,
    title: str = "Arm Position",
    save_path: Optional[Path] = None,
    dark_mode: bool = True,
) -> Figure:
    """Plot arm set point, measured position and output voltage over time.

    Args:
        arm: Dictionary of arrays from arm.csv.
        modes: Arm mode per row (text column of arm.csv), used to shade
            manual override.
        title: Plot title prefix.
        save_path: Optional path to save the figure.
        dark_mode: Whether to use dark mode styling.

    Returns:
        Matplotlib figure object.
    """
    fig, (ax1, ax2) = create_figure(2, 1, figsize=(12, 8), dark_mode=dark_mode)
    t = arm["timestamp"]

    ax1.plot(t, arm["setpoint"], "--", color=PLOT_YELLOW_ORANGE, label="Set point")
    ax1.plot(t, arm["position"], "-", color=PLOT_BLUE, alpha=0.8, label="Measured")
    if modes is not None and len(modes) == len(t):
        manual = np.array([m == "manual" for m in modes])
        if np.any(manual):
            ax1.fill_between(
                t, 0, 1, where=manual, color=PLOT_ORANGE, alpha=0.15,
                transform=ax1.get_xaxis_transform(), label="Manual",
            )
    style_axis(ax1, title=f"{title} - Tracking", xlabel="Time (s)", ylabel="Position (rad)", dark_mode=dark_mode)
    add_legend(ax1, dark_mode=dark_mode)

    ax2.plot(t, arm["output_volts"], "-", color=PLOT_ORANGE, label="Output")
    style_axis(ax2, title=f"{title} - Output", xlabel="Time (s)", ylabel="Voltage (V)", dark_mode=dark_mode)
    add_legend(ax2, dark_mode=dark_mode)

    fig.tight_layout()
    if save_path:
        save_figure(fig, save_path)
    return fig


def plot_run_summary(
    run_dir: Path,
    save_plots: bool = False,
    show_plots: bool = True,
    module_names: Sequence[str] = MODULE_NAMES,
) -> List[Figure]:
    """Generate summary plots for a complete run.

    Args:
        run_dir: Directory containing pose.csv, modules.csv and arm.csv.
        save_plots: If True, save plots to run directory.
        show_plots: If True, display plots interactively.
        module_names: Module names used in modules.csv headers.

    Returns:
        The figures drawn (trajectory, module speeds, arm).

    Raises:
        FileNotFoundError: If required CSV files are not found.
    """
    for name in SUMMARY_FILES:
        if not (run_dir / name).exists():
            raise FileNotFoundError(f"CSV file not found: {run_dir / name}")

    pose = load_csv_to_dict(run_dir / "pose.csv")
    modules = load_csv_to_dict(run_dir / "modules.csv")
    arm = load_csv_to_dict(run_dir / "arm.csv")
    headers, rows = load_csv_data(run_dir / "arm.csv")
    mode_index = headers.index("mode")
    modes = [row[mode_index] for row in rows if len(row) > mode_index]

    run_name = run_dir.name
    figures = [
        plot_trajectory(
            pose,
            title=f"{run_name} - Trajectory",
            save_path=run_dir / "trajectory.png" if save_plots else None,
        ),
        plot_module_speeds(
            modules,
            module_names,
            title=f"{run_name} - Module Speeds",
            save_path=run_dir / "module_speeds.png" if save_plots else None,
        ),
        plot_arm(
            arm,
            modes,
            title=f"{run_name} - Arm",
            save_path=run_dir / "arm.png" if save_plots else None,
        ),
    ]

    if show_plots:
        plt.show()
    return figures
