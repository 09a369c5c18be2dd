"""
Central simulation configuration.

Edit this block to tweak behaviour. The solver reads its defaults from here
and the command line in ``fluid_sim_2d.py`` overrides them per run.
"""

from __future__ import annotations

from typing import Tuple

Vec2 = Tuple[float, float]


class SimConfig:
    # Domain (world units; one unit is one pixel at scale 1)
    bounds_size: Vec2 = (200.0, 300.0)

    # Time integration
    dt: float = 0.1

    # Fluid constants (Clavet et al., springs disabled)
    interaction_radius: float = 3.4
    rest_density: float = 15.0
    stiffness: float = 0.5
    near_stiffness: float = 5.0
    linear_viscosity: float = 0.0
    quadratic_viscosity: float = 0.3
    gravity: float = -9.8

    # Wall collision: normal component scale (mu1), tangential scale (mu2)
    wall_normal_damping: float = 0.0
    wall_tangent_damping: float = 0.9

    # Demo
    scenario: str = "demo1"
    spacing: float = 1.0

    # Window
    pixel_scale: float = 3.0
    particle_radius_px: int = 1
    max_history_points: int = 240

    # Recording
    record_seconds: float = 10.0
    playback_fps: int = 30
