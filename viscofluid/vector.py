"""Utility vector functions on plain ``(x, y)`` tuples."""

from __future__ import annotations

import math

from .config import Vec2


def v_length_sq(a: Vec2) -> float:
    return a[0] * a[0] + a[1] * a[1]


def v_length(a: Vec2) -> float:
    return math.sqrt(v_length_sq(a))


def v_dot(a: Vec2, b: Vec2) -> float:
    return a[0] * b[0] + a[1] * b[1]


def v_unit(a: Vec2, length: float) -> Vec2:
    """Scale ``a`` by ``1 / length``. The caller guards ``length == 0``."""
    return a[0] / length, a[1] / length
