"""
pygame drawing helpers shared by the live app and the stdin render client.

World coordinates have the origin at the bottom-left corner of the domain and
y pointing up; screen y grows downward.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import pygame

from .config import Vec2
from .vector import v_length

Color = Tuple[int, int, int]

BACKGROUND: Color = (10, 10, 30)
BOUNDS_COLOR: Color = (80, 80, 80)
MAX_SPEED: float = 60.0


def world_to_screen(p: Vec2, world_h: float, scale: float) -> Tuple[int, int]:
    x = p[0] * scale
    # Invert y because screen y grows downward
    y = (world_h - p[1]) * scale
    return int(x), int(y)


def speed_color(vel: Vec2, max_speed: float = MAX_SPEED) -> Color:
    """Dark blue -> cyan -> yellow -> white as speed rises to ``max_speed``."""
    spd = min(v_length(vel) / max_speed, 1.0)
    if spd < 0.33:
        t = spd / 0.33
        return int(30 * (1 - t)), int(60 + 140 * t), int(120 + 135 * t)
    if spd < 0.66:
        t = (spd - 0.33) / 0.33
        return int(255 * t), int(200 + 55 * t), int(255 - 105 * t)
    t = (spd - 0.66) / 0.34
    return 255, 255, int(150 + 105 * t)


def draw_particles(
    screen: pygame.Surface,
    positions: Sequence[Vec2],
    velocities: Sequence[Vec2],
    world_w: float,
    world_h: float,
    scale: float,
    radius_px: int,
) -> None:
    screen.fill(BACKGROUND)

    top_left = world_to_screen((0.0, world_h), world_h, scale)
    bottom_right = world_to_screen((world_w, 0.0), world_h, scale)
    rect = pygame.Rect(
        top_left[0],
        top_left[1],
        bottom_right[0] - top_left[0],
        bottom_right[1] - top_left[1],
    )
    pygame.draw.rect(screen, BOUNDS_COLOR, rect, 1)

    for i, pos in enumerate(positions):
        color = speed_color(velocities[i]) if i < len(velocities) else (120, 200, 255)
        pygame.draw.circle(screen, color, world_to_screen(pos, world_h, scale), radius_px)


def trim_history(history: List[float], max_points: int) -> List[float]:
    if len(history) > max_points:
        return history[-max_points:]
    return history


def draw_graphs(
    screen: pygame.Surface,
    fps_history: List[float],
    coll_history: List[float],
) -> None:
    """FPS and wall-collisions-per-second graphs at the top-right corner."""
    margin = 10
    graph_width = 200
    graph_height = 60
    right = screen.get_width() - margin
    top = margin

    bg_color = (5, 5, 20)
    border_color = (180, 180, 180)
    grid_color = (60, 60, 90)
    text_color = (230, 230, 230)
    font = pygame.font.SysFont("consolas", 12)

    def draw_single(data: List[float], rect: pygame.Rect, color: Color, y_label: str) -> None:
        pygame.draw.rect(screen, bg_color, rect)
        pygame.draw.rect(screen, border_color, rect, 1)

        step_x = rect.width // 4
        step_y = rect.height // 3
        for i in range(1, 4):
            x = rect.left + i * step_x
            pygame.draw.line(screen, grid_color, (x, rect.top), (x, rect.bottom))
        for i in range(1, 3):
            y = rect.top + i * step_y
            pygame.draw.line(screen, grid_color, (rect.left, y), (rect.right, y))

        n = len(data)
        max_val = max(max(data), 1e-3) * 1.1 if data else 1.1

        for i in range(1, n):
            x0 = rect.left + int(rect.width * (i - 1) / max(n - 1, 1))
            x1 = rect.left + int(rect.width * i / max(n - 1, 1))
            y0 = rect.bottom - int(rect.height * (data[i - 1] / max_val))
            y1 = rect.bottom - int(rect.height * (data[i] / max_val))
            pygame.draw.line(screen, color, (x0, y0), (x1, y1), 2)

        for frac in (0.0, 0.5, 1.0):
            y = rect.bottom - int(rect.height * frac)
            surf = font.render(f"{max_val * frac:.0f}", True, text_color)
            screen.blit(surf, (rect.left - surf.get_width() - 4, y - surf.get_height() // 2))

        label_surf = font.render(y_label, True, text_color)
        screen.blit(label_surf, (rect.left - label_surf.get_width() - 4, rect.top - 2))

    fps_rect = pygame.Rect(right - graph_width, top, graph_width, graph_height)
    draw_single(fps_history, fps_rect, (80, 220, 80), "FPS")

    col_rect = pygame.Rect(right - graph_width, top + graph_height + 16, graph_width, graph_height)
    draw_single(coll_history, col_rect, (220, 180, 80), "coll/s")
