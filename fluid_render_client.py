"""
Renderer for the headless viscoelastic fluid stream.

Usage:

    python fluid_sim_2d.py --headless --frames 500 | python fluid_render_client.py

The simulator writes one line per frame (see ``viscofluid.frames``); this
script reads those lines from stdin and draws them with pygame.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import pygame

from viscofluid import SimConfig
from viscofluid.frames import Frame, parse_frame
from viscofluid.render import draw_graphs, draw_particles, trim_history


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Render a viscoelastic fluid frame stream from stdin")
    parser.add_argument("--scale", type=float, default=SimConfig.pixel_scale, help="Pixels per world unit.")
    parser.add_argument("--fps", type=int, default=30, help="Playback frame rate.")
    args = parser.parse_args(argv)

    pygame.init()
    clock = pygame.time.Clock()

    bounds_w, bounds_h = SimConfig.bounds_size
    screen = pygame.display.set_mode((int(bounds_w * args.scale), int(bounds_h * args.scale)))
    pygame.display.set_caption("Viscoelastic fluid renderer (stdin)")

    frame: Optional[Frame] = None
    fps_history: List[float] = []
    coll_history: List[float] = []
    show_graphs = True
    running = True

    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_g:
                    show_graphs = not show_graphs

        # Blocking read of the next frame
        line = sys.stdin.readline()
        if not line:
            running = False
            continue

        try:
            frame = parse_frame(line)
        except ValueError:
            continue

        if (frame.bounds_w, frame.bounds_h) != (bounds_w, bounds_h):
            bounds_w, bounds_h = frame.bounds_w, frame.bounds_h
            screen = pygame.display.set_mode((int(bounds_w * args.scale), int(bounds_h * args.scale)))

        fps = clock.get_fps()
        if fps > 0:
            fps_history.append(fps)
        coll_history.append(float(frame.collisions))
        fps_history = trim_history(fps_history, SimConfig.max_history_points)
        coll_history = trim_history(coll_history, SimConfig.max_history_points)

        draw_particles(
            screen,
            frame.positions,
            frame.velocities,
            frame.bounds_w,
            frame.bounds_h,
            args.scale,
            max(1, int(args.scale * 0.5)),
        )
        if show_graphs:
            draw_graphs(screen, fps_history, coll_history)
        pygame.display.flip()
        clock.tick(args.fps)

    pygame.quit()


if __name__ == "__main__":
    main()
