"""
2D viscoelastic fluid demo (CPU, pygame).

Drives ``viscofluid.FluidSolver`` through a ``SimulationSession``: one
fixed-size solver step per rendered frame.

Keyboard controls:
  - Space: pause / resume
  - Right arrow: single-step one simulation frame while paused
  - R: restart the current scenario
  - 1-4: switch scenario (demo1, demo2, raindrop, flatsplash)
  - G: toggle FPS / collision graphs
  - Esc or window close: quit

Usage:
    python fluid_sim_2d.py --scenario raindrop
    python fluid_sim_2d.py --headless --frames 200 | python fluid_render_client.py
    python fluid_sim_2d.py --record splash.mp4 --record-seconds 5
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import List, Optional

import imageio
import numpy as np
import pygame

from viscofluid import SCENARIOS, SimConfig, SimulationSession
from viscofluid.frames import solver_frame
from viscofluid.render import draw_graphs, draw_particles, trim_history

SCENARIO_KEYS = {
    pygame.K_1: "demo1",
    pygame.K_2: "demo2",
    pygame.K_3: "raindrop",
    pygame.K_4: "flatsplash",
}


class FluidSimApp:
    """Pygame app wrapper around a simulation session."""

    def __init__(
        self,
        session: SimulationSession,
        scale: float = SimConfig.pixel_scale,
        record_path: Optional[str] = None,
        record_seconds: float = SimConfig.record_seconds,
    ) -> None:
        self.session = session
        self.session.init()

        self.scale = scale
        self.pixel_width = int(session.width * scale)
        self.pixel_height = int(session.height * scale)
        self.particle_radius_px = max(1, int(SimConfig.particle_radius_px * scale * 0.5))

        pygame.init()
        self.clock = pygame.time.Clock()
        self.screen = pygame.display.set_mode((self.pixel_width, self.pixel_height))
        self._update_caption()

        self.running = True
        self.step_once = False

        self.show_graphs = False
        self.fps_history: List[float] = []
        self.collision_history: List[float] = []
        self.max_history_points = SimConfig.max_history_points

        self.record_path = record_path
        self.record_seconds = record_seconds
        self.recorded_frames: List[pygame.Surface] = []

    def _update_caption(self) -> None:
        pygame.display.set_caption(
            f"Viscoelastic fluid - {self.session.scenario} - t={self.session.time:.2f}"
        )

    # ---------------
    # Input handling
    # ---------------

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.session.toggle_pause()
                elif event.key == pygame.K_RIGHT:
                    self.step_once = True
                elif event.key == pygame.K_r:
                    self.session.init()
                elif event.key in SCENARIO_KEYS:
                    self.session.init(SCENARIO_KEYS[event.key])
                elif event.key == pygame.K_g:
                    self.show_graphs = not self.show_graphs

    # ---------------
    # Rendering
    # ---------------

    def _draw(self) -> None:
        solver = self.session.solver
        draw_particles(
            self.screen,
            solver.positions(),
            solver.velocities(),
            solver.width,
            solver.height,
            self.scale,
            self.particle_radius_px,
        )
        if self.show_graphs:
            draw_graphs(self.screen, self.fps_history, self.collision_history)
        pygame.display.flip()

    def _update_stats(self, frame_time: float) -> None:
        fps = self.clock.get_fps()
        if fps > 0:
            self.fps_history.append(fps)
        collisions_per_sec = 0.0
        if frame_time > 0:
            collisions_per_sec = self.session.solver.collision_events / frame_time
        self.collision_history.append(collisions_per_sec)

        self.fps_history = trim_history(self.fps_history, self.max_history_points)
        self.collision_history = trim_history(self.collision_history, self.max_history_points)

    # ---------------
    # Main loop
    # ---------------

    def run(self) -> None:
        # Pace the loop to the simulated step, like a real-time player
        target_fps = 1.0 / self.session.dt
        record_start = time.time()
        if self.record_path:
            print(f"Recording for {self.record_seconds} seconds...")
            print("Press ESC to stop recording early.")

        while self.running:
            frame_time = self.clock.tick(target_fps) / 1000.0
            self._handle_events()

            stepped = self.session.advance()
            if not stepped and self.step_once:
                self.session.step()
                stepped = True
            self.step_once = False

            if stepped:
                self._update_stats(frame_time)
                self._update_caption()

            self._draw()

            if self.record_path:
                self.recorded_frames.append(self.screen.copy())
                elapsed = time.time() - record_start
                if len(self.recorded_frames) % 30 == 0:
                    progress = min(elapsed / self.record_seconds, 1.0) * 100
                    print(f"Recording: {progress:.1f}% ({len(self.recorded_frames)} frames)")
                if elapsed >= self.record_seconds:
                    print(f"Recording complete! Captured {len(self.recorded_frames)} frames.")
                    self.running = False

        if self.record_path and self.recorded_frames:
            self._save_recording_to_file()

        self.session.teardown()
        pygame.quit()

    def _save_recording_to_file(self) -> None:
        """Save recorded frames to a video file."""
        print(f"\nSaving recording to {self.record_path}...")
        try:
            frames_data = [
                np.transpose(pygame.surfarray.array3d(frame), (1, 0, 2))
                for frame in self.recorded_frames
            ]
            imageio.mimwrite(
                self.record_path,
                frames_data,
                fps=SimConfig.playback_fps,
                codec="libx264",
                quality=8,
                pixelformat="yuv420p",
            )
            print(f"Successfully saved recording to {self.record_path}")
            print(f"Video: {len(frames_data)} frames at {SimConfig.playback_fps} FPS")
        except (OSError, ValueError, RuntimeError) as e:
            print(f"Error saving video file: {e}")
            print("Make sure imageio-ffmpeg is installed: pip install imageio-ffmpeg")


def run_headless(session: SimulationSession, frames: int) -> None:
    """Write one frame line per step to stdout (pipe into fluid_render_client.py)."""
    solver = session.init()
    print(
        f"Headless simulation | scenario={session.scenario} | "
        f"particles={solver.particle_count} | {frames} frames",
        file=sys.stderr,
    )
    try:
        for _ in range(frames):
            session.step()
            print(solver_frame(solver, session.frame), flush=True)
    except BrokenPipeError:
        # Reader went away
        pass
    finally:
        session.teardown()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="2D Viscoelastic Fluid Simulator (CPU, pygame)")
    parser.add_argument(
        "--scenario",
        choices=sorted(SCENARIOS),
        default=SimConfig.scenario,
        help="Initial particle layout.",
    )
    parser.add_argument(
        "--box-width",
        type=float,
        default=SimConfig.bounds_size[0],
        help="Width of the simulation domain in world units.",
    )
    parser.add_argument(
        "--box-height",
        type=float,
        default=SimConfig.bounds_size[1],
        help="Height of the simulation domain in world units.",
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=SimConfig.dt,
        help="Fixed simulation step in seconds.",
    )
    parser.add_argument(
        "--spacing",
        type=float,
        default=SimConfig.spacing,
        help="Lattice spacing of spawned particles (larger = fewer particles).",
    )
    parser.add_argument(
        "--gravity",
        type=float,
        default=SimConfig.gravity,
        help="Vertical gravity acceleration.",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=SimConfig.pixel_scale,
        help="Pixels per world unit.",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window and print frame lines to stdout.",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=100,
        help="Number of steps to run in headless mode.",
    )
    parser.add_argument(
        "--record",
        metavar="PATH",
        default=None,
        help="Record the window to a video file (e.g. out.mp4).",
    )
    parser.add_argument(
        "--record-seconds",
        type=float,
        default=SimConfig.record_seconds,
        help="Recording duration in seconds.",
    )
    args = parser.parse_args(argv)
    if args.dt <= 0.0:
        parser.error("--dt must be positive")
    if args.box_width <= 0.0 or args.box_height <= 0.0:
        parser.error("--box-width and --box-height must be positive")
    if args.spacing <= 0.0:
        parser.error("--spacing must be positive")
    return args


def build_session(args: argparse.Namespace) -> SimulationSession:
    return SimulationSession(
        scenario=args.scenario,
        width=args.box_width,
        height=args.box_height,
        dt=args.dt,
        spacing=args.spacing,
        gravity=args.gravity,
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    session = build_session(args)

    if args.headless:
        run_headless(session, args.frames)
        return

    app = FluidSimApp(
        session,
        scale=args.scale,
        record_path=args.record,
        record_seconds=args.record_seconds,
    )
    app.run()


if __name__ == "__main__":
    main()
