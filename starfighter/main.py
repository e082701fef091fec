"""Command-line entry point: build the scene and run the animation loop headless."""

from __future__ import annotations

import argparse
import sys
import time
from typing import Callable

import numpy as np

from starfighter.scene import Scene

_PROGRAM = "starfighter"


class FrameTimer:
    """Measures the time between frames and the number of frames per second.

    `update` returns the seconds elapsed since the previous call.  Once per
    `period` seconds it refreshes `fps` and sets `event` for that one frame.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter, period: float = 1.0):
        if period <= 0:
            raise ValueError("the fps period must be positive")
        self._clock = clock
        self.period = float(period)
        self.fps = 0
        self.event = False
        self._last: float | None = None
        self._window_start = 0.0
        self._frames = 0

    def start(self) -> None:
        now = self._clock()
        self._last = now
        self._window_start = now
        self._frames = 0
        self.event = False

    def update(self) -> float:
        """Return the time since the last frame and update the fps counter."""
        if self._last is None:
            self.start()
        now = self._clock()
        dt = now - self._last
        self._last = now
        self._frames += 1
        elapsed = now - self._window_start
        self.event = elapsed >= self.period
        if self.event:
            self.fps = int(round(self._frames / elapsed))
            self._frames = 0
            self._window_start = now
        return dt


def run(scene: Scene, frames, dt=None) -> int:
    """Advance the scene for a number of frames and return how many ran.

    With a fixed `dt` every frame advances by that many seconds; without one
    the wall-clock time between frames is used.
    """
    frames = int(frames)
    if frames < 0:
        raise ValueError("the number of frames cannot be negative")
    if dt is not None and float(dt) < 0:
        raise ValueError("the time step cannot be negative")

    timer = FrameTimer()
    timer.start()
    count = 0
    for _ in range(frames):
        step = timer.update() if dt is None else float(dt)
        scene.display_frame(step)
        count += 1
    return count


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=_PROGRAM, description="Run the space combat simulation.")
    parser.add_argument("--frames", type=int, default=600, help="number of frames to simulate")
    parser.add_argument("--dt", type=float, default=1.0 / 60.0, help="seconds per frame")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--combat", type=int, default=2, help="number of AI duels")
    parser.add_argument("--asteroids", type=int, default=100, help="number of asteroids")
    parser.add_argument("--resolution", type=int, default=70, help="asteroid mesh resolution")
    parser.add_argument("--no-asteroids", action="store_true", help="leave the asteroid field out")
    return parser


def main(argv=None) -> int:
    """Build the scene, run it for the requested frames and report progress."""
    args = _parser().parse_args(sys.argv[1:] if argv is None else list(argv))
    if args.frames < 0:
        print("error: --frames cannot be negative", file=sys.stderr)
        return 2
    if args.dt < 0:
        print("error: --dt cannot be negative", file=sys.stderr)
        return 2

    print(f"Run {_PROGRAM}")
    scene = Scene(
        np.random.default_rng(args.seed),
        show_asteroids=not args.no_asteroids,
        n_combat=args.combat,
        n_asteroids=args.asteroids,
        nuv_asteroids=args.resolution,
    )

    print("Initialize data of the scene ...")
    scene.initialize()
    print("Initialization finished\n")

    print("Start animation loop ...")
    run(scene, args.frames, args.dt)
    print("\nAnimation loop stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())