import argparse
import logging
import sys

from verlet_net.config import NetConfig
from verlet_net.emitter import SegmentRecorder
from verlet_net.models import PointerState
from verlet_net.net import Net
from verlet_net.solver_numba import NumbaNetSolver

SOLVERS = ("python", "numba")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = NetConfig()
    parser = argparse.ArgumentParser(description="Hanging net driven by a Verlet solver")
    parser.add_argument("--accuracy", type=int, default=defaults.accuracy, help="Relaxation passes per frame")
    parser.add_argument("--gravity", type=float, default=defaults.gravity, help="Downward force per frame")
    parser.add_argument("--cols", type=int, default=defaults.cols, help="Grid cells across")
    parser.add_argument("--rows", type=int, default=defaults.rows, help="Grid cells down")
    parser.add_argument("--spacing", type=float, default=defaults.spacing, help="Rest length of every link")
    parser.add_argument("--friction", type=float, default=defaults.friction, help="Velocity kept per frame (0-1)")
    parser.add_argument("--influence", type=float, default=defaults.influence, help="Pointer drag radius in pixels")
    parser.add_argument("--delta", type=float, default=defaults.delta, help="Nominal time step per frame")
    parser.add_argument("--width", type=int, default=defaults.width, help="Window width")
    parser.add_argument("--height", type=int, default=defaults.height, help="Window height")
    parser.add_argument("--line-width", type=float, default=defaults.line_width, help="Stroke width of the links")
    parser.add_argument(
        "--strand-rows",
        type=int,
        default=defaults.strand_rows,
        help="Top rows left without horizontal links",
    )
    parser.add_argument("--solver", choices=SOLVERS, default="python", help="Simulation backend")
    parser.add_argument(
        "--frames",
        type=int,
        default=None,
        help="Run this many frames headless and exit instead of opening a window",
    )
    parser.add_argument("--fps", type=int, default=60, help="Target frame rate of the window")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> NetConfig:
    return NetConfig(
        accuracy=args.accuracy,
        gravity=args.gravity,
        cols=args.cols,
        rows=args.rows,
        spacing=args.spacing,
        friction=args.friction,
        influence=args.influence,
        delta=args.delta,
        width=args.width,
        height=args.height,
        line_width=args.line_width,
        strand_rows=args.strand_rows,
    )


def build_solver(config: NetConfig, solver: str) -> Net | NumbaNetSolver:
    net = Net(config)
    if solver == "numba":
        return NumbaNetSolver(net)
    return net


def run_headless(config: NetConfig, solver: str, frames: int) -> int:
    sim = build_solver(config, solver)
    recorder = SegmentRecorder()
    displacement = sim.run(frames, emitter=recorder)

    if sim.is_exploded:
        print(f"[Headless] Simulation exploded after {sim.steps_stable} frames")
        return 1

    print(f"[Headless] {recorder.frames} frames, {len(recorder.segments)} segments per frame")
    print(f"[Headless] Last frame displacement: {displacement:.6f}")
    return 0


def run_window(config: NetConfig, solver: str, fps: int) -> int:
    import moderngl
    import pygame

    from verlet_net.renderer import Renderer

    pygame.init()
    clock = pygame.time.Clock()
    pygame.display.set_mode((config.width, config.height), pygame.OPENGL | pygame.DOUBLEBUF)
    pygame.display.set_caption("Verlet Net")
    ctx = moderngl.create_context()
    renderer = Renderer(ctx, config.width, config.height)

    sim = build_solver(config, solver)
    pointer = PointerState(influence=config.influence)

    print("\n" + "=" * 60)
    print("Controls:")
    print("  Left Click+Drag - Drag the net")
    print("  Space           - Pause/Resume")
    print("  R               - Reset net")
    print("  Esc             - Quit")
    print("=" * 60)
    print(f"  Solver: {solver}  Accuracy: {config.accuracy}  Friction: {config.friction}")
    print()

    running = True
    paused = False

    while running:
        # Pointer events only replace the snapshot; the step reads it once
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_SPACE:
                    paused = not paused
                    print(f"[{'PAUSED' if paused else 'RESUMED'}]")
                elif event.key == pygame.K_r:
                    sim = build_solver(config, solver)
                    print("[Net RESET]")

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                pointer = pointer.pressed(True)

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                pointer = pointer.pressed(False)

            elif event.type == pygame.MOUSEMOTION:
                pointer = pointer.moved_to(*event.pos)

        if not paused:
            sim.step(config.delta, pointer, renderer)
            # Motion is consumed; a still pointer must not keep dragging
            pointer = pointer.moved_to(pointer.x, pointer.y)
        else:
            sim.draw(renderer)

        renderer.draw_overlay(
            [
                f"FPS: {clock.get_fps():.1f}",
                f"Solver: {solver}",
                f"Accuracy: {config.accuracy}",
                f"Friction: {config.friction:.2f}",
            ]
        )
        pygame.display.flip()

        if sim.is_exploded:
            pygame.display.set_caption("Verlet Net - unstable, press R to reset")

        clock.tick(fps)

    pygame.quit()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = config_from_args(args)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    if args.frames is not None:
        return run_headless(config, args.solver, args.frames)
    return run_window(config, args.solver, args.fps)


if __name__ == "__main__":
    sys.exit(main())
