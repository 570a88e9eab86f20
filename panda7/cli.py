"""Command-line interface: run a headless pick-and-place batch on the demo scene."""

import argparse
import logging

import panda7.config as cfg
import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7.config import TRACE
from panda7.motion.sequencer import PickTarget, Sequencer
from panda7.runner import run_sequence
from panda7.utils.errors import Panda7Error

logger = logging.getLogger("panda7.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Panda pick-and-place demo (headless)")
    parser.add_argument("--items", type=int, default=3, help="Number of cubes to place")
    parser.add_argument(
        "--stack", action="store_true", help="Stack cubes on the stack base (default: tray)"
    )
    parser.add_argument(
        "--static",
        action="store_true",
        help="Pick from detected top-surface points instead of live cube positions",
    )
    parser.add_argument("--speed", type=float, default=1.0, help="Speed multiplier (>= 1)")
    parser.add_argument("--dt", type=float, default=cfg.INTERVAL_S, help="Tick period in seconds")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the cube layout")
    parser.add_argument(
        "--max-ticks", type=int, default=1_000_000, help="Abort the run after this many ticks"
    )

    # Verbose logging options
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity; -v=INFO, -vv=DEBUG, -vvv=TRACE",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Enable quiet logging (WARNING level)",
    )
    parser.add_argument(
        "--log-level",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set specific log level",
    )
    return parser


def resolve_log_level(args: argparse.Namespace) -> int:
    # Precedence:
    #   1) Explicit --log-level
    #   2) Verbose / quiet flags
    #   3) Environment-driven TRACE (PANDA7_TRACE=1 via TRACE_ENABLED)
    #   4) Default INFO
    if args.log_level:
        if args.log_level == "TRACE":
            cfg.TRACE_ENABLED = True
            return TRACE
        return getattr(logging, args.log_level)
    if args.verbose >= 3:
        cfg.TRACE_ENABLED = True
        return TRACE
    if args.verbose >= 2:
        return logging.DEBUG
    if args.verbose == 1:
        return logging.INFO
    if args.quiet:
        return logging.WARNING
    if cfg.TRACE_ENABLED:
        return TRACE
    return getattr(logging, cfg.LOG_LEVEL_DEFAULT)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the demo runner."""
    args = build_parser().parse_args(argv)
    log_level = resolve_log_level(args)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    third_party_log_level = log_level if log_level >= logging.INFO else logging.INFO
    logging.getLogger("numba").setLevel(third_party_log_level)
    PANDA_ROBOT.log_robot_summary()

    import numpy as np

    from panda7.sim.scene import build_demo_scene
    from panda7.utils.async_logging import AsyncLogHandler
    from panda7.utils.warmup import warmup_jit

    # Pre-compile numba JIT functions to avoid mid-loop compilation stalls
    warmup_jit()

    scene = build_demo_scene(args.items, rng=np.random.default_rng(args.seed))
    sequencer = Sequencer(stacking=args.stack)
    try:
        sequencer.set_speed_multiplier(args.speed)
    except Panda7Error as e:
        logger.error("%s", e)
        return 1
    if not sequencer.configure(scene.sim):
        logger.error("Scene has no drop zone")
        return 1

    if args.static:
        # Detections report the top surface of each cube
        targets: list[int | PickTarget] = [
            PickTarget.static(i, scene.sim.body_position(i) + (0.0, 0.0, cfg.CUBE_Z))
            for i in scene.cube_ids
        ]
    else:
        targets = list(scene.cube_ids)

    # Route the basicConfig handlers through a queue for the duration of the run
    async_log = AsyncLogHandler(logging.getLogger())
    async_log.start()
    try:
        report = run_sequence(scene.sim, sequencer, targets, dt=args.dt, max_ticks=args.max_ticks)
    except KeyboardInterrupt:
        sequencer.stop()
        logger.info("Interrupted, sequence stopped")
        return 1
    finally:
        async_log.stop()

    done = len(report.completed_items)
    if not report.started or done != len(targets):
        logger.error("Completed %d of %d item(s)", done, len(targets))
        return 1
    logger.info("All %d item(s) placed; %d on the drop zone in total", done, sequencer.placed_count)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
