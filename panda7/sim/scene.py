"""Demo scene: cubes scattered around the arm, a tray and a stack base."""

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from panda7 import config as cfg
from panda7.sim.kinematic_sim import KinematicSimulation

logger = logging.getLogger(__name__)

# Tray sits beside the arm, away from the stack base
TRAY_POSITION: tuple[float, float, float] = (0.0, -0.6, 0.0)


def randomize_cube_positions(
    rng: np.random.Generator, count: int
) -> list[NDArray[np.float64]]:
    """
    Sample up to ``count`` cube positions on the floor around the arm.

    Points are area-uniform in the ring [CUBE_RING_MIN_R, CUBE_RING_MAX_R],
    stay clear of the stack base and of each other. A cube that finds no free
    spot within CUBE_PLACEMENT_ATTEMPTS tries is left out.
    """
    r_min2 = cfg.CUBE_RING_MIN_R**2
    r_max2 = cfg.CUBE_RING_MAX_R**2
    bx, by = cfg.STACK_BASE_XY
    placed: list[tuple[float, float]] = []

    for n in range(count):
        for _ in range(cfg.CUBE_PLACEMENT_ATTEMPTS):
            r = math.sqrt(rng.uniform() * (r_max2 - r_min2) + r_min2)
            theta = rng.uniform() * 2.0 * math.pi
            x, y = r * math.cos(theta), r * math.sin(theta)
            if math.hypot(x - bx, y - by) < cfg.STACK_KEEPOUT_R:
                continue
            if any((px - x) ** 2 + (py - y) ** 2 < cfg.CUBE_MIN_SEPARATION_SQ for px, py in placed):
                continue
            placed.append((x, y))
            break
        else:
            logger.warning("No free spot for cube %d after %d attempts", n, cfg.CUBE_PLACEMENT_ATTEMPTS)

    return [np.array([x, y, cfg.CUBE_Z], dtype=np.float64) for x, y in placed]


@dataclass(frozen=True)
class DemoScene:
    sim: KinematicSimulation
    cube_ids: tuple[int, ...]
    tray_id: int
    stack_base_id: int

    def cube_positions(self) -> list[NDArray[np.float64]]:
        return [self.sim.body_position(i) for i in self.cube_ids]


def build_demo_scene(
    count: int = 5,
    rng: np.random.Generator | None = None,
    track_velocity: bool = True,
) -> DemoScene:
    """Build a ``KinematicSimulation`` holding ``count`` random cubes, a tray and a stack base."""
    rng = rng if rng is not None else np.random.default_rng()
    sim = KinematicSimulation(track_velocity=track_velocity)
    tray_id = sim.add_body("tray", TRAY_POSITION)
    stack_base_id = sim.add_body("stack_base", (*cfg.STACK_BASE_XY, 0.0))
    cube_ids = tuple(
        sim.add_body(f"cube{i}", pos, graspable=True)
        for i, pos in enumerate(randomize_cube_positions(rng, count))
    )
    logger.info("Demo scene: %d cube(s)", len(cube_ids))
    return DemoScene(sim, cube_ids, tray_id, stack_base_id)
