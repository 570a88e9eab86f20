"""Shared fixtures: a headless simulation with a few reachable cubes."""

import numpy as np
import pytest

from panda7.sim.kinematic_sim import KinematicSimulation

# Cube centres well inside the workspace, tool-down reachable
CUBE_POSITIONS = (
    (0.45, 0.20, 0.02),
    (0.40, -0.25, 0.02),
    (0.30, 0.35, 0.02),
)
STACK_BASE = (0.6, 0.0, 0.0)
TRAY = (0.0, -0.6, 0.0)


@pytest.fixture
def sim() -> KinematicSimulation:
    """Ideal-servo simulation (joints jump to their commands) with cubes, tray and stack base."""
    s = KinematicSimulation(track_velocity=False)
    s.add_body("tray", TRAY)
    s.add_body("stack_base", STACK_BASE)
    for i, pos in enumerate(CUBE_POSITIONS):
        s.add_body(f"cube{i}", pos, graspable=True)
    return s


@pytest.fixture
def cube_ids(sim) -> list[int]:
    return [sim.find_body(f"cube{i}") for i in range(len(CUBE_POSITIONS))]


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)
