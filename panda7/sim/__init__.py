"""Simulation boundary and the kinematic stand-in used headless and in tests."""

from panda7.sim.interface import PhysicsState
from panda7.sim.kinematic_sim import KinematicSimulation
from panda7.sim.scene import DemoScene, build_demo_scene, randomize_cube_positions

__all__ = [
    "PhysicsState",
    "KinematicSimulation",
    "DemoScene",
    "build_demo_scene",
    "randomize_cube_positions",
]
