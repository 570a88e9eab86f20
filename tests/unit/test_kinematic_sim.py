"""Unit tests for the kinematic stand-in simulation and the demo scene."""

import math

import numpy as np
import pytest

import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7 import config as cfg
from panda7.kinematics import forward_kinematics
from panda7.sim import KinematicSimulation, PhysicsState, build_demo_scene, randomize_cube_positions
from panda7.sim.kinematic_sim import _track_commands_jit


class TestTracking:
    def test_starts_at_home(self):
        sim = KinematicSimulation()
        assert np.allclose(sim.joint_positions(), PANDA_ROBOT.joint.home_rad)

    def test_implements_protocol(self):
        assert isinstance(KinematicSimulation(), PhysicsState)

    def test_velocity_limited_step(self):
        sim = KinematicSimulation()
        start = sim.joint_positions()
        sim.set_joint_commands(start + 1.0)
        sim.step(0.1)

        moved = sim.joint_positions() - start
        assert np.allclose(moved, np.minimum(1.0, PANDA_ROBOT.joint.speed_max * 0.1))

    def test_converges_and_clamps_to_limits(self):
        sim = KinematicSimulation()
        sim.set_joint_commands(np.full(7, 10.0))
        for _ in range(200):
            sim.step(0.05)

        q = sim.joint_positions()
        assert np.allclose(q, np.minimum(10.0, PANDA_ROBOT.joint.q_max))
        assert PANDA_ROBOT.within_limits(q)

    def test_ideal_servo_jumps_to_command(self):
        sim = KinematicSimulation(track_velocity=False)
        target = np.array(PANDA_ROBOT.joint.neutral_rad)
        sim.set_joint_commands(target)
        sim.step(1e-3)
        assert np.allclose(sim.joint_positions(), target)

    def test_kernel_in_place(self):
        q = np.zeros(3)
        _track_commands_jit(q, np.array([1.0, -1.0, 0.05]), np.ones(3), -np.ones(3) * 0.5, np.ones(3), 0.1)
        assert np.allclose(q, [0.1, -0.1, 0.05])

    def test_tool_pose_matches_forward_kinematics(self):
        sim = KinematicSimulation()
        assert np.allclose(sim.tool_pose().as_matrix(), forward_kinematics(sim.joint_positions()))

    def test_gripper_command_is_clamped(self):
        sim = KinematicSimulation()
        sim.set_gripper_command(400.0)
        assert sim.gripper_ctrl == PANDA_ROBOT.GRIPPER_OPEN
        sim.set_gripper_command(-3.0)
        assert sim.gripper_ctrl == PANDA_ROBOT.GRIPPER_CLOSED


class TestBodies:
    def test_lookup(self):
        sim = KinematicSimulation()
        tray = sim.add_body("tray", (0.1, 0.2, 0.0))

        assert sim.find_body("tray") == tray
        assert sim.find_body("missing") is None
        assert sim.body_name(tray) == "tray"
        assert np.allclose(sim.body_position(tray), (0.1, 0.2, 0.0))

    def test_duplicate_name(self):
        sim = KinematicSimulation()
        sim.add_body("cube0", (0, 0, 0))
        with pytest.raises(ValueError):
            sim.add_body("cube0", (1, 0, 0))

    def test_body_position_is_a_copy(self):
        sim = KinematicSimulation()
        cube = sim.add_body("cube0", (0.3, 0.0, 0.02))
        sim.body_position(cube)[0] = 9.0
        assert sim.body_position(cube)[0] == pytest.approx(0.3)


class TestGrasp:
    def _sim_with_cube_at_tool(self):
        sim = KinematicSimulation(track_velocity=False)
        tcp = sim.tool_pose().position
        cube = sim.add_body("cube0", tcp + (0.0, 0.0, 0.01), graspable=True)
        return sim, cube

    def test_close_attaches_and_open_releases(self):
        sim, cube = self._sim_with_cube_at_tool()
        sim.set_gripper_command(PANDA_ROBOT.GRIPPER_OPEN)
        sim.step(0.01)
        sim.set_gripper_command(PANDA_ROBOT.GRIPPER_CLOSED)
        sim.step(0.01)
        assert sim.attached_body == cube

        sim.set_joint_commands(PANDA_ROBOT.joint.neutral_rad)
        sim.step(0.01)
        expected = sim.tool_pose().position + (0.0, 0.0, 0.01)
        assert np.allclose(sim.body_position(cube), expected)

        sim.set_gripper_command(PANDA_ROBOT.GRIPPER_OPEN)
        sim.step(0.01)
        assert sim.attached_body is None
        sim.set_joint_commands(PANDA_ROBOT.joint.home_rad)
        sim.step(0.01)
        assert np.allclose(sim.body_position(cube), expected)

    def test_initially_closed_gripper_grabs_nothing(self):
        sim, _ = self._sim_with_cube_at_tool()
        sim.step(0.01)
        assert sim.attached_body is None

    def test_out_of_reach_body_is_not_grasped(self):
        sim = KinematicSimulation(track_velocity=False)
        tcp = sim.tool_pose().position
        sim.add_body("cube0", tcp + (cfg.GRASP_RADIUS_M * 2, 0.0, 0.0), graspable=True)
        sim.set_gripper_command(PANDA_ROBOT.GRIPPER_OPEN)
        sim.step(0.01)
        sim.set_gripper_command(PANDA_ROBOT.GRIPPER_CLOSED)
        sim.step(0.01)
        assert sim.attached_body is None

    def test_fixtures_are_not_graspable(self):
        sim = KinematicSimulation(track_velocity=False)
        sim.add_body("tray", sim.tool_pose().position)
        sim.set_gripper_command(PANDA_ROBOT.GRIPPER_OPEN)
        sim.step(0.01)
        sim.set_gripper_command(PANDA_ROBOT.GRIPPER_CLOSED)
        sim.step(0.01)
        assert sim.attached_body is None


class TestScene:
    def test_cube_layout_constraints(self, rng):
        positions = randomize_cube_positions(rng, 8)
        assert len(positions) == 8

        bx, by = cfg.STACK_BASE_XY
        for i, p in enumerate(positions):
            r = math.hypot(p[0], p[1])
            assert cfg.CUBE_RING_MIN_R - 1e-12 <= r <= cfg.CUBE_RING_MAX_R + 1e-12
            assert math.hypot(p[0] - bx, p[1] - by) >= cfg.STACK_KEEPOUT_R
            assert p[2] == cfg.CUBE_Z
            for q in positions[i + 1 :]:
                assert (p[0] - q[0]) ** 2 + (p[1] - q[1]) ** 2 >= cfg.CUBE_MIN_SEPARATION_SQ

    def test_seeded_layout_is_reproducible(self):
        a = randomize_cube_positions(np.random.default_rng(7), 4)
        b = randomize_cube_positions(np.random.default_rng(7), 4)
        assert all(np.array_equal(x, y) for x, y in zip(a, b))

    def test_build_demo_scene(self, rng):
        scene = build_demo_scene(3, rng=rng)

        assert len(scene.cube_ids) == 3
        assert scene.sim.find_body("tray") == scene.tray_id
        assert scene.sim.find_body("stack_base") == scene.stack_base_id
        assert [scene.sim.body_name(i) for i in scene.cube_ids] == ["cube0", "cube1", "cube2"]
        assert len(scene.cube_positions()) == 3
