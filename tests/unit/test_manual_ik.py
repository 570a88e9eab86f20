"""Unit tests for manual IK target following."""

import math

import numpy as np
import pytest

from panda7.kinematics import RedundancyResolver, forward_kinematics
from panda7.manual_ik import ManualIkController, default_target
from panda7.sim.kinematic_sim import KinematicSimulation
from panda7.utils.se3_utils import Pose, quat_angdist

TOOL_DOWN_QUAT = Pose.from_euler((0, 0, 0), (math.pi, 0.0, 0.0)).quat


@pytest.fixture
def servo() -> KinematicSimulation:
    return KinematicSimulation(track_velocity=False)


class TestEnable:
    def test_first_enable_snaps_to_default(self, servo):
        ctl = ManualIkController()
        ctl.set_enabled(True, servo)

        assert ctl.enabled
        assert np.allclose(ctl.target.position, (0.0, 0.0, 0.45))
        assert quat_angdist(ctl.target.quat, TOOL_DOWN_QUAT) < 1e-9

    def test_later_enable_syncs_to_tool(self, servo):
        ctl = ManualIkController()
        ctl.set_enabled(True, servo)
        ctl.set_enabled(False, servo)
        ctl.set_enabled(True, servo)

        assert np.allclose(ctl.target.position, servo.tool_pose().position)

    def test_reset_restores_first_enable(self, servo):
        ctl = ManualIkController()
        ctl.set_enabled(True, servo)
        ctl.reset()
        ctl.set_enabled(True, servo)
        assert np.allclose(ctl.target.position, default_target().position)

    def test_disabled_controller_does_nothing(self, servo):
        ctl = ManualIkController()
        before = servo.ctrl.copy()
        assert ctl.update(1 / 60, servo) is False
        assert np.array_equal(servo.ctrl, before)


class TestMoveTarget:
    def test_instant_move_adds_lift(self, servo):
        ctl = ManualIkController()
        ctl.move_target_to((0.4, 0.1, 0.02), sim=servo)

        assert ctl.enabled
        assert np.allclose(ctl.target.position, (0.4, 0.1, 0.07))
        assert quat_angdist(ctl.target.quat, TOOL_DOWN_QUAT) < 1e-9
        assert not ctl.animating

    def test_animated_move_eases_out(self, servo):
        ctl = ManualIkController()
        ctl.set_enabled(True, servo)
        start = ctl.target.position.copy()
        ctl.move_target_to((0.4, 0.0, 0.15), duration=1.0)
        end = np.array([0.4, 0.0, 0.2])

        ctl.update(0.5, servo)
        assert ctl.animating
        assert np.allclose(ctl.target.position, start + (end - start) * 0.875)

        ctl.update(0.5, servo)
        assert not ctl.animating
        assert np.allclose(ctl.target.position, end)


class TestTracking:
    def test_applies_solution(self, servo):
        ctl = ManualIkController()
        ctl.move_target_to((0.4, 0.0, 0.15), sim=servo)

        assert ctl.update(1 / 60, servo) is True
        T = forward_kinematics(servo.ctrl)
        assert np.allclose(T[:3, 3], (0.4, 0.0, 0.2), atol=1e-3)

    def test_unreachable_target_keeps_commands(self, servo):
        ctl = ManualIkController(resolver=RedundancyResolver(solver=lambda target, q7: []))
        ctl.set_enabled(True, servo)
        before = servo.ctrl.copy()

        assert ctl.update(1 / 60, servo) is False
        assert np.array_equal(servo.ctrl, before)
