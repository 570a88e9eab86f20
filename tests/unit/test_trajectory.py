"""Unit tests for phase interpolation helpers."""

import math

import numpy as np
import pytest

from panda7.motion.trajectory import (
    JointPath,
    blend_indicator,
    blend_joints,
    ease_out_cubic,
    phase_progress,
    smoothstep,
)
from panda7.utils.se3_utils import Pose, cylindrical_lerp, normalize_angle, quat_angdist


class TestProfiles:
    def test_smoothstep_endpoints_and_midpoint(self):
        assert smoothstep(0.0) == 0.0
        assert smoothstep(1.0) == 1.0
        assert smoothstep(0.5) == pytest.approx(0.5)

    def test_smoothstep_clamps(self):
        assert smoothstep(-0.3) == 0.0
        assert smoothstep(1.7) == 1.0

    def test_smoothstep_monotone(self):
        values = [smoothstep(p) for p in np.linspace(0.0, 1.0, 101)]
        assert all(b >= a for a, b in zip(values, values[1:]))

    def test_ease_out_cubic(self):
        assert ease_out_cubic(0.0) == 0.0
        assert ease_out_cubic(1.0) == 1.0
        assert ease_out_cubic(0.5) == pytest.approx(0.875)

    def test_phase_progress_saturates(self):
        assert phase_progress(0.5, 2.0) == pytest.approx(0.25)
        assert phase_progress(3.0, 2.0) == 1.0
        assert phase_progress(0.0, 0.0) == 1.0


class TestJointPath:
    def test_endpoints(self):
        start = np.arange(7, dtype=float)
        target = start + 1.0
        path = JointPath(start, target)

        assert np.allclose(path.sample(0.0), start)
        assert np.allclose(path.sample(1.0), target)

    def test_bounded_between_endpoints(self):
        """Every interpolated joint stays between its start and target value."""
        start = np.array([0.5, -1.0, 2.0, -2.5, 0.0, 1.0, -2.0])
        target = np.array([-0.5, 1.0, 2.0, -0.5, 1.5, 3.0, 2.0])
        path = JointPath(start, target)
        lo = np.minimum(start, target)
        hi = np.maximum(start, target)

        for p in np.linspace(-0.2, 1.2, 57):
            q = path.sample(p)
            assert np.all(q >= lo - 1e-12)
            assert np.all(q <= hi + 1e-12)

    def test_sample_many_matches_sample(self):
        path = JointPath(np.zeros(7), np.ones(7))
        ps = [0.0, 0.25, 0.5, 1.0]
        batch = path.sample_many(ps)

        assert batch.shape == (4, 7)
        for row, p in zip(batch, ps):
            assert np.allclose(row, path.sample(p))

    def test_blend_joints_linear_in_ease(self):
        assert np.allclose(blend_joints([0.0] * 7, [2.0] * 7, 0.25), 0.5)


class TestIndicatorBlend:
    def test_cylindrical_keeps_radius(self):
        a = (0.5, 0.0, 0.3)
        b = (0.0, 0.5, 0.3)
        for s in np.linspace(0.0, 1.0, 11):
            p = cylindrical_lerp(a, b, s)
            assert math.hypot(p[0], p[1]) == pytest.approx(0.5)

    def test_cylindrical_takes_shortest_way_round(self):
        r = 0.4
        a = (r * math.cos(math.radians(170)), r * math.sin(math.radians(170)), 0.2)
        b = (r * math.cos(math.radians(-170)), r * math.sin(math.radians(-170)), 0.4)
        mid = cylindrical_lerp(a, b, 0.5)

        assert mid[0] == pytest.approx(-r)
        assert mid[1] == pytest.approx(0.0, abs=1e-12)
        assert mid[2] == pytest.approx(0.3)

    def test_linear_blend_and_slerp(self):
        start = Pose.from_euler((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))
        target = Pose.from_euler((1.0, 2.0, 3.0), (0.0, 0.0, math.pi / 2))
        mid = blend_indicator(start, target, 0.5, cylindrical=False)

        assert np.allclose(mid.position, (0.5, 1.0, 1.5))
        assert quat_angdist(mid.quat, start.quat) == pytest.approx(math.pi / 4)

    def test_blend_endpoints(self):
        start = Pose.from_euler((0.3, 0.1, 0.5), (math.pi, 0.0, 0.0))
        target = Pose.from_euler((-0.2, 0.4, 0.2), (math.pi, 0.0, 0.0))
        for cyl in (True, False):
            assert np.allclose(blend_indicator(start, target, 0.0, cyl).position, start.position)
            assert np.allclose(blend_indicator(start, target, 1.0, cyl).position, target.position)


def test_normalize_angle_range():
    for a in np.linspace(-10.0, 10.0, 81):
        n = normalize_angle(a)
        assert -math.pi < n <= math.pi
        assert math.isclose(math.cos(n), math.cos(a), abs_tol=1e-9)
