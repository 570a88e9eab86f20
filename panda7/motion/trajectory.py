"""
Joint-space trajectory interpolation for timed phases.

Each phase blends from a start to a target joint vector with a smoothstep
profile. The end-effector indicator (a visual target frame) is blended
separately and never feeds back into actuator commands.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from panda7.utils.se3_utils import Pose, cylindrical_lerp, lerp_position, quat_slerp


def smoothstep(p: float) -> float:
    """Ease-in-out profile p^2 (3 - 2p), p clamped to [0, 1]."""
    p = min(max(p, 0.0), 1.0)
    return p * p * (3.0 - 2.0 * p)


def ease_out_cubic(t: float) -> float:
    """Decelerating profile 1 - (1 - t)^3, t clamped to [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return 1.0 - (1.0 - t) ** 3


def phase_progress(elapsed: float, duration: float) -> float:
    """Fraction of a phase completed, saturating at 1."""
    if duration <= 0.0:
        return 1.0
    return min(elapsed / duration, 1.0)


def blend_joints(
    start: ArrayLike, target: ArrayLike, ease: float
) -> NDArray[np.float64]:
    """``start + (target - start) * ease`` per joint."""
    a = np.asarray(start, dtype=np.float64)
    b = np.asarray(target, dtype=np.float64)
    return a + (b - a) * ease


def blend_indicator(start: Pose, target: Pose, ease: float, cylindrical: bool) -> Pose:
    """Blend the indicator frame: cylindrical or straight position, slerped orientation."""
    if cylindrical:
        position = cylindrical_lerp(start.position, target.position, ease)
    else:
        position = lerp_position(start.position, target.position, ease)
    return Pose(position, quat_slerp(start.quat, target.quat, ease))


@dataclass(frozen=True)
class JointPath:
    """
    A single smoothstep segment between two joint vectors.

    Attributes:
        start: joint angles at p = 0 (radians)
        target: joint angles at p = 1 (radians)
    """

    start: NDArray[np.float64]
    target: NDArray[np.float64]

    def sample(self, p: float) -> NDArray[np.float64]:
        """Joint angles at normalised phase time p in [0, 1]."""
        return blend_joints(self.start, self.target, smoothstep(p))

    def sample_many(self, p_values: ArrayLike) -> NDArray[np.float64]:
        """(N, 7) joint angles for each p in ``p_values``."""
        p = np.clip(np.asarray(p_values, dtype=np.float64), 0.0, 1.0).reshape(-1, 1)
        ease = p * p * (3.0 - 2.0 * p)
        return self.start + (self.target - self.start) * ease
