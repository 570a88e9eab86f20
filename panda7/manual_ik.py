"""
Manual IK mode: the arm follows a user-placed target frame.

The target can be moved instantly or animated with a cubic ease-out. While
enabled, every ``update`` solves IK from the current joints and writes the
solution to the joint actuators.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from panda7 import config as cfg
from panda7.kinematics.redundancy import RedundancyResolver, rate_limited_warning
from panda7.motion.trajectory import ease_out_cubic
from panda7.sim.interface import PhysicsState
from panda7.utils.se3_utils import Pose, lerp_position, quat_slerp

logger = logging.getLogger(__name__)


def default_target() -> Pose:
    return Pose.from_euler(cfg.HOME_POSITION_M, cfg.TOOL_DOWN_EULER)


@dataclass
class _TargetAnimation:
    start: Pose
    end: Pose
    duration: float
    elapsed: float = 0.0

    def advance(self, dt: float) -> tuple[Pose, bool]:
        self.elapsed += dt
        t = min(self.elapsed / self.duration, 1.0)
        ease = ease_out_cubic(t)
        pose = Pose(
            lerp_position(self.start.position, self.end.position, ease),
            quat_slerp(self.start.quat, self.end.quat, ease),
        )
        return pose, t >= 1.0


class ManualIkController:
    """Keeps a target pose and drives the arm to it while enabled."""

    def __init__(self, resolver: RedundancyResolver | None = None) -> None:
        self.resolver = resolver if resolver is not None else RedundancyResolver()
        self.target: Pose = default_target()
        self.enabled = False
        self._first_enable = True
        self._anim: _TargetAnimation | None = None

    @property
    def animating(self) -> bool:
        return self._anim is not None

    def set_enabled(self, enabled: bool, sim: PhysicsState) -> None:
        """
        Turn manual IK on or off. The first enable places the target at the
        default pose; later ones pick the target up where the tool is.
        """
        self.enabled = enabled
        if not enabled or self._anim is not None:
            return
        if self._first_enable:
            self.target = default_target()
            self._first_enable = False
        else:
            self.target = sim.tool_pose()
        logger.debug("Manual IK enabled, target %s", self.target)

    def reset(self) -> None:
        """Scene reset: back to the default target, next enable snaps again."""
        self.target = default_target()
        self._first_enable = True
        self._anim = None

    def move_target_to(self, position: ArrayLike, duration: float = 0.0, sim: PhysicsState | None = None) -> None:
        """Put the target just above ``position`` with the tool pointing down."""
        if not self.enabled and sim is not None:
            self.set_enabled(True, sim)
        p = np.asarray(position, dtype=np.float64).reshape(3) + (0.0, 0.0, cfg.MANUAL_TARGET_LIFT_M)
        end = Pose.from_euler(p, cfg.TOOL_DOWN_EULER)
        if duration > 0:
            self._anim = _TargetAnimation(self.target, end, float(duration))
        else:
            self._anim = None
            self.target = end

    def update(self, dt: float, sim: PhysicsState) -> bool:
        """Advance the target animation and track the target. True if a solution was applied."""
        if self._anim is not None:
            self.target, done = self._anim.advance(dt)
            if done:
                self._anim = None

        if not self.enabled:
            return False
        solution = self.resolver.solve(self.target, sim.joint_positions())
        if solution is None:
            rate_limited_warning("Manual IK: target %s unreachable", self.target)
            return False
        sim.set_joint_commands(solution)
        return True
