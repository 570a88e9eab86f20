"""
Kinematic stand-in for the physics engine.

Joints follow their position commands at up to the rated joint speed, bodies
are points, and a closed gripper carries the graspable body nearest the tool
centre point. Enough to run the sequencer headless and in tests.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
from numba import njit  # type: ignore[import-untyped]
from numpy.typing import ArrayLike, NDArray

import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7 import config as cfg
from panda7.kinematics.forward import as_joint_vector, forward_kinematics
from panda7.utils.se3_utils import Pose

logger = logging.getLogger(__name__)


@njit(cache=True)
def _track_commands_jit(
    q: np.ndarray,
    ctrl: np.ndarray,
    vmax: np.ndarray,
    jmin: np.ndarray,
    jmax: np.ndarray,
    dt: float,
) -> None:
    """Move ``q`` towards ``ctrl`` in place, velocity-limited and clamped to limits."""
    for i in range(q.shape[0]):
        step = vmax[i] * dt
        err = ctrl[i] - q[i]
        if err > step:
            err = step
        elif err < -step:
            err = -step
        new_pos = q[i] + err
        if new_pos < jmin[i]:
            new_pos = jmin[i]
        elif new_pos > jmax[i]:
            new_pos = jmax[i]
        q[i] = new_pos


@dataclass
class Body:
    """A named point body in the scene."""

    name: str
    position: NDArray[np.float64]
    graspable: bool = False
    attached_offset: NDArray[np.float64] | None = field(default=None, repr=False)


class KinematicSimulation:
    """
    Minimal simulation implementing the ``PhysicsState`` protocol.

    Args:
        q0: initial joint angles (defaults to the home posture)
        track_velocity: limit joint motion to the rated speed; when False the
            joints jump to their commands on every step
    """

    def __init__(self, q0: ArrayLike | None = None, track_velocity: bool = True) -> None:
        home = PANDA_ROBOT.joint.home_rad if q0 is None else q0
        self.qpos = as_joint_vector(home).copy()
        self.ctrl = self.qpos.copy()
        self.gripper_ctrl = PANDA_ROBOT.GRIPPER_CLOSED
        self.track_velocity = track_velocity
        self.time = 0.0

        self._bodies: list[Body] = []
        self._names: dict[str, int] = {}
        self._attached: int | None = None
        self._gripper_was_open = False

        self._vmax = np.array(PANDA_ROBOT.joint.speed_max, dtype=np.float64)
        self._jmin = np.array(PANDA_ROBOT.joint.q_min, dtype=np.float64)
        self._jmax = np.array(PANDA_ROBOT.joint.q_max, dtype=np.float64)

    # ----- Scene -----

    def add_body(self, name: str, position: ArrayLike, graspable: bool = False) -> int:
        if name in self._names:
            raise ValueError(f"duplicate body name: {name!r}")
        body_id = len(self._bodies)
        pos = np.array(position, dtype=np.float64).reshape(3)
        self._bodies.append(Body(name, pos, graspable))
        self._names[name] = body_id
        return body_id

    def body_name(self, body_id: int) -> str:
        return self._bodies[body_id].name

    @property
    def attached_body(self) -> int | None:
        return self._attached

    @property
    def gripper_closed(self) -> bool:
        return self.gripper_ctrl < cfg.GRIPPER_CLOSE_THRESHOLD

    # ----- PhysicsState -----

    def joint_positions(self) -> NDArray[np.float64]:
        return self.qpos.copy()

    def tool_pose(self) -> Pose:
        return Pose.from_matrix(forward_kinematics(self.qpos))

    def body_position(self, body_id: int) -> NDArray[np.float64]:
        return self._bodies[body_id].position.copy()

    def find_body(self, name: str) -> int | None:
        return self._names.get(name)

    def set_joint_commands(self, q: ArrayLike) -> None:
        self.ctrl[:] = as_joint_vector(q)

    def set_gripper_command(self, value: float) -> None:
        self.gripper_ctrl = float(np.clip(value, PANDA_ROBOT.GRIPPER_CLOSED, PANDA_ROBOT.GRIPPER_OPEN))

    # ----- Stepping -----

    def step(self, dt: float) -> None:
        """Advance the simulation by ``dt`` seconds."""
        if self.track_velocity:
            _track_commands_jit(self.qpos, self.ctrl, self._vmax, self._jmin, self._jmax, dt)
        else:
            np.clip(self.ctrl, self._jmin, self._jmax, out=self.qpos)
        self.time += dt

        if self.gripper_closed:
            tcp = forward_kinematics(self.qpos)[:3, 3]
            # Only a closing edge grabs; a gripper that starts closed carries nothing
            if self._attached is None and self._gripper_was_open:
                self._try_attach(tcp)
            if self._attached is not None:
                body = self._bodies[self._attached]
                body.position = tcp + body.attached_offset
            self._gripper_was_open = False
        else:
            if self._attached is not None:
                body = self._bodies[self._attached]
                logger.debug("Released '%s' at %s", body.name, np.round(body.position, 4))
                body.attached_offset = None
                self._attached = None
            self._gripper_was_open = True

    def _try_attach(self, tcp: NDArray[np.float64]) -> None:
        best: int | None = None
        best_d = cfg.GRASP_RADIUS_M
        for i, body in enumerate(self._bodies):
            if not body.graspable:
                continue
            d = float(np.linalg.norm(body.position - tcp))
            if d <= best_d:
                best, best_d = i, d
        if best is None:
            return
        body = self._bodies[best]
        body.attached_offset = body.position - tcp
        self._attached = best
        logger.debug("Grasped '%s' (%.3f m from tool)", body.name, best_d)
