"""
Boundary between the motion core and the physics/simulation collaborator.

The sequencer and manual IK controller only talk to the simulation through
this protocol: they read joint positions, the tool frame and body positions,
and write joint and gripper actuator commands.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from panda7.utils.se3_utils import Pose


@runtime_checkable
class PhysicsState(Protocol):
    def joint_positions(self) -> NDArray[np.float64]:
        """Current arm joint angles, shape (7,)."""
        ...

    def tool_pose(self) -> Pose:
        """World pose of the tool-centre-point frame."""
        ...

    def body_position(self, body_id: int) -> NDArray[np.float64]:
        """World position of a body, shape (3,)."""
        ...

    def find_body(self, name: str) -> int | None:
        """Body id for ``name``, or None if the scene has no such body."""
        ...

    def set_joint_commands(self, q: ArrayLike) -> None:
        """Write the 7 arm actuator commands (radians)."""
        ...

    def set_gripper_command(self, value: float) -> None:
        """Write the gripper actuator command (0 closed .. 255 open)."""
        ...
