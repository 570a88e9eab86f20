"""
Phase table of the pick-and-place program.

Each phase is described by data (duration, Cartesian target rule, gripper
command) instead of a switch statement, so the sequencer only looks rows up.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
from numpy.typing import NDArray

import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7 import config as cfg


class Phase(IntEnum):
    """Ordered phases of one pick-and-place cycle."""

    MOVE_OVER_TARGET = 0
    HOVER = 1
    OPEN_GRIPPER = 2
    LOWER_ONTO = 3
    SETTLE_WAIT = 4
    GRASP = 5
    GRASP_WAIT = 6
    LIFT = 7
    MOVE_TO_DROP_ZONE = 8
    LOWER_TO_DROP = 9
    PRE_RELEASE_WAIT = 10
    RELEASE = 11
    RELEASE_WAIT = 12
    LIFT_AFTER_RELEASE = 13
    ADVANCE_OR_RETURN_HOME = 14


@dataclass(frozen=True)
class PhaseGeometry:
    """Cartesian anchors a phase target is computed from."""

    start: NDArray[np.float64]  # indicator position when the phase begins
    item: NDArray[np.float64]  # current pick target position
    drop_xy: NDArray[np.float64]  # drop cell (x, y)
    drop_z: float
    hover_z: float


TargetRule = Callable[[PhaseGeometry], NDArray[np.float64]]


def _over_item_at_start_height(g: PhaseGeometry) -> NDArray[np.float64]:
    return np.array([g.item[0], g.item[1], g.start[2]])


def _above_item(g: PhaseGeometry) -> NDArray[np.float64]:
    return np.array([g.item[0], g.item[1], g.item[2] + cfg.HOVER_HEIGHT_M])


def _at_item(g: PhaseGeometry) -> NDArray[np.float64]:
    return np.array(g.item, dtype=np.float64)


def _hold(g: PhaseGeometry) -> NDArray[np.float64]:
    return np.array(g.start, dtype=np.float64)


def _above_drop(g: PhaseGeometry) -> NDArray[np.float64]:
    return np.array([g.drop_xy[0], g.drop_xy[1], g.hover_z])


def _at_drop(g: PhaseGeometry) -> NDArray[np.float64]:
    return np.array([g.drop_xy[0], g.drop_xy[1], g.drop_z])


def _home(g: PhaseGeometry) -> NDArray[np.float64]:
    return np.array(cfg.HOME_POSITION_M, dtype=np.float64)


@dataclass(frozen=True)
class PhaseDescriptor:
    """
    One row of the phase table.

    Attributes:
        phase: phase index
        base_duration: seconds before the mode multiplier
        target: rule producing the Cartesian indicator target
        gripper: gripper command held for the whole phase (0 closed, 255 open)
        explicit_joints: joint target is a fixed preset instead of an IK solve
        cylindrical: indicator arcs around the base instead of moving straight
        scaled: whether the mode multiplier applies to the duration
    """

    phase: Phase
    base_duration: float
    target: TargetRule
    gripper: float
    explicit_joints: bool = False
    cylindrical: bool = False
    scaled: bool = True

    @property
    def name(self) -> str:
        return self.phase.name

    def duration(self, mode_multiplier: float) -> float:
        if self.scaled:
            return self.base_duration * mode_multiplier
        return self.base_duration


_OPEN = PANDA_ROBOT.GRIPPER_OPEN
_CLOSED = PANDA_ROBOT.GRIPPER_CLOSED

PHASE_TABLE: tuple[PhaseDescriptor, ...] = (
    PhaseDescriptor(Phase.MOVE_OVER_TARGET, 2.0, _over_item_at_start_height, _CLOSED, cylindrical=True),
    PhaseDescriptor(Phase.HOVER, 2.0, _above_item, _CLOSED),
    PhaseDescriptor(Phase.OPEN_GRIPPER, 0.5, _hold, _OPEN),
    PhaseDescriptor(Phase.LOWER_ONTO, 4.0, _at_item, _OPEN),
    PhaseDescriptor(Phase.SETTLE_WAIT, 2.0, _hold, _OPEN),
    PhaseDescriptor(Phase.GRASP, 0.5, _hold, _CLOSED),
    PhaseDescriptor(Phase.GRASP_WAIT, 1.0, _hold, _CLOSED),
    PhaseDescriptor(Phase.LIFT, 2.0, _above_item, _CLOSED),
    PhaseDescriptor(Phase.MOVE_TO_DROP_ZONE, 8.0, _above_drop, _CLOSED, cylindrical=True),
    PhaseDescriptor(Phase.LOWER_TO_DROP, 2.0, _at_drop, _CLOSED),
    PhaseDescriptor(Phase.PRE_RELEASE_WAIT, 0.5, _at_drop, _CLOSED),
    PhaseDescriptor(Phase.RELEASE, 0.5, _at_drop, _OPEN),
    PhaseDescriptor(Phase.RELEASE_WAIT, 1.0, _at_drop, _OPEN),
    PhaseDescriptor(Phase.LIFT_AFTER_RELEASE, 2.0, _above_drop, _OPEN),
    PhaseDescriptor(
        Phase.ADVANCE_OR_RETURN_HOME,
        cfg.SEQUENCER.home_duration_s,
        _home,
        _OPEN,
        explicit_joints=True,
        cylindrical=True,
        scaled=False,
    ),
)

LAST_PHASE: int = len(PHASE_TABLE) - 1


def mode_multiplier(stacking: bool) -> float:
    """Duration multiplier for the operating mode."""
    return cfg.SEQUENCER.stack_multiplier if stacking else cfg.SEQUENCER.tray_multiplier


def stack_cell(placed_count: int) -> tuple[int, int, int]:
    """(row, column, layer) of the 3x3 stacking grid for the Nth placed item."""
    per_layer = cfg.STACK_GRID_SIZE * cfg.STACK_GRID_SIZE
    layer, pos = divmod(placed_count, per_layer)
    row, col = divmod(pos, cfg.STACK_GRID_SIZE)
    return row, col, layer


def drop_geometry(
    drop_zone: NDArray[np.float64], placed_count: int, stacking: bool
) -> tuple[NDArray[np.float64], float, float]:
    """
    Drop cell (x, y), drop height and hover height for the next item.

    Tray mode releases every item at the tray centre. Stack mode fills a 3x3
    grid centred on the drop zone, one layer per nine items.
    """
    if not stacking:
        xy = np.array(drop_zone[:2], dtype=np.float64)
        return xy, float(drop_zone[2] + cfg.TRAY_DROP_M), float(drop_zone[2] + cfg.TRAY_HOVER_M)

    row, col, layer = stack_cell(placed_count)
    centre = (cfg.STACK_GRID_SIZE - 1) / 2.0
    xy = np.array(
        [
            drop_zone[0] + (row - centre) * cfg.STACK_SPACING_M,
            drop_zone[1] + (col - centre) * cfg.STACK_SPACING_M,
        ],
        dtype=np.float64,
    )
    drop_z = cfg.STACK_BASE_Z_M + layer * cfg.STACK_LAYER_HEIGHT_M
    return xy, drop_z, drop_z + cfg.STACK_HOVER_M
