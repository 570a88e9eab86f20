"""
Pick-and-place motion sequencer.

A tick-driven state machine walking every pick target through the phase
table: approach, grasp, carry, release, and finally the return-home preset.
Each phase solves IK once for its Cartesian target and then interpolates in
joint space until its timer runs out.

State lives in an immutable ``SequencerState`` that is replaced on every
tick. ``update`` returns a tagged outcome so the caller decides how to react
to completed items; optional callbacks receive the same events.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace

import numpy as np
from numpy.typing import ArrayLike, NDArray

import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7 import config as cfg
from panda7.config import TRACE
from panda7.kinematics.forward import as_joint_vector
from panda7.kinematics.redundancy import RedundancyResolver
from panda7.motion.phases import (
    LAST_PHASE,
    PHASE_TABLE,
    Phase,
    PhaseGeometry,
    drop_geometry,
    mode_multiplier,
)
from panda7.motion.trajectory import (
    JointPath,
    blend_indicator,
    phase_progress,
    smoothstep,
)
from panda7.sim.interface import PhysicsState
from panda7.utils.errors import ConfigurationError
from panda7.utils.se3_utils import Pose

logger = logging.getLogger(__name__)

_TOOL_DOWN = Pose.from_euler((0.0, 0.0, 0.0), cfg.TOOL_DOWN_EULER)


# ----- Inputs -----


@dataclass(frozen=True, eq=False)
class PickTarget:
    """
    An item to pick.

    ``position`` None means a live body: its position is read from the
    simulation at the start of every phase. Otherwise the point is a static
    detection (top surface) captured once.
    """

    identifier: int
    position: NDArray[np.float64] | None = None

    @classmethod
    def static(cls, identifier: int, position: ArrayLike) -> PickTarget:
        return cls(identifier, np.array(position, dtype=np.float64).reshape(3))

    @property
    def is_live(self) -> bool:
        return self.position is None


def targets_from_points(
    points: Iterable[ArrayLike], identifiers: Iterable[int]
) -> list[PickTarget]:
    """Pair detected 3D points with their marker ids."""
    return [PickTarget.static(i, p) for p, i in zip(points, identifiers, strict=True)]


# ----- Outcomes -----


@dataclass(frozen=True)
class Idle:
    """update() was called while the sequencer was not running."""


@dataclass(frozen=True)
class Continuing:
    """The sequence is running and nothing notable happened this tick."""


@dataclass(frozen=True)
class ItemCompleted:
    """An item finished its cycle (placed and lifted away)."""

    item_id: int


@dataclass(frozen=True)
class BatchFinished:
    """All items are done and the arm has returned home."""


SequenceOutcome = Idle | Continuing | ItemCompleted | BatchFinished

IDLE = Idle()
CONTINUING = Continuing()
BATCH_FINISHED = BatchFinished()


# ----- State -----


def _empty_path() -> JointPath:
    q = np.array(PANDA_ROBOT.joint.home_rad, dtype=np.float64)
    return JointPath(start=q, target=q.copy())


@dataclass(frozen=True)
class SequencerState:
    """Snapshot of the sequencer between two ticks."""

    running: bool = False
    phase: int = 0
    elapsed: float = 0.0
    duration: float = 1.0
    path: JointPath = field(default_factory=_empty_path)
    start_pose: Pose = _TOOL_DOWN
    target_pose: Pose = _TOOL_DOWN
    indicator: Pose = _TOOL_DOWN
    gripper: float = PANDA_ROBOT.GRIPPER_CLOSED
    item_index: int = 0
    placed_count: int = 0

    @property
    def progress(self) -> float:
        return phase_progress(self.elapsed, self.duration)


class Sequencer:
    """
    Drives the arm through the pick-and-place program, one item at a time.

    Usage:
        seq = Sequencer(stacking=True)
        seq.configure(sim)
        seq.start(sim, [cube_a, cube_b])
        while seq.running:
            outcome = seq.update(dt, sim)
    """

    def __init__(
        self,
        resolver: RedundancyResolver | None = None,
        stacking: bool = False,
        drop_zone_body: int | None = None,
    ) -> None:
        self.resolver = resolver if resolver is not None else RedundancyResolver()
        self.stacking = stacking
        self.drop_zone_body = drop_zone_body
        self.speed_multiplier = 1.0
        self.state = SequencerState()
        self._targets: tuple[PickTarget, ...] = ()
        self._on_item_completed: Callable[[int], None] | None = None
        self._on_finished: Callable[[], None] | None = None

    # ----- Properties -----

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def phase(self) -> Phase:
        return Phase(min(self.state.phase, LAST_PHASE))

    @property
    def placed_count(self) -> int:
        return self.state.placed_count

    @property
    def indicator(self) -> Pose:
        return self.state.indicator

    @property
    def targets(self) -> tuple[PickTarget, ...]:
        return self._targets

    # ----- Configuration -----

    def configure(self, sim: PhysicsState, stacking: bool | None = None) -> bool:
        """
        Look up the drop zone in the scene.

        Stack mode uses the ``stack_base`` body; tray mode prefers ``tray``
        and falls back to ``stack_base``. Returns False if none exists.
        """
        if stacking is not None:
            self.stacking = stacking
        names = ("stack_base",) if self.stacking else ("tray", "stack_base")
        self.drop_zone_body = None
        for name in names:
            body = sim.find_body(name)
            if body is not None:
                self.drop_zone_body = body
                logger.debug("Drop zone: body '%s' (id %d)", name, body)
                break
        if self.drop_zone_body is None:
            logger.warning("No drop zone body found (looked for %s)", ", ".join(names))
        return self.drop_zone_body is not None

    def set_speed_multiplier(self, multiplier: float) -> None:
        """Fast-forward factor applied to elapsed time; must be >= 1."""
        multiplier = float(multiplier)
        if not multiplier >= 1.0:
            raise ConfigurationError(f"speed multiplier must be >= 1, got {multiplier}")
        self.speed_multiplier = multiplier

    # ----- Lifecycle -----

    def start(
        self,
        sim: PhysicsState,
        targets: Iterable[int | PickTarget],
        on_item_completed: Callable[[int], None] | None = None,
        on_finished: Callable[[], None] | None = None,
    ) -> bool:
        """
        Begin a batch. Plain ints are live body ids; PickTargets with a
        position are static points.

        Returns False (and changes nothing) when there is no drop zone or the
        queue is empty. The placed count carries over from earlier batches.
        """
        if self.drop_zone_body is None:
            logger.warning("Sequence not started: no drop zone configured")
            return False
        queue = tuple(t if isinstance(t, PickTarget) else PickTarget(int(t)) for t in targets)
        if not queue:
            logger.debug("Sequence not started: empty target queue")
            return False

        self._targets = queue
        self._on_item_completed = on_item_completed
        self._on_finished = on_finished

        state = replace(
            self.state,
            running=True,
            phase=0,
            item_index=0,
            gripper=PANDA_ROBOT.GRIPPER_CLOSED,
            indicator=sim.tool_pose(),
        )
        self.state, _ = self._prepare_step(state, sim)
        logger.info(
            "Sequence started: %d item(s), %s mode, %d already placed",
            len(queue),
            "stack" if self.stacking else "tray",
            state.placed_count,
        )
        return True

    def stop(self) -> None:
        """Abort the batch: drop the queue and rewind to phase 0.

        The in-flight segment is discarded; the placed count is kept so the
        next batch keeps stacking where this one left off.
        """
        if self.state.running:
            logger.info("Sequence stopped in phase %s", self.phase.name)
        self.state = replace(self.state, running=False, phase=0, elapsed=0.0, item_index=0)
        self._targets = ()

    def reset(self) -> None:
        """Full reset, including the placed count (e.g. when the scene resets)."""
        self.state = replace(
            self.state,
            running=False,
            phase=0,
            elapsed=0.0,
            item_index=0,
            placed_count=0,
            gripper=PANDA_ROBOT.GRIPPER_CLOSED,
        )
        self._targets = ()

    # ----- Tick -----

    def update(self, dt: float, sim: PhysicsState) -> SequenceOutcome:
        """
        Advance by ``dt`` seconds: write interpolated joint and gripper
        commands, and move to the next phase once the current one elapsed.
        """
        s = self.state
        if not s.running:
            return IDLE

        elapsed = s.elapsed + dt * self.speed_multiplier
        p = phase_progress(elapsed, s.duration)
        ease = smoothstep(p)

        sim.set_joint_commands(s.path.sample(p))
        row = PHASE_TABLE[s.phase]
        indicator = blend_indicator(s.start_pose, s.target_pose, ease, row.cylindrical)
        sim.set_gripper_command(s.gripper)

        if logger.isEnabledFor(TRACE):
            logger.trace(  # type: ignore[attr-defined]
                "phase=%s p=%.3f indicator=%s", row.name, p, indicator.position
            )

        s = replace(s, elapsed=elapsed, indicator=indicator)
        outcome: SequenceOutcome = CONTINUING
        if p >= 1.0:
            s, outcome = self._prepare_step(replace(s, phase=s.phase + 1), sim)

        self.state = s
        self._dispatch(outcome)
        return outcome

    # ----- Internals -----

    def _dispatch(self, outcome: SequenceOutcome) -> None:
        if isinstance(outcome, ItemCompleted) and self._on_item_completed is not None:
            self._on_item_completed(outcome.item_id)
        elif isinstance(outcome, BatchFinished) and self._on_finished is not None:
            self._on_finished()

    def _item_position(self, index: int, sim: PhysicsState) -> NDArray[np.float64]:
        if index >= len(self._targets):
            return np.zeros(3)
        target = self._targets[index]
        if target.position is None:
            return np.array(sim.body_position(target.identifier), dtype=np.float64)
        pos = np.array(target.position, dtype=np.float64)
        pos[2] -= cfg.STATIC_TARGET_DROP_M
        return pos

    def _prepare_step(
        self, s: SequencerState, sim: PhysicsState
    ) -> tuple[SequencerState, SequenceOutcome]:
        """Set up the phase ``s.phase``: target pose, joint goal, timer."""
        if s.phase > LAST_PHASE:
            logger.info("Sequence finished: %d item(s) placed in total", s.placed_count)
            return replace(s, running=False, phase=0, item_index=0), BATCH_FINISHED

        outcome: SequenceOutcome = CONTINUING
        if s.phase == Phase.ADVANCE_OR_RETURN_HOME:
            item_id = self._targets[s.item_index].identifier
            s = replace(s, placed_count=s.placed_count + 1, item_index=s.item_index + 1)
            outcome = ItemCompleted(item_id)
            logger.info(
                "Item %s placed (%d/%d)", item_id, s.item_index, len(self._targets)
            )
            if s.item_index < len(self._targets):
                s, _ = self._prepare_step(replace(s, phase=0), sim)
                return s, outcome

        row = PHASE_TABLE[s.phase]
        start_q = as_joint_vector(sim.joint_positions())
        start_pose = s.indicator

        drop_xy, drop_z, hover_z = drop_geometry(
            np.asarray(sim.body_position(self.drop_zone_body), dtype=np.float64),
            s.placed_count,
            self.stacking,
        )
        geometry = PhaseGeometry(
            start=start_pose.position,
            item=self._item_position(s.item_index, sim),
            drop_xy=drop_xy,
            drop_z=drop_z,
            hover_z=hover_z,
        )
        target_pose = Pose(row.target(geometry), _TOOL_DOWN.quat)

        if row.explicit_joints:
            target_q = np.array(PANDA_ROBOT.joint.home_rad, dtype=np.float64)
        else:
            solution = self.resolver.solve(target_pose, start_q)
            if solution is None:
                logger.warning(
                    "IK failed for phase %s (target %s); holding position",
                    row.name,
                    np.round(target_pose.position, 4).tolist(),
                )
                target_q = start_q.copy()
            else:
                target_q = solution

        duration = row.duration(mode_multiplier(self.stacking))
        logger.debug("Phase %s: %.2fs, gripper=%.0f", row.name, duration, row.gripper)
        s = replace(
            s,
            elapsed=0.0,
            duration=duration,
            path=JointPath(start=start_q, target=target_q),
            start_pose=start_pose,
            target_pose=target_pose,
            gripper=row.gripper,
        )
        return s, outcome
