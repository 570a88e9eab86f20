"""
Redundancy resolution over the joint 7 angle.

The analytical solver fixes q7; this module scans q7 and keeps the candidate
that stays closest to the current configuration while leaning towards the
neutral posture.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7.config import IK_WARN_INTERVAL_S, RESOLVER, ResolverTuning
from panda7.kinematics.analytical_ik import solve_analytical_ik
from panda7.kinematics.forward import as_joint_vector
from panda7.utils.se3_utils import Pose

logger = logging.getLogger(__name__)

SolverFn = Callable[[Pose, float], list[NDArray[np.float64]]]

# Rate limiting for IK warnings (avoid log spam at tick rate)
_ik_last_warn_time: float = 0.0


def rate_limited_warning(msg: str, *args: object) -> None:
    """Log a warning with rate limiting to avoid spam."""
    global _ik_last_warn_time
    now = time.monotonic()
    if now - _ik_last_warn_time > IK_WARN_INTERVAL_S:
        logger.warning(msg, *args)
        _ik_last_warn_time = now


@dataclass(frozen=True)
class CandidateSolution:
    """A solver output scored against the current and neutral postures."""

    q: NDArray[np.float64]
    cost: float
    q7: float


def scan_values(start: float, stop: float, step: float) -> Iterator[float]:
    """Yield ``start + k*step`` for k = 0, 1, ... while the value stays <= ``stop``."""
    if step <= 0 or stop < start:
        return
    n = int(math.floor((stop - start) / step + 1e-9))
    for k in range(n + 1):
        yield start + k * step


class RedundancyResolver:
    """
    Picks one joint configuration for a Cartesian target by scanning q7.

    Cost of a candidate c: ``alpha*|c - current|^2 + beta*|c - neutral|^2``.
    Search order: the current q7, then a local window around it, then (only if
    nothing was found) the full q7 range at a coarser step. The first candidate
    with the minimal cost wins.
    """

    def __init__(
        self,
        tuning: ResolverTuning = RESOLVER,
        neutral: ArrayLike | None = None,
        solver: SolverFn = solve_analytical_ik,
    ) -> None:
        self.tuning = tuning
        q_neutral = PANDA_ROBOT.joint.neutral_rad if neutral is None else neutral
        self.neutral = as_joint_vector(q_neutral)
        self.neutral.setflags(write=False)
        self.q7_min = float(PANDA_ROBOT.joint.q_min[6])
        self.q7_max = float(PANDA_ROBOT.joint.q_max[6])
        self._solver = solver

    def cost(self, candidate: NDArray, current: NDArray) -> float:
        d_cur = candidate - current
        d_neu = candidate - self.neutral
        return float(
            self.tuning.alpha * (d_cur @ d_cur) + self.tuning.beta * (d_neu @ d_neu)
        )

    def _local_q7(self, current_q7: float) -> Iterator[float]:
        yield current_q7
        lo = max(self.q7_min, current_q7 - self.tuning.q7_window)
        hi = min(self.q7_max, current_q7 + self.tuning.q7_window)
        yield from scan_values(lo, hi, self.tuning.q7_step)

    def _global_q7(self) -> Iterator[float]:
        yield from scan_values(self.q7_min, self.q7_max, self.tuning.q7_global_step)

    def solve_all(
        self, target: Pose | ArrayLike, current_q: ArrayLike
    ) -> tuple[CandidateSolution | None, list[CandidateSolution]]:
        """
        Run the full search and return the winner plus every scored candidate.

        Returns
        -------
        (best, candidates)
            ``best`` is None when no q7 in the full range yields a solution.
        """
        current = as_joint_vector(current_q)
        candidates: list[CandidateSolution] = []
        best: CandidateSolution | None = None

        def consider(q7_values: Iterator[float]) -> None:
            nonlocal best
            for q7 in q7_values:
                for q in self._solver(target, q7):
                    cand = CandidateSolution(q=q, cost=self.cost(q, current), q7=q7)
                    candidates.append(cand)
                    if best is None or cand.cost < best.cost:
                        best = cand

        consider(self._local_q7(float(current[6])))
        if best is None:
            logger.debug("No IK solution near q7=%.3f, scanning full range", current[6])
            consider(self._global_q7())

        if logger.isEnabledFor(logging.DEBUG) and best is not None:
            logger.debug(
                "IK resolved: q7=%.3f cost=%.5f (%d candidates)",
                best.q7,
                best.cost,
                len(candidates),
            )
        return best, candidates

    def solve(
        self, target: Pose | ArrayLike, current_q: ArrayLike
    ) -> NDArray[np.float64] | None:
        """Minimum-cost joint vector reaching ``target``, or None if unreachable."""
        best, _ = self.solve_all(target, current_q)
        return None if best is None else best.q.copy()
