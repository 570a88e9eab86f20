"""
Central configuration for panda7 tunables and shared constants.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from panda7.utils.errors import ConfigurationError

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")
# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]

TRACE_ENABLED = str(os.getenv("PANDA7_TRACE", "0")).lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name}={raw!r} is not a number") from e


# Default tick rate of the external simulation loop (Hz)
CONTROL_RATE_HZ: float = _env_float("PANDA7_CONTROL_RATE_HZ", 60.0)
INTERVAL_S: float = max(1e-6, 1.0 / max(CONTROL_RATE_HZ, 1.0))

LOG_LEVEL_DEFAULT: str = "INFO"

# -----------------------------------------------------------------------------
# Redundancy resolution
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResolverTuning:
    """Cost weights and q7 scan ranges for redundancy resolution."""

    alpha: float  # weight of squared distance to the current joints
    beta: float  # weight of squared distance to the neutral posture
    q7_step: float  # local scan step (rad)
    q7_window: float  # local scan half-width (rad)
    q7_global_step: float  # full-range fallback step (rad)


RESOLVER: ResolverTuning = ResolverTuning(
    alpha=_env_float("PANDA7_IK_ALPHA", 1.0),
    beta=_env_float("PANDA7_IK_BETA", 0.05),
    q7_step=_env_float("PANDA7_Q7_STEP", 0.1),
    q7_window=_env_float("PANDA7_Q7_WINDOW", 0.5),
    q7_global_step=_env_float("PANDA7_Q7_GLOBAL_STEP", 0.2),
)

if RESOLVER.q7_step <= 0 or RESOLVER.q7_global_step <= 0:
    raise ConfigurationError("q7 scan steps must be positive")
if RESOLVER.alpha < 0 or RESOLVER.beta < 0:
    raise ConfigurationError("IK cost weights must be non-negative")

# Rate limiting for IK warnings (seconds between repeated messages)
IK_WARN_INTERVAL_S: float = 1.0

# -----------------------------------------------------------------------------
# Pick-and-place sequencing
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SequencerTiming:
    """Phase duration multipliers per operating mode."""

    stack_multiplier: float
    tray_multiplier: float
    home_duration_s: float


SEQUENCER: SequencerTiming = SequencerTiming(
    stack_multiplier=_env_float("PANDA7_STACK_MULTIPLIER", 0.8),
    tray_multiplier=_env_float("PANDA7_TRAY_MULTIPLIER", 2.0),
    home_duration_s=_env_float("PANDA7_HOME_DURATION_S", 2.0),
)

# Cartesian offsets (m)
HOVER_HEIGHT_M: float = 0.2  # above the item while approaching / lifting
TRAY_HOVER_M: float = 0.2  # above the tray before lowering
TRAY_DROP_M: float = 0.05  # above the tray at release
STATIC_TARGET_DROP_M: float = 0.02  # detected points are top surfaces; grasp lower

# Stacking grid (3x3 per layer)
STACK_GRID_SIZE: int = 3
STACK_SPACING_M: float = 0.06
STACK_LAYER_HEIGHT_M: float = 0.04
# floor + cube half height + release clearance + stacking buffer
STACK_BASE_Z_M: float = 0.005 + 0.02 + 0.02 + 0.04
STACK_HOVER_M: float = 0.1

# Return-home indicator target
HOME_POSITION_M: NDArray[np.float64] = np.array([0.0, 0.0, 0.45], dtype=np.float64)
HOME_POSITION_M.setflags(write=False)

# Tool pointing straight down: extrinsic xyz euler (pi, 0, 0)
TOOL_DOWN_EULER: tuple[float, float, float] = (np.pi, 0.0, 0.0)

# -----------------------------------------------------------------------------
# Manual IK mode
# -----------------------------------------------------------------------------
MANUAL_TARGET_LIFT_M: float = 0.05  # offset above a picked point when moving the target

# -----------------------------------------------------------------------------
# Kinematic stand-in simulation
# -----------------------------------------------------------------------------
GRASP_RADIUS_M: float = _env_float("PANDA7_GRASP_RADIUS_M", 0.04)
GRIPPER_CLOSE_THRESHOLD: float = 128.0

# Demo scene layout
CUBE_RING_MIN_R: float = 0.35
CUBE_RING_MAX_R: float = 0.6
CUBE_Z: float = 0.02
STACK_BASE_XY: tuple[float, float] = (0.6, 0.0)
STACK_KEEPOUT_R: float = 0.35
CUBE_MIN_SEPARATION_SQ: float = 0.004
CUBE_PLACEMENT_ATTEMPTS: int = 100
