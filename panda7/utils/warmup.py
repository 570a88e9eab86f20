"""
JIT warmup utilities.

Call warmup_jit() on startup to pre-compile the numba kernels before the tick loop.
With cache=True, this is fast if the cache exists, slower (a few seconds) on first run.
"""

import logging
import time

import numpy as np

import panda7.PANDA_ROBOT as PANDA_ROBOT
from panda7.kinematics.forward import forward_kinematics
from panda7.sim.kinematic_sim import _track_commands_jit
from panda7.utils.se3_numba import se3_copy, se3_identity, se3_mdh, se3_mul

logger = logging.getLogger(__name__)


def warmup_jit() -> float:
    """
    Pre-compile all numba JIT functions by calling them with dummy data.

    Returns the time taken in seconds.
    """
    logger.info("Warming JIT...")
    start = time.perf_counter()

    dummy_4x4 = np.zeros((4, 4), dtype=np.float64)
    dummy_4x4_b = np.zeros((4, 4), dtype=np.float64)
    dummy_4x4_out = np.zeros((4, 4), dtype=np.float64)
    se3_identity(dummy_4x4)
    se3_mdh(0.0, 0.0, 0.0, 0.0, dummy_4x4_b)
    se3_mul(dummy_4x4, dummy_4x4_b, dummy_4x4_out)
    se3_copy(dummy_4x4, dummy_4x4_b)

    # mdh_chain through the public wrapper (read-only DH table signature)
    forward_kinematics(PANDA_ROBOT.joint.home_rad)

    # panda7/sim/kinematic_sim.py
    dummy_7f = np.zeros(7, dtype=np.float64)
    _track_commands_jit(
        dummy_7f.copy(),  # q
        dummy_7f.copy(),  # ctrl
        np.ones(7),  # vmax
        -np.ones(7),  # jmin
        np.ones(7),  # jmax
        1.0 / 60.0,  # dt
    )

    elapsed = time.perf_counter() - start
    logger.info(f"\tJIT warmup completed in {elapsed * 1000:.1f}ms")
    return elapsed
